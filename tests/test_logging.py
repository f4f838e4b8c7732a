import json
import logging
import sys

from tailorshop.core.logging_config import (
    SecurityFilter,
    StructuredFormatter,
    get_logger,
    request_id_var,
    setup_logging,
)


def make_record(msg, *args, **attrs):
    record = logging.LogRecord("tailorshop.test", logging.INFO, __file__, 10, msg, args, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


def test_setup_installs_one_stdout_json_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("tailorshop-backoffice", level="debug")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert handler.stream is sys.stdout
        assert isinstance(handler.formatter, StructuredFormatter)
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_formatter_emits_service_fields_and_custom_extras():
    formatter = StructuredFormatter("tailorshop-backoffice", environment="test")
    record = make_record("Order %s created", "AR-00001", extra_fields={"customer": 3}, duration_ms=12.5)
    data = json.loads(formatter.format(record))
    assert data["message"] == "Order AR-00001 created"
    assert data["service"] == "tailorshop-backoffice"
    assert data["environment"] == "test"
    assert data["custom"] == {"customer": 3}
    assert data["performance"] == {"duration_ms": 12.5}


def test_formatter_includes_request_id():
    token = request_id_var.set("req-42")
    try:
        data = json.loads(StructuredFormatter("svc").format(make_record("hello")))
    finally:
        request_id_var.reset(token)
    assert data["trace"] == {"request_id": "req-42"}


def test_sensitive_values_are_redacted():
    record = make_record("login password=hunter2 token: abc123 for user")
    SecurityFilter().filter(record)
    assert record.getMessage() == "login password=***REDACTED*** token: ***REDACTED*** for user"


def test_adapter_attaches_request_id():
    token = request_id_var.set("req-7")
    try:
        msg, kwargs = get_logger("tailorshop.test").process("hi", {})
    finally:
        request_id_var.reset(token)
    assert kwargs["extra"]["request_id"] == "req-7"
