"""
Structured logging for the back-office service.

Every record is emitted as one JSON object on stdout, tagged with the
service name, environment and version plus the current request id, so a
single request can be followed through the route handler and the
data-access layer.
"""

import logging
import re
import sys
import json
import time
import traceback
import uuid
from datetime import datetime
from typing import Any, Dict, Optional
from contextvars import ContextVar
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

class StructuredFormatter(logging.Formatter):
    """JSON formatter; one line per record."""

    def __init__(self, service_name: str, environment: str = "development", version: str = "1.0.0"):
        super().__init__()
        self.service_name = service_name
        self.environment = environment
        self.version = version

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "@timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": self.environment,
            "version": self.version,
        }

        trace_context = get_trace_context()
        if trace_context:
            log_obj["trace"] = trace_context

        log_obj["location"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
            "module": record.module
        }

        if record.exc_info:
            log_obj["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info)
            }

        if hasattr(record, 'extra_fields'):
            log_obj["custom"] = record.extra_fields

        if hasattr(record, 'duration_ms'):
            log_obj["performance"] = {
                "duration_ms": record.duration_ms
            }

        return json.dumps(log_obj, default=str)

class PerformanceFilter(logging.Filter):
    """Copies a `duration` extra (seconds) into `duration_ms`."""

    def filter(self, record: logging.LogRecord) -> bool:
        if hasattr(record, 'duration'):
            record.duration_ms = record.duration * 1000
        return True

class SecurityFilter(logging.Filter):
    """Masks values of sensitive `key=value` / `key: value` pairs in messages."""

    SENSITIVE_FIELDS = (
        'password', 'token', 'api_key', 'secret',
        'authorization', 'cookie', 'session'
    )
    _pattern = re.compile(
        r"(?i)\b(" + "|".join(SENSITIVE_FIELDS) + r")\b(\s*[=:]\s*)(\S+)"
    )

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self._pattern.sub(r"\1\2***REDACTED***", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True

def setup_logging(
    service_name: str,
    level: str = "INFO",
    environment: str = "development",
    version: str = "1.0.0",
) -> None:
    """
    Configure the root logger for the service.

    Args:
        service_name: Name stamped on every record
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: Deployment environment label
        version: Service version label
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(service_name, environment, version))
    handler.addFilter(PerformanceFilter())
    handler.addFilter(SecurityFilter())
    root_logger.addHandler(handler)

    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialized",
        extra={
            'extra_fields': {
                'service': service_name,
                'level': level,
            }
        }
    )

class LoggerAdapter(logging.LoggerAdapter):
    """Attaches the current request id to `extra` of every call."""

    def process(self, msg, kwargs):
        extra = kwargs.get('extra', {})
        request_id = request_id_var.get()
        if request_id:
            extra['request_id'] = request_id
        kwargs['extra'] = extra
        return msg, kwargs

def get_logger(name: str) -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger(name), {})

def get_trace_context() -> Optional[Dict[str, Any]]:
    context = {}
    request_id = request_id_var.get()
    if request_id:
        context["request_id"] = request_id
    correlation_id = correlation_id_var.get()
    if correlation_id:
        context["correlation_id"] = correlation_id
    return context or None

def set_request_context(request_id: Optional[str] = None, correlation_id: Optional[str] = None) -> None:
    if request_id:
        request_id_var.set(request_id)
    if correlation_id:
        correlation_id_var.set(correlation_id)

def generate_request_id() -> str:
    return str(uuid.uuid4())

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request and its outcome, and echoes the request id back
    in the X-Request-ID response header.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get('X-Request-ID') or generate_request_id()
        set_request_context(
            request_id=request_id,
            correlation_id=request.headers.get('X-Correlation-ID')
        )

        logger = get_logger(__name__)
        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                'extra_fields': {
                    'method': request.method,
                    'path': request.url.path,
                    'query': str(request.query_params),
                    'client_host': request.client.host if request.client else None
                }
            }
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                exc_info=True,
                extra={'duration': time.perf_counter() - start_time}
            )
            raise

        duration = time.perf_counter() - start_time
        logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={
                'duration': duration,
                'extra_fields': {
                    'method': request.method,
                    'path': request.url.path,
                    'status_code': response.status_code,
                }
            }
        )
        response.headers['X-Request-ID'] = request_id
        return response
