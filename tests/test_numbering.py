from datetime import date

import pytest
from sqlalchemy import select

from tailorshop.application.numbering import format_order_number, next_order_number, parse_order_number
from tailorshop.domain.models import Counter, Customer, Order, ORDER_COUNTER_ID


@pytest.mark.parametrize("value, expected", [(1, "AR-00001"), (42, "AR-00042"), (123456, "AR-123456")])
def test_format(value, expected):
    assert format_order_number(value) == expected


@pytest.mark.parametrize("number, expected", [
    ("AR-00017", 17),
    ("AR-9", 9),
    ("XY-00017", None),
    ("AR-17a", None),
    ("", None),
    (None, None),
])
def test_parse(number, expected):
    assert parse_order_number(number) == expected


def test_counter_row_is_created_on_first_use(db):
    assert next_order_number(db) == "AR-00001"
    assert next_order_number(db) == "AR-00002"
    db.commit()
    assert db.execute(select(Counter.value).where(Counter.id == ORDER_COUNTER_ID)).scalar_one() == 2


def test_missing_counter_resumes_after_latest_order(db):
    customer = Customer(name="Imported Customer", phone="+923009999999")
    db.add(customer)
    db.flush()
    db.add(Order(
        order_number="AR-00041",
        customer_id=customer.id,
        booking_date=date(2023, 5, 1),
        delivery_date=date(2023, 5, 9),
    ))
    db.commit()

    assert next_order_number(db) == "AR-00042"


def test_unparseable_latest_order_starts_from_one(db):
    customer = Customer(name="Legacy Customer", phone="+923008888888")
    db.add(customer)
    db.flush()
    db.add(Order(
        order_number="LEGACY-7",
        customer_id=customer.id,
        booking_date=date(2023, 5, 1),
        delivery_date=date(2023, 5, 9),
    ))
    db.commit()

    assert next_order_number(db) == "AR-00001"


def test_existing_counter_is_incremented(db):
    db.add(Counter(id=ORDER_COUNTER_ID, value=99))
    db.commit()
    assert next_order_number(db) == "AR-00100"
