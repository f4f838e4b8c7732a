import random
from datetime import date

from sqlalchemy import select

from tailorshop.application.balance import compute_balance, ledger_total
from tailorshop.application.numbering import format_order_number
from tailorshop.domain.models import Counter, Measurement, Order, ORDER_COUNTER_ID
from tailorshop.seed import seed


def test_seed_loads_demo_data(db):
    created = seed(db, customers=5, orders=8, rng=random.Random(7), today=date(2024, 6, 30))
    assert created["customers"] == 5
    assert created["orders"] == 8

    orders = db.execute(select(Order).order_by(Order.id)).scalars().all()
    assert [o.order_number for o in orders] == [format_order_number(i) for i in range(1, 9)]
    assert db.execute(select(Counter.value).where(Counter.id == ORDER_COUNTER_ID)).scalar_one() == 8

    for order in orders:
        assert order.delivery_date >= order.booking_date
        assert order.balance == compute_balance(order.total_amount, order.advance_paid, [ledger_total(db, order.id)])
        if order.measurement_id is not None:
            assert db.get(Measurement, order.measurement_id).customer_id == order.customer_id


def test_seed_without_customers_creates_no_orders(db):
    assert seed(db, customers=0, orders=3, rng=random.Random(1)) == {
        "customers": 0, "measurements": 0, "orders": 0, "payments": 0,
    }
