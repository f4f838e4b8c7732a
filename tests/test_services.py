from decimal import Decimal
from typing import Dict, List, get_type_hints

from tailorshop.application.customer_service import CustomerService
from tailorshop.application.order_service import OrderService
from tailorshop.domain.models import Order


def test_helper_annotations_resolve_beside_list_methods():
    assert get_type_hints(CustomerService.order_counts) == {
        "customer_ids": List[int], "return": Dict[int, int],
    }
    assert get_type_hints(OrderService.ledger_totals)["return"] == Dict[int, Decimal]


def test_counts_and_ledgers_for_no_ids_are_empty(db):
    assert CustomerService(db).order_counts([]) == {}
    assert OrderService(db).ledger_totals([]) == {}


def test_money_columns_load_as_decimal(db, make_customer, make_order):
    customer = make_customer()
    order = make_order(customer["id"], total=1234.5, advance=34.5)
    stored = db.get(Order, order["id"])
    assert stored.total_amount == Decimal("1234.50")
    assert isinstance(stored.advance_paid, Decimal)
    assert isinstance(stored.balance, Decimal)
