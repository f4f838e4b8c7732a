from decimal import Decimal
from typing import Iterable, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tailorshop.domain.models import Payment

Amount = Union[Decimal, float, int, None]
CENT = Decimal("0.01")


def to_decimal(value: Amount) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_balance(total_amount: Amount, advance_paid: Amount, payments: Iterable[Amount] = ()) -> Decimal:
    """balance = total_amount - (advance_paid + sum of ledger payments)."""
    paid = to_decimal(advance_paid) + sum((to_decimal(p) for p in payments), Decimal("0"))
    return (to_decimal(total_amount) - paid).quantize(CENT)


def ledger_total(db: Session, order_id: Optional[int]) -> Decimal:
    if order_id is None:
        return Decimal("0")
    total = db.execute(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.order_id == order_id)
    ).scalar_one()
    return to_decimal(total).quantize(CENT)
