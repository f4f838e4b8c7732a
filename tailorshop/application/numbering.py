"""
Order numbers: a fixed prefix plus a zero-padded, strictly increasing counter
(``AR-00001``, ``AR-00002``, ...).

The counter lives in a single ``counters`` row that is incremented with one
``UPDATE ... RETURNING`` statement inside the caller's transaction, so two
concurrent order creations can never be handed the same number.
"""
import logging
import re
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tailorshop.core_settings import get_settings
from tailorshop.domain.models import Counter, Order, ORDER_COUNTER_ID

logger = logging.getLogger(__name__)

ORDER_NUMBER_WIDTH = 5


def format_order_number(value: int, prefix: Optional[str] = None) -> str:
    if prefix is None:
        prefix = get_settings().ORDER_NUMBER_PREFIX
    return f"{prefix}{value:0{ORDER_NUMBER_WIDTH}d}"


def parse_order_number(order_number: Optional[str], prefix: Optional[str] = None) -> Optional[int]:
    """Return the numeric suffix of an order number, or None if it does not match."""
    if prefix is None:
        prefix = get_settings().ORDER_NUMBER_PREFIX
    if not order_number:
        return None
    match = re.fullmatch(re.escape(prefix) + r"(\d+)", order_number.strip())
    return int(match.group(1)) if match else None


def _increment(db: Session) -> Optional[int]:
    stmt = (
        update(Counter)
        .where(Counter.id == ORDER_COUNTER_ID)
        .values(value=Counter.value + 1)
        .returning(Counter.value)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).scalar_one_or_none()


def _seed_value(db: Session) -> int:
    # Start after the most recent order so imported data keeps its numbering
    latest = db.execute(
        select(Order.order_number).order_by(Order.created_at.desc(), Order.id.desc()).limit(1)
    ).scalar_one_or_none()
    return parse_order_number(latest) or 0


def next_order_number(db: Session) -> str:
    value = _increment(db)
    if value is None:
        seed = _seed_value(db)
        try:
            with db.begin_nested():
                db.add(Counter(id=ORDER_COUNTER_ID, value=seed + 1))
            value = seed + 1
            logger.info("Order counter initialised at %s", value)
        except IntegrityError:
            # Another request created the row first
            value = _increment(db)
    return format_order_number(value)
