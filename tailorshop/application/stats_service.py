from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tailorshop.domain.models import Customer, Order, ORDER_STATUSES, Payment
from .balance import CENT, to_decimal

RECENT_DAYS = 30
CHART_MONTHS = 6


def month_starts(today: date, count: int = CHART_MONTHS) -> list[date]:
    """First day of the current month and the `count - 1` months before it, oldest first."""
    year, month = today.year, today.month
    starts = []
    for _ in range(count):
        starts.append(date(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(starts))


class StatsService:
    def __init__(self, db: Session):
        self.db = db

    def _sum(self, column) -> Decimal:
        return to_decimal(self.db.execute(select(func.coalesce(func.sum(column), 0))).scalar_one())

    def stats(self, today: Optional[date] = None) -> dict:
        # Timestamps are stored in UTC
        today = today or datetime.utcnow().date()

        total_customers = self.db.execute(select(func.count(Customer.id))).scalar_one()
        total_orders = self.db.execute(select(func.count(Order.id))).scalar_one()
        revenue = self._sum(Order.total_amount)
        advances = self._sum(Order.advance_paid)
        payments = self._sum(Payment.amount)

        since = datetime.combine(today - timedelta(days=RECENT_DAYS), datetime.min.time())
        recent = self.db.execute(
            select(func.count(Order.id)).where(Order.created_at >= since)
        ).scalar_one()

        status_counts = {status: 0 for status in ORDER_STATUSES}
        for status, count in self.db.execute(
            select(Order.status, func.count(Order.id)).group_by(Order.status)
        ).all():
            status_counts[status] = count

        return {
            "total_customers": total_customers,
            "total_orders": total_orders,
            "total_revenue": float(revenue),
            "total_advances": float(advances),
            "total_payments": float(payments),
            # Same as summing each order's ledger-computed balance
            "total_balance": float((revenue - advances - payments).quantize(CENT)),
            "recent_orders_count": recent,
            "status_counts": status_counts,
            "chart_data": self.chart_data(today),
        }

    def chart_data(self, today: date) -> list[dict]:
        """Revenue (sum of total_amount) per creation month for the last six months, zero-filled."""
        starts = month_starts(today)
        since = datetime.combine(starts[0], datetime.min.time())
        rows = self.db.execute(
            select(Order.created_at, Order.total_amount).where(Order.created_at >= since)
        ).all()
        buckets = {(start.year, start.month): Decimal("0") for start in starts}
        for created_at, amount in rows:
            key = (created_at.year, created_at.month)
            if key in buckets:
                buckets[key] += to_decimal(amount)
        return [
            {"month": start.strftime("%b %Y"), "revenue": float(buckets[(start.year, start.month)])}
            for start in starts
        ]
