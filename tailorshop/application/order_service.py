from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from tailorshop.core import get_logger
from tailorshop.domain.models import Customer, Measurement, Order, OrderItem, Payment
from .balance import compute_balance, ledger_total, to_decimal
from .errors import NotFoundError, ValidationError
from .numbering import next_order_number
from .pagination import ListParams, Page, like_pattern, paginate
from .schemas import OrderCreate, OrderUpdate

logger = get_logger(__name__)

# Columns that may be cleared by sending null on update
NULLABLE_FIELDS = {"comments", "measurement_id", "fitting_preferences"}


class OrderService:
    sortable = {
        "created_at": Order.created_at,
        "updated_at": Order.updated_at,
        "order_number": Order.order_number,
        "booking_date": Order.booking_date,
        "delivery_date": Order.delivery_date,
        "status": Order.status,
        "total_amount": Order.total_amount,
        "balance": Order.balance,
    }

    def __init__(self, db: Session):
        self.db = db

    def list(
        self,
        params: ListParams,
        customer_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        status: Optional[str] = None,
    ) -> Page:
        stmt = (
            select(Order)
            .join(Order.customer)
            .options(selectinload(Order.items), selectinload(Order.customer))
        )
        if params.q:
            pattern = like_pattern(params.q)
            stmt = stmt.where(or_(
                Order.order_number.ilike(pattern, escape="\\"),
                Customer.name.ilike(pattern, escape="\\"),
                Customer.phone.like(pattern, escape="\\"),
            ))
        if customer_id is not None:
            stmt = stmt.where(Order.customer_id == customer_id)
        if date_from is not None:
            stmt = stmt.where(Order.booking_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(Order.booking_date <= date_to)
        if status:
            stmt = stmt.where(Order.status == status)

        page = paginate(self.db, stmt, params, self.sortable, Order.id)
        ledgers = self.ledger_totals([o.id for o in page.items])
        page.items = [self.shape(o, ledgers.get(o.id, Decimal("0"))) for o in page.items]
        return page

    def ledger_totals(self, order_ids: List[int]) -> Dict[int, Decimal]:
        if not order_ids:
            return {}
        rows = self.db.execute(
            select(Payment.order_id, func.sum(Payment.amount))
            .where(Payment.order_id.in_(order_ids))
            .group_by(Payment.order_id)
        ).all()
        return {order_id: to_decimal(total) for order_id, total in rows}

    def get_model(self, order_id: int) -> Order:
        order = self.db.get(Order, order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get(self, order_id: int) -> dict:
        order = self.get_model(order_id)
        return self.shape(order, ledger_total(self.db, order.id))

    def create(self, data: OrderCreate) -> dict:
        customer = self._customer(data.customer_id)
        if data.measurement_id is not None:
            measurement_id = self._measurement_for(data.measurement_id, customer.id).id
        else:
            measurement_id = self.default_measurement_id(customer.id)

        try:
            order = Order(
                order_number=next_order_number(self.db),
                customer_id=customer.id,
                booking_date=data.booking_date,
                delivery_date=data.delivery_date,
                status=data.status,
                comments=data.comments,
                total_amount=data.total_amount,
                advance_paid=data.advance_paid,
                balance=compute_balance(data.total_amount, data.advance_paid),
                payment_method=data.payment_method,
                measurement_id=measurement_id,
                fitting_preferences=data.fitting_preferences,
                items=[OrderItem(order_type=i.order_type, description=i.description) for i in data.order_items],
            )
            self.db.add(order)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(order)
        logger.info(f"Order {order.order_number} created for customer {customer.id}")
        return self.shape(order, Decimal("0"))

    def update(self, order_id: int, data: OrderUpdate) -> dict:
        order = self.get_model(order_id)
        changes = data.model_dump(exclude_unset=True)
        items = changes.pop("order_items", None)

        customer_id = changes.get("customer_id") or order.customer_id
        reassigned = customer_id != order.customer_id
        if reassigned:
            self._customer(customer_id)
        booking = changes.get("booking_date") or order.booking_date
        delivery = changes.get("delivery_date") or order.delivery_date
        if delivery < booking:
            raise ValidationError(
                "Delivery date must be on or after booking date",
                details=[{"field": "deliveryDate", "message": "Must be on or after booking date"}],
            )
        if changes.get("measurement_id") is not None:
            self._measurement_for(changes["measurement_id"], customer_id)
        elif reassigned and "measurement_id" not in changes:
            # The old customer's measurement does not follow the order
            changes["measurement_id"] = self.default_measurement_id(customer_id)

        try:
            for field, value in changes.items():
                if value is None and field not in NULLABLE_FIELDS:
                    continue
                setattr(order, field, value)
            if reassigned:
                # Keep the ledger rows attached to the order's customer
                self.db.execute(
                    update(Payment)
                    .where(Payment.order_id == order.id)
                    .values(customer_id=customer_id)
                    .execution_options(synchronize_session="fetch")
                )
            if items is not None:
                # Flush the removals first: order_type is unique per order
                order.items.clear()
                self.db.flush()
                order.items.extend(
                    OrderItem(order_type=i["order_type"], description=i["description"]) for i in items
                )
            ledger = self.refresh_balance(order)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(order)
        logger.info(f"Order {order.order_number} updated", extra={"extra_fields": {"fields": sorted(changes)}})
        return self.shape(order, ledger)

    def delete(self, order_id: int) -> None:
        order = self.get_model(order_id)
        try:
            # Items and ledger rows are removed with the order
            self.db.delete(order)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.info(f"Order {order.order_number} deleted")

    def refresh_balance(self, order: Order) -> Decimal:
        """Recompute the stored balance from the payment ledger; the caller commits."""
        self.db.flush()
        ledger = ledger_total(self.db, order.id)
        order.balance = compute_balance(order.total_amount, order.advance_paid, [ledger])
        return ledger

    def default_measurement_id(self, customer_id: int) -> Optional[int]:
        return self.db.execute(
            select(Measurement.id).where(
                Measurement.customer_id == customer_id,
                Measurement.is_default.is_(True),
            )
        ).scalar_one_or_none()

    def _customer(self, customer_id: int) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise ValidationError(
                "Customer not found",
                details=[{"field": "customerId", "message": f"No customer with id {customer_id}"}],
            )
        return customer

    def _measurement_for(self, measurement_id: int, customer_id: int) -> Measurement:
        measurement = self.db.get(Measurement, measurement_id)
        if not measurement or measurement.customer_id != customer_id:
            raise ValidationError(
                "Measurement not found for this customer",
                details=[{"field": "measurementId", "message": f"No measurement {measurement_id} for customer {customer_id}"}],
            )
        return measurement

    @staticmethod
    def shape(order: Order, ledger: Decimal) -> dict:
        """Order row plus items, customer summary and the ledger-derived balance."""
        advance = to_decimal(order.advance_paid)
        customer = order.customer
        return {
            "id": order.id,
            "order_number": order.order_number,
            "customer_id": order.customer_id,
            "booking_date": order.booking_date,
            "delivery_date": order.delivery_date,
            "status": order.status,
            "comments": order.comments,
            "total_amount": float(to_decimal(order.total_amount)),
            "advance_paid": float(advance),
            "paid_total": float(advance + ledger),
            "balance": float(compute_balance(order.total_amount, advance, [ledger])),
            "payment_method": order.payment_method,
            "measurement_id": order.measurement_id,
            "fitting_preferences": order.fitting_preferences,
            "items": [
                {"id": item.id, "order_type": item.order_type, "description": item.description}
                for item in order.items
            ],
            "customer": {
                "id": customer.id,
                "name": customer.name,
                "phone": customer.phone,
                "address": customer.address,
            } if customer else None,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }
