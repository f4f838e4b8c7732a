from datetime import date
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from tailorshop.core import get_logger
from tailorshop.domain.models import Customer, Order, Payment
from .balance import to_decimal
from .errors import NotFoundError
from .order_service import OrderService
from .pagination import ListParams, Page, like_pattern, paginate
from .schemas import PaymentCreate, PaymentUpdate

logger = get_logger(__name__)

ORDER_MISMATCH = "Order not found or does not belong to customer"


class PaymentService:
    sortable = {
        "created_at": Payment.created_at,
        "payment_date": Payment.payment_date,
        "amount": Payment.amount,
    }

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderService(db)

    def list(
        self,
        params: ListParams,
        order_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Page:
        stmt = (
            select(Payment)
            .join(Payment.order)
            .join(Payment.customer)
            .options(selectinload(Payment.order).selectinload(Order.customer))
        )
        if params.q:
            pattern = like_pattern(params.q)
            stmt = stmt.where(or_(
                Order.order_number.ilike(pattern, escape="\\"),
                Customer.name.ilike(pattern, escape="\\"),
                Payment.notes.ilike(pattern, escape="\\"),
            ))
        if order_id is not None:
            stmt = stmt.where(Payment.order_id == order_id)
        if customer_id is not None:
            stmt = stmt.where(Payment.customer_id == customer_id)
        if date_from is not None:
            stmt = stmt.where(Payment.payment_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(Payment.payment_date <= date_to)

        page = paginate(self.db, stmt, params, self.sortable, Payment.id)
        page.items = [self.shape(p) for p in page.items]
        return page

    def get_model(self, payment_id: int) -> Payment:
        payment = self.db.get(Payment, payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    def create(self, data: PaymentCreate) -> dict:
        order = self.db.get(Order, data.order_id)
        if not order or (data.customer_id is not None and order.customer_id != data.customer_id):
            raise NotFoundError(ORDER_MISMATCH)

        payment = Payment(
            order_id=order.id,
            customer_id=order.customer_id,
            amount=data.amount,
            payment_method=data.payment_method,
            payment_date=data.payment_date,
            notes=data.notes,
        )
        try:
            self.db.add(payment)
            self.orders.refresh_balance(order)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.error(f"Failed to record payment for order {order.id}", exc_info=True)
            raise
        self.db.refresh(payment)
        logger.info(
            f"Payment {payment.id} recorded for order {order.order_number}",
            extra={"extra_fields": {"amount": float(to_decimal(payment.amount)), "balance": float(order.balance)}},
        )
        return self.shape(payment)

    def update(self, payment_id: int, data: PaymentUpdate) -> dict:
        payment = self.get_model(payment_id)
        changes = data.model_dump(exclude_unset=True)
        try:
            for field, value in changes.items():
                if value is None and field != "notes":
                    continue
                setattr(payment, field, value)
            self.orders.refresh_balance(payment.order)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(payment)
        logger.info(f"Payment {payment.id} updated", extra={"extra_fields": {"fields": sorted(changes)}})
        return self.shape(payment)

    def delete(self, payment_id: int) -> None:
        payment = self.get_model(payment_id)
        order = payment.order
        try:
            self.db.delete(payment)
            self.orders.refresh_balance(order)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.info(f"Payment {payment_id} deleted from order {order.order_number}")

    @staticmethod
    def shape(payment: Payment) -> dict:
        order = payment.order
        summary = None
        if order is not None:
            customer = order.customer
            summary = {
                "id": order.id,
                "order_number": order.order_number,
                "total_amount": float(to_decimal(order.total_amount)),
                "advance_paid": float(to_decimal(order.advance_paid)),
                "balance": float(to_decimal(order.balance)),
                "booking_date": order.booking_date,
                "customer": {"id": customer.id, "name": customer.name, "phone": customer.phone} if customer else None,
            }
        return {
            "id": payment.id,
            "order_id": payment.order_id,
            "customer_id": payment.customer_id,
            "amount": float(to_decimal(payment.amount)),
            "payment_method": payment.payment_method,
            "payment_date": payment.payment_date,
            "notes": payment.notes,
            "created_at": payment.created_at,
            "order": summary,
        }
