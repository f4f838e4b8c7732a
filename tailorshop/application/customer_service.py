from typing import Dict, List

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tailorshop.core import get_logger
from tailorshop.domain.models import Customer, Measurement, Order
from .errors import ConflictError, HasDependentsError, NotFoundError, is_unique_violation
from .pagination import ListParams, Page, like_pattern, paginate
from .schemas import CustomerCreate, CustomerUpdate

logger = get_logger(__name__)

DUPLICATE_PHONE = "Phone number already exists"


class CustomerService:
    sortable = {
        "created_at": Customer.created_at,
        "updated_at": Customer.updated_at,
        "name": Customer.name,
        "phone": Customer.phone,
    }

    def __init__(self, db: Session):
        self.db = db

    def list(self, params: ListParams) -> Page:
        """Customers matching `q` on name (case-insensitive) or phone, with their order counts."""
        stmt = select(Customer)
        if params.q:
            pattern = like_pattern(params.q)
            stmt = stmt.where(or_(
                Customer.name.ilike(pattern, escape="\\"),
                Customer.phone.like(pattern, escape="\\"),
            ))
        page = paginate(self.db, stmt, params, self.sortable, Customer.id)
        counts = self.order_counts([c.id for c in page.items])
        page.items = [self._with_count(c, counts.get(c.id, 0)) for c in page.items]
        return page

    def order_counts(self, customer_ids: List[int]) -> Dict[int, int]:
        if not customer_ids:
            return {}
        rows = self.db.execute(
            select(Order.customer_id, func.count(Order.id))
            .where(Order.customer_id.in_(customer_ids))
            .group_by(Order.customer_id)
        ).all()
        return {customer_id: count for customer_id, count in rows}

    def get(self, customer_id: int) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise NotFoundError("Customer not found")
        return customer

    def create(self, data: CustomerCreate) -> Customer:
        obj = Customer(name=data.name, phone=data.phone, address=data.address)
        self.db.add(obj)
        self._commit()
        self.db.refresh(obj)
        logger.info(f"Customer {obj.id} created")
        return obj

    def update(self, customer_id: int, data: CustomerUpdate) -> Customer:
        customer = self.get(customer_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field != "address":
                continue
            setattr(customer, field, value)
        self._commit()
        self.db.refresh(customer)
        logger.info(f"Customer {customer.id} updated", extra={"extra_fields": {"fields": sorted(changes)}})
        return customer

    def delete(self, customer_id: int) -> None:
        customer = self.get(customer_id)
        orders = self.db.execute(
            select(func.count(Order.id)).where(Order.customer_id == customer_id)
        ).scalar_one()
        if orders:
            logger.warning(f"Refusing to delete customer {customer_id}: {orders} order(s) reference it")
            raise HasDependentsError("Customer has orders; reassign or delete orders first")
        # Measurements belong to the customer and go with it
        self.db.delete(customer)
        self._commit()
        logger.info(f"Customer {customer_id} deleted")

    def measurements(self, customer_id: int) -> List[Measurement]:
        self.get(customer_id)
        return list(self.db.execute(
            select(Measurement)
            .where(Measurement.customer_id == customer_id)
            .order_by(Measurement.created_at.desc(), Measurement.id.desc())
        ).scalars())

    def _commit(self):
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if is_unique_violation(exc, "phone"):
                raise ConflictError(DUPLICATE_PHONE) from exc
            raise

    @staticmethod
    def _with_count(customer: Customer, order_count: int) -> dict:
        return {
            "id": customer.id,
            "name": customer.name,
            "phone": customer.phone,
            "address": customer.address,
            "created_at": customer.created_at,
            "updated_at": customer.updated_at,
            "order_count": order_count,
        }
