from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from tailorshop.core import get_logger
from tailorshop.domain.models import Customer, Measurement, MEASUREMENT_FIELDS, Order
from .errors import NotFoundError, ValidationError
from .pagination import ListParams, Page, like_pattern, paginate
from .schemas import MeasurementWrite

logger = get_logger(__name__)


class MeasurementService:
    sortable = {
        "created_at": Measurement.created_at,
        "updated_at": Measurement.updated_at,
        "name": Measurement.name,
    }

    def __init__(self, db: Session):
        self.db = db

    def list(self, params: ListParams, customer_id: Optional[int] = None) -> Page:
        stmt = (
            select(Measurement)
            .join(Measurement.customer)
            .options(selectinload(Measurement.customer))
        )
        if params.q:
            pattern = like_pattern(params.q)
            stmt = stmt.where(or_(
                Measurement.name.ilike(pattern, escape="\\"),
                Customer.name.ilike(pattern, escape="\\"),
            ))
        if customer_id is not None:
            stmt = stmt.where(Measurement.customer_id == customer_id)
        return paginate(self.db, stmt, params, self.sortable, Measurement.id)

    def get(self, measurement_id: int) -> Measurement:
        measurement = self.db.get(Measurement, measurement_id)
        if not measurement:
            raise NotFoundError("Measurement not found")
        return measurement

    def create(self, data: MeasurementWrite) -> Measurement:
        self._require_customer(data.customer_id)
        measurement = Measurement(customer_id=data.customer_id)
        self._apply(measurement, data)
        try:
            if data.is_default:
                self.clear_defaults(data.customer_id)
            self.db.add(measurement)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(measurement)
        logger.info(f"Measurement {measurement.id} created for customer {measurement.customer_id}")
        return measurement

    def replace(self, measurement_id: int, data: MeasurementWrite) -> Measurement:
        """Overwrite every field; values left out of the payload are cleared."""
        measurement = self.get(measurement_id)
        moved = data.customer_id != measurement.customer_id
        if moved:
            self._require_customer(data.customer_id)
        try:
            if moved:
                self.unlink_orders(measurement.id)
            if data.is_default:
                self.clear_defaults(data.customer_id, exclude_id=measurement.id)
            measurement.customer_id = data.customer_id
            self._apply(measurement, data)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(measurement)
        logger.info(f"Measurement {measurement.id} replaced")
        return measurement

    def delete(self, measurement_id: int) -> None:
        measurement = self.get(measurement_id)
        try:
            self.unlink_orders(measurement.id)
            self.db.delete(measurement)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.info(f"Measurement {measurement_id} deleted")

    def unlink_orders(self, measurement_id: int) -> None:
        """Detach the measurement from every order that references it; the caller commits."""
        self.db.execute(
            update(Order)
            .where(Order.measurement_id == measurement_id)
            .values(measurement_id=None)
            .execution_options(synchronize_session="fetch")
        )

    def clear_defaults(self, customer_id: int, exclude_id: Optional[int] = None) -> None:
        """Unset the default flag on the customer's measurements; the caller commits."""
        stmt = (
            update(Measurement)
            .where(Measurement.customer_id == customer_id, Measurement.is_default.is_(True))
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )
        if exclude_id is not None:
            stmt = stmt.where(Measurement.id != exclude_id)
        self.db.execute(stmt)

    def _require_customer(self, customer_id: int) -> None:
        if self.db.get(Customer, customer_id) is None:
            raise ValidationError(
                "Customer not found",
                details=[{"field": "customer_id", "message": f"No customer with id {customer_id}"}],
            )

    @staticmethod
    def _apply(measurement: Measurement, data: MeasurementWrite) -> None:
        measurement.name = data.name
        measurement.is_default = data.is_default
        measurement.notes = data.notes
        for field in MEASUREMENT_FIELDS:
            setattr(measurement, field, getattr(data, field))
