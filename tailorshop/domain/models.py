from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import String, Text, ForeignKey, Numeric, Date, DateTime, Boolean, Index, UniqueConstraint, text
from datetime import datetime, date
from decimal import Decimal
from typing import Optional

class Base(DeclarativeBase):
    pass

ORDER_STATUSES = ("In Process", "Delivered", "Cancelled")
PAYMENT_METHODS = ("cash", "bank", "other")
ORDER_TYPES = ("nikkah", "mehndi", "barat", "wallima", "other")

# Body measurements in inches, with the largest value accepted for each field
MEASUREMENT_LIMITS = {
    "chest": 100,
    "waist": 100,
    "hip": 100,
    "shoulder_width": 50,
    "arm_length": 50,
    "bicep": 30,
    "neck": 30,
    "wrist": 15,
    "thigh": 50,
    "inseam": 50,
    "outseam": 60,
    "knee": 30,
    "calf": 30,
    "ankle": 20,
    "back_length": 50,
    "front_length": 50,
    "coat_length": 60,
    "waistcoat_length": 50,
    "sherwani_length": 70,
    "pant_length": 60,
}
MEASUREMENT_FIELDS = tuple(MEASUREMENT_LIMITS)

ORDER_COUNTER_ID = 1

class Customer(Base):
    __tablename__ = "customers"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    phone: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    # No cascade to orders: deletion is refused while orders exist
    orders: Mapped[list["Order"]] = relationship("Order", back_populates="customer")
    measurements: Mapped[list["Measurement"]] = relationship(
        "Measurement", back_populates="customer", cascade="all, delete-orphan"
    )

class Measurement(Base):
    __tablename__ = "measurements"
    __table_args__ = (
        # At most one default measurement per customer
        Index(
            "uq_measurements_customer_default",
            "customer_id",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default"),
        ),
    )
    id: Mapped[int] = mapped_column(primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    chest: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    waist: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    hip: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    shoulder_width: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    arm_length: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    bicep: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    neck: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    wrist: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    thigh: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    inseam: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    outseam: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    knee: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    calf: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    ankle: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    back_length: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    front_length: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    coat_length: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    waistcoat_length: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    sherwani_length: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    pant_length: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    customer: Mapped[Customer] = relationship("Customer", back_populates="measurements")

class Order(Base):
    __tablename__ = "orders"
    id: Mapped[int] = mapped_column(primary_key=True)
    order_number: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), index=True)
    booking_date: Mapped[date] = mapped_column(Date)
    delivery_date: Mapped[date] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default="In Process", index=True)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Payment snapshot; balance is refreshed from the payment ledger on every write
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    advance_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    payment_method: Mapped[str] = mapped_column(String(20), default="other")
    measurement_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("measurements.id", ondelete="SET NULL"), nullable=True
    )
    fitting_preferences: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    customer: Mapped[Customer] = relationship("Customer", back_populates="orders")
    measurement: Mapped[Optional[Measurement]] = relationship("Measurement")
    items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="order", cascade="all, delete-orphan"
    )

class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (UniqueConstraint("order_id", "order_type", name="uq_order_items_order_type"),)
    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"))
    order_type: Mapped[str] = mapped_column(String(20))
    description: Mapped[str] = mapped_column(Text, default="")
    order: Mapped[Order] = relationship("Order", back_populates="items")

class Payment(Base):
    __tablename__ = "payments"
    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    payment_method: Mapped[str] = mapped_column(String(20), default="other")
    payment_date: Mapped[date] = mapped_column(Date)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    order: Mapped[Order] = relationship("Order", back_populates="payments")
    customer: Mapped[Customer] = relationship("Customer")

class Counter(Base):
    __tablename__ = "counters"
    id: Mapped[int] = mapped_column(primary_key=True)
    value: Mapped[int] = mapped_column(default=0)
