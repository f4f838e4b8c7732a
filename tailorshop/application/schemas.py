import re
from datetime import date, datetime
from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from tailorshop.domain.models import MEASUREMENT_LIMITS

OrderStatus = Literal["In Process", "Delivered", "Cancelled"]
PaymentMethod = Literal["cash", "bank", "other"]
OrderType = Literal["nikkah", "mehndi", "barat", "wallima", "other"]

PHONE_RE = re.compile(r"^\+?[1-9]\d{0,15}$")
MAX_ORDER_ITEMS = 4

T = TypeVar("T")


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if len(value) > 20:
        raise ValueError("Phone number too long")
    if not PHONE_RE.match(value):
        raise ValueError("Invalid phone number format")
    return value


# Pagination

class PaginationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    page: int
    page_size: int = Field(alias="pageSize")
    total: int
    pages: int


class PageOut(BaseModel, Generic[T]):
    data: list[T]
    pagination: PaginationOut


class SuccessOut(BaseModel):
    success: bool = True


# Customers

class CustomerCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    name: str = Field(min_length=2, max_length=100)
    phone: str
    address: Optional[str] = Field(default=None, max_length=500)

    @field_validator("address", mode="before")
    @classmethod
    def blank_address(cls, value):
        return _blank_to_none(value)

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, value):
        return _check_phone(value)


class CustomerUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone: Optional[str] = None
    address: Optional[str] = Field(default=None, max_length=500)

    @field_validator("address", mode="before")
    @classmethod
    def blank_address(cls, value):
        return _blank_to_none(value)

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, value):
        return _check_phone(value)


class CustomerSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    phone: str
    address: Optional[str] = None


class CustomerRead(CustomerSummary):
    created_at: datetime
    updated_at: datetime


class CustomerListItem(CustomerRead):
    order_count: int = 0


# Measurements

class MeasurementValues(BaseModel):
    """Body measurements in inches; blank strings from the form mean 'not taken'."""
    chest: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["chest"])
    waist: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["waist"])
    hip: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["hip"])
    shoulder_width: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["shoulder_width"])
    arm_length: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["arm_length"])
    bicep: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["bicep"])
    neck: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["neck"])
    wrist: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["wrist"])
    thigh: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["thigh"])
    inseam: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["inseam"])
    outseam: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["outseam"])
    knee: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["knee"])
    calf: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["calf"])
    ankle: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["ankle"])
    back_length: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["back_length"])
    front_length: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["front_length"])
    coat_length: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["coat_length"])
    waistcoat_length: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["waistcoat_length"])
    sherwani_length: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["sherwani_length"])
    pant_length: Optional[float] = Field(default=None, gt=0, le=MEASUREMENT_LIMITS["pant_length"])

    @field_validator(*MEASUREMENT_LIMITS, mode="before")
    @classmethod
    def blank_measurement(cls, value):
        return _blank_to_none(value)


class MeasurementWrite(MeasurementValues):
    model_config = ConfigDict(str_strip_whitespace=True)
    customer_id: int
    name: str = Field(min_length=1, max_length=255)
    is_default: bool = False
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes(cls, value):
        return _blank_to_none(value)


class CustomerBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    phone: str


class MeasurementRead(MeasurementValues):
    model_config = ConfigDict(from_attributes=True)
    id: int
    customer_id: int
    name: str
    is_default: bool
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    customer: Optional[CustomerBrief] = None


class CustomerMeasurementsOut(BaseModel):
    measurements: list[MeasurementRead]
    total: int


# Orders

class OrderItemIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)
    order_type: OrderType = "other"
    description: str = Field(default="", max_length=1000)


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    order_type: str
    description: str


class _OrderFields(BaseModel):
    # The dashboard posts camelCase keys; snake_case is accepted as well
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    @field_validator("comments", "fitting_preferences", mode="before", check_fields=False)
    @classmethod
    def blank_text(cls, value):
        return _blank_to_none(value)

    @field_validator("order_items", mode="after", check_fields=False)
    @classmethod
    def unique_order_types(cls, items):
        if items is None:
            return items
        types = [item.order_type for item in items]
        if len(types) != len(set(types)):
            raise ValueError("Each order type can only be used once per order")
        return items

    @model_validator(mode="after")
    def check_dates_and_amounts(self):
        if self.booking_date and self.delivery_date and self.delivery_date < self.booking_date:
            raise ValueError("Delivery date must be on or after booking date")
        if self.total_amount is not None and self.advance_paid is not None and self.advance_paid > self.total_amount:
            raise ValueError("Advance paid cannot exceed total amount")
        return self


class OrderCreate(_OrderFields):
    customer_id: int
    booking_date: date
    delivery_date: date
    status: OrderStatus = "In Process"
    comments: Optional[str] = Field(default=None, max_length=1000)
    total_amount: float = Field(default=0, ge=0)
    advance_paid: float = Field(default=0, ge=0)
    payment_method: PaymentMethod = "other"
    measurement_id: Optional[int] = None
    fitting_preferences: Optional[str] = Field(default=None, max_length=1000)
    order_items: list[OrderItemIn] = Field(default_factory=list, max_length=MAX_ORDER_ITEMS)


class OrderUpdate(_OrderFields):
    customer_id: Optional[int] = None
    booking_date: Optional[date] = None
    delivery_date: Optional[date] = None
    status: Optional[OrderStatus] = None
    comments: Optional[str] = Field(default=None, max_length=1000)
    total_amount: Optional[float] = Field(default=None, ge=0)
    advance_paid: Optional[float] = Field(default=None, ge=0)
    payment_method: Optional[PaymentMethod] = None
    measurement_id: Optional[int] = None
    fitting_preferences: Optional[str] = Field(default=None, max_length=1000)
    order_items: Optional[list[OrderItemIn]] = Field(default=None, max_length=MAX_ORDER_ITEMS)


class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    order_number: str
    customer_id: int
    booking_date: date
    delivery_date: date
    status: str
    comments: Optional[str] = None
    total_amount: float
    advance_paid: float
    paid_total: float
    balance: float
    payment_method: str
    measurement_id: Optional[int] = None
    fitting_preferences: Optional[str] = None
    items: list[OrderItemRead]
    customer: Optional[CustomerSummary] = None
    created_at: datetime
    updated_at: datetime


# Payments

def _not_in_future(value: Optional[date]) -> Optional[date]:
    if value is not None and value > date.today():
        raise ValueError("Payment date cannot be in the future")
    return value


class PaymentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    order_id: int
    customer_id: Optional[int] = None
    amount: float = Field(gt=0)
    payment_method: PaymentMethod = "other"
    payment_date: date = Field(default_factory=date.today)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("payment_date")
    @classmethod
    def not_in_future(cls, value):
        return _not_in_future(value)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes(cls, value):
        return _blank_to_none(value)


class PaymentUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    amount: Optional[float] = Field(default=None, gt=0)
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("payment_date")
    @classmethod
    def not_in_future(cls, value):
        return _not_in_future(value)

    @field_validator("notes", mode="before")
    @classmethod
    def blank_notes(cls, value):
        return _blank_to_none(value)


class PaymentOrderSummary(BaseModel):
    id: int
    order_number: str
    total_amount: float
    advance_paid: float
    balance: float
    booking_date: date
    customer: Optional[CustomerBrief] = None


class PaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    order_id: int
    customer_id: int
    amount: float
    payment_method: str
    payment_date: date
    notes: Optional[str] = None
    created_at: datetime
    order: Optional[PaymentOrderSummary] = None


# Dashboard

class _CamelOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChartPoint(BaseModel):
    month: str
    revenue: float


class StatsRead(_CamelOut):
    total_customers: int
    total_orders: int
    total_revenue: float
    total_advances: float
    total_payments: float
    total_balance: float
    recent_orders_count: int
    status_counts: dict[str, int]
    chart_data: list[ChartPoint]
