"""Load demo customers, measurements, orders and payments.

Run with ``python -m tailorshop.seed`` against a migrated database.
Everything is written through the application services, so order numbers
come from the counter and balances from the payment ledger.
"""

import random
from datetime import date, timedelta
from typing import Dict, Optional

from sqlalchemy.orm import Session

from tailorshop.application.customer_service import CustomerService
from tailorshop.application.errors import ConflictError
from tailorshop.application.measurement_service import MeasurementService
from tailorshop.application.order_service import OrderService
from tailorshop.application.payment_service import PaymentService
from tailorshop.application.schemas import (
    CustomerCreate,
    MeasurementWrite,
    OrderCreate,
    OrderItemIn,
    PaymentCreate,
)
from tailorshop.domain.models import MEASUREMENT_LIMITS, ORDER_STATUSES, ORDER_TYPES, PAYMENT_METHODS
from tailorshop.infrastructure.db import SessionLocal

CUSTOMER_COUNT = 20
ORDER_COUNT = 30

FIRST_NAMES = (
    "Ahmed", "Ali", "Bilal", "Danish", "Faisal", "Hamza", "Imran", "Junaid",
    "Kashif", "Omar", "Saad", "Usman", "Zain", "Ayesha", "Fatima", "Sana",
)
LAST_NAMES = (
    "Khan", "Raza", "Qureshi", "Siddiqui", "Butt", "Chaudhry", "Malik",
    "Sheikh", "Mirza", "Hashmi", "Akhtar",
)
AREAS = ("Gulberg", "Model Town", "Johar Town", "DHA Phase 5", "Clifton", "F-7 Markaz")
COMMENTS = (
    "Customer wants a slim fit",
    "First fitting on Friday evening",
    "Match embroidery with the sample cloth",
    "Extra buttons requested",
)
FITTINGS = ("Loose around the chest", "Short sleeves", "Regular fit", "High collar")


def random_phone(rng: random.Random) -> str:
    return "+923" + "".join(str(rng.randint(0, 9)) for _ in range(9))


def random_measurements(rng: random.Random) -> Dict[str, float]:
    fields = rng.sample(sorted(MEASUREMENT_LIMITS), rng.randint(3, 12))
    return {
        field: round(rng.uniform(0.4, 0.9) * MEASUREMENT_LIMITS[field], 1)
        for field in fields
    }


def seed(db: Session, customers: int = CUSTOMER_COUNT, orders: int = ORDER_COUNT,
         rng: Optional[random.Random] = None, today: Optional[date] = None) -> Dict[str, int]:
    rng = rng or random.Random()
    today = today or date.today()
    created = {"customers": 0, "measurements": 0, "orders": 0, "payments": 0}

    customer_ids = []
    for _ in range(customers):
        data = CustomerCreate(
            name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
            phone=random_phone(rng),
            address=f"House {rng.randint(1, 250)}, {rng.choice(AREAS)}",
        )
        try:
            customer = CustomerService(db).create(data)
        except ConflictError:
            print(f"Skipping customer with duplicate phone {data.phone}")
            continue
        customer_ids.append(customer.id)
        created["customers"] += 1

        # Most customers have a default measurement on file
        if rng.random() < 0.7:
            MeasurementService(db).create(MeasurementWrite(
                customer_id=customer.id,
                name="Wedding suit",
                is_default=True,
                **random_measurements(rng),
            ))
            created["measurements"] += 1
    print(f"Created {created['customers']} customers and {created['measurements']} measurements")

    if not customer_ids:
        return created

    for _ in range(orders):
        booking = today - timedelta(days=rng.randint(0, 90))
        total = rng.randrange(5000, 60000, 500)
        item_types = rng.sample(ORDER_TYPES, rng.randint(0, 3))
        order = OrderService(db).create(OrderCreate(
            customer_id=rng.choice(customer_ids),
            booking_date=booking,
            delivery_date=booking + timedelta(days=rng.randint(1, 30)),
            status=rng.choice(ORDER_STATUSES),
            comments=rng.choice(COMMENTS) if rng.random() < 0.6 else None,
            fitting_preferences=rng.choice(FITTINGS) if rng.random() < 0.4 else None,
            total_amount=total,
            advance_paid=rng.randrange(0, total // 2 + 1, 500),
            payment_method=rng.choice(PAYMENT_METHODS),
            order_items=[OrderItemIn(order_type=t, description=f"{t.title()} outfit") for t in item_types],
        ))
        created["orders"] += 1

        if rng.random() < 0.5 and order["balance"] > 0:
            PaymentService(db).create(PaymentCreate(
                order_id=order["id"],
                amount=round(order["balance"] / 2, 2),
                payment_method=rng.choice(PAYMENT_METHODS),
                payment_date=booking + timedelta(days=rng.randint(0, (today - booking).days)),
            ))
            created["payments"] += 1
    print(f"Created {created['orders']} orders and {created['payments']} payments")
    return created


def main():
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()
    print("Seed completed.")


if __name__ == "__main__":
    main()
