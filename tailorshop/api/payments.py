from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tailorshop.infrastructure.db import get_db
from tailorshop.application.pagination import ListParams
from tailorshop.application.payment_service import PaymentService
from tailorshop.application.schemas import PageOut, PaymentCreate, PaymentRead, PaymentUpdate, SuccessOut
from .deps import list_params

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=PageOut[PaymentRead])
def list_payments(
    params: ListParams = Depends(list_params),
    order_id: Optional[int] = Query(None),
    customer_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None, alias="from", description="Payment date, inclusive"),
    date_to: Optional[date] = Query(None, alias="to", description="Payment date, inclusive"),
    db: Session = Depends(get_db),
):
    page = PaymentService(db).list(
        params, order_id=order_id, customer_id=customer_id, date_from=date_from, date_to=date_to
    )
    return page.envelope(page.items)


@router.post("", response_model=PaymentRead, status_code=201)
def create_payment(payload: PaymentCreate, db: Session = Depends(get_db)):
    """Record a ledger payment against an order and refresh its balance"""
    return PaymentService(db).create(payload)


@router.patch("/{payment_id}", response_model=PaymentRead)
def update_payment(payment_id: int, payload: PaymentUpdate, db: Session = Depends(get_db)):
    return PaymentService(db).update(payment_id, payload)


@router.delete("/{payment_id}", response_model=SuccessOut)
def delete_payment(payment_id: int, db: Session = Depends(get_db)):
    PaymentService(db).delete(payment_id)
    return {"success": True}
