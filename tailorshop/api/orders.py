from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tailorshop.infrastructure.db import get_db
from tailorshop.application.order_service import OrderService
from tailorshop.application.pagination import ListParams
from tailorshop.application.schemas import OrderCreate, OrderRead, OrderStatus, OrderUpdate, PageOut, SuccessOut
from .deps import list_params

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=PageOut[OrderRead])
def list_orders(
    params: ListParams = Depends(list_params),
    customer_id: Optional[int] = Query(None, alias="customerId"),
    date_from: Optional[date] = Query(None, alias="from", description="Booking date, inclusive"),
    date_to: Optional[date] = Query(None, alias="to", description="Booking date, inclusive"),
    status: Optional[OrderStatus] = Query(None),
    db: Session = Depends(get_db),
):
    """List orders, searching order number, customer name or phone"""
    page = OrderService(db).list(params, customer_id=customer_id, date_from=date_from, date_to=date_to, status=status)
    return page.envelope(page.items)


@router.post("", response_model=OrderRead, status_code=201)
def create_order(payload: OrderCreate, db: Session = Depends(get_db)):
    return OrderService(db).create(payload)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return OrderService(db).get(order_id)


@router.patch("/{order_id}", response_model=OrderRead)
def update_order(order_id: int, payload: OrderUpdate, db: Session = Depends(get_db)):
    """Partial update; when orderItems is sent it replaces the existing items"""
    return OrderService(db).update(order_id, payload)


@router.delete("/{order_id}", response_model=SuccessOut)
def delete_order(order_id: int, db: Session = Depends(get_db)):
    OrderService(db).delete(order_id)
    return {"success": True}
