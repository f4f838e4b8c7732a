from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tailorshop.infrastructure.db import get_db
from tailorshop.application.customer_service import CustomerService
from tailorshop.application.pagination import ListParams
from tailorshop.application.schemas import (
    CustomerCreate,
    CustomerListItem,
    CustomerMeasurementsOut,
    CustomerRead,
    CustomerUpdate,
    PageOut,
    SuccessOut,
)
from .deps import list_params

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=PageOut[CustomerListItem])
def list_customers(params: ListParams = Depends(list_params), db: Session = Depends(get_db)):
    """List customers, searching name or phone, with their order counts"""
    page = CustomerService(db).list(params)
    return page.envelope(page.items)


@router.post("", response_model=CustomerRead, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    return CustomerService(db).create(payload)


@router.get("/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return CustomerService(db).get(customer_id)


@router.patch("/{customer_id}", response_model=CustomerRead)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    return CustomerService(db).update(customer_id, payload)


@router.delete("/{customer_id}", response_model=SuccessOut)
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    """Delete a customer and their measurements; refused while orders reference them"""
    CustomerService(db).delete(customer_id)
    return {"success": True}


@router.get("/{customer_id}/measurements", response_model=CustomerMeasurementsOut)
def customer_measurements(customer_id: int, db: Session = Depends(get_db)):
    measurements = CustomerService(db).measurements(customer_id)
    return {"measurements": measurements, "total": len(measurements)}
