from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tailorshop.infrastructure.db import get_db
from tailorshop.application.measurement_service import MeasurementService
from tailorshop.application.pagination import ListParams
from tailorshop.application.schemas import MeasurementRead, MeasurementWrite, PageOut, SuccessOut
from .deps import list_params

router = APIRouter(prefix="/measurements", tags=["measurements"])


@router.get("", response_model=PageOut[MeasurementRead])
def list_measurements(
    params: ListParams = Depends(list_params),
    customer_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    page = MeasurementService(db).list(params, customer_id=customer_id)
    return page.envelope(page.items)


@router.post("", response_model=MeasurementRead, status_code=201)
def create_measurement(payload: MeasurementWrite, db: Session = Depends(get_db)):
    """Create a measurement; is_default=true makes it the customer's only default"""
    return MeasurementService(db).create(payload)


@router.get("/{measurement_id}", response_model=MeasurementRead)
def get_measurement(measurement_id: int, db: Session = Depends(get_db)):
    return MeasurementService(db).get(measurement_id)


@router.put("/{measurement_id}", response_model=MeasurementRead)
def replace_measurement(measurement_id: int, payload: MeasurementWrite, db: Session = Depends(get_db)):
    return MeasurementService(db).replace(measurement_id, payload)


@router.delete("/{measurement_id}", response_model=SuccessOut)
def delete_measurement(measurement_id: int, db: Session = Depends(get_db)):
    MeasurementService(db).delete(measurement_id)
    return {"success": True}
