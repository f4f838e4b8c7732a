from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tailorshop.infrastructure.db import get_db
from tailorshop.application.schemas import StatsRead
from tailorshop.application.stats_service import StatsService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsRead)
def dashboard_stats(db: Session = Depends(get_db)):
    """Totals, status breakdown and six-month revenue chart for the dashboard"""
    return StatsService(db).stats()
