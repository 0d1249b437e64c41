"""Dashboard metrics across the caller's shops, or for one shop."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from duebook.api.deps import get_current_user_id, get_db
from duebook.schemas.dashboard import DashboardMetrics
from duebook.services.dashboard_service import get_dashboard_metrics

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/metrics", response_model=DashboardMetrics)
def metrics(db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return get_dashboard_metrics(db, user_id)


@router.get("/metrics/shop/{shop_id}", response_model=DashboardMetrics)
def shop_metrics(shop_id: int, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return get_dashboard_metrics(db, user_id, shop_id)
