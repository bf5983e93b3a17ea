"""Dashboard router - admin metrics."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nestflow.core.deps import get_db, require_roles
from nestflow.db.enums import ROLES_ADMIN
from nestflow.schemas.auth import UserSession
from nestflow.schemas.dashboard import DashboardMetrics
from nestflow.services import dashboard_service

router = APIRouter()


@router.get("/metrics", response_model=DashboardMetrics)
def get_metrics(
    session: UserSession = Depends(require_roles(ROLES_ADMIN)),
    db: Session = Depends(get_db),
):
    """Attendance, capacity, billing, classroom and enrollment figures for the center."""
    return dashboard_service.get_metrics(db, session.center_id)
