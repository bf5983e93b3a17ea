"""Activities router - child timeline entries."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from nestflow.core.deps import get_current_session, get_db, require_roles
from nestflow.db.enums import ROLES_STAFF
from nestflow.schemas.activity import ActivityBulkCreate, ActivityCreate, ActivityRead
from nestflow.schemas.auth import UserSession
from nestflow.services import activity_service

router = APIRouter()


@router.get("", response_model=list[ActivityRead])
def list_activities(
    child_id: str | None = Query(None, alias="childId"),
    limit: int = Query(
        activity_service.DEFAULT_LIST_LIMIT, ge=1, le=activity_service.MAX_LIST_LIMIT
    ),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Newest activities first, optionally for one child."""
    activities = activity_service.list_activities(
        db, session.center_id, child_id=child_id, limit=limit
    )
    return [activity_service.to_activity_read(a) for a in activities]


@router.post("", response_model=ActivityRead, status_code=201)
def create_activity(
    data: ActivityCreate,
    session: UserSession = Depends(require_roles(ROLES_STAFF)),
    db: Session = Depends(get_db),
):
    activity = activity_service.create_activity(db, session.center_id, session.user_id, data)
    return activity_service.to_activity_read(activity)


@router.post("/bulk", response_model=list[ActivityRead], status_code=201)
def create_bulk_activities(
    data: ActivityBulkCreate,
    session: UserSession = Depends(require_roles(ROLES_STAFF)),
    db: Session = Depends(get_db),
):
    """Record one activity per child id; all or nothing."""
    activities = activity_service.create_bulk_activities(
        db, session.center_id, session.user_id, data
    )
    return [activity_service.to_activity_read(a) for a in activities]
