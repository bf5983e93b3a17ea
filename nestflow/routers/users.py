"""Users router - center member directory."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from nestflow.core.deps import get_current_session, get_db
from nestflow.db.enums import Role
from nestflow.schemas.auth import UserSession
from nestflow.schemas.user import UserRead
from nestflow.services import user_service

router = APIRouter()


@router.get("", response_model=list[UserRead])
def list_users(
    role: Role | None = Query(None),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Members of the caller's center, for picking recipients and staff."""
    return user_service.list_users(db, session.center_id, role=role)
