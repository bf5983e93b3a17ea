"""Children router - roster CRUD and guardian contacts."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from nestflow.core.deps import get_current_session, get_db, require_roles
from nestflow.db.enums import ROLES_ADMIN, ROLES_STAFF, EnrollmentStatus
from nestflow.schemas.auth import UserSession
from nestflow.schemas.child import (
    ChildCreate,
    ChildRead,
    ChildUpdate,
    GuardianCreate,
    GuardianRead,
)
from nestflow.schemas.common import MessageResponse
from nestflow.services import child_service

router = APIRouter()


@router.get("", response_model=list[ChildRead])
def list_children(
    classroom_id: str | None = Query(None, alias="classroomId"),
    enrollment_status: EnrollmentStatus | None = Query(None, alias="enrollmentStatus"),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List the center's children, optionally by classroom or enrollment status."""
    children = child_service.list_children(
        db,
        session.center_id,
        classroom_id=classroom_id,
        enrollment_status=enrollment_status,
    )
    return [child_service.to_child_read(c) for c in children]


@router.get("/{child_id}", response_model=ChildRead)
def get_child(
    child_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    child = child_service.require_child(db, session.center_id, child_id)
    return child_service.to_child_read(child)


@router.post("", response_model=ChildRead, status_code=201)
def create_child(
    data: ChildCreate,
    session: UserSession = Depends(require_roles(ROLES_STAFF)),
    db: Session = Depends(get_db),
):
    """Add a child. Enrollment defaults to PENDING."""
    child = child_service.create_child(db, session.center_id, data)
    return child_service.to_child_read(child)


@router.put("/{child_id}", response_model=ChildRead)
def update_child(
    child_id: str,
    data: ChildUpdate,
    session: UserSession = Depends(require_roles(ROLES_STAFF)),
    db: Session = Depends(get_db),
):
    """Partial update; omitted or null fields keep their value."""
    child = child_service.require_child(db, session.center_id, child_id)
    child = child_service.update_child(db, child, data)
    return child_service.to_child_read(child)


@router.delete("/{child_id}", response_model=MessageResponse)
def delete_child(
    child_id: str,
    session: UserSession = Depends(require_roles(ROLES_ADMIN)),
    db: Session = Depends(get_db),
):
    """Delete a child along with its attendance, activities, guardians and invoices."""
    child = child_service.require_child(db, session.center_id, child_id)
    child_service.delete_child(db, child)
    return MessageResponse(message="Child deleted successfully")


# =============================================================================
# Guardians
# =============================================================================

@router.get("/{child_id}/guardians", response_model=list[GuardianRead])
def list_guardians(
    child_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    child = child_service.require_child(db, session.center_id, child_id)
    return child_service.list_guardians(db, child)


@router.post("/{child_id}/guardians", response_model=GuardianRead, status_code=201)
def add_guardian(
    child_id: str,
    data: GuardianCreate,
    session: UserSession = Depends(require_roles(ROLES_STAFF)),
    db: Session = Depends(get_db),
):
    child = child_service.require_child(db, session.center_id, child_id)
    return child_service.add_guardian(db, child, data)
