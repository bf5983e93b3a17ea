"""Classrooms router - rooms, capacity and staff roster."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nestflow.core.deps import get_current_session, get_db, require_roles
from nestflow.db.enums import ROLES_ADMIN
from nestflow.schemas.auth import UserSession
from nestflow.schemas.classroom import (
    ClassroomCreate,
    ClassroomRead,
    ClassroomStaffUpdate,
    ClassroomUpdate,
)
from nestflow.schemas.common import MessageResponse
from nestflow.services import classroom_service

router = APIRouter()


def _read(db: Session, classroom) -> ClassroomRead:
    counts = classroom_service.enrolled_counts(db, classroom.center_id)
    return classroom_service.to_classroom_read(classroom, counts.get(classroom.id, 0))


@router.get("", response_model=list[ClassroomRead])
def list_classrooms(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Classrooms with enrollment counted from the roster."""
    counts = classroom_service.enrolled_counts(db, session.center_id)
    return [
        classroom_service.to_classroom_read(room, counts.get(room.id, 0))
        for room in classroom_service.list_classrooms(db, session.center_id)
    ]


@router.get("/{classroom_id}", response_model=ClassroomRead)
def get_classroom(
    classroom_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    classroom = classroom_service.require_classroom(db, session.center_id, classroom_id)
    return _read(db, classroom)


@router.post("", response_model=ClassroomRead, status_code=201)
def create_classroom(
    data: ClassroomCreate,
    session: UserSession = Depends(require_roles(ROLES_ADMIN)),
    db: Session = Depends(get_db),
):
    classroom = classroom_service.create_classroom(db, session.center_id, data)
    return _read(db, classroom)


@router.put("/{classroom_id}", response_model=ClassroomRead)
def update_classroom(
    classroom_id: str,
    data: ClassroomUpdate,
    session: UserSession = Depends(require_roles(ROLES_ADMIN)),
    db: Session = Depends(get_db),
):
    classroom = classroom_service.require_classroom(db, session.center_id, classroom_id)
    classroom = classroom_service.update_classroom(db, classroom, data)
    return _read(db, classroom)


@router.put("/{classroom_id}/staff", response_model=ClassroomRead)
def set_classroom_staff(
    classroom_id: str,
    data: ClassroomStaffUpdate,
    session: UserSession = Depends(require_roles(ROLES_ADMIN)),
    db: Session = Depends(get_db),
):
    """Replace the staff roster with the given admin/teacher ids."""
    classroom = classroom_service.require_classroom(db, session.center_id, classroom_id)
    classroom = classroom_service.set_staff(db, classroom, data)
    return _read(db, classroom)


@router.delete("/{classroom_id}", response_model=MessageResponse)
def delete_classroom(
    classroom_id: str,
    session: UserSession = Depends(require_roles(ROLES_ADMIN)),
    db: Session = Depends(get_db),
):
    """Delete a classroom; its children are unassigned."""
    classroom = classroom_service.require_classroom(db, session.center_id, classroom_id)
    classroom_service.delete_classroom(db, classroom)
    return MessageResponse(message="Classroom deleted successfully")
