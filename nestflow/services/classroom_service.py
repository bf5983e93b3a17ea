"""Classroom service - rooms, capacity and staff assignment.

Enrollment per classroom is counted from children.classroom_id on every read
and never stored.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from nestflow.db.enums import DEFAULT_CLASSROOM_CAPACITY, ROLES_STAFF
from nestflow.db.models import Child, Classroom, User
from nestflow.schemas.classroom import (
    ClassroomCreate,
    ClassroomRead,
    ClassroomStaffUpdate,
    ClassroomUpdate,
)
from nestflow.services.errors import InvalidInputError, NotFoundError
from nestflow.utils.normalization import normalize_name, normalize_optional_text


def get_classroom(db: Session, center_id: str, classroom_id: str) -> Classroom | None:
    """Get a classroom by ID (center-scoped)."""
    return db.query(Classroom).options(selectinload(Classroom.staff)).filter(
        Classroom.id == classroom_id,
        Classroom.center_id == center_id,
    ).first()


def require_classroom(db: Session, center_id: str, classroom_id: str) -> Classroom:
    classroom = get_classroom(db, center_id, classroom_id)
    if not classroom:
        raise NotFoundError("Classroom not found")
    return classroom


def list_classrooms(db: Session, center_id: str) -> list[Classroom]:
    return db.query(Classroom).options(selectinload(Classroom.staff)).filter(
        Classroom.center_id == center_id,
    ).order_by(Classroom.name).all()


def enrolled_counts(db: Session, center_id: str) -> dict[str, int]:
    """classroom_id -> number of children assigned."""
    rows = db.query(Child.classroom_id, func.count(Child.id)).filter(
        Child.center_id == center_id,
        Child.classroom_id.isnot(None),
    ).group_by(Child.classroom_id).all()
    return {classroom_id: count for classroom_id, count in rows}


def _validate_capacity(capacity: int | None) -> None:
    if capacity is not None and capacity < 0:
        raise InvalidInputError("capacity must be >= 0")


def create_classroom(db: Session, center_id: str, data: ClassroomCreate) -> Classroom:
    """
    Create a classroom.

    Raises:
        InvalidInputError: name missing or negative capacity
    """
    name = normalize_name(data.name)
    if not name:
        raise InvalidInputError("name is required")
    _validate_capacity(data.capacity)

    classroom = Classroom(
        center_id=center_id,
        name=name,
        capacity=data.capacity if data.capacity is not None else DEFAULT_CLASSROOM_CAPACITY,
        age_group=normalize_optional_text(data.age_group),
    )
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    return classroom


def update_classroom(db: Session, classroom: Classroom, data: ClassroomUpdate) -> Classroom:
    """Partial update with the same checks as create."""
    _validate_capacity(data.capacity)
    if data.name is not None:
        name = normalize_name(data.name)
        if not name:
            raise InvalidInputError("name is required")
        classroom.name = name
    if data.capacity is not None:
        classroom.capacity = data.capacity
    if data.age_group is not None:
        classroom.age_group = normalize_optional_text(data.age_group)
    db.commit()
    db.refresh(classroom)
    return classroom


def delete_classroom(db: Session, classroom: Classroom) -> None:
    """Delete a classroom; its children become unassigned."""
    db.query(Child).filter(Child.classroom_id == classroom.id).update(
        {Child.classroom_id: None}, synchronize_session="fetch"
    )
    db.delete(classroom)
    db.commit()


def set_staff(db: Session, classroom: Classroom, data: ClassroomStaffUpdate) -> Classroom:
    """
    Replace the classroom's staff roster.

    Raises:
        NotFoundError: an id is not an ADMIN/TEACHER of the center
    """
    staff_ids = list(dict.fromkeys(data.staff_ids))
    staff_roles = [role.value for role in ROLES_STAFF]
    users = []
    if staff_ids:
        users = db.query(User).filter(
            User.id.in_(staff_ids),
            User.center_id == classroom.center_id,
            User.role.in_(staff_roles),
        ).all()
    if len(users) != len(staff_ids):
        raise NotFoundError("Staff member not found")

    classroom.staff = users
    db.commit()
    db.refresh(classroom)
    return classroom


def to_classroom_read(classroom: Classroom, enrolled: int) -> ClassroomRead:
    """Convert Classroom model to ClassroomRead schema."""
    return ClassroomRead(
        id=classroom.id,
        center_id=classroom.center_id,
        name=classroom.name,
        capacity=classroom.capacity,
        age_group=classroom.age_group,
        enrolled=enrolled,
        staff_ids=sorted(user.id for user in classroom.staff),
        created_at=classroom.created_at,
    )
