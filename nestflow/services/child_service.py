"""Child service - roster CRUD and guardian contacts."""

import logging

from sqlalchemy.orm import Session, joinedload

from nestflow.db.enums import DEFAULT_ENROLLMENT_STATUS, EnrollmentStatus
from nestflow.db.models import Child, Classroom, Guardian
from nestflow.schemas.child import ChildCreate, ChildRead, ChildUpdate, GuardianCreate
from nestflow.services.errors import InvalidInputError, NotFoundError
from nestflow.utils.normalization import normalize_name, normalize_optional_text
from nestflow.utils.presentation import child_status_label

logger = logging.getLogger(__name__)

# Fields copied as-is on update when provided (COALESCE semantics)
_UPDATABLE_FIELDS = ("dob", "avatar_url", "allergies", "notes")


def get_child(db: Session, center_id: str, child_id: str) -> Child | None:
    """Get a child by ID (center-scoped)."""
    return db.query(Child).options(joinedload(Child.classroom)).filter(
        Child.id == child_id,
        Child.center_id == center_id,
    ).first()


def require_child(db: Session, center_id: str, child_id: str) -> Child:
    """Get a child or raise NotFoundError (also for other centers' children)."""
    child = get_child(db, center_id, child_id)
    if not child:
        raise NotFoundError("Child not found")
    return child


def list_children(
    db: Session,
    center_id: str,
    classroom_id: str | None = None,
    enrollment_status: EnrollmentStatus | None = None,
) -> list[Child]:
    """List a center's children ordered by name."""
    query = db.query(Child).options(joinedload(Child.classroom)).filter(
        Child.center_id == center_id,
    )
    if classroom_id:
        query = query.filter(Child.classroom_id == classroom_id)
    if enrollment_status:
        query = query.filter(Child.enrollment_status == enrollment_status.value)
    return query.order_by(Child.first_name, Child.last_name).all()


def _require_classroom(db: Session, center_id: str, classroom_id: str) -> Classroom:
    classroom = db.query(Classroom).filter(
        Classroom.id == classroom_id,
        Classroom.center_id == center_id,
    ).first()
    if not classroom:
        raise NotFoundError("Classroom not found")
    return classroom


def create_child(db: Session, center_id: str, data: ChildCreate) -> Child:
    """
    Add a child to the roster.

    Raises:
        InvalidInputError: first or last name missing
        NotFoundError: classroom not in this center
    """
    # Blank names are rejected; accepted names are stored as sent
    if not normalize_name(data.first_name) or not normalize_name(data.last_name):
        raise InvalidInputError("firstName and lastName are required")

    if data.classroom_id:
        _require_classroom(db, center_id, data.classroom_id)

    child = Child(
        center_id=center_id,
        classroom_id=data.classroom_id or None,
        first_name=data.first_name,
        last_name=data.last_name,
        dob=data.dob,
        avatar_url=data.avatar_url or None,
        allergies=list(data.allergies or []),
        notes=data.notes,
        enrollment_status=(data.enrollment_status or DEFAULT_ENROLLMENT_STATUS).value,
    )
    db.add(child)
    db.commit()
    db.refresh(child)
    logger.info("Child created", extra={"center_id": center_id, "child_id": child.id})
    return child


def update_child(db: Session, child: Child, data: ChildUpdate) -> Child:
    """
    Partial update. Omitted or null fields keep their current value.

    Raises:
        NotFoundError: new classroom not in the child's center
    """
    if normalize_name(data.first_name):
        child.first_name = data.first_name
    if normalize_name(data.last_name):
        child.last_name = data.last_name

    if data.classroom_id:
        _require_classroom(db, child.center_id, data.classroom_id)
        child.classroom_id = data.classroom_id

    for field in _UPDATABLE_FIELDS:
        value = getattr(data, field)
        if value is not None:
            setattr(child, field, list(value) if field == "allergies" else value)

    if data.status is not None:
        child.status = data.status.value
    if data.enrollment_status is not None:
        child.enrollment_status = data.enrollment_status.value

    db.commit()
    db.refresh(child)
    return child


def delete_child(db: Session, child: Child) -> None:
    """Delete a child with everything it owns."""
    child_id, center_id = child.id, child.center_id
    db.delete(child)
    db.commit()
    logger.info("Child deleted", extra={"center_id": center_id, "child_id": child_id})


def to_child_read(child: Child) -> ChildRead:
    """Convert Child model to ChildRead schema."""
    return ChildRead(
        id=child.id,
        center_id=child.center_id,
        classroom_id=child.classroom_id,
        classroom_name=child.classroom.name if child.classroom else None,
        first_name=child.first_name,
        last_name=child.last_name,
        dob=child.dob,
        avatar_url=child.avatar_url,
        allergies=list(child.allergies or []),
        notes=child.notes,
        status=child.status,
        enrollment_status=child.enrollment_status,
        status_label=child_status_label(child.enrollment_status, child.status),
        created_at=child.created_at,
        updated_at=child.updated_at,
    )


# =============================================================================
# Guardians
# =============================================================================

def list_guardians(db: Session, child: Child) -> list[Guardian]:
    return db.query(Guardian).filter(
        Guardian.child_id == child.id,
    ).order_by(Guardian.created_at).all()


def add_guardian(db: Session, child: Child, data: GuardianCreate) -> Guardian:
    """
    Attach a guardian contact to a child.

    Raises:
        InvalidInputError: name or relation missing
    """
    name = normalize_name(data.name)
    relation = normalize_optional_text(data.relation)
    if not name or not relation:
        raise InvalidInputError("name and relation are required")

    guardian = Guardian(
        child_id=child.id,
        name=name,
        relation=relation,
        phone=normalize_optional_text(data.phone),
        email=normalize_optional_text(data.email),
        avatar_url=normalize_optional_text(data.avatar_url),
    )
    db.add(guardian)
    db.commit()
    db.refresh(guardian)
    return guardian
