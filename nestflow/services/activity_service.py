"""Activity service - append-only child timeline."""

import logging
from typing import Any

from sqlalchemy.orm import Session, joinedload

from nestflow.db.enums import ActivityType
from nestflow.db.models import Activity, Child
from nestflow.schemas.activity import ActivityBulkCreate, ActivityCreate, ActivityRead
from nestflow.services.errors import InvalidInputError, NotFoundError
from nestflow.utils.presentation import display_name

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 200


def log_activity(
    db: Session,
    child_id: str,
    activity_type: ActivityType,
    title: str,
    author_id: str | None = None,
    description: str | None = None,
    media_url: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> Activity:
    """
    Append a timeline entry for a child.

    Args:
        db: Database session
        child_id: The child this entry is for
        activity_type: Type of entry (from ActivityType enum)
        title: Short headline shown on the timeline
        author_id: Staff member who recorded it (None for system)
        metadata: Type-specific details as JSON

    Returns:
        The created activity
    """
    activity = Activity(
        child_id=child_id,
        author_id=author_id,
        type=activity_type.value,
        title=title,
        description=description,
        media_url=media_url,
        meta=metadata,
    )
    db.add(activity)
    db.flush()  # Don't commit - let caller control transaction
    return activity


def list_activities(
    db: Session,
    center_id: str,
    child_id: str | None = None,
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[Activity]:
    """List activities newest first, scoped to the center through the child."""
    query = db.query(Activity).join(Activity.child).options(
        joinedload(Activity.author),
        joinedload(Activity.child),
    ).filter(Child.center_id == center_id)
    if child_id:
        query = query.filter(Activity.child_id == child_id)
    return query.order_by(Activity.created_at.desc()).limit(limit).all()


def _validate_fields(activity_type: str | None, title: str | None) -> ActivityType:
    if not activity_type or not title:
        raise InvalidInputError("Missing required fields")
    if not ActivityType.has_value(activity_type):
        raise InvalidInputError("Invalid activity type")
    return ActivityType(activity_type)


def _center_child_ids(db: Session, center_id: str, child_ids: list[str]) -> set[str]:
    rows = db.query(Child.id).filter(
        Child.center_id == center_id,
        Child.id.in_(child_ids),
    ).all()
    return {row[0] for row in rows}


def create_activity(
    db: Session,
    center_id: str,
    author_id: str,
    data: ActivityCreate,
) -> Activity:
    """
    Record one activity.

    Raises:
        InvalidInputError: child_id, type or title missing; unknown type
        NotFoundError: child not in this center
    """
    if not data.child_id:
        raise InvalidInputError("Missing required fields")
    activity_type = _validate_fields(data.type, data.title)

    if not _center_child_ids(db, center_id, [data.child_id]):
        raise NotFoundError("Child not found")

    activity = log_activity(
        db,
        child_id=data.child_id,
        activity_type=activity_type,
        title=data.title,
        author_id=author_id,
        description=data.description,
        media_url=data.media_url,
        metadata=data.metadata,
    )
    db.commit()
    db.refresh(activity)
    return activity


def create_bulk_activities(
    db: Session,
    center_id: str,
    author_id: str,
    data: ActivityBulkCreate,
) -> list[Activity]:
    """
    Record the same activity for several children in one transaction.

    Every child must belong to the center; otherwise nothing is written.

    Raises:
        InvalidInputError: child_ids not a non-empty list; type/title invalid
        NotFoundError: any child not in this center
    """
    child_ids = data.child_ids
    if not isinstance(child_ids, list) or not child_ids:
        raise InvalidInputError("childIds must be a non-empty array")
    if not all(isinstance(cid, str) and cid for cid in child_ids):
        raise InvalidInputError("childIds must be a non-empty array")
    activity_type = _validate_fields(data.type, data.title)

    known = _center_child_ids(db, center_id, child_ids)
    if any(cid not in known for cid in child_ids):
        raise NotFoundError("Child not found")

    try:
        activities = [
            log_activity(
                db,
                child_id=child_id,
                activity_type=activity_type,
                title=data.title,
                author_id=author_id,
                description=data.description,
                media_url=data.media_url,
                metadata=data.metadata,
            )
            for child_id in child_ids
        ]
        db.commit()
    except Exception:
        db.rollback()
        raise

    for activity in activities:
        db.refresh(activity)
    logger.info(
        "Bulk activities created",
        extra={"center_id": center_id, "count": len(activities)},
    )
    return activities


def to_activity_read(activity: Activity) -> ActivityRead:
    """Convert Activity model to ActivityRead schema."""
    author = activity.author
    child = activity.child
    return ActivityRead(
        id=activity.id,
        child_id=activity.child_id,
        author_id=activity.author_id,
        type=activity.type,
        title=activity.title,
        description=activity.description,
        media_url=activity.media_url,
        metadata=activity.meta,
        created_at=activity.created_at,
        author_name=display_name(author.first_name, author.last_name) if author else None,
        child_first_name=child.first_name if child else None,
        child_last_name=child.last_name if child else None,
    )
