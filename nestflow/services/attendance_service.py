"""Attendance service - check-in/check-out state machine and status projection.

Per child per center-local day the record moves no-record -> open -> closed.
An open row has check_out_time NULL. Child.status is a cached projection of
the most recent row for today and can always be recomputed with
project_child_status().
"""

import logging
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session, joinedload

from nestflow.db.enums import ActivityType, AttendanceStatus
from nestflow.db.models import Attendance, Center, Child
from nestflow.schemas.attendance import AttendanceRead, CheckInRequest, CheckOutRequest
from nestflow.services import activity_service
from nestflow.services.errors import InvalidInputError, NotFoundError
from nestflow.utils.local_time import center_today
from nestflow.utils.presentation import display_name

logger = logging.getLogger(__name__)


def _center_timezone(db: Session, center_id: str) -> str | None:
    row = db.query(Center.timezone).filter(Center.id == center_id).first()
    return row[0] if row else None


def today_for_center(db: Session, center_id: str) -> date:
    """Today's date in the center's timezone."""
    return center_today(_center_timezone(db, center_id))


def _require_child(db: Session, center_id: str, child_id: str | None) -> Child:
    if not child_id:
        raise InvalidInputError("childId is required")
    child = db.query(Child).filter(
        Child.id == child_id,
        Child.center_id == center_id,
    ).first()
    if not child:
        raise NotFoundError("Child not found")
    return child


# =============================================================================
# Queries
# =============================================================================

def list_attendance(
    db: Session,
    center_id: str,
    child_id: str | None = None,
    on_date: date | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[Attendance]:
    """
    List attendance rows, newest day first.

    The date range applies only when both bounds are given.
    """
    query = db.query(Attendance).join(Attendance.child).options(
        joinedload(Attendance.child),
        joinedload(Attendance.checked_in_by_user),
        joinedload(Attendance.checked_out_by_user),
    ).filter(Child.center_id == center_id)

    if child_id:
        query = query.filter(Attendance.child_id == child_id)
    if on_date:
        query = query.filter(Attendance.date == on_date)
    if start_date and end_date:
        query = query.filter(Attendance.date.between(start_date, end_date))

    return query.order_by(Attendance.date.desc(), Attendance.check_in_time.desc()).all()


def find_open_record(
    db: Session,
    child_id: str,
    on_date: date,
    for_update: bool = False,
) -> Attendance | None:
    """Most recent open row for a child on a day."""
    query = db.query(Attendance).filter(
        Attendance.child_id == child_id,
        Attendance.date == on_date,
        Attendance.check_out_time.is_(None),
    ).order_by(Attendance.check_in_time.desc())
    if for_update:
        query = query.with_for_update()
    return query.first()


# =============================================================================
# State transitions
# =============================================================================

def check_in(
    db: Session,
    center_id: str,
    user_id: str,
    data: CheckInRequest,
) -> Attendance:
    """
    Open an attendance record for today.

    Sets the child PRESENT and appends a CHECK_IN activity, all in one commit.
    A second check-in on the same day opens another row.

    Raises:
        InvalidInputError: child_id missing
        NotFoundError: child not in this center
    """
    child = _require_child(db, center_id, data.child_id)

    try:
        record = Attendance(
            child_id=child.id,
            date=today_for_center(db, center_id),
            check_in_time=datetime.now(timezone.utc),
            checked_in_by=user_id,
            notes=data.notes,
        )
        db.add(record)
        child.status = AttendanceStatus.PRESENT.value
        activity_service.log_activity(
            db,
            child_id=child.id,
            activity_type=ActivityType.CHECK_IN,
            title="Checked in",
            author_id=user_id,
            description=data.notes,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(record)
    logger.info("Child checked in", extra={"center_id": center_id, "child_id": child.id})
    return record


def check_out(
    db: Session,
    center_id: str,
    user_id: str,
    data: CheckOutRequest,
) -> Attendance:
    """
    Close today's most recent open record.

    The open row is locked for the duration of the transaction so concurrent
    check-outs cannot close it twice.

    Raises:
        InvalidInputError: child_id missing
        NotFoundError: child not in this center, or no open record today
    """
    child = _require_child(db, center_id, data.child_id)

    record = find_open_record(
        db, child.id, today_for_center(db, center_id), for_update=True
    )
    if not record:
        db.rollback()
        raise NotFoundError("No active check-in found for today")

    try:
        record.check_out_time = datetime.now(timezone.utc)
        record.checked_out_by = user_id
        record.signature_url = data.signature_url
        if data.notes is not None:
            record.notes = data.notes
        child.status = AttendanceStatus.CHECKED_OUT.value
        activity_service.log_activity(
            db,
            child_id=child.id,
            activity_type=ActivityType.CHECK_OUT,
            title="Checked out",
            author_id=user_id,
            description=data.notes,
            media_url=data.signature_url,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(record)
    logger.info("Child checked out", extra={"center_id": center_id, "child_id": child.id})
    return record


# =============================================================================
# Status projection
# =============================================================================

def project_child_status(db: Session, child: Child, on_date: date | None = None) -> AttendanceStatus:
    """
    Recompute a child's attendance status from the day's rows.

    The most recent row decides: open means PRESENT, closed means
    CHECKED_OUT. No row means ABSENT.
    """
    day = on_date or today_for_center(db, child.center_id)
    latest = db.query(Attendance).filter(
        Attendance.child_id == child.id,
        Attendance.date == day,
    ).order_by(Attendance.check_in_time.desc()).first()

    if latest is None:
        return AttendanceStatus.ABSENT
    if latest.check_out_time is None:
        return AttendanceStatus.PRESENT
    return AttendanceStatus.CHECKED_OUT


def reconcile_statuses(db: Session, center_id: str | None = None) -> int:
    """
    Rewrite every child's cached status from attendance rows.

    Run at the start of each day to reset yesterday's PRESENT/CHECKED_OUT
    children to ABSENT. Returns the number of children changed.
    """
    query = db.query(Child)
    if center_id:
        query = query.filter(Child.center_id == center_id)

    today_by_center: dict[str, date] = {}
    changed = 0
    for child in query.all():
        if child.center_id not in today_by_center:
            today_by_center[child.center_id] = today_for_center(db, child.center_id)
        projected = project_child_status(db, child, today_by_center[child.center_id]).value
        if child.status != projected:
            child.status = projected
            changed += 1

    db.commit()
    logger.info("Reconciled child statuses", extra={"changed": changed})
    return changed


def to_attendance_read(record: Attendance) -> AttendanceRead:
    """Convert Attendance model to AttendanceRead schema."""
    checked_in = record.checked_in_by_user
    checked_out = record.checked_out_by_user
    return AttendanceRead(
        id=record.id,
        child_id=record.child_id,
        date=record.date,
        check_in_time=record.check_in_time,
        check_out_time=record.check_out_time,
        checked_in_by=record.checked_in_by,
        checked_out_by=record.checked_out_by,
        signature_url=record.signature_url,
        notes=record.notes,
        first_name=record.child.first_name if record.child else None,
        last_name=record.child.last_name if record.child else None,
        checked_in_by_name=(
            display_name(checked_in.first_name, checked_in.last_name) if checked_in else None
        ),
        checked_out_by_name=(
            display_name(checked_out.first_name, checked_out.last_name) if checked_out else None
        ),
    )
