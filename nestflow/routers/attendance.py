"""Attendance router - check-in, check-out and history."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from nestflow.core.deps import get_current_session, get_db, require_roles
from nestflow.db.enums import ROLES_STAFF
from nestflow.schemas.attendance import AttendanceRead, CheckInRequest, CheckOutRequest
from nestflow.schemas.auth import UserSession
from nestflow.services import attendance_service

router = APIRouter()


@router.get("", response_model=list[AttendanceRead])
def list_attendance(
    child_id: str | None = Query(None, alias="childId"),
    on_date: date | None = Query(None, alias="date"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Attendance rows, newest day first. The range needs both bounds."""
    records = attendance_service.list_attendance(
        db,
        session.center_id,
        child_id=child_id,
        on_date=on_date,
        start_date=start_date,
        end_date=end_date,
    )
    return [attendance_service.to_attendance_read(r) for r in records]


@router.post("/check-in", response_model=AttendanceRead, status_code=201)
def check_in(
    data: CheckInRequest,
    session: UserSession = Depends(require_roles(ROLES_STAFF)),
    db: Session = Depends(get_db),
):
    record = attendance_service.check_in(db, session.center_id, session.user_id, data)
    return attendance_service.to_attendance_read(record)


@router.post("/check-out", response_model=AttendanceRead)
def check_out(
    data: CheckOutRequest,
    session: UserSession = Depends(require_roles(ROLES_STAFF)),
    db: Session = Depends(get_db),
):
    record = attendance_service.check_out(db, session.center_id, session.user_id, data)
    return attendance_service.to_attendance_read(record)
