"""Pydantic schemas for attendance (check-in / check-out)."""

from datetime import date, datetime

from pydantic import BaseModel

from nestflow.schemas.common import RequestModel


class CheckInRequest(RequestModel):
    child_id: str | None = None
    notes: str | None = None


class CheckOutRequest(RequestModel):
    child_id: str | None = None
    signature_url: str | None = None
    notes: str | None = None


class AttendanceRead(BaseModel):
    """Attendance row; check_out_time null means the child is still in."""
    id: str
    child_id: str
    date: date
    check_in_time: datetime
    check_out_time: datetime | None = None
    checked_in_by: str | None = None
    checked_out_by: str | None = None
    signature_url: str | None = None
    notes: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    checked_in_by_name: str | None = None
    checked_out_by_name: str | None = None
