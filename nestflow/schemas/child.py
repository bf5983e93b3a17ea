"""Pydantic schemas for children and guardians."""

from datetime import date, datetime

from pydantic import BaseModel

from nestflow.db.enums import AttendanceStatus, EnrollmentStatus
from nestflow.schemas.common import RequestModel


class ChildCreate(RequestModel):
    """Request to add a child to the center roster."""
    first_name: str | None = None
    last_name: str | None = None
    dob: date | None = None
    classroom_id: str | None = None
    avatar_url: str | None = None
    allergies: list[str] | None = None
    notes: str | None = None
    enrollment_status: EnrollmentStatus | None = None


class ChildUpdate(RequestModel):
    """Partial update; omitted or null fields keep their current value."""
    first_name: str | None = None
    last_name: str | None = None
    dob: date | None = None
    classroom_id: str | None = None
    avatar_url: str | None = None
    allergies: list[str] | None = None
    notes: str | None = None
    status: AttendanceStatus | None = None
    enrollment_status: EnrollmentStatus | None = None


class ChildRead(BaseModel):
    """Child response with classroom name and display label."""
    id: str
    center_id: str
    classroom_id: str | None = None
    classroom_name: str | None = None
    first_name: str
    last_name: str
    dob: date | None = None
    avatar_url: str | None = None
    allergies: list[str] = []
    notes: str | None = None
    status: AttendanceStatus
    enrollment_status: EnrollmentStatus
    status_label: str
    created_at: datetime
    updated_at: datetime


class GuardianCreate(RequestModel):
    name: str | None = None
    relation: str | None = None
    phone: str | None = None
    email: str | None = None
    avatar_url: str | None = None


class GuardianRead(BaseModel):
    id: str
    child_id: str
    name: str
    relation: str
    phone: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
