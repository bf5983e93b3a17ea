"""Pydantic schemas for classrooms."""

from datetime import datetime

from pydantic import BaseModel

from nestflow.schemas.common import RequestModel


class ClassroomCreate(RequestModel):
    name: str | None = None
    capacity: int | None = None
    age_group: str | None = None


class ClassroomUpdate(RequestModel):
    name: str | None = None
    capacity: int | None = None
    age_group: str | None = None


class ClassroomStaffUpdate(RequestModel):
    """Replaces the classroom's staff roster."""
    staff_ids: list[str] = []


class ClassroomRead(BaseModel):
    """Classroom response. enrolled is counted from the roster on every read."""
    id: str
    center_id: str
    name: str
    capacity: int
    age_group: str | None = None
    enrolled: int
    staff_ids: list[str]
    created_at: datetime
