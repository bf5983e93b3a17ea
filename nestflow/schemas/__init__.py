"""Pydantic schemas for API request/response models."""

from nestflow.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserSession
from nestflow.schemas.user import UserRead
from nestflow.schemas.child import (
    ChildCreate,
    ChildRead,
    ChildUpdate,
    GuardianCreate,
    GuardianRead,
)
from nestflow.schemas.activity import ActivityBulkCreate, ActivityCreate, ActivityRead
from nestflow.schemas.attendance import AttendanceRead, CheckInRequest, CheckOutRequest
from nestflow.schemas.message import MessageCreate, MessageRead, UnreadCountResponse
from nestflow.schemas.classroom import (
    ClassroomCreate,
    ClassroomRead,
    ClassroomStaffUpdate,
    ClassroomUpdate,
)

__all__ = [
    # Auth
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserSession",
    # User
    "UserRead",
    # Child
    "ChildCreate",
    "ChildRead",
    "ChildUpdate",
    "GuardianCreate",
    "GuardianRead",
    # Activity
    "ActivityCreate",
    "ActivityBulkCreate",
    "ActivityRead",
    # Attendance
    "AttendanceRead",
    "CheckInRequest",
    "CheckOutRequest",
    # Message
    "MessageCreate",
    "MessageRead",
    "UnreadCountResponse",
    # Classroom
    "ClassroomCreate",
    "ClassroomRead",
    "ClassroomStaffUpdate",
    "ClassroomUpdate",
]
