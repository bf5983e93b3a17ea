"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel, EmailStr, Field

from nestflow.db.enums import Role
from nestflow.schemas.common import RequestModel
from nestflow.schemas.user import UserRead


class UserSession(BaseModel):
    """
    Full session context for authenticated requests.

    This is returned by get_current_session dependency
    and contains all information needed for authorization.
    """
    user_id: str
    center_id: str
    role: Role  # Validated enum
    email: str
    first_name: str | None = None
    last_name: str | None = None


class LoginRequest(BaseModel):
    """Credentials for POST /auth/login."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(RequestModel):
    """
    Registration payload.

    Without center_id a new center is created and the user becomes its
    first member.
    """
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role
    first_name: str | None = None
    last_name: str | None = None
    center_id: str | None = None
    center_name: str | None = None


class AuthResponse(BaseModel):
    """Token plus the authenticated user's profile."""
    token: str
    user: UserRead
