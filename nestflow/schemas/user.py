"""Pydantic schemas for users."""

from pydantic import BaseModel

from nestflow.db.enums import Role


class UserRead(BaseModel):
    """Public profile of a center member."""
    id: str
    email: str
    role: Role
    first_name: str | None = None
    last_name: str | None = None
    center_id: str
    avatar_url: str | None = None

    model_config = {"from_attributes": True}
