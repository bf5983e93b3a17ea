"""Pydantic schemas for direct messages."""

from datetime import datetime

from pydantic import BaseModel

from nestflow.schemas.common import RequestModel


class MessageCreate(RequestModel):
    recipient_id: str | None = None
    content: str | None = None
    child_id: str | None = None


class MessageRead(BaseModel):
    """Message response with sender and recipient display names."""
    id: str
    center_id: str
    sender_id: str
    recipient_id: str
    child_id: str | None = None
    content: str
    is_read: bool
    created_at: datetime
    sender_name: str | None = None
    sender_avatar: str | None = None
    recipient_name: str | None = None


class UnreadCountResponse(BaseModel):
    count: int
