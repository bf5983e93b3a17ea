"""Pydantic schemas for timeline activities."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from nestflow.schemas.common import RequestModel


class ActivityCreate(RequestModel):
    """Request to record one activity for one child."""
    child_id: str | None = None
    type: str | None = None
    title: str | None = None
    description: str | None = None
    media_url: str | None = None
    metadata: dict[str, Any] | None = None


class ActivityBulkCreate(RequestModel):
    """
    Request to record the same activity for several children.

    child_ids is validated by the service so a wrong shape reports
    "childIds must be a non-empty array".
    """
    child_ids: Any = None
    type: str | None = None
    title: str | None = None
    description: str | None = None
    media_url: str | None = None
    metadata: dict[str, Any] | None = None


class ActivityRead(BaseModel):
    """Activity response with author and child names."""
    id: str
    child_id: str
    author_id: str | None = None
    type: str
    title: str
    description: str | None = None
    media_url: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime
    author_name: str | None = None
    child_first_name: str | None = None
    child_last_name: str | None = None
