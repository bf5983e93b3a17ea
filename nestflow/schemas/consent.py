"""Pydantic schemas for consent templates and signed forms."""

from datetime import datetime

from pydantic import BaseModel

from nestflow.db.enums import ConsentStatus
from nestflow.schemas.common import RequestModel


class ConsentTemplateCreate(RequestModel):
    title: str | None = None
    content: str | None = None
    is_required: bool = False


class ConsentTemplateRead(BaseModel):
    id: str
    center_id: str
    title: str
    content: str
    is_required: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ConsentSignRequest(RequestModel):
    signer_name: str | None = None


class ChildConsentRead(BaseModel):
    """A template paired with the child's signature state (PENDING if unsigned)."""
    template_id: str
    child_id: str
    title: str
    is_required: bool
    status: ConsentStatus
    signer_name: str | None = None
    signed_at: datetime | None = None
