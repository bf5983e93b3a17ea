"""Pydantic schemas for invoices."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from nestflow.db.enums import InvoiceStatus
from nestflow.schemas.common import RequestModel


class InvoiceCreate(RequestModel):
    child_id: str | None = None
    title: str | None = None
    amount: Decimal | None = None
    due_date: date | None = None
    status: InvoiceStatus | None = None


class InvoiceRead(BaseModel):
    id: str
    child_id: str
    title: str
    amount: Decimal
    due_date: date | None = None
    status: InvoiceStatus
    paid_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
