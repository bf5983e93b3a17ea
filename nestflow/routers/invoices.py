"""Invoices router - tuition billing."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from nestflow.core.deps import get_current_session, get_db, require_roles
from nestflow.db.enums import ROLES_ADMIN, ROLES_CAN_PAY_INVOICES, InvoiceStatus
from nestflow.schemas.auth import UserSession
from nestflow.schemas.invoice import InvoiceCreate, InvoiceRead
from nestflow.services import invoice_service

router = APIRouter()


@router.get("", response_model=list[InvoiceRead])
def list_invoices(
    child_id: str | None = Query(None, alias="childId"),
    status: InvoiceStatus | None = Query(None),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return invoice_service.list_invoices(
        db, session.center_id, child_id=child_id, status=status
    )


@router.post("", response_model=InvoiceRead, status_code=201)
def create_invoice(
    data: InvoiceCreate,
    session: UserSession = Depends(require_roles(ROLES_ADMIN)),
    db: Session = Depends(get_db),
):
    return invoice_service.create_invoice(db, session.center_id, data)


@router.post("/{invoice_id}/pay", response_model=InvoiceRead)
def pay_invoice(
    invoice_id: str,
    session: UserSession = Depends(require_roles(ROLES_CAN_PAY_INVOICES)),
    db: Session = Depends(get_db),
):
    """Mark a PENDING or OVERDUE invoice as PAID."""
    invoice = invoice_service.get_invoice(db, session.center_id, invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice_service.pay_invoice(db, invoice)
