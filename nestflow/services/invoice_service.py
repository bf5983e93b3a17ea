"""Invoice service - tuition billing. PAID is terminal."""

import logging
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session

from nestflow.db.enums import DEFAULT_INVOICE_STATUS, InvoiceStatus
from nestflow.db.models import Child, Invoice
from nestflow.schemas.invoice import InvoiceCreate
from nestflow.services.errors import ConflictError, InvalidInputError, NotFoundError
from nestflow.utils.normalization import normalize_optional_text

logger = logging.getLogger(__name__)


def list_invoices(
    db: Session,
    center_id: str,
    child_id: str | None = None,
    status: InvoiceStatus | None = None,
) -> list[Invoice]:
    """List invoices of the center's children, newest first."""
    query = db.query(Invoice).join(Invoice.child).filter(Child.center_id == center_id)
    if child_id:
        query = query.filter(Invoice.child_id == child_id)
    if status:
        query = query.filter(Invoice.status == status.value)
    return query.order_by(Invoice.created_at.desc()).all()


def get_invoice(db: Session, center_id: str, invoice_id: str) -> Invoice | None:
    """Get an invoice by ID (center-scoped through the child)."""
    return db.query(Invoice).join(Invoice.child).filter(
        Invoice.id == invoice_id,
        Child.center_id == center_id,
    ).first()


def create_invoice(db: Session, center_id: str, data: InvoiceCreate) -> Invoice:
    """
    Bill a child.

    Raises:
        InvalidInputError: child, title or amount missing; negative amount
        NotFoundError: child not in this center
    """
    title = normalize_optional_text(data.title)
    if not data.child_id or not title or data.amount is None:
        raise InvalidInputError("childId, title and amount are required")
    if data.amount < 0:
        raise InvalidInputError("amount must be >= 0")

    child = db.query(Child.id).filter(
        Child.id == data.child_id,
        Child.center_id == center_id,
    ).first()
    if not child:
        raise NotFoundError("Child not found")

    status = data.status or DEFAULT_INVOICE_STATUS
    invoice = Invoice(
        child_id=data.child_id,
        title=title,
        amount=data.amount,
        due_date=data.due_date,
        status=status.value,
        paid_at=datetime.now(timezone.utc) if status == InvoiceStatus.PAID else None,
    )
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice


def pay_invoice(db: Session, invoice: Invoice) -> Invoice:
    """
    Settle a PENDING or OVERDUE invoice.

    Raises:
        ConflictError: invoice already PAID
    """
    if invoice.status == InvoiceStatus.PAID.value:
        raise ConflictError("Invoice already paid")
    invoice.status = InvoiceStatus.PAID.value
    invoice.paid_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(invoice)
    return invoice


def mark_overdue(db: Session, today: date | None = None) -> int:
    """Flip PENDING invoices past their due date to OVERDUE. Returns the count."""
    cutoff = today or datetime.now(timezone.utc).date()
    updated = db.query(Invoice).filter(
        Invoice.status == InvoiceStatus.PENDING.value,
        Invoice.due_date.isnot(None),
        Invoice.due_date < cutoff,
    ).update({Invoice.status: InvoiceStatus.OVERDUE.value}, synchronize_session=False)
    db.commit()
    logger.info("Marked invoices overdue", extra={"count": updated})
    return updated
