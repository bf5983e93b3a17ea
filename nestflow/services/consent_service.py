"""Consent service - center templates and per-child signatures."""

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from nestflow.db.enums import ConsentStatus
from nestflow.db.models import Child, ConsentTemplate, SignedConsentForm
from nestflow.schemas.consent import ChildConsentRead, ConsentSignRequest, ConsentTemplateCreate
from nestflow.services.errors import InvalidInputError, NotFoundError
from nestflow.utils.normalization import normalize_name, normalize_optional_text


def list_templates(db: Session, center_id: str) -> list[ConsentTemplate]:
    return db.query(ConsentTemplate).filter(
        ConsentTemplate.center_id == center_id,
    ).order_by(ConsentTemplate.created_at, ConsentTemplate.title).all()


def create_template(db: Session, center_id: str, data: ConsentTemplateCreate) -> ConsentTemplate:
    """
    Create a template. Templates are immutable afterwards.

    Raises:
        InvalidInputError: title or content missing
    """
    title = normalize_optional_text(data.title)
    content = normalize_optional_text(data.content)
    if not title or not content:
        raise InvalidInputError("title and content are required")

    template = ConsentTemplate(
        center_id=center_id,
        title=title,
        content=content,
        is_required=data.is_required,
    )
    db.add(template)
    db.commit()
    db.refresh(template)
    return template


def list_child_consents(db: Session, child: Child) -> list[ChildConsentRead]:
    """One entry per center template; unsigned templates show as PENDING."""
    signed = {
        form.template_id: form
        for form in db.query(SignedConsentForm).filter(
            SignedConsentForm.child_id == child.id,
        ).all()
    }
    entries = []
    for template in list_templates(db, child.center_id):
        form = signed.get(template.id)
        entries.append(
            ChildConsentRead(
                template_id=template.id,
                child_id=child.id,
                title=template.title,
                is_required=template.is_required,
                status=form.status if form else ConsentStatus.PENDING,
                signer_name=form.signer_name if form else None,
                signed_at=form.signed_at if form else None,
            )
        )
    return entries


def sign_consent(
    db: Session,
    child: Child,
    template_id: str,
    data: ConsentSignRequest,
) -> ChildConsentRead:
    """
    Sign a template for a child. Re-signing overwrites the previous signature.

    Raises:
        InvalidInputError: signer name missing
        NotFoundError: template not in the child's center
    """
    signer_name = normalize_name(data.signer_name)
    if not signer_name:
        raise InvalidInputError("signerName is required")

    template = db.query(ConsentTemplate).filter(
        ConsentTemplate.id == template_id,
        ConsentTemplate.center_id == child.center_id,
    ).first()
    if not template:
        raise NotFoundError("Consent template not found")

    form = db.query(SignedConsentForm).filter(
        SignedConsentForm.child_id == child.id,
        SignedConsentForm.template_id == template.id,
    ).first()
    if not form:
        form = SignedConsentForm(child_id=child.id, template_id=template.id)
        db.add(form)

    form.status = ConsentStatus.SIGNED.value
    form.signer_name = signer_name
    form.signed_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(form)

    return ChildConsentRead(
        template_id=template.id,
        child_id=child.id,
        title=template.title,
        is_required=template.is_required,
        status=form.status,
        signer_name=form.signer_name,
        signed_at=form.signed_at,
    )
