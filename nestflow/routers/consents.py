"""Consent router - templates and per-child signatures.

Mixed paths: /consent-templates and /children/{id}/consents.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nestflow.core.deps import get_current_session, get_db, require_roles
from nestflow.db.enums import ROLES_ADMIN
from nestflow.schemas.auth import UserSession
from nestflow.schemas.consent import (
    ChildConsentRead,
    ConsentSignRequest,
    ConsentTemplateCreate,
    ConsentTemplateRead,
)
from nestflow.services import child_service, consent_service

router = APIRouter()


@router.get("/consent-templates", response_model=list[ConsentTemplateRead])
def list_templates(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return consent_service.list_templates(db, session.center_id)


@router.post("/consent-templates", response_model=ConsentTemplateRead, status_code=201)
def create_template(
    data: ConsentTemplateCreate,
    session: UserSession = Depends(require_roles(ROLES_ADMIN)),
    db: Session = Depends(get_db),
):
    return consent_service.create_template(db, session.center_id, data)


@router.get("/children/{child_id}/consents", response_model=list[ChildConsentRead])
def list_child_consents(
    child_id: str,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Every center template with this child's signature state."""
    child = child_service.require_child(db, session.center_id, child_id)
    return consent_service.list_child_consents(db, child)


@router.post(
    "/children/{child_id}/consents/{template_id}/sign",
    response_model=ChildConsentRead,
)
def sign_consent(
    child_id: str,
    template_id: str,
    data: ConsentSignRequest,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    child = child_service.require_child(db, session.center_id, child_id)
    return consent_service.sign_consent(db, child, template_id, data)
