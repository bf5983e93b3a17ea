"""Authentication endpoints: login, register, current user."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from nestflow.core.deps import get_current_session, get_db
from nestflow.core.rate_limit import AUTH_RATE_LIMIT, limiter
from nestflow.core.structured_logging import build_log_context
from nestflow.db.models import User
from nestflow.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserSession
from nestflow.schemas.user import UserRead
from nestflow.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=AuthResponse)
@limiter.limit(AUTH_RATE_LIMIT)
def login(
    request: Request,
    data: LoginRequest,
    db: Session = Depends(get_db),
):
    """Exchange email and password for a bearer token."""
    user = auth_service.authenticate(db, data.email, data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    logger.info(
        "User logged in",
        extra=build_log_context(
            user_id=user.id,
            center_id=user.center_id,
            request_id=getattr(request.state, "request_id", None),
            route="/api/auth/login",
            method="POST",
        ),
    )
    return auth_service.to_auth_response(user)


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit(AUTH_RATE_LIMIT)
def register(
    request: Request,
    data: RegisterRequest,
    db: Session = Depends(get_db),
):
    """
    Create an account.

    Without centerId a new center is created and this user becomes its
    first member.
    """
    user = auth_service.register_user(db, data)
    logger.info(
        "User registered",
        extra=build_log_context(
            user_id=user.id,
            center_id=user.center_id,
            request_id=getattr(request.state, "request_id", None),
            route="/api/auth/register",
            method="POST",
        ),
    )
    return auth_service.to_auth_response(user)


@router.get("/me", response_model=UserRead)
def me(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Profile of the authenticated user."""
    user = db.query(User).filter(User.id == session.user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user
