"""FastAPI dependencies for authentication, authorization, and database access."""

from typing import Generator

import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from nestflow.core.security import decode_access_token
from nestflow.db.session import SessionLocal


AUTH_HEADER = "Authorization"
BEARER_PREFIX = "bearer "


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_bearer_token(request: Request) -> str | None:
    """Extract the raw token from `Authorization: Bearer <token>`."""
    header = request.headers.get(AUTH_HEADER)
    if not header or not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


def get_current_session(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Get full session context: user_id, center_id, role.

    This is the PRIMARY auth dependency for most endpoints.

    Validates:
    - Bearer token exists
    - JWT is valid and not expired
    - User still exists and the role is known

    Raises:
        HTTPException 401: Authentication failed
    """
    # Import here to avoid circular imports
    from nestflow.db.enums import Role
    from nestflow.db.models import User
    from nestflow.schemas.auth import UserSession

    token = get_bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = decode_access_token(token)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = db.query(User).filter(User.id == payload.get("sub")).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    # Role and center are read from the stored user, not the token
    if not Role.has_value(user.role):
        raise HTTPException(status_code=403, detail=f"Unknown role '{user.role}'")

    session = UserSession(
        user_id=user.id,
        center_id=user.center_id,
        role=Role(user.role),
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
    )
    request.state.user_id = session.user_id
    request.state.center_id = session.center_id
    return session


def require_roles(allowed_roles: list):
    """
    Dependency factory for role-based authorization.

    Uses enum values (not strings) to prevent drift.

    Usage:
        @router.post("/children", dependencies=[Depends(require_roles(ROLES_STAFF))])
    """
    def dependency(request: Request, db: Session = Depends(get_db)):
        session = get_current_session(request, db)
        if session.role not in allowed_roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return session
    return dependency
