"""Authentication service - credential checks, registration, token issuance."""

import logging

from sqlalchemy.orm import Session

from nestflow.core.security import create_access_token, hash_password, verify_password
from nestflow.db.models import Center, User
from nestflow.schemas.auth import AuthResponse, RegisterRequest
from nestflow.schemas.user import UserRead
from nestflow.services.errors import InvalidInputError, NotFoundError
from nestflow.utils.normalization import normalize_email, normalize_name

logger = logging.getLogger(__name__)


def authenticate(db: Session, email: str, password: str) -> User | None:
    """
    Return the user for valid credentials, else None.

    Unknown email and wrong password are indistinguishable to the caller.
    """
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def default_center_name(first_name: str | None, email: str) -> str:
    return f"{first_name or email}'s Center"


def register_user(db: Session, data: RegisterRequest) -> User:
    """
    Create a user, bootstrapping a new center when no center_id is given.

    Raises:
        InvalidInputError: email already registered
        NotFoundError: center_id does not exist
    """
    email = normalize_email(data.email)
    if db.query(User.id).filter(User.email == email).first():
        raise InvalidInputError("Email already registered")

    first_name = normalize_name(data.first_name)
    last_name = normalize_name(data.last_name)

    if data.center_id:
        center = db.query(Center).filter(Center.id == data.center_id).first()
        if not center:
            raise NotFoundError("Center not found")
    else:
        center = Center(
            name=normalize_name(data.center_name) or default_center_name(first_name, email),
        )
        db.add(center)
        db.flush()
        logger.info("Created center via registration", extra={"center_id": center.id})

    user = User(
        center_id=center.id,
        email=email,
        password_hash=hash_password(data.password),
        role=data.role.value,
        first_name=first_name,
        last_name=last_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def issue_token(user: User) -> str:
    return create_access_token(
        user_id=user.id,
        center_id=user.center_id,
        role=user.role,
        email=user.email,
    )


def to_auth_response(user: User) -> AuthResponse:
    """Token plus profile, as returned by login and register."""
    return AuthResponse(token=issue_token(user), user=UserRead.model_validate(user))
