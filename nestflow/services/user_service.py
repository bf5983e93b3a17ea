"""User service - center directory lookups."""

from sqlalchemy.orm import Session

from nestflow.db.enums import Role
from nestflow.db.models import User


def get_user(db: Session, center_id: str, user_id: str) -> User | None:
    """Get a user by ID (center-scoped)."""
    return db.query(User).filter(
        User.id == user_id,
        User.center_id == center_id,
    ).first()


def list_users(db: Session, center_id: str, role: Role | None = None) -> list[User]:
    """List members of a center, optionally filtered by role."""
    query = db.query(User).filter(User.center_id == center_id)
    if role:
        query = query.filter(User.role == role.value)
    return query.order_by(User.first_name, User.last_name, User.email).all()
