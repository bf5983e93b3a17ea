"""Service layer modules."""

from nestflow.services.auth_service import authenticate, register_user, to_auth_response
from nestflow.services.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    ServiceError,
)

# Import service modules (not individual functions) for cleaner access
from nestflow.services import (  # noqa: E402
    activity_service,
    attendance_service,
    child_service,
    classroom_service,
    consent_service,
    dashboard_service,
    invoice_service,
    message_service,
    user_service,
)

__all__ = [
    # Auth
    "authenticate",
    "register_user",
    "to_auth_response",
    # Errors
    "ServiceError",
    "InvalidInputError",
    "NotFoundError",
    "ConflictError",
    # Modules
    "activity_service",
    "attendance_service",
    "child_service",
    "classroom_service",
    "consent_service",
    "dashboard_service",
    "invoice_service",
    "message_service",
    "user_service",
]
