"""Service-layer exceptions mapped to HTTP status codes by the app."""


class ServiceError(Exception):
    """Base exception for service errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(ServiceError):
    """Required field missing or malformed."""

    status_code = 400


class NotFoundError(ServiceError):
    """Record missing or owned by another center."""

    status_code = 404


class ConflictError(ServiceError):
    """Requested transition not allowed from the current state."""

    status_code = 409
