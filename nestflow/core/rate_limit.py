"""Rate limiting configuration for the NestFlow API."""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from nestflow.core.config import settings

IS_TESTING = os.getenv("TESTING", "").lower() in ("1", "true", "yes")

# Limits are only applied to auth endpoints; storage defaults to in-memory
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=not IS_TESTING and settings.RATE_LIMIT_AUTH > 0,
)

AUTH_RATE_LIMIT = f"{max(settings.RATE_LIMIT_AUTH, 1)}/minute"
