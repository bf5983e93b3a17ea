"""Center-local calendar helpers.

Attendance days are counted in the center's own timezone, so "today" near
midnight UTC is not the server's today.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from nestflow.core.config import settings

logger = logging.getLogger(__name__)


def resolve_timezone(tz_name: str | None) -> ZoneInfo:
    """ZoneInfo for a center, falling back to the configured default."""
    name = tz_name or settings.DEFAULT_CENTER_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone '%s', defaulting to %s", name, settings.DEFAULT_CENTER_TIMEZONE)
        return ZoneInfo(settings.DEFAULT_CENTER_TIMEZONE)


def center_today(tz_name: str | None, now: datetime | None = None) -> date:
    """Calendar date at the center right now."""
    current = now or datetime.now(timezone.utc)
    return current.astimezone(resolve_timezone(tz_name)).date()
