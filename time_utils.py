from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Return the named zone, or None for the system local zone."""

    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        logger.warning("Failed to load timezone %s (%s), using system local time", name, exc)
    return None


def now_in_tz(tz: Optional[tzinfo]) -> datetime:
    if tz:
        return datetime.now(tz)
    return datetime.now().astimezone()


def wall_clock(tz: Optional[tzinfo]) -> Callable[[], datetime]:
    return lambda: now_in_tz(tz)
