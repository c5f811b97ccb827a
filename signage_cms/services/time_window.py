"""Time window evaluation for schedules.

Every check runs against the site's local wall clock: callers convert the request
instant with :func:`local_now` before asking :func:`is_active`. Stored values that
cannot be parsed make the rule not match rather than raising.
"""

import logging
import os
from datetime import datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def _default_timezone() -> str:
    name = (os.getenv("SIGNAGE_DEFAULT_TIMEZONE", "UTC") or "UTC").strip()
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("SIGNAGE_DEFAULT_TIMEZONE %r is not a known zone, using UTC", name)
        return "UTC"
    return name


DEFAULT_TIMEZONE = _default_timezone()
DAY_TOKENS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def parse_hms(value: str | None) -> time | None:
    raw = (value or "").strip()
    parts = raw.split(":")
    if len(parts) not in (2, 3):
        return None
    try:
        hour = int(parts[0])
        minute = int(parts[1])
        second = int(parts[2]) if len(parts) == 3 else 0
    except ValueError:
        return None
    if hour < 0 or hour > 23 or minute < 0 or minute > 59 or second < 0 or second > 59:
        return None
    return time(hour, minute, second)


def parse_days_of_week(value: str | None) -> frozenset[str] | None:
    """Return the day tokens in ``value``, an empty set for "every day", or None if malformed."""
    raw = (value or "").strip()
    if not raw:
        return frozenset()
    days: set[str] = set()
    for item in raw.split(","):
        token = item.strip()
        if not token:
            continue
        if token not in DAY_TOKENS:
            return None
        days.add(token)
    return frozenset(days)


def weekday_token(moment: datetime) -> str:
    return DAY_TOKENS[moment.weekday()]


def load_zone(name: str | None) -> ZoneInfo:
    candidate = (name or "").strip() or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown time zone %r, falling back to %s", candidate, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def local_now(zone_name: str | None, now_utc: datetime | None = None) -> datetime:
    """Wall-clock time at ``zone_name`` for the instant ``now_utc`` (defaults to now).

    Naive inputs are taken to be UTC.
    """
    instant = now_utc or datetime.now(timezone.utc)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(load_zone(zone_name))


def _time_in_window(current: time, start: time | None, end: time | None) -> bool:
    if start is not None and end is not None:
        if start <= end:
            return start <= current <= end
        # window crosses midnight
        return current >= start or current <= end
    if start is not None:
        return current >= start
    if end is not None:
        return current <= end
    return True


def is_active(schedule, now: datetime) -> bool:
    """True when ``schedule`` is switched on and ``now`` falls inside all of its bounds.

    ``schedule`` is anything with the snapshot attributes (``is_active``,
    ``start_date``, ``end_date``, ``days_of_week``, ``start_time``, ``end_time``).
    """
    if not schedule.is_active:
        return False

    today = now.date()
    if schedule.start_date is not None and today < schedule.start_date:
        return False
    if schedule.end_date is not None and today > schedule.end_date:
        return False

    days = parse_days_of_week(schedule.days_of_week)
    if days is None:
        return False
    if days and weekday_token(now) not in days:
        return False

    start = None
    end = None
    if (schedule.start_time or "").strip():
        start = parse_hms(schedule.start_time)
        if start is None:
            return False
    if (schedule.end_time or "").strip():
        end = parse_hms(schedule.end_time)
        if end is None:
            return False

    current = now.time().replace(microsecond=0, tzinfo=None)
    return _time_in_window(current, start, end)
