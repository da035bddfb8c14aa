"""Timezone-aware date normalization.

Query bounds arrive either as full ISO-8601 instants or as bare calendar
dates (``YYYY-MM-DD``). Bare dates are resolved to the first or last
millisecond of that civil day in the requested timezone and rendered as a
UTC string, so every comparison downstream is a plain string comparison
against the ``...Z`` timestamps in the log files.
"""

import logging
from datetime import date, datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import DISPLAY_DATE_FORMAT, DISPLAY_TIME_FORMAT, END_OF_DAY, START_OF_DAY

logger = logging.getLogger(__name__)

_DAY_START = time(0, 0, 0, 0)
# fold=1 picks the later of two repeated wall-clock times on a fall-back day
_DAY_END = time(23, 59, 59, 999000, fold=1)


def format_instant(dt: datetime) -> str:
    """Render an aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    utc = dt.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_instant(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp string into an aware datetime."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def resolve_timezone(tz_name: str | None) -> tzinfo | None:
    """
    Look up a timezone by IANA name.

    Returns None for "host local time" when no name is given. Unknown names
    resolve to UTC.
    """
    if not tz_name:
        return None
    if tz_name == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {tz_name!r}, falling back to UTC")
        return timezone.utc


def _utc_fallback(date_string: str, is_end_date: bool) -> str:
    return f"{date_string}T{END_OF_DAY if is_end_date else START_OF_DAY}Z"


def normalize_date(
    date_string: str, is_end_date: bool = False, tz_name: str | None = None
) -> str:
    """
    Convert a date filter into a sortable UTC instant string.

    Args:
        date_string: A bare date (``2025-06-30``) or a full ISO-8601 instant.
        is_end_date: Resolve to the last millisecond of the day instead of
            the first.
        tz_name: IANA timezone the civil date is expressed in. Defaults to
            the host timezone.

    Returns:
        The input unchanged if it already has a time component, otherwise
        the UTC instant of the requested day boundary. Any failure to
        resolve the timezone or the date falls back to reading the date as
        UTC.
    """
    if "T" in date_string:
        return date_string

    if tz_name == "UTC":
        return _utc_fallback(date_string, is_end_date)

    try:
        day = date.fromisoformat(date_string)
        if tz_name:
            zone = ZoneInfo(tz_name)
            local = datetime.combine(day, _DAY_END if is_end_date else _DAY_START, tzinfo=zone)
        else:
            # Naive datetimes are interpreted in the host's local time,
            # including the DST rules in force on that date
            local = datetime.combine(day, _DAY_END if is_end_date else _DAY_START)
        result = format_instant(local.astimezone(timezone.utc))
    except (ZoneInfoNotFoundError, ValueError, OverflowError, OSError) as e:
        result = _utc_fallback(date_string, is_end_date)
        logger.warning(
            f"Failed to resolve {date_string!r} in timezone {tz_name!r} ({e}), "
            f"falling back to {result}"
        )
        return result

    logger.debug(
        f"normalize_date: {date_string} ({'end' if is_end_date else 'start'}) "
        f"in {tz_name or 'local time'} -> {result}"
    )
    return result


def format_local(timestamp: str, zone: tzinfo | None = None) -> tuple[str | None, str | None]:
    """
    Render a UTC timestamp as local display strings.

    Args:
        timestamp: ISO-8601 instant from a log line.
        zone: Display timezone; None means host local time.

    Returns:
        ``(formatted_time, local_date)``, or ``(None, None)`` if the
        timestamp cannot be parsed.
    """
    dt = parse_instant(timestamp)
    if dt is None:
        return None, None
    try:
        local = dt.astimezone(zone)
    except (OverflowError, OSError):
        return None, None
    return local.strftime(DISPLAY_TIME_FORMAT), local.strftime(DISPLAY_DATE_FORMAT)
