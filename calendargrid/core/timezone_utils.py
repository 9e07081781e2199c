"""Local timezone resolution and calendar-day helpers for calendargrid.

Every day boundary in the grid is a *local* midnight. The helpers here turn
instants into local calendar dates so that day arithmetic is done on dates rather
than on raw second deltas, which keeps DST transitions from shifting a day index.
"""

from __future__ import annotations

import datetime
import logging
import os
import zoneinfo
from typing import Union

from dateutil import parser as date_parser
from dateutil import tz as dateutil_tz

logger = logging.getLogger(__name__)

# Environment variables consulted by this module
TIMEZONE_ENV_VAR = "CALENDARGRID_TIMEZONE"
TEST_TIME_ENV_VAR = "CALENDARGRID_TEST_TIME"

DateOrDateTime = Union[datetime.date, datetime.datetime]


def resolve_timezone(tz_name: str | None) -> datetime.tzinfo | None:
    """Resolve an IANA timezone name to a tzinfo.

    Args:
        tz_name: IANA identifier such as "Europe/Oslo", or None

    Returns:
        ZoneInfo for a valid name, None when the name is empty or unknown
    """
    if not tz_name:
        return None
    try:
        return zoneinfo.ZoneInfo(tz_name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        logger.warning("Invalid timezone %r, using system local time", tz_name)
        return None


def get_local_timezone(tz_name: str | None = None) -> datetime.tzinfo:
    """Get the timezone that defines calendar-day boundaries.

    Resolution order:
    1. The explicit ``tz_name`` argument
    2. The CALENDARGRID_TIMEZONE environment variable
    3. The host's local timezone (``dateutil.tz.tzlocal``)

    Args:
        tz_name: Optional IANA timezone identifier

    Returns:
        A tzinfo suitable for localizing naive wall-clock times
    """
    resolved = resolve_timezone(tz_name or os.environ.get(TIMEZONE_ENV_VAR))
    if resolved is not None:
        return resolved
    return dateutil_tz.tzlocal()


def now_local(tz: datetime.tzinfo | None = None) -> datetime.datetime:
    """Return the current wall-clock time in the local timezone.

    Can be overridden for testing via the CALENDARGRID_TEST_TIME environment
    variable (ISO 8601, e.g. "2025-01-13T08:20:00+01:00"). Naive override values are
    interpreted as local wall-clock time.

    Args:
        tz: Timezone to express the result in (defaults to get_local_timezone())

    Returns:
        Timezone-aware current time
    """
    local_tz = tz or get_local_timezone()
    test_time = os.environ.get(TEST_TIME_ENV_VAR)
    if test_time:
        try:
            dt = date_parser.isoparse(test_time)
            if dt.tzinfo is None:
                return dt.replace(tzinfo=local_tz)
            return dt.astimezone(local_tz)
        except (ValueError, OverflowError) as e:
            logger.warning("Failed to parse %s=%r: %s", TEST_TIME_ENV_VAR, test_time, e)

    return datetime.datetime.now(local_tz)


def to_local_datetime(dt: datetime.datetime, tz: datetime.tzinfo) -> datetime.datetime:
    """Express a datetime in ``tz``; naive values are taken as local wall time."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def to_local_date(value: DateOrDateTime, tz: datetime.tzinfo) -> datetime.date:
    """Return the local calendar date of a date or datetime.

    Bare dates are already calendar days and are returned unchanged.
    """
    if isinstance(value, datetime.datetime):
        return to_local_datetime(value, tz).date()
    return value


def local_midnight(day: datetime.date, tz: datetime.tzinfo) -> datetime.datetime:
    """Return the instant of local midnight starting ``day`` in ``tz``."""
    return datetime.datetime.combine(day, datetime.time.min, tzinfo=tz)


def end_of_local_day(day: datetime.date, tz: datetime.tzinfo) -> datetime.datetime:
    """Return the last representable millisecond of ``day`` in ``tz`` (23:59:59.999)."""
    return datetime.datetime.combine(day, datetime.time(23, 59, 59, 999000), tzinfo=tz)
