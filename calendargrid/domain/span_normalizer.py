"""Span normalization - feed start/end values to clipped day-index ranges."""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass

from calendargrid.calendar.datetime_utils import is_bare_date, parse_feed_value
from calendargrid.calendar.models import CalendarWindow, EventTimeInfo, RawEvent, TimeValue
from calendargrid.core.timezone_utils import to_local_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedTimes:
    """Start/end strings picked from a raw event, plus the all-day flag."""

    start: str | None
    end: str | None
    all_day: bool


@dataclass(frozen=True)
class DayRange:
    """Inclusive day-index range inside a window."""

    start_index: int
    end_index: int


def resolve_time_value(value: TimeValue | None) -> str | None:
    """Pick the usable string from a flat or nested time value.

    ``dateTime`` wins over ``date`` when a nested value carries both.
    """
    if value is None:
        return None
    if isinstance(value, EventTimeInfo):
        return value.date_time or value.date
    return value


def resolve_times(event: RawEvent) -> ResolvedTimes:
    """Resolve an event's start/end strings and decide whether it is all-day.

    An event is all-day when its start only offers a bare ``date`` field, or when
    the resolved start string itself is a bare date.
    """
    start = resolve_time_value(event.start)
    end = resolve_time_value(event.end)

    date_only_start = (
        isinstance(event.start, EventTimeInfo)
        and bool(event.start.date)
        and not event.start.date_time
    )
    all_day = date_only_start or is_bare_date(start)
    return ResolvedTimes(start=start, end=end, all_day=all_day)


def _as_local_date(value: str | None, tz: datetime.tzinfo) -> datetime.date | None:
    parsed = parse_feed_value(value)
    if parsed is None:
        return None
    return to_local_date(parsed, tz)


def resolve_day_range(event: RawEvent, window: CalendarWindow) -> DayRange | None:
    """Map an event to an inclusive day range relative to the window's day 0.

    All-day events from calendar providers end on the day *after* their last
    day; when both the event is all-day and its end is a bare date, one day is
    taken off the end. Timed events are never corrected.

    Args:
        event: Raw feed event
        window: Current display window

    Returns:
        Unclipped DayRange (indices may fall outside the window), or None when the
        event has no usable start/end, including values that overflow the date
        range once converted to local time
    """
    times = resolve_times(event)

    try:
        start_day = _as_local_date(times.start, window.timezone)
        end_day = _as_local_date(times.end, window.timezone)
        if start_day is not None and end_day is not None:
            if times.all_day and is_bare_date(times.end):
                end_day -= datetime.timedelta(days=1)
    except OverflowError:
        logger.debug(
            "Event %r has start/end outside the representable date range (%r, %r)",
            event.id,
            times.start,
            times.end,
        )
        return None

    if start_day is None or end_day is None:
        logger.debug(
            "Event %r has missing or unparsable start/end (%r, %r)",
            event.id,
            times.start,
            times.end,
        )
        return None

    start_index = window.day_index(start_day)
    # An empty or inverted range still occupies its start day
    end_index = max(start_index, window.day_index(end_day))
    return DayRange(start_index=start_index, end_index=end_index)


def clip_to_window(day_range: DayRange, window: CalendarWindow) -> DayRange | None:
    """Clamp a range to ``[0, N-1]``; None when it lies wholly outside."""
    last_index = window.last_index
    if day_range.end_index < 0 or day_range.start_index > last_index:
        return None
    return DayRange(
        start_index=max(0, day_range.start_index),
        end_index=min(last_index, day_range.end_index),
    )


def normalize_span(event: RawEvent, window: CalendarWindow) -> DayRange | None:
    """Resolve and clip an event's day range.

    Returns:
        Clipped DayRange, or None when the event has no usable start/end or lies
        wholly outside the window
    """
    day_range = resolve_day_range(event, window)
    if day_range is None:
        return None
    return clip_to_window(day_range, window)
