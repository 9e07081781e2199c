"""Display window construction.

The window is N consecutive local calendar days, day 0 being today. ``now`` is
always passed in by the caller so builds are reproducible and testable.
"""

from __future__ import annotations

import datetime
import logging

from calendargrid.calendar.models import CalendarWindow
from calendargrid.core.timezone_utils import (
    end_of_local_day,
    get_local_timezone,
    local_midnight,
    to_local_datetime,
)

logger = logging.getLogger(__name__)


def build_window(
    now: datetime.datetime,
    days: int,
    tz: datetime.tzinfo | None = None,
) -> CalendarWindow:
    """Build the N-day window containing ``now``.

    Args:
        now: Current instant. Aware values are converted to the local zone;
            naive values are local wall time.
        days: Number of days N; zero or negative yields an empty window
        tz: Timezone defining day boundaries. Defaults to the configured local
            timezone (CALENDARGRID_TIMEZONE, else the host zone), never to
            ``now``'s own tzinfo.

    Returns:
        Immutable CalendarWindow with ``day[i] = localMidnight(now) + i days``
    """
    local_tz = tz or get_local_timezone()
    today = to_local_datetime(now, local_tz).date()

    count = max(0, int(days))
    window_days = tuple(
        local_midnight(today + datetime.timedelta(days=i), local_tz) for i in range(count)
    )
    logger.debug("Built %d-day window starting %s", count, today.isoformat())
    return CalendarWindow(today=today, days=window_days, timezone=local_tz)


def fetch_bounds(window: CalendarWindow) -> tuple[datetime.datetime, datetime.datetime] | None:
    """Time range an upstream fetcher should query to cover the window.

    Returns:
        ``(time_min, time_max)``: local midnight of day 0 and the last millisecond of
        the last day, or None for an empty window
    """
    if not window.days:
        return None
    last_day = window.today + datetime.timedelta(days=window.last_index)
    return window.days[0], end_of_local_day(last_day, window.timezone)
