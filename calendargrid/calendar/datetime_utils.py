"""Datetime parsing utilities for calendar feed values.

Feed start/end values arrive either as bare dates ("2025-01-10") for all-day
events or as ISO 8601 date-times ("2025-01-10T18:00:00+01:00") for timed events.
"""

import logging
import re
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# A value made of exactly YYYY-MM-DD is a calendar day, not an instant
BARE_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_bare_date(value: Optional[str]) -> bool:
    """Check whether a feed value is a bare calendar date.

    Examples:
        >>> is_bare_date("2025-01-10")
        True
        >>> is_bare_date("2025-01-10T18:00:00Z")
        False
        >>> is_bare_date(None)
        False
    """
    return bool(value) and BARE_DATE_PATTERN.match(value) is not None


def parse_feed_value(value: Optional[str]) -> Optional[Union[date, datetime]]:
    """Parse a feed start/end string.

    Bare dates become ``date`` objects; anything else is parsed as an ISO 8601
    date-time and may be naive (local wall time) or timezone-aware.

    Args:
        value: Raw feed string

    Returns:
        Parsed date or datetime, or None when missing or unparsable
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    try:
        if is_bare_date(text):
            return date.fromisoformat(text)
        return date_parser.isoparse(text)
    except (ValueError, OverflowError) as e:
        logger.debug("Unparsable feed datetime %r: %s", value, e)
        return None
