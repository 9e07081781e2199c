from collections.abc import Generator
from datetime import datetime
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

import pytest

from calendargrid.calendar.models import RawEvent


@pytest.fixture
def oslo_tz(clean_test_environment: None, monkeypatch: Any) -> ZoneInfo:
    """Household timezone, also configured as the local zone.

    Day boundaries come from the configured local zone, so tests never depend on
    the host.
    """
    monkeypatch.setenv("CALENDARGRID_TIMEZONE", "Europe/Oslo")
    return ZoneInfo("Europe/Oslo")


@pytest.fixture
def monday_morning(oslo_tz: ZoneInfo) -> datetime:
    """Monday 2025-01-13 09:30 in Oslo; day 0 of most test windows."""
    return datetime(2025, 1, 13, 9, 30, tzinfo=oslo_tz)


@pytest.fixture
def household() -> list[str]:
    """Six-person household in display order."""
    return ["Hallgrim", "Eskil", "Sindre", "Kristian", "Niklas", "Marius"]


@pytest.fixture
def make_event() -> Callable[..., RawEvent]:
    """Factory for feed events.

    ``start``/``end`` are passed through unchanged, so tests can use flat ISO
    strings or nested ``{"date": ...}`` / ``{"dateTime": ...}`` dictionaries.
    """
    counter = {"n": 0}

    def _make(
        title: Optional[str],
        start: Any,
        end: Any = None,
        event_id: Optional[str] = None,
    ) -> RawEvent:
        counter["n"] += 1
        return RawEvent.model_validate(
            {
                "id": event_id or f"evt-{counter['n']}",
                "summary": title,
                "start": start,
                "end": end,
            }
        )

    return _make


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Keep host configuration from leaking into tests."""
    for name in (
        "CALENDARGRID_TEST_TIME",
        "CALENDARGRID_TIMEZONE",
        "CALENDARGRID_CONFIG",
        "CALENDARGRID_RESOURCES",
        "CALENDARGRID_WILDCARD",
        "CALENDARGRID_WINDOW_DAYS",
        "CALENDARGRID_MAX_WINDOW_DAYS",
        "CALENDARGRID_UNICODE_TAGS",
        "CALENDARGRID_DEBUG",
        "CALENDARGRID_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
