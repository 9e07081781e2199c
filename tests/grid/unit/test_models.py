"""Tests for calendar grid models and feed datetime parsing."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from calendargrid.calendar.datetime_utils import is_bare_date, parse_feed_value
from calendargrid.calendar.models import EventTimeInfo, Placement, RawEvent, Span
from calendargrid.domain.pipeline import build_calendar_grid

pytestmark = pytest.mark.unit


class TestRawEvent:
    """Tests for RawEvent validation."""

    def test_google_style_item(self):
        event = RawEvent.from_feed_item(
            {
                "id": "abc",
                "summary": "Eskil: Trening",
                "start": {"dateTime": "2025-01-13T17:00:00+01:00", "timeZone": "Europe/Oslo"},
                "end": {"dateTime": "2025-01-13T18:00:00+01:00"},
                "htmlLink": "https://calendar.example/abc",
            }
        )

        assert event.title == "Eskil: Trening"
        assert event.start == EventTimeInfo(date_time="2025-01-13T17:00:00+01:00")

    def test_flat_item_with_title_key(self):
        event = RawEvent.from_feed_item({"id": 5, "title": "Alle: Middag", "start": "2025-01-13"})

        assert event.id == "5"
        assert event.start == "2025-01-13"
        assert event.end is None

    def test_invalid_item_returns_none(self):
        assert RawEvent.from_feed_item({"id": "x", "start": ["2025-01-13"]}) is None

    def test_events_are_immutable(self):
        event = RawEvent(id="1", title="A: X")

        with pytest.raises(ValidationError):
            event.title = "B: Y"


class TestPlacement:
    """Tests for Placement."""

    def test_derived_fields(self):
        placement = Placement(
            resource="Sindre", lane_index=1, start_day_index=2, end_day_index=4, title="Hytta", event_id="h1"
        )

        assert placement.day_span == 3
        assert placement.placement_id == "h1:Sindre"

    def test_negative_indices_rejected(self):
        with pytest.raises(ValidationError):
            Placement(resource="A", lane_index=0, start_day_index=-1, end_day_index=0, title="X")


def test_span_overlap():
    a = Span(resource="A", start_index=0, end_index=2, title="a")

    assert a.overlaps(Span(resource="A", start_index=2, end_index=3, title="b"))
    assert not a.overlaps(Span(resource="A", start_index=3, end_index=3, title="c"))


class TestCalendarGrid:
    """Tests for CalendarGrid helpers."""

    def test_lanes_for_and_payload(self, make_event, monday_morning):
        events = [
            make_event("A: X", "2025-01-13", "2025-01-16", event_id="x"),
            make_event("A: Y", "2025-01-14", "2025-01-15", event_id="y"),
        ]
        grid = build_calendar_grid(events, ["A", "B"], monday_morning, 3)

        assert [[p.title for p in lane] for lane in grid.lanes_for("A")] == [["X"], ["Y"]]
        assert grid.lanes_for("B") == [[]]

        payload = grid.to_payload()
        assert payload["days"][0] == "2025-01-13T00:00:00+01:00"
        assert payload["resources"] == [{"name": "A", "lane_count": 2}, {"name": "B", "lane_count": 1}]
        assert payload["placements"][1] == {
            "resource": "A",
            "lane_index": 1,
            "start_day_index": 1,
            "end_day_index": 1,
            "title": "Y",
            "event_id": "y",
            "day_span": 1,
            "placement_id": "y:A",
        }


class TestDatetimeUtils:
    """Tests for feed value parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [("2025-01-10", True), ("2025-01-10T00:00:00", False), ("", False), (None, False), ("10.01.2025", False)],
    )
    def test_is_bare_date(self, value, expected):
        assert is_bare_date(value) is expected

    def test_parse_bare_date(self):
        assert parse_feed_value("2025-01-10") == date(2025, 1, 10)

    def test_parse_date_time(self):
        assert parse_feed_value("2025-01-10T18:00:00Z") == datetime(2025, 1, 10, 18, tzinfo=timezone.utc)

    def test_parse_naive_date_time(self):
        assert parse_feed_value("2025-01-10T18:00:00").tzinfo is None

    @pytest.mark.parametrize("value", [None, "", "soon", "2025-02-30"])
    def test_unparsable_values(self, value):
        assert parse_feed_value(value) is None
