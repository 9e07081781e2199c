"""Tests for the calendar grid pipeline."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from calendargrid.calendar.models import CalendarGrid, GridBuildStats, RawEvent
from calendargrid.core.settings import GridSettings
from calendargrid.domain.pipeline import (
    CalendarGridEngine,
    assign_event,
    build_calendar_grid,
    coerce_event,
    unique_resources,
)
from calendargrid.domain.tag_parser import TagParser

pytestmark = pytest.mark.unit


def spans_of(grid: CalendarGrid, resource: str) -> list[tuple[int, int, int, str]]:
    return [
        (p.lane_index, p.start_day_index, p.end_day_index, p.title)
        for p in grid.placements_for(resource)
    ]


class TestScenarios:
    """End-to-end layout scenarios."""

    @pytest.mark.smoke
    def test_same_lane_packing(self, make_event, monday_morning):
        """A and B each keep a single lane when their events never share a day."""
        events = [
            make_event("A: Tur", {"date": "2025-01-13"}, {"date": "2025-01-15"}),
            make_event("B: Tur", {"date": "2025-01-13"}, {"date": "2025-01-14"}),
            make_event(
                "Alle: Møte",
                {"dateTime": "2025-01-15T18:00:00+01:00"},
                {"dateTime": "2025-01-15T19:00:00+01:00"},
            ),
        ]

        grid = build_calendar_grid(events, ["A", "B"], monday_morning, 5)

        assert grid.lane_counts == {"A": 1, "B": 1}
        assert spans_of(grid, "A") == [(0, 0, 1, "Tur"), (0, 2, 2, "Møte")]
        assert spans_of(grid, "B") == [(0, 0, 0, "Tur"), (0, 2, 2, "Møte")]

    @pytest.mark.smoke
    def test_forced_second_lane(self, make_event, monday_morning):
        """X (Mon-Wed) and Y (Tue) both cover Tuesday."""
        events = [
            make_event("A: X", "2025-01-13", "2025-01-16"),
            make_event("A: Y", "2025-01-14", "2025-01-15"),
        ]

        grid = build_calendar_grid(events, ["A"], monday_morning, 5)

        assert grid.lane_counts == {"A": 2}
        assert spans_of(grid, "A") == [(0, 0, 2, "X"), (1, 1, 1, "Y")]

    def test_wildcard_fan_out(self, make_event, monday_morning, household):
        events = [make_event("Alle: Julebord", "2025-01-17T19:00:00+01:00", "2025-01-17T23:00:00+01:00")]

        grid = build_calendar_grid(events, household, monday_morning, 5)

        assert [p.resource for p in grid.placements] == household
        assert {p.title for p in grid.placements} == {"Julebord"}
        assert {p.placement_id for p in grid.placements} == {f"evt-1:{name}" for name in household}

    def test_unknown_tag_is_excluded(self, make_event, monday_morning, household):
        events = [make_event("Ukjent: Noe", "2025-01-13", "2025-01-14")]

        grid = build_calendar_grid(events, household, monday_morning, 5)

        assert grid.placements == ()
        assert grid.lane_counts == {name: 1 for name in household}
        assert grid.stats.events_untagged == 1


class TestRobustness:
    """The pipeline never raises on empty or malformed input."""

    def test_empty_feed(self, monday_morning, household):
        grid = build_calendar_grid([], household, monday_morning, 5)

        assert grid.window.size == 5
        assert grid.placements == ()
        assert grid.lane_counts == {name: 1 for name in household}
        assert grid.stats == GridBuildStats()

    def test_empty_window(self, make_event, monday_morning):
        grid = build_calendar_grid(
            [make_event("A: X", "2025-01-13", "2025-01-14")], ["A"], monday_morning, 0
        )

        assert grid.window.days == ()
        assert grid.placements == ()
        assert grid.lane_counts == {"A": 1}
        assert grid.stats.events_outside_window == 1

    def test_malformed_feed_items_are_counted_and_skipped(self, monday_morning):
        feed = [
            {"id": "ok", "summary": "A: Trening", "start": "2025-01-14", "end": "2025-01-15"},
            {"id": "bad-start", "summary": "A: Rot", "start": 42, "end": "2025-01-15"},
            {"id": "no-end", "summary": "A: Halv", "start": "2025-01-14"},
            {"id": "garbage", "summary": "A: Tull", "start": "i morgen", "end": "snart"},
            "not a mapping",
            {"id": "untagged", "summary": "Trening", "start": "2025-01-14", "end": "2025-01-15"},
            {"id": "old", "summary": "A: Forbi", "start": "2024-12-01", "end": "2024-12-02"},
        ]

        grid = build_calendar_grid(feed, ["A"], monday_morning, 5)

        assert [p.event_id for p in grid.placements] == ["ok"]
        assert grid.stats == GridBuildStats(
            events_in=7,
            events_invalid=4,
            events_untagged=1,
            events_outside_window=1,
            assignments=1,
            placements=1,
        )

    @pytest.mark.parametrize(
        "start,end",
        [
            ("0001-01-01", "0001-01-01"),
            ("2025-01-14T10:00:00+01:00", "9999-12-31T23:30:00-05:00"),
            ("0001-01-01T00:30:00+05:00", "2025-01-14T10:00:00+01:00"),
        ],
    )
    def test_out_of_range_dates_are_counted_invalid(self, monday_morning, start, end):
        feed = [
            {"id": "ok", "summary": "A: Trening", "start": "2025-01-14", "end": "2025-01-15"},
            {"id": "extreme", "summary": "A: Evig", "start": start, "end": end},
        ]

        grid = build_calendar_grid(feed, ["A"], monday_morning, 5)

        assert [p.event_id for p in grid.placements] == ["ok"]
        assert grid.stats.events_invalid == 1

    def test_utc_now_uses_configured_local_days(self, make_event, monkeypatch):
        """23:30 UTC on the 13th is already the 14th in Oslo."""
        monkeypatch.setenv("CALENDARGRID_TIMEZONE", "Europe/Oslo")
        now = datetime(2025, 1, 13, 23, 30, tzinfo=timezone.utc)

        grid = build_calendar_grid(
            [make_event("A: Frokost", "2025-01-14T08:00:00+01:00", "2025-01-14T09:00:00+01:00")],
            ["A"],
            now,
            3,
        )

        assert grid.window.today == date(2025, 1, 14)
        assert grid.window.days[0] == datetime(2025, 1, 14, tzinfo=ZoneInfo("Europe/Oslo"))
        assert spans_of(grid, "A") == [(0, 0, 0, "Frokost")]

    def test_grid_is_hashable_and_lane_counts_read_only(self, make_event, monday_morning):
        events = [make_event("A: X", "2025-01-14", "2025-01-15")]

        grid = build_calendar_grid(events, ["A", "B"], monday_morning, 5)

        assert hash(grid) == hash(build_calendar_grid(events, ["A", "B"], monday_morning, 5))
        with pytest.raises(TypeError):
            grid.lane_counts["A"] = 7
        assert grid.lane_counts == {"A": 1, "B": 1}

    def test_feed_dicts_and_models_are_interchangeable(self, make_event, monday_morning):
        as_model = make_event("A: X", "2025-01-14", "2025-01-15", event_id="x")
        as_dict = {"id": "x", "title": "A: X", "start": "2025-01-14", "end": "2025-01-15"}

        assert build_calendar_grid([as_model], ["A"], monday_morning, 5) == build_calendar_grid(
            [as_dict], ["A"], monday_morning, 5
        )

    def test_duplicate_resources_collapse_to_first(self, make_event, monday_morning):
        grid = build_calendar_grid(
            [make_event("eskil: X", "2025-01-14", "2025-01-15")],
            ["Eskil", "ESKIL", "Sindre"],
            monday_morning,
            5,
        )

        assert grid.resources == ("Eskil", "Sindre")
        assert grid.lane_counts == {"Eskil": 1, "Sindre": 1}
        assert grid.placements[0].resource == "Eskil"


class TestInvariants:
    """Grid-wide properties on a busy household week."""

    @pytest.fixture
    def busy_feed(self, make_event):
        base = datetime(2025, 1, 13)
        titles = ["Hallgrim", "Eskil", "Sindre", "Alle", "Ukjent"]
        events = []
        for i in range(40):
            tag = titles[i % len(titles)]
            start = base + timedelta(days=(i * 7) % 9 - 2)
            if i % 3 == 0:
                events.append(
                    make_event(
                        f"{tag}: Hendelse {i % 4}",
                        {"date": start.date().isoformat()},
                        {"date": (start + timedelta(days=1 + i % 3)).date().isoformat()},
                    )
                )
            else:
                events.append(
                    make_event(
                        f"{tag}: Avtale {i % 5}",
                        {"dateTime": (start + timedelta(hours=8 + i % 10)).isoformat()},
                        {"dateTime": (start + timedelta(hours=10 + i % 30)).isoformat()},
                    )
                )
        return events

    def test_idempotent(self, busy_feed, monday_morning, household):
        first = build_calendar_grid(busy_feed, household, monday_morning, 7)
        second = build_calendar_grid(busy_feed, household, monday_morning, 7)

        assert first == second
        assert first.to_payload() == second.to_payload()

    def test_no_overlap_within_lanes(self, busy_feed, monday_morning, household):
        grid = build_calendar_grid(busy_feed, household, monday_morning, 7)

        for name in household:
            for lane in grid.lanes_for(name):
                for i, first in enumerate(lane):
                    for second in lane[i + 1 :]:
                        assert (
                            first.end_day_index < second.start_day_index
                            or second.end_day_index < first.start_day_index
                        )

    def test_lane_counts_are_minimal(self, busy_feed, monday_morning, household):
        grid = build_calendar_grid(busy_feed, household, monday_morning, 7)

        for name in household:
            placements = grid.placements_for(name)
            peak = max(
                sum(1 for p in placements if p.start_day_index <= d <= p.end_day_index)
                for d in range(7)
            )
            assert grid.lane_counts[name] == max(peak, 1)

    def test_every_assignment_placed_once(self, busy_feed, monday_morning, household):
        grid = build_calendar_grid(busy_feed, household, monday_morning, 7)

        ids = [p.placement_id for p in grid.placements]
        assert len(ids) == len(set(ids))
        assert grid.stats.assignments == grid.stats.placements == len(ids)

    def test_placements_inside_window(self, busy_feed, monday_morning, household):
        grid = build_calendar_grid(busy_feed, household, monday_morning, 7)

        for p in grid.placements:
            assert 0 <= p.start_day_index <= p.end_day_index <= grid.window.last_index


class TestHelpers:
    """Tests for pipeline helper functions."""

    def test_unique_resources(self):
        assert unique_resources(["A", "b", "a", "B", "C"]) == ("A", "b", "C")

    def test_coerce_event(self):
        event = RawEvent(id="1", title="A: X")

        assert coerce_event(event) is event
        assert coerce_event({"id": 7, "summary": "A: X"}) == RawEvent(id="7", title="A: X")
        assert coerce_event(None) is None

    def test_assign_event_one_per_resource(self):
        event = RawEvent(id="1", title="Alle: Middag")

        assignments = assign_event(event, TagParser(["A", "B"]))

        assert [(a.resource, a.title) for a in assignments] == [("A", "Middag"), ("B", "Middag")]
        assert all(a.event is event for a in assignments)


class TestCalendarGridEngine:
    """Tests for the settings-bound engine."""

    def setup_method(self):
        self.settings = GridSettings(
            resources=["Hallgrim", "Eskil"],
            wildcard="Alle",
            window_days=3,
            timezone="Europe/Oslo",
        )
        self.engine = CalendarGridEngine(self.settings)

    def test_build_uses_settings(self, make_event, monday_morning):
        grid = self.engine.build(
            [make_event("Eskil: Trening", "2025-01-15T17:00:00+01:00", "2025-01-15T18:00:00+01:00")],
            monday_morning,
        )

        assert grid.resources == ("Hallgrim", "Eskil")
        assert grid.window.size == 3
        assert spans_of(grid, "Eskil") == [(0, 2, 2, "Trening")]

    def test_window_and_fetch_bounds(self, monday_morning, oslo_tz):
        time_min, time_max = self.engine.fetch_bounds(monday_morning)

        assert self.engine.window(monday_morning).today.isoformat() == "2025-01-13"
        assert time_min == datetime(2025, 1, 13, tzinfo=oslo_tz)
        assert time_max == datetime(2025, 1, 15, 23, 59, 59, 999000, tzinfo=oslo_tz)

    def test_display_hints_use_settings_colors(self, monday_morning):
        grid = self.engine.build([], monday_morning)

        hints = self.engine.display_hints(grid)

        assert [row.name for row in hints.rows] == ["Hallgrim", "Eskil"]
        assert hints.rows[1].color == "#2563eb"
