"""Calendar grid pipeline for calendargrid.

Turns a flat, unordered list of tagged feed events into a collision-free
(person x day x lane) grid:

    raw events
      -> TagParser            (one event -> zero or more per-resource assignments)
      -> normalize_span       (inclusive day range, clipped to the window)
      -> build_lane_set       (once per resource)
      -> assemble_grid        (placements + lane counts)

The pipeline is a pure, synchronous function of its inputs. It performs no I/O,
keeps no state between calls and never raises on empty or malformed events, so it
is safe to re-run on every poll cycle.

Usage:
    grid = build_calendar_grid(events, ["Hallgrim", "Eskil"], now=now, days=5)
    for placement in grid.placements:
        ...
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from calendargrid.calendar.models import (
    CalendarGrid,
    CalendarWindow,
    GridBuildStats,
    RawEvent,
    Span,
)
from calendargrid.core.settings import GridSettings
from calendargrid.core.timezone_utils import resolve_timezone
from calendargrid.domain.display_hints import DisplayHints, compute_display_hints
from calendargrid.domain.grid_assembler import assemble_grid
from calendargrid.domain.span_normalizer import clip_to_window, resolve_day_range
from calendargrid.domain.tag_parser import DEFAULT_WILDCARD, TagParser
from calendargrid.domain.window_builder import build_window, fetch_bounds

logger = logging.getLogger(__name__)

FeedItem = Union[RawEvent, Mapping[str, Any]]


@dataclass(frozen=True)
class Assignment:
    """One event routed to one resource."""

    event: RawEvent
    resource: str
    title: str


def unique_resources(resources: Iterable[str]) -> tuple[str, ...]:
    """Drop case-insensitive duplicates, keeping the first spelling and order."""
    seen: set[str] = set()
    result = []
    for name in resources:
        key = name.upper()
        if key in seen:
            logger.warning("Duplicate resource %r ignored", name)
            continue
        seen.add(key)
        result.append(name)
    return tuple(result)


def coerce_event(item: FeedItem) -> RawEvent | None:
    """Accept both model instances and raw feed dictionaries."""
    if isinstance(item, RawEvent):
        return item
    if isinstance(item, Mapping):
        return RawEvent.from_feed_item(item)
    logger.debug("Skipping feed item of unsupported type %s", type(item).__name__)
    return None


def assign_event(event: RawEvent, parser: TagParser) -> list[Assignment]:
    """Fan an event out to the resources its tag addresses."""
    match = parser.parse(event.title)
    return [Assignment(event=event, resource=r, title=match.title) for r in match.resources]


def build_calendar_grid(
    events: Iterable[FeedItem],
    resources: Sequence[str],
    now: datetime.datetime,
    days: int,
    *,
    wildcard: str = DEFAULT_WILDCARD,
    tz: datetime.tzinfo | None = None,
    unicode_letters: bool = False,
) -> CalendarGrid:
    """Build the calendar grid for one fetch cycle.

    Args:
        events: Feed events (RawEvent instances or feed dictionaries)
        resources: Configured resource names in display order
        now: Current wall-clock instant
        days: Window size N; zero or negative yields an empty window
        wildcard: Tag that fans an event out to every resource
        tz: Timezone defining day boundaries (see build_window)
        unicode_letters: Accept any Unicode letter in tags

    Returns:
        CalendarGrid with every resource present and a lane count of at least 1
    """
    resource_names = unique_resources(resources)
    window = build_window(now, days, tz)
    parser = TagParser(resource_names, wildcard=wildcard, unicode_letters=unicode_letters)

    spans_by_resource: dict[str, list[Span]] = {name: [] for name in resource_names}
    events_in = events_invalid = events_untagged = events_outside = assignment_count = 0

    for item in events:
        events_in += 1
        event = coerce_event(item)
        if event is None:
            events_invalid += 1
            continue

        assignments = assign_event(event, parser)
        if not assignments:
            events_untagged += 1
            continue

        unclipped = resolve_day_range(event, window)
        if unclipped is None:
            events_invalid += 1
            continue
        day_range = clip_to_window(unclipped, window)
        if day_range is None:
            events_outside += 1
            continue

        for assignment in assignments:
            assignment_count += 1
            spans_by_resource[assignment.resource].append(
                Span(
                    resource=assignment.resource,
                    start_index=day_range.start_index,
                    end_index=day_range.end_index,
                    title=assignment.title,
                    event_id=event.id,
                )
            )

    placements, lane_counts = assemble_grid(resource_names, spans_by_resource)

    stats = GridBuildStats(
        events_in=events_in,
        events_invalid=events_invalid,
        events_untagged=events_untagged,
        events_outside_window=events_outside,
        assignments=assignment_count,
        placements=len(placements),
    )
    logger.debug(
        "Grid built: %d events in, %d placements, %d untagged, %d invalid, %d outside window",
        stats.events_in,
        stats.placements,
        stats.events_untagged,
        stats.events_invalid,
        stats.events_outside_window,
    )

    return CalendarGrid(
        window=window,
        resources=resource_names,
        placements=tuple(placements),
        lane_counts=lane_counts,
        stats=stats,
    )


class CalendarGridEngine:
    """Grid builder bound to a household's GridSettings."""

    def __init__(self, settings: GridSettings):
        """Initialize engine.

        Args:
            settings: Validated grid settings
        """
        self.settings = settings
        self.timezone = resolve_timezone(settings.timezone)

    def window(self, now: datetime.datetime) -> CalendarWindow:
        """Current display window for ``now``."""
        return build_window(now, self.settings.window_days, self.timezone)

    def fetch_bounds(
        self, now: datetime.datetime
    ) -> tuple[datetime.datetime, datetime.datetime] | None:
        """Query range for the upstream calendar fetch covering the window."""
        return fetch_bounds(self.window(now))

    def build(self, events: Iterable[FeedItem], now: datetime.datetime) -> CalendarGrid:
        """Build the grid from one fetch cycle's events."""
        return build_calendar_grid(
            events,
            self.settings.resources,
            now,
            self.settings.window_days,
            wildcard=self.settings.wildcard,
            tz=self.timezone,
            unicode_letters=self.settings.unicode_letters,
        )

    def display_hints(self, grid: CalendarGrid) -> DisplayHints:
        """Layout metrics for rendering ``grid``."""
        return compute_display_hints(grid, self.settings.color_for)
