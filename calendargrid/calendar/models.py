"""Data models for the calendar grid - feed events, windows, spans and placements."""

import datetime
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class EventTimeInfo(BaseModel):
    """Nested start/end value as delivered by calendar APIs.

    All-day events carry ``date``; timed events carry ``dateTime``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    date: Optional[str] = Field(default=None, description="Bare date, YYYY-MM-DD")
    date_time: Optional[str] = Field(
        default=None, alias="dateTime", description="ISO 8601 date-time"
    )


TimeValue = Union[str, EventTimeInfo]


class RawEvent(BaseModel):
    """Calendar event record supplied by the feed collaborator.

    Immutable. Recurrences must already be expanded to single instances.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(default="", description="Event ID")
    title: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("title", "summary"),
        description="Event title, e.g. 'Eskil: Fotballtrening'",
    )
    start: Optional[TimeValue] = Field(default=None, description="Event start")
    end: Optional[TimeValue] = Field(default=None, description="Event end")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Accept numeric IDs from loosely typed feeds."""
        if v is None:
            return ""
        return str(v)

    @classmethod
    def from_feed_item(cls, item: Mapping[str, Any]) -> Optional["RawEvent"]:
        """Build an event from a feed dictionary.

        Returns:
            The event, or None when the record does not validate
        """
        try:
            return cls.model_validate(dict(item))
        except (ValidationError, TypeError, ValueError) as e:
            logger.debug("Skipping malformed feed item %r: %s", item, e)
            return None


@dataclass(frozen=True)
class Span:
    """One resource's inclusive day-index claim inside the window."""

    resource: str
    start_index: int
    end_index: int
    title: str
    event_id: str = ""

    def overlaps(self, other: "Span") -> bool:
        """True when both spans claim at least one common day."""
        return not (self.end_index < other.start_index or other.end_index < self.start_index)


@dataclass(frozen=True)
class CalendarWindow:
    """N consecutive local calendar days starting at today's local midnight."""

    today: datetime.date
    days: tuple[datetime.datetime, ...]
    timezone: datetime.tzinfo

    @property
    def size(self) -> int:
        return len(self.days)

    @property
    def last_index(self) -> int:
        """Index of the last day, -1 for an empty window."""
        return len(self.days) - 1

    @property
    def dates(self) -> tuple[datetime.date, ...]:
        return tuple(day.date() for day in self.days)

    def day_index(self, day: datetime.date) -> int:
        """Whole local days between day 0 and ``day`` (negative before the window)."""
        return (day - self.today).days

    def is_stale(self, now: datetime.datetime) -> bool:
        """Check whether the local calendar date has moved past this window's day 0."""
        if now.tzinfo is None:
            local_now = now.replace(tzinfo=self.timezone)
        else:
            local_now = now.astimezone(self.timezone)
        return local_now.date() != self.today


class Placement(BaseModel):
    """Final grid position of one event for one resource."""

    model_config = ConfigDict(frozen=True)

    resource: str = Field(..., description="Resource (person) name as configured")
    lane_index: int = Field(..., ge=0, description="Sub-row inside the resource row")
    start_day_index: int = Field(..., ge=0, description="First covered day, inclusive")
    end_day_index: int = Field(..., ge=0, description="Last covered day, inclusive")
    title: str = Field(..., description="Display title with the tag removed")
    event_id: str = Field(default="", description="Source event ID")

    @property
    def day_span(self) -> int:
        """Number of day columns the placement covers."""
        return self.end_day_index - self.start_day_index + 1

    @property
    def placement_id(self) -> str:
        """Render key, unique per event and resource."""
        return f"{self.event_id}:{self.resource}"


@dataclass(frozen=True)
class GridBuildStats:
    """Counters describing one grid build."""

    events_in: int = 0
    events_invalid: int = 0
    events_untagged: int = 0
    events_outside_window: int = 0
    assignments: int = 0
    placements: int = 0


@dataclass(frozen=True)
class CalendarGrid:
    """Assembled calendar grid handed to the renderer.

    ``lane_counts`` is stored as a read-only mapping.
    """

    window: CalendarWindow
    resources: tuple[str, ...]
    placements: tuple[Placement, ...]
    lane_counts: Mapping[str, int]
    stats: GridBuildStats = field(default_factory=GridBuildStats)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lane_counts", MappingProxyType(dict(self.lane_counts)))

    def __hash__(self) -> int:
        return hash(
            (
                self.window,
                self.resources,
                self.placements,
                tuple(self.lane_counts.items()),
                self.stats,
            )
        )

    def placements_for(self, resource: str) -> list[Placement]:
        """All placements of one resource in lane order."""
        return [p for p in self.placements if p.resource == resource]

    def lanes_for(self, resource: str) -> list[list[Placement]]:
        """Placements of one resource grouped by lane, always ``lane_counts`` long."""
        lanes: list[list[Placement]] = [[] for _ in range(self.lane_counts.get(resource, 1))]
        for placement in self.placements_for(resource):
            lanes[placement.lane_index].append(placement)
        return lanes

    def to_payload(self) -> dict[str, Any]:
        """JSON-friendly representation for the rendering collaborator."""
        return {
            "days": [day.isoformat() for day in self.window.days],
            "resources": [
                {"name": name, "lane_count": self.lane_counts[name]} for name in self.resources
            ],
            "placements": [
                {**p.model_dump(), "day_span": p.day_span, "placement_id": p.placement_id}
                for p in self.placements
            ],
        }
