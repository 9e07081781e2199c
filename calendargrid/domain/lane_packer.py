"""Lane packing - greedy interval partitioning of one resource's spans.

Spans are sorted by start day and handed to the first lane whose last span ended
before the new span starts. A new lane is opened only when every open lane is still
busy on the new span's start day, so the lane count equals the peak number of
spans sharing a day, which is the minimum possible.
"""

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass

from calendargrid.calendar.models import Span

logger = logging.getLogger(__name__)


def collation_key(text: str) -> tuple[str, str, str]:
    """Locale-independent sort key approximating natural-language title order.

    Compares accent- and case-insensitively first, then accent-sensitively, then
    exactly, so "Møte" and "mote" sit together and ties still order the same way on
    every host.
    """
    folded = text.casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base, folded, text


def span_sort_key(span: Span) -> tuple[int, int, tuple[str, str, str]]:
    return span.start_index, span.end_index, collation_key(span.title)


@dataclass(frozen=True)
class LaneSet:
    """All lanes of one resource."""

    resource: str
    lanes: tuple[tuple[Span, ...], ...] = ()

    @property
    def lane_count(self) -> int:
        """Number of display sub-rows; an idle resource still reserves one."""
        return max(len(self.lanes), 1)


def pack_lanes(spans: Iterable[Span]) -> list[list[Span]]:
    """Partition spans into the minimum number of non-overlapping lanes.

    Args:
        spans: Spans of a single resource, already clipped to the window

    Returns:
        Lanes in creation order, each holding spans in sorted order
    """
    lanes: list[list[Span]] = []
    lane_ends: list[int] = []

    for span in sorted(spans, key=span_sort_key):
        for lane_index, last_end in enumerate(lane_ends):
            if last_end < span.start_index:
                lanes[lane_index].append(span)
                lane_ends[lane_index] = span.end_index
                break
        else:
            lanes.append([span])
            lane_ends.append(span.end_index)

    return lanes


def build_lane_set(resource: str, spans: Iterable[Span]) -> LaneSet:
    """Pack one resource's spans into a LaneSet."""
    lanes = pack_lanes(spans)
    if len(lanes) > 1:
        logger.debug("%s needs %d lanes", resource, len(lanes))
    return LaneSet(resource=resource, lanes=tuple(tuple(lane) for lane in lanes))
