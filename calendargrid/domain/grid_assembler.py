"""Grid assembly - per-resource lane sets flattened into placements."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from calendargrid.calendar.models import Placement, Span
from calendargrid.domain.lane_packer import LaneSet, build_lane_set

logger = logging.getLogger(__name__)


def assemble_grid(
    resources: Sequence[str],
    spans_by_resource: Mapping[str, Sequence[Span]],
) -> tuple[list[Placement], dict[str, int]]:
    """Pack every resource and flatten the result.

    Resources are processed in configured order and lanes keep the packer's
    order, so unchanged input always lands on the same rows. No clipping or
    validation happens here; spans must already be inside the window.

    Args:
        resources: Configured resource names in display order
        spans_by_resource: Clipped spans keyed by resource name

    Returns:
        Tuple of (placements, lane_counts)
    """
    placements: list[Placement] = []
    lane_counts: dict[str, int] = {}

    for resource in resources:
        lane_set = build_lane_set(resource, spans_by_resource.get(resource, ()))
        lane_counts[resource] = lane_set.lane_count
        placements.extend(_placements_from_lane_set(lane_set))

    return placements, lane_counts


def _placements_from_lane_set(lane_set: LaneSet) -> list[Placement]:
    return [
        Placement(
            resource=lane_set.resource,
            lane_index=lane_index,
            start_day_index=span.start_index,
            end_day_index=span.end_index,
            title=span.title,
            event_id=span.event_id,
        )
        for lane_index, lane in enumerate(lane_set.lanes)
        for span in lane
    ]
