"""Layout metrics the dashboard renderer derives from a calendar grid.

Each resource row has a fixed total height that is shared by its lanes. Wide
windows first rotate titles, then hide them and show colour only.
"""

from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, Field

from calendargrid.calendar.models import CalendarGrid

ROW_HEIGHT_PX = 200
MIN_LANE_HEIGHT_PX = 24
NAME_COLUMN_PX = 160
GAP_PX = 16
COMPRESSED_GAP_PX = 8

# More columns than this hide titles entirely
COMPRESS_ABOVE_COLUMNS = 10
# More columns than this (and not compressed) rotate titles
VERTICAL_TEXT_ABOVE_COLUMNS = 5


class ResourceRowHints(BaseModel):
    """Row metrics for one resource."""

    name: str
    lane_count: int = Field(..., ge=1)
    lane_height_px: float
    color: str


class DisplayHints(BaseModel):
    """Layout metrics for one rendered grid."""

    column_count: int
    compress: bool = Field(..., description="Too many columns for text, colour only")
    vertical_text: bool = Field(..., description="Rotate titles to fit narrow columns")
    gap_px: int
    name_column_px: int = NAME_COLUMN_PX
    day_labels: list[str] = Field(default_factory=list, description="DD.MM per column")
    rows: list[ResourceRowHints] = Field(default_factory=list)


def lane_height(lane_count: int, gap_px: int) -> float:
    """Height of a single lane so all lanes of a row fit in ROW_HEIGHT_PX."""
    return max(MIN_LANE_HEIGHT_PX, (ROW_HEIGHT_PX - gap_px) / max(lane_count, 1))


def compute_display_hints(
    grid: CalendarGrid,
    color_for: Callable[[str], str],
) -> DisplayHints:
    """Compute layout metrics for ``grid``.

    Args:
        grid: Assembled calendar grid
        color_for: Returns the accent colour of a resource

    Returns:
        DisplayHints for the renderer
    """
    column_count = grid.window.size
    compress = column_count > COMPRESS_ABOVE_COLUMNS
    gap_px = COMPRESSED_GAP_PX if compress else GAP_PX

    rows = [
        ResourceRowHints(
            name=name,
            lane_count=grid.lane_counts[name],
            lane_height_px=lane_height(grid.lane_counts[name], gap_px),
            color=color_for(name),
        )
        for name in grid.resources
    ]

    return DisplayHints(
        column_count=column_count,
        compress=compress,
        vertical_text=not compress and column_count > VERTICAL_TEXT_ABOVE_COLUMNS,
        gap_px=gap_px,
        day_labels=[day.strftime("%d.%m") for day in grid.window.days],
        rows=rows,
    )
