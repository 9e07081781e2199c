"""calendargrid - household calendar grid layout engine.

Turns tagged calendar feed events ("Eskil: Fotballtrening", "Alle: Julebord") into a
collision-free person x day x lane grid for a shared household display.
"""

__version__ = "0.1.0"

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

from calendargrid.calendar.models import CalendarGrid, CalendarWindow, Placement, RawEvent
from calendargrid.core.settings import GridSettings, load_settings
from calendargrid.domain.pipeline import CalendarGridEngine, build_calendar_grid
from calendargrid.exceptions import GridConfigError, GridError

__all__ = [
    "CalendarGrid",
    "CalendarGridEngine",
    "CalendarWindow",
    "GridConfigError",
    "GridError",
    "GridSettings",
    "Placement",
    "RawEvent",
    "build_calendar_grid",
    "load_settings",
]


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Installs a colorized console handler when the root logger has none yet.
    The CALENDARGRID_DEBUG environment variable (truthy values: "1", "true", "yes",
    "on") forces DEBUG verbosity so dropped events show up while troubleshooting.
    """
    debug_env = os.environ.get("CALENDARGRID_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler if none is present to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message, with only the level colorized
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )
