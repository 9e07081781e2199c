"""
Central logging configuration for calendargrid.

The grid is rebuilt on every poll cycle, so per-event DEBUG output (dropped
titles, lane counts) is only enabled on request.
"""

import logging
import os
from typing import Optional

GRID_MODULES = [
    "calendargrid",
    "calendargrid.calendar.models",
    "calendargrid.calendar.datetime_utils",
    "calendargrid.core.config_manager",
    "calendargrid.core.settings",
    "calendargrid.core.timezone_utils",
    "calendargrid.domain.tag_parser",
    "calendargrid.domain.span_normalizer",
    "calendargrid.domain.window_builder",
    "calendargrid.domain.lane_packer",
    "calendargrid.domain.grid_assembler",
    "calendargrid.domain.pipeline",
]


def configure_grid_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logging levels for calendargrid modules.

    Args:
        debug_mode: Whether to enable debug logging for calendargrid modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        CALENDARGRID_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        CALENDARGRID_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("CALENDARGRID_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("CALENDARGRID_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    root_level = logging.DEBUG if final_debug else logging.INFO
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    # Only add a basic handler if none exists (preserve colorized setup from __init__.py)
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(root_level)
        handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s - %(name)s - %(message)s"))
        root_logger.addHandler(handler)

    grid_level = logging.DEBUG if final_debug else logging.INFO
    for module in GRID_MODULES:
        logging.getLogger(module).setLevel(grid_level)

    if final_debug:
        root_logger.info("Debug logging enabled for calendargrid modules.")
    else:
        root_logger.info("Production logging configuration applied.")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in ("calendargrid", "calendargrid.domain.pipeline"):
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
