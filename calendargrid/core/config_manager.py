"""Environment configuration for calendargrid."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")
_UNBOUNDED = ("", "none", "unbounded", "off")


def _parse_env_line(line: str) -> tuple[str, str] | None:
    """``KEY=value`` with surrounding quotes removed; None for blanks and comments."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    return key, value.strip().strip('"').strip("'")


def parse_env_file(path: Path) -> dict[str, str]:
    """Read ``CALENDARGRID_*`` defaults from a .env file; {} when it is missing or unreadable."""
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError):
        logger.debug("Ignoring unreadable .env file %s", path, exc_info=True)
        return {}

    return dict(filter(None, map(_parse_env_line, content.splitlines())))


def split_resource_list(value: str) -> list[str]:
    """Split a comma separated resource list, dropping blanks.

    Examples:
        >>> split_resource_list("Hallgrim, Eskil ,,Sindre")
        ['Hallgrim', 'Eskil', 'Sindre']
    """
    return [part.strip() for part in value.split(",") if part.strip()]


class ConfigManager:
    """Builds grid configuration from environment variables and .env files."""

    def __init__(self, env_file_path: Path | None = None):
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Export .env values that the real environment does not already define.

        Returns:
            Names of the variables taken from the file
        """
        defaults = parse_env_file(self.env_file_path)
        applied = [key for key in defaults if key not in os.environ]
        for key in applied:
            os.environ[key] = defaults[key]

        logger.debug(
            "Applied %d of %d .env defaults from %s", len(applied), len(defaults), self.env_file_path
        )
        return applied

    def build_config_from_env(self) -> dict[str, Any]:
        """Build configuration dictionary from environment variables.

        Recognizes:
        - CALENDARGRID_RESOURCES -> 'resources' (comma separated names)
        - CALENDARGRID_WILDCARD -> 'wildcard'
        - CALENDARGRID_WINDOW_DAYS -> 'window_days' (int)
        - CALENDARGRID_MAX_WINDOW_DAYS -> 'max_window_days' (int, or "none")
        - CALENDARGRID_TIMEZONE -> 'timezone'
        - CALENDARGRID_UNICODE_TAGS -> 'unicode_letters' (bool)

        Returns:
            Configuration dictionary compatible with GridSettings
        """
        cfg: dict[str, Any] = {}

        resources = os.environ.get("CALENDARGRID_RESOURCES")
        if resources:
            cfg["resources"] = split_resource_list(resources)

        wildcard = os.environ.get("CALENDARGRID_WILDCARD")
        if wildcard:
            cfg["wildcard"] = wildcard.strip()

        window_days = os.environ.get("CALENDARGRID_WINDOW_DAYS")
        if window_days:
            try:
                cfg["window_days"] = int(window_days)
            except ValueError:
                logger.warning("Invalid CALENDARGRID_WINDOW_DAYS=%r; ignoring", window_days)

        max_days = os.environ.get("CALENDARGRID_MAX_WINDOW_DAYS")
        if max_days is not None:
            if max_days.strip().lower() in _UNBOUNDED:
                cfg["max_window_days"] = None
            else:
                try:
                    cfg["max_window_days"] = int(max_days)
                except ValueError:
                    logger.warning("Invalid CALENDARGRID_MAX_WINDOW_DAYS=%r; ignoring", max_days)

        timezone = os.environ.get("CALENDARGRID_TIMEZONE")
        if timezone:
            cfg["timezone"] = timezone.strip()

        unicode_tags = os.environ.get("CALENDARGRID_UNICODE_TAGS")
        if unicode_tags is not None:
            cfg["unicode_letters"] = unicode_tags.strip().lower() in _TRUTHY

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration from environment."""
        self.load_env_file()
        return self.build_config_from_env()
