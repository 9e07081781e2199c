"""Grid settings using Pydantic for type validation and configuration."""

import logging
import os
import re
import zoneinfo
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from calendargrid.core.config_manager import ConfigManager
from calendargrid.domain.tag_parser import DEFAULT_WILDCARD, NORDIC_TAG_LETTERS
from calendargrid.exceptions import GridConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR = "CALENDARGRID_CONFIG"

DEFAULT_WINDOW_DAYS = 5
DEFAULT_MAX_WINDOW_DAYS = 14

# Accent colours assigned to resources without an explicit colour, in order
DEFAULT_RESOURCE_PALETTE = (
    "#6b7280",
    "#2563eb",
    "#059669",
    "#d97706",
    "#db2777",
    "#9333ea",
)

_NORDIC_NAME = re.compile(rf"^[{NORDIC_TAG_LETTERS}]+$")


class GridSettings(BaseModel):
    """Household calendar grid configuration."""

    resources: list[str] = Field(..., description="Household members, in display order")
    wildcard: str = Field(default=DEFAULT_WILDCARD, description="Tag addressing everyone")
    window_days: int = Field(default=DEFAULT_WINDOW_DAYS, description="Days shown, today first")
    max_window_days: Optional[int] = Field(
        default=DEFAULT_MAX_WINDOW_DAYS,
        description="Upper bound for window_days; None leaves it unbounded",
    )
    timezone: Optional[str] = Field(
        default=None, description="IANA timezone for day boundaries (host local if unset)"
    )
    unicode_letters: bool = Field(
        default=False, description="Accept any Unicode letter in tags, not only A-Z and ÆØÅ"
    )
    resource_colors: dict[str, str] = Field(
        default_factory=dict, description="Accent colour per resource name"
    )

    @field_validator("resources")
    @classmethod
    def validate_resources(cls, v: list[str]) -> list[str]:
        """Strip names and reject empty or case-insensitively duplicated ones."""
        names = [name.strip() for name in v]
        seen: set[str] = set()
        for name in names:
            if not name:
                raise ValueError("Resource names must not be empty")
            key = name.upper()
            if key in seen:
                raise ValueError(f"Duplicate resource name: {name}")
            seen.add(key)
        return names

    @field_validator("wildcard")
    @classmethod
    def validate_wildcard(cls, v: str) -> str:
        wildcard = v.strip()
        if not wildcard:
            raise ValueError("Wildcard tag must not be empty")
        return wildcard

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        try:
            zoneinfo.ZoneInfo(v)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @model_validator(mode="after")
    def validate_consistency(self) -> "GridSettings":
        """Cross-field checks: wildcard clash, tag reachability, window bounds."""
        wildcard_key = self.wildcard.upper()
        for name in self.resources:
            if name.upper() == wildcard_key:
                raise ValueError(f"Resource name {name!r} collides with the wildcard tag")
            if not self.tag_reachable(name):
                logger.warning("Resource %r can never be matched by a title tag", name)

        if self.window_days < 0:
            logger.warning("window_days=%d is negative, using 0", self.window_days)
            self.window_days = 0
        if self.max_window_days is not None and self.window_days > self.max_window_days:
            logger.warning(
                "window_days=%d exceeds max_window_days=%d, clamping",
                self.window_days,
                self.max_window_days,
            )
            self.window_days = self.max_window_days
        return self

    def tag_reachable(self, name: str) -> bool:
        """Whether a title tag can ever address ``name``."""
        if self.unicode_letters:
            return name.isalpha()
        return _NORDIC_NAME.match(name) is not None

    def color_for(self, resource: str) -> str:
        """Accent colour of a resource, falling back to the default palette."""
        if resource in self.resource_colors:
            return self.resource_colors[resource]
        try:
            index = self.resources.index(resource)
        except ValueError:
            index = 0
        return DEFAULT_RESOURCE_PALETTE[index % len(DEFAULT_RESOURCE_PALETTE)]


def read_settings_file(path: Union[str, Path]) -> dict[str, Any]:
    """Read a YAML settings file.

    Raises:
        GridConfigError: If the file cannot be read or is not a YAML mapping
    """
    settings_path = Path(path)
    try:
        with settings_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise GridConfigError(
            "Cannot read settings file", field_name="path", field_value=settings_path
        ) from e
    except yaml.YAMLError as e:
        raise GridConfigError(
            "Settings file is not valid YAML",
            field_name="path",
            field_value=settings_path,
            details={"error": str(e)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise GridConfigError(
            "Settings file must contain a mapping", field_name="path", field_value=settings_path
        )
    return data


def load_settings(
    path: Optional[Union[str, Path]] = None,
    env: bool = True,
    config_manager: Optional[ConfigManager] = None,
) -> GridSettings:
    """Load grid settings from a YAML file and environment overrides.

    Environment values (including .env defaults) take precedence over the file.

    Args:
        path: Settings file; defaults to CALENDARGRID_CONFIG when set
        env: Whether to apply environment overrides
        config_manager: ConfigManager to read the environment with

    Returns:
        Validated GridSettings

    Raises:
        GridConfigError: If the file is unreadable or the settings are invalid
    """
    cfg: dict[str, Any] = {}

    settings_path = path or os.environ.get(CONFIG_PATH_ENV_VAR)
    if settings_path:
        cfg.update(read_settings_file(settings_path))
        logger.debug("Loaded grid settings from %s", settings_path)

    if env:
        manager = config_manager or ConfigManager()
        cfg.update(manager.load_full_config())

    try:
        settings = GridSettings.model_validate(cfg)
    except ValidationError as e:
        messages = [
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        ]
        raise GridConfigError(
            "Invalid grid settings", details={"validation_errors": messages}
        ) from e

    logger.info(
        "Grid settings: %d resources, %d-day window",
        len(settings.resources),
        settings.window_days,
    )
    return settings
