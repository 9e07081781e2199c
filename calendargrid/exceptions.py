"""
Exceptions for calendargrid.

The layout engine itself never raises for bad calendar data: malformed or untagged
records are filtered out. Only the configuration layer raises, so a broken settings
file or resource list is reported loudly at startup instead of silently producing an
empty grid.
"""

from typing import Any, Optional


class GridError(Exception):
    """Base exception for all calendargrid errors.

    Args:
        message: Human-readable error description
        details: Optional dictionary containing additional error context

    Example:
        >>> raise GridError("Grid setup failed", {"component": "settings"})
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class GridConfigError(GridError):
    """Raised when grid configuration cannot be loaded or fails validation.

    Covers unreadable or malformed settings files, resource lists with empty or
    duplicate names, and unknown timezone identifiers.

    Args:
        message: Human-readable error description
        field_name: Name of the offending setting, if known
        field_value: The invalid value
        details: Additional context about the failure

    Example:
        >>> raise GridConfigError(
        ...     "Duplicate resource name",
        ...     field_name="resources",
        ...     field_value="Eskil",
        ... )
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.field_name = field_name
        self.field_value = field_value

        error_details = details or {}
        if field_name:
            error_details["field_name"] = field_name
        if field_value is not None:
            error_details["field_value"] = str(field_value)

        super().__init__(message, error_details)
