"""Tag parsing for household calendar titles.

Events are routed to people by a leading tag: ``"Eskil: Fotballtrening"`` belongs to
Eskil, ``"Alle: Julebord"`` belongs to everyone. Untagged events, and tags naming
nobody in the configured household, are not meant for the grid.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_WILDCARD = "Alle"

# Letters accepted in a tag: ASCII plus the Norwegian/Danish vowels
NORDIC_TAG_LETTERS = "A-Za-zÅÆØåæø"

_NORDIC_TAG_PATTERN = re.compile(rf"^\s*([{NORDIC_TAG_LETTERS}]+)\s*:\s*(.+)\s*$")
# [^\W\d_] is "any Unicode letter"
_UNICODE_TAG_PATTERN = re.compile(r"^\s*([^\W\d_]+)\s*:\s*(.+)\s*$")


@dataclass(frozen=True)
class TagMatch:
    """Resources addressed by a title, with the tag stripped from the title."""

    resources: tuple[str, ...] = ()
    title: str = ""

    def __bool__(self) -> bool:
        return bool(self.resources)


class TagParser:
    """Resolves title tags against a fixed, ordered resource list."""

    def __init__(
        self,
        resources: Sequence[str],
        wildcard: str = DEFAULT_WILDCARD,
        unicode_letters: bool = False,
    ):
        """Initialize tag parser.

        Args:
            resources: Configured resource names in display order
            wildcard: Tag that addresses every resource
            unicode_letters: Accept any Unicode letter in tags instead of the
                ASCII + ÅÆØ set
        """
        self.resources = tuple(resources)
        self.wildcard_key = wildcard.upper()
        self.pattern = _UNICODE_TAG_PATTERN if unicode_letters else _NORDIC_TAG_PATTERN

        # First occurrence wins for names that differ only in case
        self._by_key: dict[str, str] = {}
        for name in self.resources:
            self._by_key.setdefault(name.upper(), name)

    def parse(self, title: str | None) -> TagMatch:
        """Parse a title into addressed resources and a display title.

        Args:
            title: Raw event title, may be empty or None

        Returns:
            TagMatch; empty when the title has no recognized tag
        """
        if not title:
            return TagMatch()

        match = self.pattern.match(title)
        if match is None:
            return TagMatch()

        tag_key = match.group(1).upper()
        display_title = match.group(2).strip()

        if tag_key == self.wildcard_key:
            return TagMatch(self.resources, display_title)

        resource = self._by_key.get(tag_key)
        if resource is not None:
            return TagMatch((resource,), display_title)

        logger.debug("Ignoring title with unknown tag %r", match.group(1))
        return TagMatch()


def parse_tag(
    title: str | None,
    resources: Sequence[str],
    wildcard: str = DEFAULT_WILDCARD,
    unicode_letters: bool = False,
) -> TagMatch:
    """Parse a single title (convenience wrapper around TagParser)."""
    return TagParser(resources, wildcard, unicode_letters).parse(title)
