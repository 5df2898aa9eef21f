"""Placement sections.

The set is closed: a descriptor whose section is not listed here can
never be registered.
"""

from __future__ import annotations

from enum import StrEnum


class Section(StrEnum):
    """Placement zones a plugin can occupy."""

    HEADER = "header"
    SIDEBAR = "sidebar"
    CONTENT = "content"
    FOOTER = "footer"


VALID_SECTIONS: frozenset[str] = frozenset(s.value for s in Section)


def is_valid_section(section: object) -> bool:
    """Check whether *section* names one of the fixed placement zones."""
    return isinstance(section, str) and section in VALID_SECTIONS
