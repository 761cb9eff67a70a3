"""Shared Kernel - identifiers shared by the session, selector and resolver contexts.

These types are kept minimal:
- ElementId: short session-scoped element reference id (e1, e2, ...)
- SessionId: validated session name, safe to use as a file name
- AriaRole: role names accepted by the role selector strategy
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

ELEMENT_ID_PATTERN = re.compile(r"^e(\d+)$")

DEFAULT_SESSION = "default"


@dataclass(frozen=True)
class ElementId:
    """Short reference to a stored element (e1, e2, etc.).

    Format: "e{number}" where number is a positive integer. Ids are
    minted by the session store and are never reused within a session.
    """
    value: str

    REF_PATTERN: str = field(default=r"^e[1-9]\d*$", init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not re.match(self.REF_PATTERN, self.value):
            raise ValueError(
                f"Invalid element id: '{self.value}'. "
                f"Must match pattern 'e{{number}}' (e.g., e1, e42)"
            )

    @classmethod
    def from_number(cls, number: int) -> "ElementId":
        """Create an ElementId from its numeric suffix.

        Args:
            number: The element number (must be positive)

        Raises:
            ValueError: If number is not positive
        """
        if number < 1:
            raise ValueError(f"Element number must be positive, got {number}")
        return cls(value=f"e{number}")

    @property
    def number(self) -> int:
        return int(self.value[1:])

    def next(self) -> "ElementId":
        return ElementId.from_number(self.number + 1)

    def __str__(self) -> str:
        return self.value


def element_number(key: str) -> Optional[int]:
    """Return the numeric suffix of an ``e<digits>`` key, or None.

    Keys that do not follow the pattern are not errors; they are ignored
    by id allocation.
    """
    match = ELEMENT_ID_PATTERN.match(key)
    if not match:
        return None
    return int(match.group(1))


def next_element_id(keys: Iterable[str]) -> ElementId:
    """Return ``e<max+1>`` over the conforming keys (``e1`` when none)."""
    highest = 0
    for key in keys:
        number = element_number(key)
        if number is not None and number > highest:
            highest = number
    return ElementId.from_number(highest + 1)


@dataclass(frozen=True)
class SessionId:
    """User-chosen session name.

    Session ids name files in the session directory, so they are limited to
    letters, digits, dot, underscore and dash.
    """
    value: str

    PATTERN: str = field(default=r"^[A-Za-z0-9._-]{1,128}$", init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not re.match(self.PATTERN, self.value) or self.value in (".", ".."):
            raise ValueError(
                f"Invalid session id: '{self.value}'. "
                "Use letters, digits, '.', '_' or '-' (max 128 characters)"
            )

    @property
    def is_default(self) -> bool:
        return self.value == DEFAULT_SESSION

    def __str__(self) -> str:
        return self.value


class AriaRole:
    """ARIA role names understood by Playwright's role selector engine."""

    ROLES: FrozenSet[str] = frozenset(
        {
            "alert", "alertdialog", "application", "article", "banner", "blockquote",
            "button", "caption", "cell", "checkbox", "code", "columnheader", "combobox",
            "complementary", "contentinfo", "definition", "deletion", "dialog",
            "directory", "document", "emphasis", "feed", "figure", "form", "generic",
            "grid", "gridcell", "group", "heading", "img", "insertion", "link", "list",
            "listbox", "listitem", "log", "main", "marquee", "math", "meter", "menu",
            "menubar", "menuitem", "menuitemcheckbox", "menuitemradio", "navigation",
            "none", "note", "option", "paragraph", "presentation", "progressbar",
            "radio", "radiogroup", "region", "row", "rowgroup", "rowheader",
            "scrollbar", "search", "searchbox", "separator", "slider", "spinbutton",
            "status", "strong", "subscript", "superscript", "switch", "tab", "table",
            "tablist", "tabpanel", "term", "textbox", "time", "timer", "toolbar",
            "tooltip", "tree", "treegrid", "treeitem",
        }
    )

    @classmethod
    def is_known(cls, role: str) -> bool:
        return role.strip().lower() in cls.ROLES
