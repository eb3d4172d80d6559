"""Selector parsing.

Selectors are written as plain strings in scenarios:

- ``#username``: any CSS selector
- ``link:Login``: an element by ARIA role and accessible name
- ``text:Passwords do not match``: an element by its visible text
- ``nav >> link:Login``: any of the above scoped to a region

A role prefix followed by a lowercase CSS pseudo-class (``button:disabled``)
stays CSS; capitalise the name to match an element by it (``button:Disabled``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Self

ROLES = frozenset(
    {
        "alert",
        "button",
        "checkbox",
        "dialog",
        "heading",
        "link",
        "listitem",
        "navigation",
        "textbox",
    }
)

# `button:disabled` and `link:visited` stay CSS
CSS_PSEUDO_CLASSES = frozenset(
    {
        "active",
        "checked",
        "default",
        "disabled",
        "empty",
        "enabled",
        "first-child",
        "first-of-type",
        "focus",
        "focus-visible",
        "focus-within",
        "has",
        "hover",
        "indeterminate",
        "invalid",
        "is",
        "last-child",
        "last-of-type",
        "link",
        "not",
        "nth-child",
        "nth-last-child",
        "nth-of-type",
        "only-child",
        "optional",
        "placeholder-shown",
        "read-only",
        "required",
        "target",
        "valid",
        "visible",
        "visited",
        "where",
    }
)

SCOPE_SEPARATOR = " >> "


class SelectorKind(StrEnum):
    CSS = "css"
    ROLE = "role"
    TEXT = "text"


def _is_pseudo_class(rest: str) -> bool:
    if rest.startswith(":"):
        return True
    match = re.match(r"[a-z-]+", rest)
    return match is not None and match.group() in CSS_PSEUDO_CLASSES


@dataclass(frozen=True)
class Selector:
    kind: SelectorKind
    value: str
    name: str | None = None
    within: str | None = None

    @classmethod
    def parse(cls, raw: str | Self, within: str | None = None) -> Self:
        if isinstance(raw, Selector):
            if within is None or raw.within == within:
                return raw
            return cls(raw.kind, raw.value, raw.name, within)

        raw = raw.strip()
        if not raw:
            raise ValueError("Empty selector")

        if SCOPE_SEPARATOR in raw:
            scope, _, inner = raw.rpartition(SCOPE_SEPARATOR)
            return cls.parse(inner, within=scope.strip())

        prefix, sep, rest = raw.partition(":")
        if sep and prefix == "text":
            return cls(SelectorKind.TEXT, rest.strip(), within=within)
        if sep and prefix in ROLES and not _is_pseudo_class(rest):
            return cls(SelectorKind.ROLE, prefix, name=rest.strip() or None, within=within)
        return cls(SelectorKind.CSS, raw, within=within)

    @property
    def scoped(self) -> bool:
        return self.within is not None

    def __str__(self) -> str:
        if self.kind is SelectorKind.TEXT:
            inner = f"text:{self.value}"
        elif self.kind is SelectorKind.ROLE:
            inner = f"{self.value}:{self.name}" if self.name else self.value
        else:
            inner = self.value
        return f"{self.within}{SCOPE_SEPARATOR}{inner}" if self.within else inner


def sel(raw: str | Selector) -> Selector:
    """Shorthand for :meth:`Selector.parse`."""
    return Selector.parse(raw)
