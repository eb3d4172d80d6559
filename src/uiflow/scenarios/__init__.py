"""Built-in suites."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .auth import auth_suite

if TYPE_CHECKING:
    from collections.abc import Callable

    from uiflow.core.suite import Suite

SUITES: dict[str, Callable[[], Suite]] = {
    "auth": auth_suite,
}


def get_suite(name: str) -> Suite:
    try:
        factory = SUITES[name]
    except KeyError:
        raise KeyError(f"Unknown suite {name!r}; available: {', '.join(sorted(SUITES))}") from None
    return factory()
