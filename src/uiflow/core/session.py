"""Session contract driven by the flow verifier."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from .selectors import Selector


class Session(ABC):
    """An isolated browser context: cookie jar, current URL, loaded DOM.

    A session is owned by exactly one test case. Every method is a suspension
    point; none of them may block past the timeout it is given.
    """

    @abstractmethod
    async def goto(self, path: str, timeout: float) -> None:
        """Navigate to ``path`` relative to the base URL and wait for the load event."""

    @abstractmethod
    async def clear_cookies(self) -> None:
        """Drop every cookie in this session's jar."""

    @abstractmethod
    async def current_path(self) -> str:
        """Path component of the current URL."""

    @abstractmethod
    async def visible_count(self, selector: Selector) -> int:
        """Number of visible elements matching ``selector``."""

    @abstractmethod
    async def is_focused(self, selector: Selector) -> bool:
        """Whether the first visible match currently holds keyboard focus."""

    @abstractmethod
    async def fill(self, selector: Selector, value: str, timeout: float) -> None:
        """Replace the value of the single visible match."""

    @abstractmethod
    async def click(self, selector: Selector, timeout: float) -> None:
        """Click the single visible match."""

    @abstractmethod
    async def content(self) -> str:
        """HTML snapshot of the current page."""

    async def screenshot(self, path: Path) -> Path | None:
        """Save a screenshot if the backend can produce one."""
        return None

    @abstractmethod
    async def close(self) -> None:
        """Tear the session down; the cookie jar goes with it."""

    async def __aenter__(self) -> Session:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
