"""Error taxonomy for flow verification."""

from __future__ import annotations


class FlowError(Exception):
    """Base class for failures reported at the test-case boundary."""

    def __init__(self, message: str, *, target: str | None = None, elapsed_s: float | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.target = target
        self.elapsed_s = elapsed_s

    def __str__(self) -> str:
        parts = [self.message]
        if self.target is not None:
            parts.append(f"target={self.target}")
        if self.elapsed_s is not None:
            parts.append(f"waited {self.elapsed_s:.2f}s")
        return " | ".join(parts)


class ElementNotFound(FlowError):
    """No visible element matched the selector before the action timeout."""


class AmbiguousElement(FlowError):
    """More than one visible element matched a selector that must be unique."""

    def __init__(self, message: str, *, count: int, target: str | None = None, elapsed_s: float | None = None) -> None:
        super().__init__(message, target=target, elapsed_s=elapsed_s)
        self.count = count


class WaitTimeoutError(FlowError, TimeoutError):
    """A predicate or wait did not resolve within its bound."""


class NavigationError(WaitTimeoutError):
    """The current URL did not reach the expected path."""

    def __init__(
        self,
        message: str,
        *,
        expected: str,
        actual: str | None,
        elapsed_s: float | None = None,
    ) -> None:
        super().__init__(message, target=f"url == {expected}", elapsed_s=elapsed_s)
        self.expected = expected
        self.actual = actual


class ValidationMismatch(WaitTimeoutError):
    """An expected failure-path message never appeared."""


class BrowserLaunchError(FlowError):
    """The browser could not be started."""


class SuiteDefinitionError(FlowError):
    """The suite itself is malformed (e.g. duplicate case names)."""
