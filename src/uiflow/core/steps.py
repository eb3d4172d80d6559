"""Step types a scenario is made of."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .predicates import Predicate
    from .verifier import FlowVerifier


class Step(ABC):
    @abstractmethod
    def describe(self) -> str:
        """One-line description used in reports."""

    @abstractmethod
    async def run(self, verifier: FlowVerifier) -> None:
        """Apply the step; return only once its side effects are observable."""


@dataclass(frozen=True)
class Navigate(Step):
    path: str

    def describe(self) -> str:
        return f"navigate {self.path}"

    async def run(self, verifier: FlowVerifier) -> None:
        await verifier.navigate(self.path)


@dataclass(frozen=True)
class ClearCookies(Step):
    def describe(self) -> str:
        return "clear cookies"

    async def run(self, verifier: FlowVerifier) -> None:
        await verifier.clear_cookies()


@dataclass(frozen=True)
class Fill(Step):
    selector: str
    value: str
    secret: bool = False

    def describe(self) -> str:
        shown = "***" if self.secret else repr(self.value)
        return f"fill {self.selector} with {shown}"

    async def run(self, verifier: FlowVerifier) -> None:
        await verifier.fill_field(self.selector, self.value)


@dataclass(frozen=True)
class Click(Step):
    selector: str

    def describe(self) -> str:
        return f"click {self.selector}"

    async def run(self, verifier: FlowVerifier) -> None:
        await verifier.click(self.selector)


@dataclass(frozen=True)
class WaitFor(Step):
    predicate: Predicate
    timeout: float | None = None

    def describe(self) -> str:
        return f"wait for {self.predicate.description}"

    async def run(self, verifier: FlowVerifier) -> None:
        await verifier.assert_eventually(self.predicate, self.timeout)


@dataclass(frozen=True)
class ExpectUrl(Step):
    path: str
    timeout: float | None = None

    def describe(self) -> str:
        return f"expect url {self.path}"

    async def run(self, verifier: FlowVerifier) -> None:
        await verifier.assert_url(self.path, self.timeout)


@dataclass(frozen=True)
class ExpectValidation(Step):
    """A failure-path message the application must show."""

    text: str
    timeout: float | None = None

    def describe(self) -> str:
        return f"expect validation {self.text!r}"

    async def run(self, verifier: FlowVerifier) -> None:
        await verifier.expect_validation(self.text, self.timeout)
