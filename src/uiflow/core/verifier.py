"""Flow verifier: runs ordered steps against a session and polls assertions."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from .config.main import HydrationConfig, TimeoutConfig
from .errors import AmbiguousElement, ElementNotFound, FlowError, NavigationError, ValidationMismatch, WaitTimeoutError
from .predicates import Predicate, all_of, text_hidden, text_visible, url_is, visible
from .selectors import Selector

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .session import Session
    from .steps import Step

logger = logging.getLogger(__name__)

INITIAL_POLL_S = 0.05
MAX_POLL_S = 0.5
MIN_EVALUATION_S = 0.1


class Phase(StrEnum):
    NOT_STARTED = "not_started"
    NAVIGATING = "navigating"
    HYDRATING = "hydrating"
    INTERACTING = "interacting"
    ASSERTING = "asserting"
    PASSED = "passed"
    FAILED = "failed"


@dataclass
class ScenarioResult:
    passed: bool
    duration_s: float
    phase: Phase
    steps: list[str] = field(default_factory=list)
    failed_step: str | None = None
    error: FlowError | None = None


class FlowVerifier:
    """Drives one session through a scenario.

    Interactions are never issued while a page is hydrating: ``navigate``, a
    verifier that has not seen the page yet, and any assertion or interaction
    that observes arrival on a new path enter ``HYDRATING``. Every
    interaction awaits the pending hydration signal first.
    """

    def __init__(
        self,
        session: Session,
        timeouts: TimeoutConfig | None = None,
        hydration: HydrationConfig | None = None,
    ) -> None:
        self.session = session
        self.timeouts = timeouts or TimeoutConfig()
        self.hydration = hydration or HydrationConfig()
        self.phase = Phase.NOT_STARTED
        self._hydration_task: asyncio.Task[None] | None = None
        self._hydrated_path: str | None = None

    def _enter(self, phase: Phase) -> None:
        if phase is not self.phase:
            logger.debug("phase %s -> %s", self.phase, phase)
        self.phase = phase

    # ---- polling -----------------------------------------------------------------

    async def _poll(self, predicate: Predicate, timeout: float) -> float | None:
        """Return elapsed seconds once ``predicate`` holds, ``None`` on expiry."""
        loop = asyncio.get_running_loop()
        start = loop.time()
        deadline = start + timeout
        delay = INITIAL_POLL_S

        while True:
            remaining = deadline - loop.time()
            try:
                holds = await asyncio.wait_for(predicate(self.session), timeout=max(remaining, MIN_EVALUATION_S))
            except asyncio.TimeoutError:
                holds = False
            if holds:
                elapsed = loop.time() - start
                logger.debug("%s after %.2fs", predicate.description, elapsed)
                return elapsed

            remaining = deadline - loop.time()
            if remaining <= 0:
                return None
            await asyncio.sleep(min(delay, remaining))
            delay = min(delay * 2, MAX_POLL_S)

    async def assert_eventually(self, predicate: Predicate, timeout: float | None = None) -> float:
        """Wait until ``predicate`` holds; raise :class:`WaitTimeoutError` otherwise."""
        timeout = self.timeouts.expect if timeout is None else timeout
        self._enter(Phase.ASSERTING)
        elapsed = await self._poll(predicate, timeout)
        if elapsed is None:
            raise WaitTimeoutError("Condition not met", target=predicate.description, elapsed_s=timeout)
        await self._hydrate_if_arrived()
        return elapsed

    async def assert_url(self, expected_path: str, timeout: float | None = None) -> float:
        timeout = self.timeouts.expect if timeout is None else timeout
        self._enter(Phase.ASSERTING)
        elapsed = await self._poll(url_is(expected_path), timeout)
        if elapsed is None:
            actual = await self.session.current_path()
            raise NavigationError(
                f"Expected to be on {expected_path}, still on {actual}",
                expected=expected_path,
                actual=actual,
                elapsed_s=timeout,
            )
        await self._hydrate_if_arrived()
        return elapsed

    async def expect_validation(self, text: str, timeout: float | None = None) -> float:
        timeout = self.timeouts.expect if timeout is None else timeout
        self._enter(Phase.ASSERTING)
        predicate = text_visible(text)
        elapsed = await self._poll(predicate, timeout)
        if elapsed is None:
            raise ValidationMismatch("Expected validation message did not appear", target=text, elapsed_s=timeout)
        return elapsed

    # ---- navigation and hydration ------------------------------------------------

    def _hydration_signal(self) -> Predicate | None:
        checks: list[Predicate] = []
        if self.hydration.loading_text:
            checks.append(text_hidden(self.hydration.loading_text))
        if self.hydration.ready_selector:
            checks.append(visible(self.hydration.ready_selector))
        return all_of(*checks) if checks else None

    async def _wait_for_hydration_signal(self) -> None:
        signal = self._hydration_signal()
        if signal is not None:
            timeout = self.timeouts.hydration
            if await self._poll(signal, timeout) is None:
                raise WaitTimeoutError("Page did not finish hydrating", target=signal.description, elapsed_s=timeout)
        self._hydrated_path = await self.session.current_path()

    def _begin_hydration(self) -> None:
        self._enter(Phase.HYDRATING)
        if self._hydration_task is None or self._hydration_task.done():
            self._hydration_task = asyncio.create_task(self._wait_for_hydration_signal())

    async def ensure_hydrated(self) -> None:
        task = self._hydration_task
        if task is None:
            return
        try:
            await task
        finally:
            if self._hydration_task is task:
                self._hydration_task = None

    async def _hydrate_if_arrived(self) -> None:
        if self._hydrated_path is None:
            return
        if await self.session.current_path() != self._hydrated_path:
            self._begin_hydration()
            await self.ensure_hydrated()

    async def navigate(self, path: str) -> None:
        self._enter(Phase.NAVIGATING)
        await self.session.goto(path, self.timeouts.navigation)
        self._begin_hydration()
        await self.ensure_hydrated()

    async def clear_cookies(self) -> None:
        await self.session.clear_cookies()

    # ---- interactions ------------------------------------------------------------

    async def _resolve(self, selector: str | Selector) -> Selector:
        target = Selector.parse(selector)
        if self._hydrated_path is None and self._hydration_task is None:
            # nothing known about the page yet
            self._begin_hydration()
        else:
            await self._hydrate_if_arrived()
        await self.ensure_hydrated()
        self._enter(Phase.INTERACTING)

        timeout = self.timeouts.action
        loop = asyncio.get_running_loop()
        start = loop.time()
        deadline = start + timeout
        delay = INITIAL_POLL_S

        while True:
            remaining = deadline - loop.time()
            try:
                count = await asyncio.wait_for(
                    self.session.visible_count(target), timeout=max(remaining, MIN_EVALUATION_S)
                )
            except asyncio.TimeoutError:
                count = 0
            if count == 1:
                return target
            if count > 1:
                raise AmbiguousElement(
                    f"{count} visible elements match; scope the selector to a region",
                    count=count,
                    target=str(target),
                    elapsed_s=loop.time() - start,
                )
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise ElementNotFound("No visible element matches", target=str(target), elapsed_s=timeout)
            await asyncio.sleep(min(delay, remaining))
            delay = min(delay * 2, MAX_POLL_S)

    async def fill_field(self, selector: str | Selector, value: str) -> None:
        target = await self._resolve(selector)
        await self.session.fill(target, value, self.timeouts.action)

    async def click(self, selector: str | Selector) -> None:
        target = await self._resolve(selector)
        await self.session.click(target, self.timeouts.action)

    # ---- scenarios ---------------------------------------------------------------

    async def aclose(self) -> None:
        task, self._hydration_task = self._hydration_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except FlowError as exc:
                logger.debug("Pending hydration ended with %s", exc)

    async def run_scenario(self, steps: Iterable[Step]) -> ScenarioResult:
        """Run ``steps`` strictly in order; the first failure ends the scenario."""
        start = time.perf_counter()
        executed: list[str] = []
        description: str | None = None

        try:
            for step in steps:
                description = step.describe()
                logger.debug("step: %s", description)
                await step.run(self)
                executed.append(description)
        except FlowError as exc:
            self._enter(Phase.FAILED)
            logger.debug("failed at %r: %s", description, exc)
            return ScenarioResult(
                passed=False,
                duration_s=time.perf_counter() - start,
                phase=self.phase,
                steps=executed,
                failed_step=description,
                error=exc,
            )
        finally:
            await self.aclose()

        self._enter(Phase.PASSED)
        return ScenarioResult(
            passed=True,
            duration_s=time.perf_counter() - start,
            phase=self.phase,
            steps=executed,
        )


async def run_scenario(
    session: Session,
    steps: Iterable[Step],
    timeouts: TimeoutConfig | None = None,
    hydration: HydrationConfig | None = None,
) -> ScenarioResult:
    return await FlowVerifier(session, timeouts, hydration).run_scenario(steps)


async def assert_eventually(session: Session, predicate: Predicate, timeout: float) -> float:
    return await FlowVerifier(session).assert_eventually(predicate, timeout)


async def assert_url(session: Session, expected_path: str, timeout: float) -> float:
    return await FlowVerifier(session).assert_url(expected_path, timeout)


async def fill_field(session: Session, selector: str | Selector, value: str, timeout: float | None = None) -> None:
    timeouts = TimeoutConfig(action=timeout) if timeout else None
    await FlowVerifier(session, timeouts).fill_field(selector, value)


async def click(session: Session, selector: str | Selector, timeout: float | None = None) -> None:
    timeouts = TimeoutConfig(action=timeout) if timeout else None
    await FlowVerifier(session, timeouts).click(selector)
