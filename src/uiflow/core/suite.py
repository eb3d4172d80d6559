"""Test cases, serial chains and the suite runner."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum
from fnmatch import fnmatchcase
from traceback import format_exception
from typing import TYPE_CHECKING, Protocol

from .config.main import UiFlowConfig
from .errors import SuiteDefinitionError, WaitTimeoutError
from .fixtures import Credentials, generate_credentials
from .report import Diagnostics, collect_diagnostics
from .verifier import FlowVerifier

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from .session import Session
    from .steps import Step

logger = logging.getLogger(__name__)


class CaseStatus(StrEnum):
    PASSED = "passed"
    FAILED = "failed"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class CaseContext:
    """Everything a case needs to build its steps, passed explicitly."""

    credentials: Credentials
    config: UiFlowConfig


@dataclass(frozen=True)
class FlowCase:
    name: str
    build: Callable[[CaseContext], list[Step]]
    chain: str | None = None
    description: str = ""


class SessionFactory(Protocol):
    async def new_session(self) -> Session: ...


@dataclass
class CaseResult:
    name: str
    status: CaseStatus
    chain: str | None = None
    duration_s: float = 0.0
    attempts: int = 0
    steps: list[str] = field(default_factory=list)
    failed_step: str | None = None
    error: BaseException | None = None
    traceback: str | None = None
    blocked_by: str | None = None
    diagnostics: Diagnostics | None = None

    @property
    def passed(self) -> bool:
        return self.status is CaseStatus.PASSED


@dataclass
class SuiteResult:
    cases: list[CaseResult]
    duration_s: float = 0.0

    def count(self, status: CaseStatus) -> int:
        return sum(1 for case in self.cases if case.status is status)

    @property
    def passed(self) -> bool:
        return bool(self.cases) and all(case.passed for case in self.cases)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1


def _matches(name: str, pattern: str) -> bool:
    return fnmatchcase(name, pattern) or pattern in name


class Suite:
    def __init__(self, name: str, cases: Iterable[FlowCase]) -> None:
        self.name = name
        self.cases = list(cases)
        seen: set[str] = set()
        for case in self.cases:
            if case.name in seen:
                raise SuiteDefinitionError(f"Duplicate case name {case.name!r} in suite {name!r}")
            seen.add(case.name)

    def __iter__(self) -> Iterator[FlowCase]:
        return iter(self.cases)

    def __len__(self) -> int:
        return len(self.cases)

    def chain(self, name: str) -> list[FlowCase]:
        return [case for case in self.cases if case.chain == name]

    def select(self, pattern: str | None) -> Suite:
        """Cases matching ``pattern`` plus the earlier cases of their chains."""
        if not pattern:
            return self

        wanted = {case.name for case in self.cases if _matches(case.name, pattern)}
        for case in self.cases:
            if case.name in wanted and case.chain is not None:
                for earlier in self.chain(case.chain):
                    if earlier.name == case.name:
                        break
                    wanted.add(earlier.name)

        return Suite(self.name, [case for case in self.cases if case.name in wanted])

    def units(self) -> list[list[FlowCase]]:
        """Independent cases alone, each chain as one ordered unit."""
        units: list[list[FlowCase]] = []
        chains: dict[str, list[FlowCase]] = {}
        for case in self.cases:
            if case.chain is None:
                units.append([case])
            elif case.chain in chains:
                chains[case.chain].append(case)
            else:
                chains[case.chain] = [case]
                units.append(chains[case.chain])
        return units


class SuiteRunner:
    """Runs independent cases concurrently and chains strictly in order."""

    def __init__(
        self,
        config: UiFlowConfig,
        session_factory: SessionFactory,
        on_result: Callable[[CaseResult], None] | None = None,
    ) -> None:
        self.config = config
        self.session_factory = session_factory
        self.on_result = on_result

    def _credentials(self) -> Credentials:
        auth = self.config.auth
        return generate_credentials(auth.username_prefix, auth.password, auth.email_domain)

    async def run(self, suite: Suite) -> SuiteResult:
        start = time.perf_counter()
        results: dict[str, CaseResult] = {}
        workers = asyncio.Semaphore(self.config.run.workers)

        async with asyncio.TaskGroup() as group:
            for unit in suite.units():
                group.create_task(self._run_unit(unit, workers, results))

        return SuiteResult(
            cases=[results[case.name] for case in suite],
            duration_s=time.perf_counter() - start,
        )

    def _record(self, results: dict[str, CaseResult], result: CaseResult) -> None:
        results[result.name] = result
        if self.on_result is not None:
            self.on_result(result)

    async def _run_unit(
        self,
        unit: list[FlowCase],
        workers: asyncio.Semaphore,
        results: dict[str, CaseResult],
    ) -> None:
        context = CaseContext(credentials=self._credentials(), config=self.config)
        blocker: str | None = None

        for case in unit:
            if blocker is not None:
                logger.info("%s blocked by %s", case.name, blocker)
                self._record(
                    results,
                    CaseResult(name=case.name, status=CaseStatus.BLOCKED, chain=case.chain, blocked_by=blocker),
                )
                continue

            async with workers:
                result = await self.run_case(case, context)
            self._record(results, result)
            if not result.passed:
                blocker = case.name

    async def run_case(self, case: FlowCase, context: CaseContext) -> CaseResult:
        attempts = self.config.run.retries + 1
        result: CaseResult | None = None
        for attempt in range(1, attempts + 1):
            logger.debug("%s: attempt %d/%d", case.name, attempt, attempts)
            result = await self._attempt(case, context)
            result.attempts = attempt
            if result.passed:
                break
        assert result is not None
        logger.info("%s %s in %.2fs", case.name, result.status, result.duration_s)
        return result

    async def _attempt(self, case: FlowCase, context: CaseContext) -> CaseResult:
        start = time.perf_counter()
        result = CaseResult(name=case.name, status=CaseStatus.FAILED, chain=case.chain)

        try:
            session = await self.session_factory.new_session()
        except Exception as exc:  # noqa: BLE001
            result.error = exc
            result.traceback = "".join(format_exception(exc))
            result.duration_s = time.perf_counter() - start
            return result

        async with session:
            try:
                verifier = FlowVerifier(session, self.config.timeouts, self.config.hydration)
                budget = self.config.timeouts.case
                try:
                    scenario = await asyncio.wait_for(verifier.run_scenario(case.build(context)), timeout=budget)
                except asyncio.TimeoutError:
                    result.error = WaitTimeoutError(
                        "Case exceeded its time budget", target=case.name, elapsed_s=budget
                    )
                else:
                    result.steps = scenario.steps
                    result.failed_step = scenario.failed_step
                    result.error = scenario.error
                    if scenario.passed:
                        result.status = CaseStatus.PASSED
            except Exception as exc:  # noqa: BLE001
                logger.exception("%s raised an unexpected error", case.name)
                result.error = exc
                result.traceback = "".join(format_exception(exc))

            if not result.passed:
                result.diagnostics = await collect_diagnostics(session, case.name, self.config.project.artifacts_dir)

        result.duration_s = time.perf_counter() - start
        return result
