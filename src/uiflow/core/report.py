"""Failure diagnostics and rich rendering of suite results."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from rich.console import Console

    from .session import Session
    from .suite import CaseResult, SuiteResult

logger = logging.getLogger(__name__)

EXCERPT_LINES = 15
STATUS_STYLES = {"passed": "green", "failed": "red", "blocked": "yellow"}
STATUS_ICONS = {"passed": "✅", "failed": "❌", "blocked": "⏸"}


@dataclass
class Diagnostics:
    url: str | None = None
    page_text: str | None = None
    html_path: Path | None = None
    screenshot_path: Path | None = None


def page_text_excerpt(html: str, max_lines: int = EXCERPT_LINES) -> str:
    """Visible text of the page, one non-empty line per block."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    lines = [line.strip() for line in soup.get_text("\n").splitlines()]
    lines = [line for line in lines if line]
    if len(lines) > max_lines:
        lines = [*lines[:max_lines], f"... ({len(lines) - max_lines} more lines)"]
    return "\n".join(lines)


def _artifact_stem(case_name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", case_name)


async def collect_diagnostics(session: Session, case_name: str, artifacts_dir: str | Path | None) -> Diagnostics:
    """Capture what the page looked like when a case failed."""
    diagnostics = Diagnostics()
    try:
        diagnostics.url = await session.current_path()
        html = await session.content()
        diagnostics.page_text = page_text_excerpt(html)
        if artifacts_dir is not None:
            directory = Path(artifacts_dir)
            directory.mkdir(parents=True, exist_ok=True)
            stem = _artifact_stem(case_name)
            diagnostics.html_path = directory / f"{stem}.html"
            diagnostics.html_path.write_text(html, encoding="utf-8")
            diagnostics.screenshot_path = await session.screenshot(directory / f"{stem}.png")
    except Exception as exc:  # noqa: BLE001
        logger.warning("Could not capture diagnostics for %s: %s", case_name, exc)
    return diagnostics


def render_case(console: Console, result: CaseResult) -> None:
    status = result.status.value
    line = Text()
    line.append(f"{STATUS_ICONS[status]} ")
    line.append(result.name, style=f"bold {STATUS_STYLES[status]}")
    if result.chain:
        line.append(f"  [{result.chain}]", style="dim")
    if result.blocked_by:
        line.append(f"  blocked by {result.blocked_by}", style="yellow")
    else:
        line.append(f"  {result.duration_s:.2f}s", style="dim")
    if result.attempts > 1:
        line.append(f"  (attempt {result.attempts})", style="dim")
    console.print(line)


def render_failure(console: Console, result: CaseResult) -> None:
    body = Text()
    if result.failed_step:
        body.append("Step: ", style="bold")
        body.append(f"{result.failed_step}\n")
    if result.error is not None:
        body.append(f"{result.error.__class__.__name__}: ", style="bold red")
        body.append(f"{result.error}\n")
    diagnostics = result.diagnostics
    if diagnostics is not None:
        if diagnostics.url:
            body.append("URL: ", style="bold")
            body.append(f"{diagnostics.url}\n")
        if diagnostics.html_path:
            body.append("HTML: ", style="bold")
            body.append(f"{diagnostics.html_path}\n")
        if diagnostics.screenshot_path:
            body.append("Screenshot: ", style="bold")
            body.append(f"{diagnostics.screenshot_path}\n")
        if diagnostics.page_text:
            body.append("\nPage text:\n", style="bold")
            body.append(diagnostics.page_text, style="dim")
    if result.traceback:
        body.append("\n\n")
        body.append(result.traceback, style="dim")
    console.print(Panel(body, title=f"❌ {result.name}", border_style="red", title_align="left"))


def render_summary(console: Console, suite_result: SuiteResult) -> None:
    for result in suite_result.cases:
        if result.status.value == "failed":
            render_failure(console, result)

    table = Table(title="Results", show_header=True, header_style="bold")
    table.add_column("Case")
    table.add_column("Chain", style="dim")
    table.add_column("Status")
    table.add_column("Time", justify="right")
    for result in suite_result.cases:
        status = result.status.value
        table.add_row(
            result.name,
            result.chain or "",
            Text(status, style=STATUS_STYLES[status]),
            "" if result.blocked_by else f"{result.duration_s:.2f}s",
        )
    console.print(table)

    counts = ", ".join(
        f"{sum(1 for case in suite_result.cases if case.status.value == status)} {status}"
        for status in STATUS_STYLES
    )
    style = "green" if suite_result.passed else "red"
    console.print(f"[{style}]{counts}[/{style}] in {suite_result.duration_s:.2f}s")
