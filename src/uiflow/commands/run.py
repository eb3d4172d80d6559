"""Run command implementation."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console

from uiflow.core.browser import PlaywrightSessionFactory
from uiflow.core.config.main import ConfigLoadingError, UiFlowConfig
from uiflow.core.errors import BrowserLaunchError, SuiteDefinitionError
from uiflow.core.logging import configure_logging
from uiflow.core.report import render_case, render_summary
from uiflow.core.suite import SuiteRunner
from uiflow.scenarios import get_suite

if TYPE_CHECKING:
    from uiflow.core.suite import Suite, SuiteResult

console = Console()

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ERROR = 2


def apply_overrides(
    config: UiFlowConfig,
    *,
    base_url: str | None = None,
    headless: bool | None = None,
    workers: int | None = None,
    retries: int | None = None,
    artifacts: Path | None = None,
    verbose: bool = False,
) -> UiFlowConfig:
    """Command-line flags win over uiflow.yaml and the environment."""
    config = config.model_copy(deep=True)
    if base_url:
        config.project.base_url = base_url
    if headless is not None:
        config.browser.headless = headless
    if workers is not None:
        config.run.workers = workers
    if retries is not None:
        config.run.retries = retries
    if artifacts is not None:
        config.project.artifacts_dir = str(artifacts)
    if verbose:
        config.verbose = True
    return config


async def run_suite(config: UiFlowConfig, suite: Suite) -> SuiteResult:
    async with PlaywrightSessionFactory(config) as factory:
        runner = SuiteRunner(config, factory, on_result=lambda result: render_case(console, result))
        return await runner.run(suite)


def run_command(
    pattern: str | None = typer.Argument(None, help="Glob or substring selecting cases"),
    suite: str = typer.Option("auth", "--suite", "-s", help="Suite to run"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to uiflow.yaml"),
    base_url: str | None = typer.Option(None, "--base-url", help="Override project.base_url"),
    headless: bool | None = typer.Option(None, "--headless/--headed", help="Run the browser headless or headed"),
    workers: int | None = typer.Option(None, "--workers", "-w", min=1, help="Concurrent independent cases"),
    retries: int | None = typer.Option(None, "--retries", min=0, help="Re-runs of a fully failed case"),
    artifacts: Path | None = typer.Option(None, "--artifacts", help="Directory for failure HTML and screenshots"),
    verbose: bool = typer.Option(False, "--verbose", help="Log every step and poll"),
) -> None:
    """Run the selected cases; exit 0 if all pass, 1 on failures, 2 on setup errors."""
    console.print("\n[bold blue]🧪 Running UI flows[/bold blue]")

    try:
        config = UiFlowConfig.load_config(config_path, required=config_path is not None)
    except ConfigLoadingError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(EXIT_ERROR) from e

    config = apply_overrides(
        config,
        base_url=base_url,
        headless=headless,
        workers=workers,
        retries=retries,
        artifacts=artifacts,
        verbose=verbose,
    )
    configure_logging(config.verbose, console)

    try:
        selected = get_suite(suite).select(pattern)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        raise typer.Exit(EXIT_ERROR) from e
    except SuiteDefinitionError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(EXIT_ERROR) from e

    if not len(selected):
        console.print(f"[red]No cases in suite {suite!r} match {pattern!r}[/red]")
        raise typer.Exit(EXIT_ERROR)

    console.print(f"🌐 Target: [bold]{config.project.base_url}[/bold]")
    console.print(f"📋 {len(selected)} case(s), {config.run.workers} worker(s)\n")

    try:
        result = asyncio.run(run_suite(config, selected))
    except BrowserLaunchError as e:
        console.print(f"[red]{e}[/red]")
        console.print("Install a browser with: [bold]playwright install chromium[/bold]")
        raise typer.Exit(EXIT_ERROR) from e

    console.print()
    render_summary(console, result)
    raise typer.Exit(EXIT_OK if result.passed else EXIT_FAILED)
