"""Init command implementation."""

from __future__ import annotations

import typer
from rich.console import Console

from uiflow.core.config.main import ConfigLoadingError, ProjectConfig, UiFlowConfig

from .run import EXIT_ERROR

console = Console()


def init_command(
    base_url: str = typer.Option(ProjectConfig().base_url, "--base-url", help="URL of the application under test"),
    name: str = typer.Option(ProjectConfig().name, "--name", help="Project name"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing uiflow.yaml"),
) -> None:
    """Write a uiflow.yaml with default settings."""
    config_path = UiFlowConfig.get_config_path()
    if config_path.exists() and not force:
        console.print(f"[red]❌ {config_path.name} already exists.[/red] Use [bold]--force[/bold] to overwrite it.")
        raise typer.Exit(1)

    config = UiFlowConfig(project=ProjectConfig(name=name, base_url=base_url))
    try:
        config.save(config_path)
    except ConfigLoadingError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(EXIT_ERROR) from e
