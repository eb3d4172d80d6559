"""List command implementation."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from uiflow.core.errors import SuiteDefinitionError
from uiflow.scenarios import get_suite

from .run import EXIT_ERROR

console = Console()


def list_command(
    pattern: str | None = typer.Argument(None, help="Glob or substring selecting cases"),
    suite: str = typer.Option("auth", "--suite", "-s", help="Suite to list"),
) -> None:
    """Show the cases a run would execute, in order."""
    try:
        selected = get_suite(suite).select(pattern)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        raise typer.Exit(EXIT_ERROR) from e
    except SuiteDefinitionError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(EXIT_ERROR) from e

    table = Table(title=f"Suite: {selected.name}", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Case")
    table.add_column("Chain", style="cyan")
    table.add_column("Description", style="dim")
    for index, case in enumerate(selected, start=1):
        table.add_row(str(index), case.name, case.chain or "", case.description)
    console.print(table)
    console.print(f"{len(selected)} case(s)")
