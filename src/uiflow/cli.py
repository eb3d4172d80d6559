"""Main CLI application for uiflow."""

import typer
from rich.console import Console

from . import __version__

console = Console()
app = typer.Typer(
    name="uiflow",
    help="Declarative UI-flow verification for rendered web applications",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Show version information."""
    if value:
        console.print(f"uiflow v{__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version information",
    ),
) -> None:
    """
    uiflow: drive a browser through scripted flows and assert on what the UI shows.

    Every wait is bounded, interactions wait out client-side hydration, and
    dependent cases are blocked instead of run against undefined state.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


# Import and register commands after app creation to avoid circular imports
def register_commands() -> None:
    """Register CLI commands."""
    from .commands.init import init_command
    from .commands.list import list_command
    from .commands.run import run_command

    app.command("init", help="Create a uiflow.yaml in the current directory")(init_command)
    app.command("list", help="List the cases of a suite")(list_command)
    app.command("run", help="Run a suite against the configured application")(run_command)


register_commands()


if __name__ == "__main__":
    app()
