"""Console helpers shared by svcctl commands."""

from pathlib import Path

import click
from rich.console import Console

from svcctl.backend.base import ServiceBackend, get_backend
from svcctl.services.config import load_config

console = Console()


def error(msg: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error:[/red] {msg}")


def warning(msg: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning:[/yellow] {msg}")


def info(msg: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{msg}[/dim]")


def success(msg: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {msg}")


def backend_from_context(ctx: click.Context) -> ServiceBackend:
    """Build the backend for this invocation.

    Args:
        ctx: Click context carrying the config path.

    Returns:
        ServiceBackend for the configured platform.
    """
    config_path: Path | None = ctx.obj.get("config_path") if ctx.obj else None
    config = load_config(config_path)
    try:
        return get_backend(config)
    except NotImplementedError as e:
        error(str(e))
        raise SystemExit(1) from e
