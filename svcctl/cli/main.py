"""Main CLI entry point for svcctl."""

import logging
import sys
from pathlib import Path

import click

from svcctl.cli.check import check
from svcctl.cli.config import config
from svcctl.cli.control import mode, start, stop
from svcctl.cli.list import list_services
from svcctl.cli.output import console
from svcctl.cli.show import show
from svcctl.exceptions import SvcctlError


def _setup_logging(debug: bool = False) -> None:
    """Configure logging to stderr."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to config file",
)
@click.option("--debug/--no-debug", default=False, help="Show debug information")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, debug: bool) -> None:
    """svcctl - Query and control system services.

    Works with systemd units on Linux and the Service Control Manager on Windows.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["debug"] = debug
    _setup_logging(debug)


@cli.command()
@click.pass_context
def help(ctx: click.Context) -> None:
    """Show this help message."""
    click.echo(ctx.parent.get_help())


# Register commands
cli.add_command(check)
cli.add_command(list_services, name="list")
cli.add_command(show)
cli.add_command(start)
cli.add_command(stop)
cli.add_command(mode)
cli.add_command(config)


def main() -> None:
    """Main entry point with error handling."""
    try:
        cli()
    except SvcctlError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        if "--debug" in sys.argv:
            raise
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
