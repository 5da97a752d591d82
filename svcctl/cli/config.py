"""Config CLI commands for svcctl."""

from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.tree import Tree

from svcctl.cli.output import console, error
from svcctl.models.config import SvcctlConfig
from svcctl.services.config import ConfigService


def _parse_value(value: str) -> Any:
    """Parse a string value into appropriate Python type.

    Args:
        value: String value from command line.

    Returns:
        Parsed value (bool, int, float, or string).
    """
    # Boolean
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    # Number
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            pass

    return value


def _format_value(value: Any) -> str:
    """Format a value for display."""
    if value is None:
        return "[dim]not set[/dim]"
    if isinstance(value, bool):
        return "[green]true[/green]" if value else "[red]false[/red]"
    return str(value)


def _config_service(ctx: click.Context) -> ConfigService:
    config_path: Path | None = ctx.obj.get("config_path") if ctx.obj else None
    return ConfigService(config_path)


def _known_keys() -> list[str]:
    """Config keys as written in the file (camelCase aliases)."""
    return [field.alias or name for name, field in SvcctlConfig.model_fields.items()]


@click.group()
def config() -> None:
    """View and modify configuration."""
    pass


@config.command(name="show")
@click.argument("key", required=False)
@click.pass_context
def config_show(ctx: click.Context, key: str | None) -> None:
    """Show effective configuration values.

    If KEY is provided, show only that value. Otherwise show all config.

    Examples:
        svcctl config show
        svcctl config show stopTimeout
    """
    service = _config_service(ctx)
    effective = service.load().model_dump(by_alias=True)

    if key:
        if key not in effective:
            console.print(f"[yellow]Unknown key '{key}'[/yellow]")
            return
        console.print(f"{key}: {_format_value(effective[key])}")
        return

    source = service.config_path or "built-in defaults"
    tree = Tree(f"[bold]Configuration[/bold] [dim]({source})[/dim]")
    for name, value in effective.items():
        tree.add(f"[cyan]{name}[/cyan]: {_format_value(value)}")
    console.print(tree)


@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set a configuration value.

    Examples:
        svcctl config set busScope user
        svcctl config set stopTimeout 60
    """
    if key not in _known_keys():
        error(f"Unknown key '{key}'. Known keys: {', '.join(_known_keys())}")
        raise SystemExit(1)

    service = _config_service(ctx)
    config_data = service.get_raw()
    parsed_value = _parse_value(value)
    config_data[key] = parsed_value

    try:
        SvcctlConfig(**config_data)
    except ValidationError as e:
        error(f"Invalid value for {key}: {e.errors()[0]['msg']}")
        raise SystemExit(1) from e

    path = service.set_raw(config_data)
    console.print(f"[green]Set {key} = {_format_value(parsed_value)}[/green]")
    console.print(f"[dim]Saved to {path}[/dim]")


@config.command(name="unset")
@click.argument("key")
@click.pass_context
def config_unset(ctx: click.Context, key: str) -> None:
    """Remove a configuration value, restoring its default.

    Examples:
        svcctl config unset stopTimeout
    """
    service = _config_service(ctx)
    config_data = service.get_raw()

    if key in config_data:
        del config_data[key]
        service.set_raw(config_data)
        console.print(f"[green]Removed {key}[/green]")
    else:
        console.print(f"[yellow]Key '{key}' not found[/yellow]")
