"""List command for svcctl CLI."""

import click
from rich.table import Table

from svcctl.cli.output import backend_from_context, console


@click.command("list")
@click.option("--states", is_flag=True, help="Also show whether each service is running")
@click.pass_context
def list_services(ctx: click.Context, states: bool) -> None:
    """List services known to the service manager.

    Examples:
        svcctl list
        svcctl list --states
    """
    backend = backend_from_context(ctx)

    with backend.list_service_names() as names:
        if not names.count:
            console.print("[dim]No services found[/dim]")
            return

        table = Table(title=f"Services ({names.count})")
        table.add_column("Name", style="cyan")
        if states:
            table.add_column("Running")

        for name in names:
            if states:
                running = backend.is_running(name)
                table.add_row(name, "[green]yes[/green]" if running else "[red]no[/red]")
            else:
                table.add_row(name)

    console.print(table)
