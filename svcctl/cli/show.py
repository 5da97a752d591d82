"""Show command for svcctl CLI."""

import click
from rich.table import Table

from svcctl.cli.output import backend_from_context, console, warning
from svcctl.exceptions import ServiceNotFoundError
from svcctl.models.service import ServiceDetail


def _detail_table(detail: ServiceDetail) -> Table:
    """Render a detail record as a two-column table."""
    table = Table(title=detail.display_name, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Name", detail.name)
    table.add_row("Display name", detail.display_name)
    table.add_row("Executable", detail.executable)
    table.add_row("Type", detail.service_type)
    table.add_row("Description", detail.description)
    table.add_row("Account", detail.account)
    table.add_row("Running", "[green]yes[/green]" if detail.running else "[red]no[/red]")
    table.add_row("Start mode", detail.start_mode.value if detail.start_mode else "[dim]unknown[/dim]")
    return table


@click.command()
@click.argument("name")
@click.pass_context
def show(ctx: click.Context, name: str) -> None:
    """Show details for a service.

    Examples:
        svcctl show sshd
        svcctl show cron.service
    """
    backend = backend_from_context(ctx)
    service = backend.qualify_name(name)
    try:
        detail = backend.get_details(service)
    except ServiceNotFoundError:
        console.print(f"[red]Service not found:[/red] {service}")
        raise click.Abort() from None

    console.print(_detail_table(detail))
    if detail.is_partial:
        warning(f"Some fields could not be read: {', '.join(detail.missing_fields)}")
