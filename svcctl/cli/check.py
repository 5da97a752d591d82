"""Check command for svcctl CLI."""

import click

from svcctl.cli.output import backend_from_context, console
from svcctl.models.service import ServiceState


@click.command()
@click.argument("name", required=False)
@click.pass_context
def check(ctx: click.Context, name: str | None) -> None:
    """Check whether a service exists and is running.

    NAME is prompted for when omitted. On systemd a bare name gets the
    unit suffix appended.

    Examples:
        svcctl check sshd
        svcctl check Spooler
    """
    if not name:
        name = click.prompt("Service name").strip()

    backend = backend_from_context(ctx)
    service = backend.qualify_name(name)
    state = backend.state(service)

    if state is ServiceState.UNAVAILABLE:
        console.print(f"[red]Could not query service manager for {service}[/red]")
        raise SystemExit(1)

    if not state.exists:
        console.print(f"[red]No service found with name {name}[/red]")
        raise SystemExit(1)

    console.print(f"[green]Service {service} exists[/green]")
    if state is ServiceState.RUNNING:
        console.print("[green]Service is running[/green]")
    else:
        console.print("[red]Service is not running[/red]")
