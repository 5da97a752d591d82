"""Start, stop and start-mode commands for svcctl CLI."""

import click

from svcctl.cli.output import backend_from_context, console, error, info, success
from svcctl.models.service import StartMode, StopOutcome


@click.command()
@click.argument("name")
@click.pass_context
def start(ctx: click.Context, name: str) -> None:
    """Start a service.

    Examples:
        svcctl start nginx
    """
    backend = backend_from_context(ctx)
    service = backend.qualify_name(name)

    if backend.start(service):
        success(f"Started {service}")
    else:
        error(f"Failed to start {service}")
        raise SystemExit(1)


@click.command()
@click.argument("name")
@click.option(
    "--timeout",
    "-t",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds to wait for the service to stop (default: stopTimeout from config)",
)
@click.pass_context
def stop(ctx: click.Context, name: str, timeout: float | None) -> None:
    """Stop a service and wait until it has stopped.

    Examples:
        svcctl stop nginx
        svcctl stop nginx --timeout 5
    """
    backend = backend_from_context(ctx)
    service = backend.qualify_name(name)

    outcome = backend.stop(service, timeout)
    if outcome is StopOutcome.STOPPED:
        success(f"Stopped {service}")
    elif outcome is StopOutcome.TIMED_OUT:
        error(f"Timed out waiting for {service} to stop")
        info("The stop request was sent; the service may still be shutting down.")
        raise SystemExit(1)
    else:
        error(f"Failed to stop {service}")
        raise SystemExit(1)


@click.command()
@click.argument("name")
@click.argument(
    "new_mode",
    required=False,
    type=click.Choice([m.value for m in StartMode]),
)
@click.pass_context
def mode(ctx: click.Context, name: str, new_mode: str | None) -> None:
    """Show or change a service's start mode.

    NEW_MODE options:
        auto      - Start automatically at boot
        demand    - Start only when requested
        disabled  - Never start

    Examples:
        svcctl mode nginx
        svcctl mode nginx disabled
    """
    backend = backend_from_context(ctx)
    service = backend.qualify_name(name)

    if new_mode is None:
        current = backend.get_start_mode(service)
        if current is None:
            error(f"Could not read start mode of {service}")
            raise SystemExit(1)
        console.print(f"{service}: [cyan]{current.value}[/cyan]")
        return

    target = StartMode(new_mode)
    if backend.set_start_mode(service, target):
        success(f"Start mode of {service} set to {target.value}")
    else:
        error(f"Failed to set start mode of {service}")
        raise SystemExit(1)
