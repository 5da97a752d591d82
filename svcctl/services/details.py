"""Helpers for assembling ServiceDetail records."""

import logging

from svcctl.models.service import (
    NAME_LIMIT,
    NOT_SPECIFIED,
    ServiceDefinition,
    ServiceDetail,
    StartMode,
    clip,
)

logger = logging.getLogger(__name__)


def display_name_for(name: str) -> str:
    """Derive a display name by dropping the trailing extension.

    Examples:
        display_name_for("sshd.service") -> "sshd"
        display_name_for("getty@tty1.service") -> "getty@tty1"
        display_name_for("Spooler") -> "Spooler"
    """
    stem, dot, _ = name.rpartition(".")
    return stem if dot else name


def or_not_specified(value: str | None) -> str:
    """Substitute the placeholder for missing or empty text."""
    return value if value else NOT_SPECIFIED


def detail_from_definition(
    name: str,
    definition: ServiceDefinition,
    running: bool = False,
    start_mode: StartMode | None = None,
) -> ServiceDetail:
    """Map parsed definition fields into a detail record."""
    detail = ServiceDetail(
        name=clip(name, NAME_LIMIT),
        display_name=clip(display_name_for(name), NAME_LIMIT),
        executable=or_not_specified(definition.exec_start),
        service_type=or_not_specified(definition.type),
        description=or_not_specified(definition.description),
        account=or_not_specified(definition.user),
        running=running,
        start_mode=start_mode,
    )
    log_partial(detail)
    return detail


def log_partial(detail: ServiceDetail) -> None:
    """Report fields that could not be populated."""
    if detail.is_partial:
        logger.info(
            "Partial details for %s, not specified: %s",
            detail.name,
            ", ".join(detail.missing_fields),
        )
