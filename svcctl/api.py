"""Public service-control functions.

Each function builds (or accepts) a backend and performs exactly one
logical request. Boolean functions collapse every failure to False, so
"does not exist" and "manager unreachable" look the same to callers; use
``get_service_state`` when the difference matters.
"""

import logging

from svcctl.backend.base import ServiceBackend, get_backend
from svcctl.exceptions import SvcctlError
from svcctl.models.service import ServiceDetail, ServiceState, StartMode, StopOutcome
from svcctl.services.config import load_config

logger = logging.getLogger(__name__)


def _backend(backend: ServiceBackend | None) -> ServiceBackend:
    return backend if backend is not None else get_backend(load_config())


def _quiet_backend(backend: ServiceBackend | None) -> ServiceBackend | None:
    """Build the backend for a call that must not raise.

    Returns:
        The backend, or None if the configuration could not be loaded.
    """
    try:
        return _backend(backend)
    except SvcctlError as e:
        logger.error("Failed to set up service backend: %s", e)
        return None


def service_exists(name: str, backend: ServiceBackend | None = None) -> bool:
    """Check if a service exists."""
    resolved = _quiet_backend(backend)
    return resolved is not None and resolved.exists(name)


def service_is_running(name: str, backend: ServiceBackend | None = None) -> bool:
    """Check if a service is running."""
    resolved = _quiet_backend(backend)
    return resolved is not None and resolved.is_running(name)


def get_service_state(name: str, backend: ServiceBackend | None = None) -> ServiceState:
    """Query a service's state without conflating failure causes."""
    resolved = _quiet_backend(backend)
    if resolved is None:
        return ServiceState.UNAVAILABLE
    return resolved.state(name)


def list_service_names(backend: ServiceBackend | None = None) -> list[str]:
    """List every service known to the service manager.

    Returns:
        Service names in backend order.

    Raises:
        ConfigError: If the configuration cannot be loaded.
        ConnectionFailedError: If the manager cannot be reached.
        EnumerationFailedError: If the listing fails.
    """
    with _backend(backend).list_service_names() as names:
        return names.to_list()


def get_service_details(name: str, backend: ServiceBackend | None = None) -> ServiceDetail:
    """Get descriptive metadata for a service.

    Raises:
        ConfigError: If the configuration cannot be loaded.
        ConnectionFailedError: If the manager cannot be reached.
        ServiceNotFoundError: If the service does not exist.
    """
    return _backend(backend).get_details(name)


def start_service(name: str, backend: ServiceBackend | None = None) -> bool:
    """Start a service."""
    resolved = _quiet_backend(backend)
    return resolved is not None and resolved.start(name)


def stop_service(
    name: str, timeout: float | None = None, backend: ServiceBackend | None = None
) -> bool:
    """Stop a service and wait for it to stop.

    Returns:
        True only if the service was observed stopped within the timeout.
    """
    return stop_service_with_outcome(name, timeout, backend) is StopOutcome.STOPPED


def stop_service_with_outcome(
    name: str, timeout: float | None = None, backend: ServiceBackend | None = None
) -> StopOutcome:
    """Stop a service and report whether it stopped or timed out."""
    resolved = _quiet_backend(backend)
    if resolved is None:
        return StopOutcome.FAILED
    outcome = resolved.stop(name, timeout)
    logger.debug("Stop %s: %s", name, outcome.value)
    return outcome


def set_service_start_mode(
    name: str, mode: StartMode, backend: ServiceBackend | None = None
) -> bool:
    """Change a service's persisted start mode."""
    resolved = _quiet_backend(backend)
    return resolved is not None and resolved.set_start_mode(name, mode)


def get_service_start_mode(
    name: str, backend: ServiceBackend | None = None
) -> StartMode | None:
    """Read a service's persisted start mode."""
    resolved = _quiet_backend(backend)
    if resolved is None:
        return None
    return resolved.get_start_mode(name)
