"""Base service backend interface."""

import platform
from abc import ABC, abstractmethod

from svcctl.models.config import SvcctlConfig
from svcctl.models.service import ServiceDetail, ServiceState, StartMode, StopOutcome
from svcctl.services.enumeration import ServiceNameCollection


class ServiceBackend(ABC):
    """Abstract base class for platform service managers.

    Every public method acquires its own connection to the service manager
    and releases it before returning, so one backend instance may be shared
    between threads.
    """

    #: Suffix that marks a service object; empty accepts every name.
    suffix: str = ""

    def __init__(self, config: SvcctlConfig | None = None) -> None:
        """Initialize the backend.

        Args:
            config: Settings to use. Defaults to built-in defaults.
        """
        self.config = config or SvcctlConfig()

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Check if the service can be resolved.

        Returns:
            True if the service exists. Any failure returns False.
        """
        pass

    @abstractmethod
    def state(self, name: str) -> ServiceState:
        """Query the run state, keeping failure causes apart.

        Returns:
            ServiceState; never raises.
        """
        pass

    def is_running(self, name: str) -> bool:
        """Check if the service is running.

        Returns:
            True only when the service was resolved and reports running.
        """
        return self.state(name) is ServiceState.RUNNING

    @abstractmethod
    def list_service_names(self) -> ServiceNameCollection:
        """Enumerate every service known to the manager.

        Returns:
            Owned collection of names matching the service suffix.

        Raises:
            ConnectionFailedError: If the manager cannot be reached.
            EnumerationFailedError: If the listing fails.
        """
        pass

    @abstractmethod
    def get_details(self, name: str) -> ServiceDetail:
        """Collect descriptive metadata for a service.

        Returns:
            ServiceDetail with "Not specified" for each unavailable field.

        Raises:
            ConnectionFailedError: If the manager cannot be reached.
            ServiceNotFoundError: If the service cannot be resolved.
        """
        pass

    @abstractmethod
    def start(self, name: str) -> bool:
        """Start the service.

        Returns:
            True if the start request was accepted.
        """
        pass

    @abstractmethod
    def stop(self, name: str, timeout: float | None = None) -> StopOutcome:
        """Stop the service and wait until it is observed stopped.

        Args:
            name: Service to stop.
            timeout: Seconds to wait; defaults to the configured stop timeout.

        Returns:
            StopOutcome of the request.
        """
        pass

    @abstractmethod
    def set_start_mode(self, name: str, mode: StartMode) -> bool:
        """Change the persisted start mode.

        Returns:
            True if the change was applied.
        """
        pass

    @abstractmethod
    def get_start_mode(self, name: str) -> StartMode | None:
        """Read the persisted start mode.

        Returns:
            StartMode, or None if unknown or not representable.
        """
        pass

    def qualify_name(self, name: str) -> str:
        """Turn a name typed by a user into the backend's service name."""
        return name

    def stop_timeout(self, timeout: float | None) -> float:
        """Resolve the effective stop timeout."""
        return self.config.stop_timeout if timeout is None else timeout


def get_backend(config: SvcctlConfig | None = None) -> ServiceBackend:
    """Get the service backend for the configured or current platform.

    Args:
        config: Settings to use. Defaults to built-in defaults.

    Returns:
        ServiceBackend instance.

    Raises:
        NotImplementedError: If the platform is not supported.
    """
    config = config or SvcctlConfig()
    choice = config.backend
    if choice == "auto":
        system = platform.system()
        if system == "Linux":
            choice = "systemd"
        elif system == "Windows":
            choice = "windows"
        else:
            raise NotImplementedError(f"Service management not supported on {system}")

    if choice == "systemd":
        from svcctl.backend.systemd import SystemdBackend

        return SystemdBackend(config)

    from svcctl.backend.windows import WindowsBackend

    return WindowsBackend(config)
