"""Custom exceptions for svcctl."""


class SvcctlError(Exception):
    """Base exception for svcctl errors."""

    pass


class ConfigError(SvcctlError):
    """Raised when the configuration file cannot be read or is invalid."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path:
            message = f"{message} ({path})"
        super().__init__(message)


class ConnectionFailedError(SvcctlError):
    """Raised when the platform service manager cannot be reached."""

    pass


class ServiceNotFoundError(SvcctlError):
    """Raised when the service manager does not know the named service."""

    def __init__(self, name: str, reason: str | None = None) -> None:
        self.name = name
        self.reason = reason
        msg = f"Service not found: {name}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class QueryFailedError(SvcctlError):
    """Raised when a property, status or config read fails."""

    pass


class EnumerationFailedError(SvcctlError):
    """Raised when the list of services cannot be retrieved."""

    pass


class AllocationFailedError(EnumerationFailedError):
    """Raised when the name collection cannot grow or take ownership of a name.

    Any names accumulated before the failure have already been released.
    """

    def __init__(self, message: str, accumulated: int = 0) -> None:
        self.accumulated = accumulated
        super().__init__(message)
