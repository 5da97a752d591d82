"""Service models for svcctl."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Placeholder for any detail field the backend could not supply
NOT_SPECIFIED = "Not specified"

# Field capacities, in characters
NAME_LIMIT = 255
TYPE_LIMIT = 1023
COMMAND_LIMIT = 1023
DESCRIPTION_LIMIT = 4191
ACCOUNT_LIMIT = 255


def clip(value: str, limit: int) -> str:
    """Cut a value at a field capacity.

    Args:
        value: Text to store.
        limit: Maximum number of characters kept.

    Returns:
        The value, silently truncated to ``limit`` characters.
    """
    return value[:limit]


class RunState(str, Enum):
    """Observed run state of a service."""

    RUNNING = "running"
    NOT_RUNNING = "not-running"


class ServiceState(str, Enum):
    """Run state that keeps "does not exist" and "backend error" apart."""

    RUNNING = "running"
    NOT_RUNNING = "not-running"
    NOT_FOUND = "not-found"
    UNAVAILABLE = "unavailable"

    @property
    def exists(self) -> bool:
        """Whether the service was resolved."""
        return self in (ServiceState.RUNNING, ServiceState.NOT_RUNNING)

    def run_state(self) -> RunState:
        """Collapse to the two-valued run state."""
        if self is ServiceState.RUNNING:
            return RunState.RUNNING
        return RunState.NOT_RUNNING


class StartMode(str, Enum):
    """Persisted start mode of a service."""

    AUTO_START = "auto"
    DEMAND_START = "demand"
    DISABLED = "disabled"

    @property
    def scm_code(self) -> int:
        """Start type value used by the Windows Service Control Manager."""
        return _SCM_CODES[self]

    @classmethod
    def from_scm_code(cls, code: int) -> "StartMode | None":
        """Map an SCM start type to a start mode.

        Boot and system start types have no counterpart and map to None.
        """
        for mode, value in _SCM_CODES.items():
            if value == code:
                return mode
        return None


_SCM_CODES = {
    StartMode.AUTO_START: 2,
    StartMode.DEMAND_START: 3,
    StartMode.DISABLED: 4,
}


class StopOutcome(str, Enum):
    """Result of a bounded stop request."""

    STOPPED = "stopped"
    TIMED_OUT = "timed-out"
    FAILED = "failed"


class ServiceDefinition(BaseModel):
    """Recognized fields of a key=value service definition file.

    Empty text means the key was not present.
    """

    type: str = ""
    exec_start: str = ""
    description: str = ""
    user: str = ""


class ServiceDetail(BaseModel):
    """Descriptive metadata for one service, built fresh per query."""

    name: str = Field(description="Service name as known to the backend")
    display_name: str = Field(
        default=NOT_SPECIFIED, alias="displayName", description="Human display name"
    )
    executable: str = Field(default=NOT_SPECIFIED, description="Executable command line")
    service_type: str = Field(
        default=NOT_SPECIFIED, alias="serviceType", description="Human-readable service type"
    )
    description: str = Field(default=NOT_SPECIFIED)
    account: str = Field(default=NOT_SPECIFIED, description="Run-as account")

    # Status Query result, and persisted start mode when known
    running: bool = False
    start_mode: StartMode | None = Field(default=None, alias="startMode")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def missing_fields(self) -> list[str]:
        """Names of descriptive fields left at the placeholder."""
        fields = ("display_name", "executable", "service_type", "description", "account")
        return [f for f in fields if getattr(self, f) == NOT_SPECIFIED]

    @property
    def is_partial(self) -> bool:
        """Whether one or more descriptive fields could not be populated."""
        return bool(self.missing_fields)
