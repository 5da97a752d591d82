"""svcctl - query and control operating-system services.

One contract over systemd units on Linux and Service Control Manager
services on Windows.
"""

from svcctl.api import (
    get_service_details,
    get_service_start_mode,
    get_service_state,
    list_service_names,
    service_exists,
    service_is_running,
    set_service_start_mode,
    start_service,
    stop_service,
    stop_service_with_outcome,
)
from svcctl.models.service import (
    NOT_SPECIFIED,
    RunState,
    ServiceDetail,
    ServiceState,
    StartMode,
    StopOutcome,
)

__version__ = "0.1.0"

__all__ = [
    "NOT_SPECIFIED",
    "RunState",
    "ServiceDetail",
    "ServiceState",
    "StartMode",
    "StopOutcome",
    "get_service_details",
    "get_service_start_mode",
    "get_service_state",
    "list_service_names",
    "service_exists",
    "service_is_running",
    "set_service_start_mode",
    "start_service",
    "stop_service",
    "stop_service_with_outcome",
]
