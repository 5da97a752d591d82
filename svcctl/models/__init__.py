"""Pydantic data models."""

from svcctl.models.config import SvcctlConfig
from svcctl.models.service import (
    NOT_SPECIFIED,
    RunState,
    ServiceDefinition,
    ServiceDetail,
    ServiceState,
    StartMode,
    StopOutcome,
)

__all__ = [
    "NOT_SPECIFIED",
    "RunState",
    "ServiceDefinition",
    "ServiceDetail",
    "ServiceState",
    "StartMode",
    "StopOutcome",
    "SvcctlConfig",
]
