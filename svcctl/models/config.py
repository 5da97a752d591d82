"""Configuration model for svcctl."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SvcctlConfig(BaseModel):
    """Settings shared by every backend call."""

    backend: Literal["auto", "systemd", "windows"] = Field(
        default="auto", description="Backend to use; auto picks one for the running platform"
    )
    bus_scope: Literal["system", "user"] = Field(
        default="system", alias="busScope", description="systemd manager to talk to"
    )
    unit_suffix: str = Field(
        default=".service", alias="unitSuffix", description="Suffix of service units"
    )
    stop_timeout: float = Field(
        default=30.0, gt=0, alias="stopTimeout", description="Seconds to wait for a stop"
    )
    poll_interval: float = Field(
        default=0.05, gt=0, alias="pollInterval", description="Seconds between stop polls"
    )
    command_timeout: float = Field(
        default=10.0, gt=0, alias="commandTimeout", description="Seconds per backend tool call"
    )

    model_config = ConfigDict(populate_by_name=True)
