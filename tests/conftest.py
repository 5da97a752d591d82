"""Pytest fixtures for svcctl tests."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from svcctl.backend.base import ServiceBackend
from svcctl.exceptions import ServiceNotFoundError
from svcctl.models.config import SvcctlConfig
from svcctl.models.service import (
    ServiceDetail,
    ServiceState,
    StartMode,
    StopOutcome,
)
from svcctl.services.details import display_name_for
from svcctl.services.enumeration import ServiceNameCollection, collect_service_names


@dataclass
class FakeService:
    """A service held by InMemoryBackend."""

    running: bool = False
    start_mode: StartMode = StartMode.DEMAND_START
    executable: str = "/usr/bin/true"
    description: str = ""
    # Polls needed before a stop is observed; None never stops
    stop_polls: int | None = 0
    calls: list[str] = field(default_factory=list)


class InMemoryBackend(ServiceBackend):
    """Backend over a dictionary of fake services."""

    suffix = ".service"

    def __init__(self, services: dict[str, FakeService] | None = None) -> None:
        super().__init__(SvcctlConfig(stopTimeout=0.05, pollInterval=0.001))
        self.services = services if services is not None else {}
        self.reachable = True

    def _get(self, name: str) -> FakeService:
        if name not in self.services:
            raise ServiceNotFoundError(name)
        return self.services[name]

    def exists(self, name: str) -> bool:
        return self.reachable and name in self.services

    def state(self, name: str) -> ServiceState:
        if not self.reachable:
            return ServiceState.UNAVAILABLE
        if name not in self.services:
            return ServiceState.NOT_FOUND
        if self.services[name].running:
            return ServiceState.RUNNING
        return ServiceState.NOT_RUNNING

    def list_service_names(self) -> ServiceNameCollection:
        return collect_service_names(list(self.services) + ["dbus.socket"], self.suffix)

    def get_details(self, name: str) -> ServiceDetail:
        service = self._get(name)
        return ServiceDetail(
            name=name,
            display_name=display_name_for(name),
            executable=service.executable,
            description=service.description or "Not specified",
            running=service.running,
            start_mode=service.start_mode,
        )

    def start(self, name: str) -> bool:
        if not self.exists(name):
            return False
        self.services[name].running = True
        self.services[name].calls.append("start")
        return True

    def stop(self, name: str, timeout: float | None = None) -> StopOutcome:
        if not self.exists(name):
            return StopOutcome.FAILED
        service = self.services[name]
        service.calls.append("stop")
        if service.stop_polls is None:
            return StopOutcome.TIMED_OUT
        service.running = False
        return StopOutcome.STOPPED

    def set_start_mode(self, name: str, mode: StartMode) -> bool:
        if not self.exists(name):
            return False
        self.services[name].start_mode = mode
        return True

    def get_start_mode(self, name: str) -> StartMode | None:
        if not self.exists(name):
            return None
        return self.services[name].start_mode

    def qualify_name(self, name: str) -> str:
        return name if "." in name else f"{name}{self.suffix}"


@pytest.fixture
def backend() -> InMemoryBackend:
    """Create an in-memory backend with a few services.

    Returns:
        InMemoryBackend holding sshd (running), cron (stopped) and hung
        (never stops).
    """
    return InMemoryBackend(
        {
            "sshd.service": FakeService(
                running=True,
                start_mode=StartMode.AUTO_START,
                executable="/usr/sbin/sshd -D",
                description="OpenBSD Secure Shell server",
            ),
            "cron.service": FakeService(),
            "hung.service": FakeService(running=True, stop_polls=None),
        }
    )


@pytest.fixture
def unit_file(tmp_path: Path) -> Path:
    """Write a typical systemd unit file.

    Returns:
        Path to the unit file.
    """
    content = """\
[Unit]
Description=OpenBSD Secure Shell server
After=network.target auditd.service

[Service]
# Run in the foreground
Type=notify
ExecStart=/usr/sbin/sshd -D $SSHD_OPTS
User=root
Restart=on-failure

[Install]
WantedBy=multi-user.target
"""
    path = tmp_path / "ssh.service"
    path.write_text(content, encoding="utf-8")
    return path
