"""Unit tests for the Windows Service Control Manager backend.

FakeWin32Service mirrors the parts of pywin32's win32service module the
backend uses, and records every handle it opens and closes.
"""

from typing import Any

import pytest

from svcctl.backend.windows import OWN_PROCESS_LABEL, SHARED_PROCESS_LABEL, WindowsBackend
from svcctl.exceptions import (
    ConnectionFailedError,
    EnumerationFailedError,
    QueryFailedError,
    ServiceNotFoundError,
)
from svcctl.models.config import SvcctlConfig
from svcctl.models.service import NOT_SPECIFIED, ServiceState, StartMode, StopOutcome


class FakeWinError(Exception):
    """Stands in for pywintypes.error."""

    def __init__(self, winerror: int, funcname: str, strerror: str) -> None:
        super().__init__(winerror, funcname, strerror)
        self.winerror = winerror
        self.funcname = funcname
        self.strerror = strerror


class FakeWin32Service:
    """Minimal win32service replacement backed by a dictionary."""

    error = FakeWinError

    SC_MANAGER_CONNECT = 0x0001
    SC_MANAGER_ENUMERATE_SERVICE = 0x0004
    SERVICE_QUERY_CONFIG = 0x0001
    SERVICE_CHANGE_CONFIG = 0x0002
    SERVICE_QUERY_STATUS = 0x0004
    SERVICE_ENUMERATE_DEPENDENTS = 0x0008
    SERVICE_START = 0x0010
    SERVICE_STOP = 0x0020
    SERVICE_WIN32_OWN_PROCESS = 0x10
    SERVICE_WIN32_SHARE_PROCESS = 0x20
    SERVICE_WIN32 = 0x30
    SERVICE_STATE_ALL = 0x3
    SERVICE_STOPPED = 1
    SERVICE_STOP_PENDING = 3
    SERVICE_RUNNING = 4
    SERVICE_CONTROL_STOP = 1
    SERVICE_NO_CHANGE = 0xFFFFFFFF
    SERVICE_CONFIG_DESCRIPTION = 1

    def __init__(self, services: dict[str, dict[str, Any]]) -> None:
        self.services = services
        self.open_handles: set[int] = set()
        self.available = True
        self.failing: set[str] = set()
        self._next = 1

    def _handle(self) -> int:
        self._next += 1
        self.open_handles.add(self._next)
        return self._next

    def _check(self, call: str) -> None:
        if call in self.failing:
            raise FakeWinError(5, call, "Access is denied.")

    def OpenSCManager(self, machine: Any, database: Any, access: int) -> int:
        if not self.available:
            raise FakeWinError(5, "OpenSCManager", "Access is denied.")
        return self._handle()

    def OpenService(self, scm: int, name: str, access: int) -> tuple[int, str]:
        assert scm in self.open_handles
        self._check("OpenService")
        if name not in self.services:
            raise FakeWinError(1060, "OpenService", "The specified service does not exist.")
        return (self._handle(), name)

    def CloseServiceHandle(self, handle: Any) -> None:
        key = handle[0] if isinstance(handle, tuple) else handle
        self.open_handles.remove(key)

    def QueryServiceStatusEx(self, handle: tuple[int, str]) -> dict[str, int]:
        self._check("QueryServiceStatusEx")
        service = self.services[handle[1]]
        if service["state"] == self.SERVICE_STOP_PENDING:
            service["polls"] -= 1
            if service["polls"] <= 0 and not service.get("hang"):
                service["state"] = self.SERVICE_STOPPED
        return {"ServiceType": service["type"], "CurrentState": service["state"], "ProcessId": 0}

    def EnumServicesStatus(self, scm: int, type_: int, state: int) -> tuple:
        self._check("EnumServicesStatus")
        return tuple(
            (name, s["display"], (s["type"], s["state"], 0, 0, 0, 0, 0))
            for name, s in self.services.items()
        )

    def StartService(self, handle: tuple[int, str], args: Any) -> None:
        self._check("StartService")
        self.services[handle[1]]["state"] = self.SERVICE_RUNNING

    def ControlService(self, handle: tuple[int, str], control: int) -> tuple:
        self._check("ControlService")
        service = self.services[handle[1]]
        service["state"] = self.SERVICE_STOP_PENDING
        service.setdefault("polls", 2)
        return (service["type"], service["state"], 0, 0, 0, 0, 0)

    def ChangeServiceConfig(self, handle: tuple[int, str], service_type: int, start_type: int, *rest: Any) -> None:
        self._check("ChangeServiceConfig")
        assert service_type == self.SERVICE_NO_CHANGE
        self.services[handle[1]]["start"] = start_type

    def QueryServiceConfig(self, handle: tuple[int, str]) -> tuple:
        self._check("QueryServiceConfig")
        s = self.services[handle[1]]
        return (s["type"], s["start"], 1, s["binary"], "", 0, [], s["account"], s["display"])

    def QueryServiceConfig2(self, handle: tuple[int, str], level: int) -> str:
        self._check("QueryServiceConfig2")
        return self.services[handle[1]].get("description")

    def GetServiceDisplayName(self, scm: int, name: str) -> str:
        self._check("GetServiceDisplayName")
        return self.services[name]["display"]


@pytest.fixture
def win32() -> FakeWin32Service:
    """Create a fake SCM with two services."""
    return FakeWin32Service(
        {
            "Spooler": {
                "display": "Print Spooler",
                "type": 0x10,
                "state": 4,
                "start": 2,
                "binary": "C:\\Windows\\System32\\spoolsv.exe",
                "account": "LocalSystem",
                "description": "Loads files to memory for later printing",
            },
            "W32Time": {
                "display": "Windows Time",
                "type": 0x20,
                "state": 1,
                "start": 3,
                "binary": "C:\\Windows\\system32\\svchost.exe -k LocalService",
                "account": "NT AUTHORITY\\LocalService",
            },
        }
    )


@pytest.fixture
def windows(win32: FakeWin32Service) -> WindowsBackend:
    """Create a Windows backend over the fake SCM."""
    return WindowsBackend(SvcctlConfig(stopTimeout=0.5, pollInterval=0.001), api=win32)


class TestWindowsStatus:
    """Tests for exists/is_running/state."""

    def test_exists(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        assert windows.exists("Spooler")
        assert not windows.exists("Nope")
        assert not win32.open_handles

    def test_is_running(self, windows: WindowsBackend) -> None:
        assert windows.is_running("Spooler")
        assert not windows.is_running("W32Time")
        assert not windows.is_running("Nope")

    def test_state(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        assert windows.state("Spooler") is ServiceState.RUNNING
        assert windows.state("W32Time") is ServiceState.NOT_RUNNING
        assert windows.state("Nope") is ServiceState.NOT_FOUND
        win32.available = False
        assert windows.state("Spooler") is ServiceState.UNAVAILABLE

    def test_status_query_failure(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        """A failed status query should read as not running and release handles."""
        win32.failing.add("QueryServiceStatusEx")
        assert windows.is_running("Spooler") is False
        assert not win32.open_handles

    def test_access_denied_is_unavailable(
        self, windows: WindowsBackend, win32: FakeWin32Service
    ) -> None:
        """An OpenService permission error should not read as a missing service."""
        win32.failing.add("OpenService")
        assert windows.state("Spooler") is ServiceState.UNAVAILABLE
        assert windows.exists("Spooler") is False
        with pytest.raises(QueryFailedError):
            windows.get_details("Spooler")
        assert not win32.open_handles

    def test_unavailable_returns_false(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        win32.available = False
        assert windows.exists("Spooler") is False
        assert windows.is_running("Spooler") is False


class TestWindowsEnumeration:
    """Tests for list_service_names()."""

    def test_lists_all_services(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        with windows.list_service_names() as names:
            assert names.to_list() == ["Spooler", "W32Time"]
        assert not win32.open_handles

    def test_enumeration_failure(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        win32.failing.add("EnumServicesStatus")
        with pytest.raises(EnumerationFailedError):
            windows.list_service_names()
        assert not win32.open_handles

    def test_manager_unavailable(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        win32.available = False
        with pytest.raises(ConnectionFailedError):
            windows.list_service_names()


class TestWindowsDetails:
    """Tests for get_details()."""

    def test_native_config(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        detail = windows.get_details("Spooler")

        assert detail.name == "Spooler"
        assert detail.display_name == "Print Spooler"
        assert detail.executable == "C:\\Windows\\System32\\spoolsv.exe"
        assert detail.service_type == OWN_PROCESS_LABEL
        assert detail.account == "LocalSystem"
        assert detail.description == "Loads files to memory for later printing"
        assert detail.running is True
        assert detail.start_mode is StartMode.AUTO_START
        assert not win32.open_handles

    def test_shared_process_without_description(self, windows: WindowsBackend) -> None:
        detail = windows.get_details("W32Time")

        assert detail.service_type == SHARED_PROCESS_LABEL
        assert detail.description == NOT_SPECIFIED
        assert detail.missing_fields == ["description"]

    def test_sub_query_failures_are_best_effort(
        self, windows: WindowsBackend, win32: FakeWin32Service
    ) -> None:
        """A failing sub-query should leave only its own fields unset."""
        win32.failing.update({"QueryServiceConfig", "GetServiceDisplayName"})
        detail = windows.get_details("Spooler")

        assert detail.executable == NOT_SPECIFIED
        assert detail.account == NOT_SPECIFIED
        assert detail.display_name == "Spooler"
        assert detail.service_type == OWN_PROCESS_LABEL
        assert detail.description == "Loads files to memory for later printing"
        assert not win32.open_handles

    def test_unknown_service(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        with pytest.raises(ServiceNotFoundError):
            windows.get_details("Nope")
        assert not win32.open_handles


class TestWindowsControl:
    """Tests for start/stop/start mode."""

    def test_start(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        assert windows.start("W32Time")
        assert windows.is_running("W32Time")
        assert not win32.open_handles

    def test_start_failure(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        win32.failing.add("StartService")
        assert not windows.start("W32Time")
        assert not win32.open_handles

    def test_start_unknown(self, windows: WindowsBackend) -> None:
        assert not windows.start("Nope")

    def test_stop_polls_until_stopped(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        assert windows.stop("Spooler") is StopOutcome.STOPPED
        assert win32.services["Spooler"]["state"] == win32.SERVICE_STOPPED
        assert not win32.open_handles

    def test_stop_already_stopped(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        """Stopping a stopped service should succeed without a control request."""
        win32.failing.add("ControlService")
        assert windows.stop("W32Time") is StopOutcome.STOPPED

    def test_stop_while_stop_pending(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        """A second stop should wait on the pending one without a new request."""
        win32.services["Spooler"].update(state=win32.SERVICE_STOP_PENDING, polls=2)
        win32.failing.add("ControlService")
        assert windows.stop("Spooler") is StopOutcome.STOPPED
        assert not win32.open_handles

    def test_stop_times_out(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        win32.services["Spooler"]["hang"] = True
        assert windows.stop("Spooler", timeout=0.01) is StopOutcome.TIMED_OUT
        assert not win32.open_handles

    def test_stop_rejected(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        win32.failing.add("ControlService")
        assert windows.stop("Spooler") is StopOutcome.FAILED
        assert not win32.open_handles

    @pytest.mark.parametrize("mode", list(StartMode))
    def test_start_mode_round_trip(self, windows: WindowsBackend, mode: StartMode) -> None:
        assert windows.set_start_mode("W32Time", mode)
        assert windows.get_start_mode("W32Time") is mode

    def test_start_mode_failure(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        win32.failing.add("ChangeServiceConfig")
        assert not windows.set_start_mode("W32Time", StartMode.DISABLED)
        assert windows.get_start_mode("W32Time") is StartMode.DEMAND_START
        assert not win32.open_handles

    def test_boot_start_has_no_mode(self, windows: WindowsBackend, win32: FakeWin32Service) -> None:
        win32.services["W32Time"]["start"] = 0
        assert windows.get_start_mode("W32Time") is None
