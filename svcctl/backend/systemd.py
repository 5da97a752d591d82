"""Linux systemd backend.

Talks to the systemd manager over D-Bus through ``busctl``. Each public
call opens its own bus connection and closes it before returning.
"""

import json
import logging
import shutil
import subprocess
import time
from typing import Any

from svcctl.backend.base import ServiceBackend
from svcctl.exceptions import (
    ConnectionFailedError,
    EnumerationFailedError,
    QueryFailedError,
    ServiceNotFoundError,
    SvcctlError,
)
from svcctl.models.config import SvcctlConfig
from svcctl.models.service import (
    ServiceDefinition,
    ServiceDetail,
    ServiceState,
    StartMode,
    StopOutcome,
)
from svcctl.services.definition import parse_definition_file
from svcctl.services.details import detail_from_definition
from svcctl.services.enumeration import ServiceNameCollection, collect_service_names

logger = logging.getLogger(__name__)

# Bus names
DESTINATION = "org.freedesktop.systemd1"
MANAGER_PATH = "/org/freedesktop/systemd1"
MANAGER_INTERFACE = "org.freedesktop.systemd1.Manager"
UNIT_INTERFACE = "org.freedesktop.systemd1.Unit"
DBUS_NAME = "org.freedesktop.DBus"
DBUS_PATH = "/org/freedesktop/DBus"

UNIT_TYPES = (
    ".service",
    ".socket",
    ".target",
    ".timer",
    ".mount",
    ".automount",
    ".path",
    ".device",
    ".swap",
    ".slice",
    ".scope",
)

ACTIVE_STATE = "active"
STOPPED_STATES = frozenset({"inactive", "failed"})

# Markers of "no such unit" in busctl error output
NOT_FOUND_MARKERS = ("NoSuchUnit", "not loaded", "not found")

# GetUnitFileState values that map to something other than DemandStart
UNIT_FILE_MODES = {
    "enabled": StartMode.AUTO_START,
    "enabled-runtime": StartMode.AUTO_START,
    "masked": StartMode.DISABLED,
    "masked-runtime": StartMode.DISABLED,
}

# Unit-file calls per start mode: (method, signature, flags)
START_MODE_STEPS: dict[StartMode, list[tuple[str, str, tuple[bool, ...]]]] = {
    StartMode.AUTO_START: [
        ("UnmaskUnitFiles", "asb", (False,)),
        ("EnableUnitFiles", "asbb", (False, True)),
    ],
    StartMode.DEMAND_START: [
        ("UnmaskUnitFiles", "asb", (False,)),
        ("DisableUnitFiles", "asb", (False,)),
    ],
    StartMode.DISABLED: [
        ("DisableUnitFiles", "asb", (False,)),
        ("MaskUnitFiles", "asbb", (False, True)),
    ],
}


def _is_not_found(message: str) -> bool:
    return any(marker in message for marker in NOT_FOUND_MARKERS)


class SystemdBus:
    """Scoped connection to the systemd manager.

    Example:
        with SystemdBus("system") as bus:
            unit_path = bus.get_unit("sshd.service")
            print(bus.active_state(unit_path))
    """

    def __init__(self, scope: str = "system", timeout: float = 10.0) -> None:
        """Initialize an unopened connection.

        Args:
            scope: "system" or "user" manager.
            timeout: Seconds allowed per busctl invocation.
        """
        self.scope = scope
        self.timeout = timeout
        self._busctl: str | None = None

    @property
    def is_open(self) -> bool:
        """Whether the connection is usable."""
        return self._busctl is not None

    def open(self) -> "SystemdBus":
        """Connect to the bus and check that the manager is present.

        Raises:
            ConnectionFailedError: If busctl is missing or the bus is unreachable.
        """
        busctl = shutil.which("busctl")
        if busctl is None:
            raise ConnectionFailedError("busctl not found; is systemd installed?")

        self._busctl = busctl
        try:
            self._run("call", DBUS_NAME, DBUS_PATH, DBUS_NAME, "GetNameOwner", "s", DESTINATION)
        except SvcctlError as e:
            self._busctl = None
            raise ConnectionFailedError(f"Failed to connect to {self.scope} bus: {e}") from e
        return self

    def close(self) -> None:
        """Release the connection."""
        self._busctl = None

    def __enter__(self) -> "SystemdBus":
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _run(self, verb: str, *args: str) -> Any:
        """Run one busctl verb and decode its JSON payload."""
        if self._busctl is None:
            raise ConnectionFailedError("Bus connection is not open")

        cmd = [self._busctl, f"--{self.scope}", "--json=short", verb, *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise QueryFailedError(f"busctl {verb} timed out after {self.timeout}s") from e
        except OSError as e:
            raise QueryFailedError(f"Failed to run busctl: {e}") from e

        if result.returncode != 0:
            message = result.stderr.strip() or f"busctl {verb} exited with {result.returncode}"
            raise QueryFailedError(message)

        if not result.stdout.strip():
            return None
        try:
            return json.loads(result.stdout)["data"]
        except (ValueError, KeyError, TypeError) as e:
            raise QueryFailedError(f"Unexpected busctl output: {result.stdout[:200]!r}") from e

    def call(self, path: str, interface: str, method: str, signature: str = "", *args: str) -> list[Any]:
        """Call a manager method.

        Returns:
            The method's return values.
        """
        params = [signature, *args] if signature else []
        data = self._run("call", DESTINATION, path, interface, method, *params)
        return data or []

    def get_property(self, path: str, interface: str, name: str) -> Any:
        """Read one property of an object."""
        return self._run("get-property", DESTINATION, path, interface, name)

    def get_unit(self, name: str) -> str:
        """Resolve a unit name to its object path.

        Raises:
            ServiceNotFoundError: If the manager has no such unit loaded.
            QueryFailedError: If the call fails for another reason.
        """
        try:
            data = self.call(MANAGER_PATH, MANAGER_INTERFACE, "GetUnit", "s", name)
        except QueryFailedError as e:
            if _is_not_found(str(e)):
                raise ServiceNotFoundError(name, str(e)) from e
            raise

        if not data or not isinstance(data[0], str):
            raise QueryFailedError(f"Failed to read unit object path for {name}")
        return data[0]

    def active_state(self, unit_path: str) -> str:
        """Read the ActiveState property of a resolved unit."""
        state = self.get_property(unit_path, UNIT_INTERFACE, "ActiveState")
        if not isinstance(state, str):
            raise QueryFailedError(f"Failed to read ActiveState of {unit_path}")
        return state

    def unit_files(self, method: str, signature: str, name: str, *flags: bool) -> list[Any]:
        """Call a unit-file method on a single unit."""
        args = ["1", name, *("true" if flag else "false" for flag in flags)]
        return self.call(MANAGER_PATH, MANAGER_INTERFACE, method, signature, *args)


class SystemdBackend(ServiceBackend):
    """Linux systemd service backend."""

    def __init__(self, config: SvcctlConfig | None = None) -> None:
        super().__init__(config)
        self.suffix = self.config.unit_suffix

    def _connect(self) -> SystemdBus:
        return SystemdBus(self.config.bus_scope, self.config.command_timeout)

    def exists(self, name: str) -> bool:
        try:
            with self._connect() as bus:
                bus.get_unit(name)
                return True
        except ServiceNotFoundError as e:
            logger.debug("%s", e)
        except SvcctlError as e:
            logger.error("Failed to resolve %s: %s", name, e)
        return False

    def state(self, name: str) -> ServiceState:
        try:
            with self._connect() as bus:
                active = bus.active_state(bus.get_unit(name))
        except ServiceNotFoundError:
            return ServiceState.NOT_FOUND
        except SvcctlError as e:
            logger.error("Failed to query %s: %s", name, e)
            return ServiceState.UNAVAILABLE

        if active == ACTIVE_STATE:
            return ServiceState.RUNNING
        return ServiceState.NOT_RUNNING

    def list_service_names(self) -> ServiceNameCollection:
        with self._connect() as bus:
            try:
                data = bus.call(MANAGER_PATH, MANAGER_INTERFACE, "ListUnits")
            except QueryFailedError as e:
                raise EnumerationFailedError(f"Failed to call ListUnits: {e}") from e

        if not data or not isinstance(data[0], list):
            raise EnumerationFailedError("Unexpected ListUnits reply")
        return collect_service_names(data[0], self.suffix, name_of=lambda unit: unit[0])

    def get_details(self, name: str) -> ServiceDetail:
        with self._connect() as bus:
            unit_path = bus.get_unit(name)
            try:
                running = bus.active_state(unit_path) == ACTIVE_STATE
            except QueryFailedError as e:
                logger.warning("Failed to read ActiveState of %s: %s", name, e)
                running = False
            start_mode = self._read_start_mode(bus, name)

        fragment = self.fragment_path(name)
        definition = parse_definition_file(fragment) if fragment else ServiceDefinition()
        return detail_from_definition(name, definition, running, start_mode)

    def fragment_path(self, name: str) -> str | None:
        """Ask systemctl where the unit's definition file lives.

        Returns:
            Path to the definition file, or None if unavailable.
        """
        cmd = ["systemctl", f"--{self.config.bus_scope}", "show", "-p", "FragmentPath", name]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.command_timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.error("Failed to execute command %s: %s", " ".join(cmd), e)
            return None

        if result.returncode != 0:
            logger.error("systemctl show failed for %s: %s", name, result.stderr.strip())
            return None

        lines = result.stdout.splitlines()
        key, _, value = (lines[0] if lines else "").partition("=")
        if key != "FragmentPath" or not value.strip():
            logger.warning("No definition file for %s", name)
            return None
        return value.strip()

    def start(self, name: str) -> bool:
        try:
            with self._connect() as bus:
                bus.call(MANAGER_PATH, MANAGER_INTERFACE, "StartUnit", "ss", name, "replace")
        except SvcctlError as e:
            logger.error("Failed to start %s: %s", name, e)
            return False
        return True

    def stop(self, name: str, timeout: float | None = None) -> StopOutcome:
        timeout = self.stop_timeout(timeout)
        try:
            with self._connect() as bus:
                bus.call(MANAGER_PATH, MANAGER_INTERFACE, "StopUnit", "ss", name, "replace")
                return self._wait_for_stop(bus, name, timeout)
        except SvcctlError as e:
            logger.error("Failed to stop %s: %s", name, e)
            return StopOutcome.FAILED

    def _wait_for_stop(self, bus: SystemdBus, name: str, timeout: float) -> StopOutcome:
        """Poll ActiveState until the unit is stopped or the timeout passes."""
        deadline = time.monotonic() + timeout
        while True:
            try:
                state = bus.active_state(bus.get_unit(name))
            except ServiceNotFoundError:
                # Unloaded after stopping
                return StopOutcome.STOPPED

            if state in STOPPED_STATES:
                return StopOutcome.STOPPED
            if time.monotonic() >= deadline:
                logger.error(
                    "Timed out after %.1fs waiting for %s to stop (state: %s)", timeout, name, state
                )
                return StopOutcome.TIMED_OUT
            time.sleep(self.config.poll_interval)

    def set_start_mode(self, name: str, mode: StartMode) -> bool:
        try:
            with self._connect() as bus:
                for method, signature, flags in START_MODE_STEPS[mode]:
                    bus.unit_files(method, signature, name, *flags)
                bus.call(MANAGER_PATH, MANAGER_INTERFACE, "Reload")
        except SvcctlError as e:
            logger.error("Failed to set start mode of %s to %s: %s", name, mode.value, e)
            return False
        logger.info("Changed start mode of %s to %s", name, mode.value)
        return True

    def get_start_mode(self, name: str) -> StartMode | None:
        try:
            with self._connect() as bus:
                return self._read_start_mode(bus, name)
        except SvcctlError as e:
            logger.error("Failed to read start mode of %s: %s", name, e)
            return None

    def _read_start_mode(self, bus: SystemdBus, name: str) -> StartMode | None:
        try:
            data = bus.call(MANAGER_PATH, MANAGER_INTERFACE, "GetUnitFileState", "s", name)
        except QueryFailedError as e:
            logger.warning("Failed to read unit file state of %s: %s", name, e)
            return None
        if not data or not isinstance(data[0], str):
            return None
        return UNIT_FILE_MODES.get(data[0], StartMode.DEMAND_START)

    def qualify_name(self, name: str) -> str:
        if not self.suffix or name.endswith(UNIT_TYPES) or name.endswith(self.suffix):
            return name
        return f"{name}{self.suffix}"
