"""Windows Service Control Manager backend.

Uses pywin32's ``win32service`` module. Every manager and service handle
is closed in a ``finally`` block before the public call returns.
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from types import ModuleType
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
    ACCOUNT_LIMIT,
    COMMAND_LIMIT,
    DESCRIPTION_LIMIT,
    NAME_LIMIT,
    ServiceDetail,
    ServiceState,
    StartMode,
    StopOutcome,
    clip,
)
from svcctl.services.details import display_name_for, log_partial, or_not_specified
from svcctl.services.enumeration import ServiceNameCollection, collect_service_names

logger = logging.getLogger(__name__)

OWN_PROCESS_LABEL = "Own Process"
SHARED_PROCESS_LABEL = "Shared Process"

# QueryServiceConfig tuple positions
CONFIG_START_TYPE = 1
CONFIG_BINARY_PATH = 3
CONFIG_START_NAME = 7

# OpenService error codes that mean the service is not there
ERROR_INVALID_NAME = 123
ERROR_SERVICE_DOES_NOT_EXIST = 1060
NOT_FOUND_ERRORS = frozenset({ERROR_INVALID_NAME, ERROR_SERVICE_DOES_NOT_EXIST})


def _load_win32service() -> ModuleType:
    import win32service

    return win32service


class WindowsBackend(ServiceBackend):
    """Windows Service Control Manager backend."""

    suffix = ""

    def __init__(self, config: SvcctlConfig | None = None, api: Any = None) -> None:
        """Initialize the backend.

        Args:
            config: Settings to use.
            api: Module exposing the win32service API. Defaults to pywin32.
        """
        super().__init__(config)
        self.api = api if api is not None else _load_win32service()

    @contextmanager
    def _manager(self, access: int) -> Iterator[Any]:
        """Open the service control manager for one call."""
        try:
            scm = self.api.OpenSCManager(None, None, access)
        except self.api.error as e:
            raise ConnectionFailedError(f"Failed to open service control manager: {e}") from e
        try:
            yield scm
        finally:
            self.api.CloseServiceHandle(scm)

    @contextmanager
    def _service(self, scm: Any, name: str, access: int) -> Iterator[Any]:
        """Open one service with the given rights."""
        try:
            handle = self.api.OpenService(scm, name, access)
        except self.api.error as e:
            if getattr(e, "winerror", None) in NOT_FOUND_ERRORS:
                raise ServiceNotFoundError(name, str(e)) from e
            raise QueryFailedError(f"Failed to open service {name}: {e}") from e
        try:
            yield handle
        finally:
            self.api.CloseServiceHandle(handle)

    def _current_state(self, handle: Any) -> int:
        try:
            status = self.api.QueryServiceStatusEx(handle)
        except self.api.error as e:
            raise QueryFailedError(f"QueryServiceStatusEx failed: {e}") from e
        return status["CurrentState"]

    def exists(self, name: str) -> bool:
        api = self.api
        try:
            with self._manager(api.SC_MANAGER_ENUMERATE_SERVICE) as scm:
                with self._service(scm, name, api.SERVICE_QUERY_STATUS):
                    return True
        except ServiceNotFoundError as e:
            logger.debug("%s", e)
        except SvcctlError as e:
            logger.error("Failed to resolve %s: %s", name, e)
        return False

    def state(self, name: str) -> ServiceState:
        api = self.api
        try:
            with self._manager(api.SC_MANAGER_ENUMERATE_SERVICE) as scm:
                with self._service(scm, name, api.SERVICE_QUERY_STATUS) as handle:
                    current = self._current_state(handle)
        except ServiceNotFoundError:
            return ServiceState.NOT_FOUND
        except SvcctlError as e:
            logger.error("Failed to query %s: %s", name, e)
            return ServiceState.UNAVAILABLE

        if current == api.SERVICE_RUNNING:
            return ServiceState.RUNNING
        return ServiceState.NOT_RUNNING

    def list_service_names(self) -> ServiceNameCollection:
        api = self.api
        with self._manager(api.SC_MANAGER_ENUMERATE_SERVICE) as scm:
            try:
                statuses = api.EnumServicesStatus(scm, api.SERVICE_WIN32, api.SERVICE_STATE_ALL)
            except api.error as e:
                raise EnumerationFailedError(f"EnumServicesStatus failed: {e}") from e
            return collect_service_names(statuses, self.suffix, name_of=lambda entry: entry[0])

    def get_details(self, name: str) -> ServiceDetail:
        api = self.api
        access = api.SERVICE_QUERY_CONFIG | api.SERVICE_QUERY_STATUS | api.SERVICE_ENUMERATE_DEPENDENTS
        fields: dict[str, Any] = {"name": clip(name, NAME_LIMIT)}

        with self._manager(api.SC_MANAGER_ENUMERATE_SERVICE) as scm:
            with self._service(scm, name, access) as handle:
                try:
                    status = api.QueryServiceStatusEx(handle)
                    fields["running"] = status["CurrentState"] == api.SERVICE_RUNNING
                    if status["ServiceType"] & api.SERVICE_WIN32_OWN_PROCESS:
                        fields["service_type"] = OWN_PROCESS_LABEL
                    else:
                        fields["service_type"] = SHARED_PROCESS_LABEL
                except api.error as e:
                    logger.warning("Failed to query status of %s: %s", name, e)

                try:
                    config = api.QueryServiceConfig(handle)
                    fields["executable"] = or_not_specified(
                        clip(config[CONFIG_BINARY_PATH] or "", COMMAND_LIMIT)
                    )
                    fields["account"] = or_not_specified(
                        clip(config[CONFIG_START_NAME] or "", ACCOUNT_LIMIT)
                    )
                    fields["start_mode"] = StartMode.from_scm_code(config[CONFIG_START_TYPE])
                except api.error as e:
                    logger.warning("Failed to query config of %s: %s", name, e)

                try:
                    description = api.QueryServiceConfig2(handle, api.SERVICE_CONFIG_DESCRIPTION)
                    fields["description"] = or_not_specified(clip(description or "", DESCRIPTION_LIMIT))
                except api.error as e:
                    logger.warning("Failed to query description of %s: %s", name, e)

            try:
                display = api.GetServiceDisplayName(scm, name)
            except api.error as e:
                logger.warning("Failed to query display name of %s: %s", name, e)
                display = display_name_for(name)
            fields["display_name"] = or_not_specified(clip(display or "", NAME_LIMIT))

        detail = ServiceDetail(**fields)
        log_partial(detail)
        return detail

    def start(self, name: str) -> bool:
        api = self.api
        try:
            with self._manager(api.SC_MANAGER_CONNECT) as scm:
                with self._service(scm, name, api.SERVICE_START) as handle:
                    api.StartService(handle, None)
        except api.error as e:
            logger.error("StartService failed for %s: %s", name, e)
            return False
        except SvcctlError as e:
            logger.error("Failed to start %s: %s", name, e)
            return False
        return True

    def stop(self, name: str, timeout: float | None = None) -> StopOutcome:
        api = self.api
        timeout = self.stop_timeout(timeout)
        try:
            with self._manager(api.SC_MANAGER_CONNECT) as scm:
                access = api.SERVICE_STOP | api.SERVICE_QUERY_STATUS
                with self._service(scm, name, access) as handle:
                    current = self._current_state(handle)
                    if current == api.SERVICE_STOPPED:
                        return StopOutcome.STOPPED
                    if current == api.SERVICE_STOP_PENDING:
                        # Stop already requested; the SCM rejects a second one
                        return self._wait_for_stop(handle, name, timeout)
                    try:
                        api.ControlService(handle, api.SERVICE_CONTROL_STOP)
                    except api.error as e:
                        logger.error("ControlService failed for %s: %s", name, e)
                        return StopOutcome.FAILED
                    return self._wait_for_stop(handle, name, timeout)
        except SvcctlError as e:
            logger.error("Failed to stop %s: %s", name, e)
            return StopOutcome.FAILED

    def _wait_for_stop(self, handle: Any, name: str, timeout: float) -> StopOutcome:
        """Poll the service status until stopped or the timeout passes."""
        deadline = time.monotonic() + timeout
        while self._current_state(handle) != self.api.SERVICE_STOPPED:
            if time.monotonic() >= deadline:
                logger.error("Timed out after %.1fs waiting for %s to stop", timeout, name)
                return StopOutcome.TIMED_OUT
            time.sleep(self.config.poll_interval)
        return StopOutcome.STOPPED

    def set_start_mode(self, name: str, mode: StartMode) -> bool:
        api = self.api
        try:
            with self._manager(api.SC_MANAGER_CONNECT) as scm:
                with self._service(scm, name, api.SERVICE_CHANGE_CONFIG) as handle:
                    api.ChangeServiceConfig(
                        handle,
                        api.SERVICE_NO_CHANGE,
                        mode.scm_code,
                        api.SERVICE_NO_CHANGE,
                        None,
                        None,
                        0,
                        None,
                        None,
                        None,
                        None,
                    )
        except api.error as e:
            logger.error("ChangeServiceConfig failed for %s: %s", name, e)
            return False
        except SvcctlError as e:
            logger.error("Failed to set start mode of %s: %s", name, e)
            return False
        logger.info("Changed start mode of %s to %s", name, mode.value)
        return True

    def get_start_mode(self, name: str) -> StartMode | None:
        api = self.api
        try:
            with self._manager(api.SC_MANAGER_CONNECT) as scm:
                with self._service(scm, name, api.SERVICE_QUERY_CONFIG) as handle:
                    config = api.QueryServiceConfig(handle)
        except api.error as e:
            logger.error("QueryServiceConfig failed for %s: %s", name, e)
            return None
        except SvcctlError as e:
            logger.error("Failed to read start mode of %s: %s", name, e)
            return None
        return StartMode.from_scm_code(config[CONFIG_START_TYPE])
