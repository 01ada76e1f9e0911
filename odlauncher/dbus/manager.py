import asyncio
import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from dbus_next.errors import DBusError

from odlauncher.dbus.connection import DBusConnectionManager
from odlauncher.dbus.constants import (
    ConnectionConfig,
    SystemdDBusConstants,
    SystemdErrorNames,
    UnitControlModes,
)
from odlauncher.dbus.interfaces import SystemdBus
from odlauncher.dbus.unit import SystemdUnit
from odlauncher.errors import RemoteCallError, UnitNotFoundError

T = TypeVar('T')


class SystemdManager(SystemdBus):
    """Talks to org.freedesktop.systemd1.Manager over D-Bus.

    Every call is bounded by ``call_timeout`` and D-Bus errors are
    translated into UnitNotFoundError or RemoteCallError.
    """

    def __init__(
        self,
        dbus_manager: DBusConnectionManager | None = None,
        call_timeout: float = ConnectionConfig.DEFAULT_CALL_TIMEOUT,
    ):
        """Initialize the SystemdManager.

        Args:
            dbus_manager: The D-Bus connection manager.
            call_timeout: Seconds to wait for any single reply.
        """
        self._logger = logging.getLogger(__name__)

        self._dbus_manager = dbus_manager or \
            DBusConnectionManager.get_instance()
        self._call_timeout = call_timeout
        self._manager_proxy = None
        self._proxy_bus = None

    async def _ensure_manager_proxy(self) -> None:
        """Ensure the systemd manager D-Bus proxy is bound to the live bus.

        The proxy is rebuilt after the connection manager reconnects.
        """
        bus = await self._call(
            'connect to the session bus',
            self._dbus_manager.get_bus(),
        )
        if self._manager_proxy is not None and bus is self._proxy_bus:
            return

        async def _create_proxy() -> Any:
            introspection = await bus.introspect(
                SystemdDBusConstants.SERVICE_NAME,
                SystemdDBusConstants.OBJECT_PATH,
            )
            proxy_object = bus.get_proxy_object(
                SystemdDBusConstants.SERVICE_NAME,
                SystemdDBusConstants.OBJECT_PATH,
                introspection,
            )
            return proxy_object.get_interface(
                SystemdDBusConstants.MANAGER_INTERFACE
            )

        self._manager_proxy = await self._call(
            'create systemd manager proxy',
            _create_proxy(),
        )
        self._proxy_bus = bus

    async def _call(
        self,
        description: str,
        awaitable: Awaitable[T],
        unit_name: str | None = None,
    ) -> T:
        """Await a remote call with a timeout and translate its errors.
        """
        try:
            return await asyncio.wait_for(awaitable, self._call_timeout)
        except DBusError as e:
            if e.type == SystemdErrorNames.NO_SUCH_UNIT and unit_name:
                self._logger.debug('Unit %s is not loaded', unit_name)
                raise UnitNotFoundError(unit_name) from e

            self._logger.error('Failed to %s: %s', description, e.text)
            raise RemoteCallError(
                f'Failed to {description}: {e.text}',
                error_name=e.type,
            ) from e
        except asyncio.TimeoutError as e:
            self._logger.error(
                'Timed out after %.1fs trying to %s',
                self._call_timeout,
                description,
            )
            raise RemoteCallError(
                f'Timed out trying to {description}'
            ) from e
        except ConnectionError as e:
            raise RemoteCallError(str(e)) from e

    async def get_unit(self, unit_name: str) -> str:
        """Get the object path of a loaded unit.

        Raises:
            UnitNotFoundError: If the unit is not loaded
            RemoteCallError: If the D-Bus call fails
        """
        await self._ensure_manager_proxy()

        object_path = await self._call(
            f'get unit {unit_name}',
            self._manager_proxy.call_get_unit(unit_name),  # type: ignore
            unit_name=unit_name,
        )
        if not isinstance(object_path, str) or not object_path:
            raise RemoteCallError(
                f'GetUnit returned no object path for {unit_name}'
            )
        return object_path

    async def get_unit_property(
        self,
        object_path: str,
        property_name: str,
    ) -> Any:
        """Read a Unit interface property from the given unit object.

        Raises:
            RemoteCallError: If the D-Bus call fails or returns no value
        """
        unit = SystemdUnit(self._dbus_manager, object_path)
        return await self._call(
            f'read {property_name} of {object_path}',
            unit.get_property(
                SystemdDBusConstants.UNIT_INTERFACE,
                property_name,
            ),
        )

    async def start_unit(
        self,
        unit_name: str,
        mode: str = UnitControlModes.REPLACE,
    ) -> str:
        """Start a unit by name.

        Returns:
            The job object path

        Raises:
            UnitNotFoundError: If no unit file provides the unit
            RemoteCallError: If the D-Bus call fails
        """
        await self._ensure_manager_proxy()

        return await self._call(
            f'start unit {unit_name}',
            self._manager_proxy.call_start_unit(  # type: ignore
                unit_name,
                mode,
            ),
            unit_name=unit_name,
        )

    async def stop_unit(
        self,
        unit_name: str,
        mode: str = UnitControlModes.REPLACE,
    ) -> str:
        """Stop a unit by name.

        Returns:
            The job object path

        Raises:
            UnitNotFoundError: If the unit is not loaded
            RemoteCallError: If the D-Bus call fails
        """
        await self._ensure_manager_proxy()

        return await self._call(
            f'stop unit {unit_name}',
            self._manager_proxy.call_stop_unit(  # type: ignore
                unit_name,
                mode,
            ),
            unit_name=unit_name,
        )

    async def enable_unit_files(
        self,
        unit_files: list[str],
        runtime: bool = False,
        force: bool = False,
    ) -> tuple[bool, list[tuple[str, str, str]]]:
        """Enable unit files.

        Args:
            unit_files: List of unit file names to enable
            runtime: Whether to enable for runtime only
            force: Whether to replace existing symlinks

        Returns:
            Tuple of (carries_install_info, changes)

        Raises:
            RemoteCallError: If the D-Bus call fails
        """
        await self._ensure_manager_proxy()

        reply = await self._call(
            f'enable unit files {unit_files}',
            self._manager_proxy.call_enable_unit_files(  # type: ignore
                unit_files,
                runtime,
                force,
            ),
        )
        if not isinstance(reply, (list, tuple)) or len(reply) != 2:
            raise RemoteCallError(
                f'EnableUnitFiles returned an unexpected reply: {reply!r}'
            )
        carries_install_info, changes = reply
        return carries_install_info, changes

    async def disable_unit_files(
        self,
        unit_files: list[str],
        runtime: bool = False,
    ) -> list[tuple[str, str, str]]:
        """Disable unit files.

        Raises:
            RemoteCallError: If the D-Bus call fails
        """
        await self._ensure_manager_proxy()

        return await self._call(
            f'disable unit files {unit_files}',
            self._manager_proxy.call_disable_unit_files(  # type: ignore
                unit_files,
                runtime,
            ),
        )

    async def get_unit_file_state(self, unit_name: str) -> str:
        """Get the unit file state of a unit.

        Raises:
            RemoteCallError: If the D-Bus call fails
        """
        await self._ensure_manager_proxy()

        state = await self._call(
            f'get unit file state of {unit_name}',
            self._manager_proxy.call_get_unit_file_state(  # type: ignore
                unit_name
            ),
        )
        if not isinstance(state, str):
            raise RemoteCallError(
                f'GetUnitFileState returned no state for {unit_name}'
            )
        return state

    async def reload(self) -> None:
        """Reload the systemd manager configuration.

        Raises:
            RemoteCallError: If the D-Bus call fails
        """
        await self._ensure_manager_proxy()

        await self._call(
            'reload systemd manager',
            self._manager_proxy.call_reload(),  # type: ignore
        )
