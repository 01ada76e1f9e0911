import logging

from odlauncher.dbus.constants import UnitControlModes, UnitPropertyNames
from odlauncher.dbus.interfaces import SystemdBus
from odlauncher.dbus.manager import SystemdManager
from odlauncher.errors import RemoteCallError, UnitNotFoundError
from odlauncher.systemd.types import UnitActiveState, UnitFileState, UnitState


class ServiceController:
    """Start, stop, enable, disable and query units of the user manager.

    The boolean operations report remote failures as ``False`` after logging
    them; ``status`` lets RemoteCallError propagate. An unknown unit is never
    an error: it is simply not active.
    """

    def __init__(self, bus: SystemdBus | None = None) -> None:
        """Initialize the controller.

        Args:
            bus: Control bus implementation, defaults to the session
                systemd manager
        """
        self._logger = logging.getLogger(__name__)

        self._bus = bus or SystemdManager()

    async def status(self, unit_name: str) -> UnitState:
        """Query the current state of a unit.

        Raises:
            RemoteCallError: If the manager could not be queried
        """
        try:
            object_path = await self._bus.get_unit(unit_name)
        except UnitNotFoundError:
            self._logger.debug('Unit %s is not loaded', unit_name)
            return UnitState.NOT_LOADED

        active_state = await self._bus.get_unit_property(
            object_path,
            UnitPropertyNames.ACTIVE_STATE,
        )
        if not isinstance(active_state, str):
            raise RemoteCallError(
                f'{UnitPropertyNames.ACTIVE_STATE} of {unit_name} '
                f'is not a string: {active_state!r}'
            )
        return UnitState.from_active_state(active_state)

    async def is_active(self, unit_name: str) -> bool:
        """Return True if the unit is currently active.
        """
        try:
            return await self.status(unit_name) == UnitState.ACTIVE
        except RemoteCallError as e:
            self._logger.error(
                'Could not determine whether %s is active: %s',
                unit_name,
                e,
            )
            return False

    async def set_active(self, unit_name: str, active: bool) -> bool:
        """Start or stop a unit.

        Returns once systemd has accepted the job; the unit may still be
        transitioning.

        Returns:
            True if the request was accepted
        """
        try:
            if active:
                job_path = await self._bus.start_unit(
                    unit_name,
                    UnitControlModes.REPLACE,
                )
            else:
                job_path = await self._bus.stop_unit(
                    unit_name,
                    UnitControlModes.REPLACE,
                )
        except UnitNotFoundError:
            if active:
                self._logger.error('Unit %s could not be found', unit_name)
                return False
            # nothing loaded means nothing to stop
            self._logger.debug('Unit %s already stopped', unit_name)
            return True
        except RemoteCallError as e:
            self._logger.error(
                'Failed to change %s to %s: %s',
                unit_name,
                UnitActiveState.ACTIVE if active else UnitActiveState.INACTIVE,
                e,
            )
            return False

        self._logger.info('Queued job %s for %s', job_path, unit_name)
        return True

    async def is_enabled(self, unit_name: str) -> bool:
        """Return True if the unit is enabled to start on login.
        """
        try:
            state = await self._bus.get_unit_file_state(unit_name)
        except (RemoteCallError, UnitNotFoundError) as e:
            self._logger.error(
                'Could not determine unit file state of %s: %s',
                unit_name,
                e,
            )
            return False
        return state == UnitFileState.ENABLED

    async def set_enabled(self, unit_name: str, enabled: bool) -> bool:
        """Enable or disable a unit in the user scope.

        Returns:
            True on success
        """
        try:
            if enabled:
                _, changes = await self._bus.enable_unit_files(
                    [unit_name],
                    runtime=False,
                    force=True,
                )
            else:
                changes = await self._bus.disable_unit_files(
                    [unit_name],
                    runtime=False,
                )
            await self._bus.reload()
        except (RemoteCallError, UnitNotFoundError) as e:
            self._logger.error(
                'Could not change enabled state of %s to %s: %s',
                unit_name,
                enabled,
                e,
            )
            return False

        for change_type, file_name, destination in changes:
            self._logger.debug(
                '%s %s -> %s',
                change_type,
                file_name,
                destination,
            )
        return True
