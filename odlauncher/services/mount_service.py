import logging
import os

from odlauncher.config import LauncherConfig
from odlauncher.dbus.manager import SystemdManager
from odlauncher.errors import InvalidInputError, RemoteCallError
from odlauncher.models.mount import MountInfo, MountOperationResult
from odlauncher.mounts import (
    await_available,
    escape_home,
    get_account_name,
    is_valid_mount_candidate,
    list_known_mounts,
    remove_mount_cache,
)
from odlauncher.systemd.controller import ServiceController
from odlauncher.systemd.escape import escape_path, template_unit
from odlauncher.systemd.types import MountOperation, UnitState


class MountService:
    """A service for managing per-account mountpoints.

    Ties the unit name codec, the service controller and the availability
    poller together for front ends.
    """

    def __init__(
        self,
        config: LauncherConfig | None = None,
        controller: ServiceController | None = None,
    ) -> None:
        """Initialise the service.

        Args:
            config: Launcher configuration
            controller: Service controller, defaults to one bound to the
                session systemd manager
        """
        self._logger = logging.getLogger(__name__)

        self._config = config or LauncherConfig.from_environment()
        if controller is None:
            controller = ServiceController(
                SystemdManager(call_timeout=self._config.call_timeout)
            )
        self._controller = controller

    def unit_name_for(self, mountpoint: str | os.PathLike[str]) -> str:
        """Compute the unit name serving a mountpoint.
        """
        if not os.fspath(mountpoint):
            raise InvalidInputError('Mountpoint must not be empty')
        return template_unit(
            self._config.unit_template,
            escape_path(mountpoint),
        )

    async def list_mounts(self) -> list[MountInfo]:
        """List every known mount with its current unit state.
        """
        mounts = []
        for mountpoint in list_known_mounts(self._config.cache_root):
            instance = escape_path(mountpoint)
            unit_name = template_unit(self._config.unit_template, instance)

            try:
                state = await self._controller.status(unit_name)
            except RemoteCallError as e:
                self._logger.warning(
                    'Could not query %s: %s',
                    unit_name,
                    e,
                )
                state = UnitState.OTHER

            mounts.append(MountInfo(
                mountpoint=mountpoint,
                display_path=escape_home(mountpoint),
                instance=instance,
                unit_name=unit_name,
                state=state,
                enabled=await self._controller.is_enabled(unit_name),
                account=get_account_name(instance, self._config.cache_root),
            ))

        return mounts

    async def status(self, mountpoint: str) -> UnitState:
        """Get the unit state of a single mountpoint.

        Raises:
            RemoteCallError: If systemd could not be queried
        """
        return await self._controller.status(self.unit_name_for(mountpoint))

    async def create_mount(
        self,
        mountpoint: str,
        timeout: float | None = None,
    ) -> MountOperationResult:
        """Create a new mount on an empty directory and wait for it.

        Raises:
            InvalidInputError: If the mountpoint is not an empty directory
        """
        if not is_valid_mount_candidate(mountpoint):
            raise InvalidInputError(
                f'Mountpoint must be an existing empty directory: '
                f'{mountpoint!r}'
            )

        return await self._start(mountpoint, MountOperation.CREATE, timeout)

    async def mount(
        self,
        mountpoint: str,
        timeout: float | None = None,
    ) -> MountOperationResult:
        """Start the unit for a mountpoint and wait until it is usable.
        """
        return await self._start(mountpoint, MountOperation.MOUNT, timeout)

    async def unmount(self, mountpoint: str) -> MountOperationResult:
        """Stop the unit for a mountpoint.
        """
        unit_name = self.unit_name_for(mountpoint)
        stopped = await self._controller.set_active(unit_name, False)

        return MountOperationResult(
            success=stopped,
            mountpoint=mountpoint,
            unit_name=unit_name,
            operation=MountOperation.UNMOUNT,
            message=f'Unmounted {mountpoint}' \
                if stopped else f'Failed to stop {unit_name}',
        )

    async def set_enabled(
        self,
        mountpoint: str,
        enabled: bool,
    ) -> MountOperationResult:
        """Enable or disable mounting on login.
        """
        unit_name = self.unit_name_for(mountpoint)
        operation = MountOperation.ENABLE if enabled \
            else MountOperation.DISABLE
        success = await self._controller.set_enabled(unit_name, enabled)

        return MountOperationResult(
            success=success,
            mountpoint=mountpoint,
            unit_name=unit_name,
            operation=operation,
            message=f'{operation.value.capitalize()}d {unit_name}' \
                if success else f'Failed to {operation.value} {unit_name}',
        )

    async def delete_mount(self, mountpoint: str) -> MountOperationResult:
        """Stop and disable a mount, then remove its cached data.

        A unit that is not loaded still has its cache removed.
        """
        unit_name = self.unit_name_for(mountpoint)

        if not await self._controller.set_active(unit_name, False):
            return self._delete_failed(mountpoint, unit_name, 'stop')
        if not await self._controller.set_enabled(unit_name, False):
            return self._delete_failed(mountpoint, unit_name, 'disable')

        removed = remove_mount_cache(mountpoint, self._config.cache_root)
        return MountOperationResult(
            success=True,
            mountpoint=mountpoint,
            unit_name=unit_name,
            operation=MountOperation.DELETE,
            message=f'Deleted {mountpoint}' if removed \
                else f'No cached data for {mountpoint}',
        )

    def _delete_failed(
        self,
        mountpoint: str,
        unit_name: str,
        step: str,
    ) -> MountOperationResult:
        return MountOperationResult(
            success=False,
            mountpoint=mountpoint,
            unit_name=unit_name,
            operation=MountOperation.DELETE,
            message=f'Failed to {step} {unit_name}, cache kept',
        )

    async def _start(
        self,
        mountpoint: str,
        operation: MountOperation,
        timeout: float | None,
    ) -> MountOperationResult:
        """Start a unit and poll for the mount's sentinel file.
        """
        unit_name = self.unit_name_for(mountpoint)

        if not await self._controller.set_active(unit_name, True):
            return MountOperationResult(
                success=False,
                mountpoint=mountpoint,
                unit_name=unit_name,
                operation=operation,
                message=f'Failed to start {unit_name}',
            )

        available = await await_available(
            mountpoint,
            timeout if timeout is not None else self._config.poll_timeout,
            sentinel=self._config.sentinel,
        )
        if not available:
            self._logger.warning(
                '%s started but %s is not available yet',
                unit_name,
                mountpoint,
            )

        return MountOperationResult(
            success=True,
            mountpoint=mountpoint,
            unit_name=unit_name,
            operation=operation,
            available=available,
            message=f'Mounted {mountpoint}' if available \
                else f'Started {unit_name}, mount not available yet',
        )
