from abc import ABC, abstractmethod
from typing import Any

from odlauncher.dbus.constants import UnitControlModes


class SystemdBus(ABC):
    """Abstract interface to the systemd manager control bus.

    Implementations raise UnitNotFoundError when the manager does not know a
    unit and RemoteCallError for every other failure.
    """

    @abstractmethod
    async def get_unit(self, unit_name: str) -> str:
        """Resolve a loaded unit to its object path.
        """

    @abstractmethod
    async def get_unit_property(
        self,
        object_path: str,
        property_name: str,
    ) -> Any:
        """Read a property of the org.freedesktop.systemd1.Unit interface.
        """

    @abstractmethod
    async def start_unit(
        self,
        unit_name: str,
        mode: str = UnitControlModes.REPLACE,
    ) -> str:
        """Enqueue a start job and return its object path.
        """

    @abstractmethod
    async def stop_unit(
        self,
        unit_name: str,
        mode: str = UnitControlModes.REPLACE,
    ) -> str:
        """Enqueue a stop job and return its object path.
        """

    @abstractmethod
    async def enable_unit_files(
        self,
        unit_files: list[str],
        runtime: bool = False,
        force: bool = False,
    ) -> tuple[bool, list[tuple[str, str, str]]]:
        """Enable unit files.
        """

    @abstractmethod
    async def disable_unit_files(
        self,
        unit_files: list[str],
        runtime: bool = False,
    ) -> list[tuple[str, str, str]]:
        """Disable unit files.
        """

    @abstractmethod
    async def get_unit_file_state(self, unit_name: str) -> str:
        """Get the persisted unit file state (e.g. 'enabled').
        """

    @abstractmethod
    async def reload(self) -> None:
        """Reload the manager configuration.
        """
