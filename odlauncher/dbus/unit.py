import logging
from typing import Any

from dbus_next.signature import Variant

from odlauncher.dbus.connection import DBusConnectionManager
from odlauncher.dbus.constants import DBusConstants, SystemdDBusConstants
from odlauncher.errors import RemoteCallError


class SystemdUnit:
    """Represents a loaded systemd unit object.

    Reads unit properties via org.freedesktop.DBus.Properties.
    """

    def __init__(self, dbus_manager: DBusConnectionManager, object_path: str):
        """Initialize a SystemdUnit instance.

        Args:
            dbus_manager: The D-Bus connection manager
            object_path: The D-Bus object path for this unit
        """
        self._logger = logging.getLogger(__name__)

        self._dbus_manager = dbus_manager
        self._object_path = object_path
        self._properties_interface = None

    async def _ensure_proxy(self) -> None:
        """Ensure the properties proxy interface is initialized.
        """
        if self._properties_interface is not None:
            return

        bus = await self._dbus_manager.get_bus()
        introspection = await bus.introspect(
            SystemdDBusConstants.SERVICE_NAME,
            self._object_path,
        )
        proxy_object = bus.get_proxy_object(
            SystemdDBusConstants.SERVICE_NAME,
            self._object_path,
            introspection,
        )
        self._properties_interface = proxy_object.get_interface(
            DBusConstants.PROPERTIES_INTERFACE
        )

    async def get_property(self, interface: str, property_name: str) -> Any:
        """Get a single property from the unit.

        Args:
            interface: The D-Bus interface name
            property_name: The property name to retrieve

        Returns:
            The unwrapped property value

        Raises:
            DBusError: If the D-Bus call fails
            RemoteCallError: If the reply carries no value
        """
        await self._ensure_proxy()

        variant = await self._properties_interface.call_get(  # type: ignore
            interface,
            property_name,
        )
        if not isinstance(variant, Variant):
            raise RemoteCallError(
                f'Property {interface}.{property_name} of '
                f'{self._object_path} returned no value'
            )
        return variant.value
