from enum import StrEnum
from typing import Final


class DBusConstants(StrEnum):
    """Standard D-Bus service and interface constants.
    """

    # D-Bus daemon service constants
    SERVICE_NAME = 'org.freedesktop.DBus'
    OBJECT_PATH = '/org/freedesktop/DBus'
    INTERFACE = 'org.freedesktop.DBus'

    # Standard D-Bus interface for properties access
    PROPERTIES_INTERFACE = 'org.freedesktop.DBus.Properties'


class SystemdDBusConstants(StrEnum):
    """Systemd D-Bus service and interface constants.
    """

    SERVICE_NAME = 'org.freedesktop.systemd1'
    OBJECT_PATH = '/org/freedesktop/systemd1'

    MANAGER_INTERFACE = 'org.freedesktop.systemd1.Manager'
    UNIT_INTERFACE = 'org.freedesktop.systemd1.Unit'


class SystemdErrorNames(StrEnum):
    """D-Bus error names returned by the systemd manager.
    """

    NO_SUCH_UNIT = 'org.freedesktop.systemd1.NoSuchUnit'


class UnitPropertyNames(StrEnum):
    """Property names of the org.freedesktop.systemd1.Unit interface.
    """

    ACTIVE_STATE = 'ActiveState'


class UnitControlModes(StrEnum):
    """Systemd unit control mode constants.
    """

    REPLACE = 'replace'


class ConnectionConfig:
    """Configuration constants for D-Bus connection.
    """

    DEFAULT_MAX_RETRIES: Final[int] = 5
    DEFAULT_INITIAL_BACKOFF: Final[float] = 1.0
    BACKOFF_MULTIPLIER: Final[float] = 2.0
    # matches the libdbus default reply timeout
    DEFAULT_CALL_TIMEOUT: Final[float] = 25.0
