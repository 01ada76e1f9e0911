from odlauncher.dbus.connection import DBusConnectionManager
from odlauncher.dbus.interfaces import SystemdBus
from odlauncher.dbus.manager import SystemdManager
from odlauncher.dbus.unit import SystemdUnit

__all__ = [
    'DBusConnectionManager',
    'SystemdBus',
    'SystemdManager',
    'SystemdUnit',
]
