from odlauncher.systemd.controller import ServiceController
from odlauncher.systemd.escape import (
    escape_path,
    escape_string,
    template_unit,
    unescape_path,
    unescape_string,
    untemplate_unit,
)
from odlauncher.systemd.types import (
    MountOperation,
    UnitActiveState,
    UnitFileState,
    UnitState,
)

__all__ = [
    'MountOperation',
    'ServiceController',
    'UnitActiveState',
    'UnitFileState',
    'UnitState',
    'escape_path',
    'escape_string',
    'template_unit',
    'unescape_path',
    'unescape_string',
    'untemplate_unit',
]
