import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from odlauncher.config import LauncherConfig
from odlauncher.dbus.constants import UnitControlModes, UnitPropertyNames
from odlauncher.dbus.interfaces import SystemdBus
from odlauncher.errors import RemoteCallError, UnitNotFoundError
from odlauncher.services.mount_service import MountService
from odlauncher.systemd.controller import ServiceController
from odlauncher.systemd.escape import escape_path, untemplate_unit, unescape_path


class FakeSystemdBus(SystemdBus):
    """In-memory stand-in for the user's systemd manager.

    Units become loaded when they are started, like template instances do,
    unless they are listed in unknown_units.
    """

    def __init__(self) -> None:
        self.active_states: dict[str, str] = {}
        self.file_states: dict[str, str] = {}
        self.calls: list[tuple[str, Any]] = []
        self.fail_with: RemoteCallError | None = None
        self.on_start: Callable[[str], None] | None = None
        self.reloads = 0
        self.unknown_units: set[str] = set()

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        if self.fail_with is not None:
            raise self.fail_with

    async def get_unit(self, unit_name: str) -> str:
        self._record('GetUnit', unit_name)
        if unit_name not in self.active_states:
            raise UnitNotFoundError(unit_name)
        return f'/org/freedesktop/systemd1/unit/{unit_name}'

    async def get_unit_property(
        self,
        object_path: str,
        property_name: str,
    ) -> Any:
        self._record('Get', object_path, property_name)
        assert property_name == UnitPropertyNames.ACTIVE_STATE
        return self.active_states[object_path.rsplit('/', 1)[1]]

    async def start_unit(
        self,
        unit_name: str,
        mode: str = UnitControlModes.REPLACE,
    ) -> str:
        self._record('StartUnit', unit_name, mode)
        if unit_name in self.unknown_units:
            raise UnitNotFoundError(unit_name)
        self.active_states[unit_name] = 'active'
        if self.on_start is not None:
            self.on_start(unit_name)
        return '/org/freedesktop/systemd1/job/1'

    async def stop_unit(
        self,
        unit_name: str,
        mode: str = UnitControlModes.REPLACE,
    ) -> str:
        self._record('StopUnit', unit_name, mode)
        if unit_name not in self.active_states:
            raise UnitNotFoundError(unit_name)
        self.active_states[unit_name] = 'inactive'
        return '/org/freedesktop/systemd1/job/2'

    async def enable_unit_files(
        self,
        unit_files: list[str],
        runtime: bool = False,
        force: bool = False,
    ) -> tuple[bool, list[tuple[str, str, str]]]:
        self._record('EnableUnitFiles', unit_files, runtime, force)
        changes = []
        for name in unit_files:
            if self.file_states.get(name) != 'enabled':
                changes.append(('symlink', name, '/dev/null'))
            self.file_states[name] = 'enabled'
        return True, changes

    async def disable_unit_files(
        self,
        unit_files: list[str],
        runtime: bool = False,
    ) -> list[tuple[str, str, str]]:
        self._record('DisableUnitFiles', unit_files, runtime)
        for name in unit_files:
            self.file_states[name] = 'disabled'
        return [('unlink', name, '') for name in unit_files]

    async def get_unit_file_state(self, unit_name: str) -> str:
        self._record('GetUnitFileState', unit_name)
        return self.file_states.get(unit_name, 'disabled')

    async def reload(self) -> None:
        self._record('Reload')
        self.reloads += 1

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]


@pytest.fixture
def sentinel_writer():
    """Build on_start hooks that write the sentinel like the daemon does.
    """
    def _build(
        delay: float,
        sentinel: str = '.xdg-volume-info',
    ) -> Callable[[str], None]:
        def _on_start(unit_name: str) -> None:
            mountpoint = Path(unescape_path(untemplate_unit(unit_name)))
            asyncio.get_running_loop().call_later(
                delay,
                (mountpoint / sentinel).touch,
            )

        return _on_start

    return _build


@pytest.fixture
def bus() -> FakeSystemdBus:
    return FakeSystemdBus()


@pytest.fixture
def controller(bus: FakeSystemdBus) -> ServiceController:
    return ServiceController(bus)


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    root = tmp_path / 'cache' / 'onedriver'
    root.mkdir(parents=True)
    return root


@pytest.fixture
def config(cache_root: Path) -> LauncherConfig:
    return LauncherConfig(cache_root=cache_root, poll_timeout=2)


@pytest.fixture
def service(
    config: LauncherConfig,
    controller: ServiceController,
) -> MountService:
    return MountService(config=config, controller=controller)


@pytest.fixture
def make_known_mount(cache_root: Path, tmp_path: Path):
    """Create a mountpoint and the daemon cache directory pointing at it.
    """
    def _make(name: str, account: str | None = None) -> Path:
        mountpoint = tmp_path / 'mounts' / name
        mountpoint.mkdir(parents=True)
        cache_dir = cache_root / escape_path(mountpoint)
        cache_dir.mkdir()
        if account is not None:
            (cache_dir / 'auth_tokens.json').write_text(
                f'{{"account": "{account}", "access_token": "secret"}}'
            )
        return mountpoint

    return _make
