import pytest

from odlauncher.errors import InvalidInputError, RemoteCallError
from odlauncher.systemd.escape import escape_path
from odlauncher.systemd.types import MountOperation, UnitState


@pytest.fixture
def empty_dir(tmp_path):
    mountpoint = tmp_path / 'OneDrive'
    mountpoint.mkdir()
    return mountpoint


def test_unit_name_for(service, empty_dir):
    assert service.unit_name_for(empty_dir) == \
        f'onedriver@{escape_path(empty_dir)}.service'


def test_unit_name_for_empty_path(service):
    with pytest.raises(InvalidInputError):
        service.unit_name_for('')


@pytest.mark.asyncio
async def test_mount_waits_for_sentinel_then_unmounts(
    service,
    bus,
    controller,
    empty_dir,
    sentinel_writer,
):
    bus.on_start = sentinel_writer(0.2)
    unit_name = service.unit_name_for(empty_dir)

    result = await service.create_mount(str(empty_dir), timeout=10)

    assert result.success
    assert result.available
    assert result.operation == MountOperation.CREATE
    assert (empty_dir / '.xdg-volume-info').exists()
    assert await controller.is_active(unit_name)

    result = await service.unmount(str(empty_dir))
    assert result.success
    assert await controller.is_active(unit_name) is False


@pytest.mark.asyncio
async def test_mount_not_available_before_deadline(service, bus, empty_dir):
    result = await service.mount(str(empty_dir), timeout=0.2)

    assert result.success
    assert result.available is False
    assert await service.status(str(empty_dir)) == UnitState.ACTIVE


@pytest.mark.asyncio
async def test_create_rejects_non_empty_directory(service, bus, empty_dir):
    (empty_dir / 'file.txt').write_text('data')

    with pytest.raises(InvalidInputError):
        await service.create_mount(str(empty_dir))
    assert bus.calls == []


@pytest.mark.asyncio
async def test_mount_reports_start_failure(service, bus, empty_dir):
    bus.fail_with = RemoteCallError('Access denied')

    result = await service.mount(str(empty_dir), timeout=0.2)

    assert result.success is False
    assert result.available is False
    assert 'Failed to start' in result.message


@pytest.mark.asyncio
async def test_long_mountpoint_failure_is_reported(service, bus, tmp_path):
    mountpoint = str(tmp_path / (' ' * 250))
    unit_name = service.unit_name_for(mountpoint)
    assert len(unit_name) > 1000
    bus.fail_with = RemoteCallError('Access denied')

    result = await service.mount(mountpoint, timeout=0.2)
    assert result.success is False
    assert result.message == f'Failed to start {unit_name}'

    result = await service.unmount(mountpoint)
    assert result.success is False
    assert unit_name in result.message


@pytest.mark.asyncio
async def test_enable_and_disable(service, controller, empty_dir):
    unit_name = service.unit_name_for(empty_dir)

    result = await service.set_enabled(str(empty_dir), True)
    assert result.success
    assert result.operation == MountOperation.ENABLE
    assert await controller.is_enabled(unit_name)

    result = await service.set_enabled(str(empty_dir), False)
    assert result.success
    assert result.operation == MountOperation.DISABLE
    assert await controller.is_enabled(unit_name) is False


@pytest.mark.asyncio
async def test_list_mounts(service, bus, make_known_mount):
    running = make_known_mount('Personal', account='me@example.com')
    stopped = make_known_mount('Work')
    await service.mount(str(running), timeout=0.1)
    await service.set_enabled(str(running), True)

    mounts = {m.mountpoint: m for m in await service.list_mounts()}

    assert set(mounts) == {str(running), str(stopped)}
    assert mounts[str(running)].state == UnitState.ACTIVE
    assert mounts[str(running)].enabled
    assert mounts[str(running)].account == 'me@example.com'
    assert mounts[str(stopped)].state == UnitState.NOT_LOADED
    assert mounts[str(stopped)].enabled is False
    assert mounts[str(stopped)].account is None
    assert mounts[str(stopped)].instance == escape_path(stopped)


@pytest.mark.asyncio
async def test_list_mounts_survives_remote_failure(
    service,
    bus,
    make_known_mount,
):
    make_known_mount('Personal')
    bus.fail_with = RemoteCallError('Timed out')

    [mount] = await service.list_mounts()
    assert mount.state == UnitState.OTHER
    assert mount.enabled is False


@pytest.mark.asyncio
async def test_delete_mount_removes_cache(
    service,
    bus,
    cache_root,
    make_known_mount,
):
    mountpoint = make_known_mount('Personal', account='me@example.com')
    await service.mount(str(mountpoint), timeout=0.1)
    await service.set_enabled(str(mountpoint), True)

    result = await service.delete_mount(str(mountpoint))

    assert result.success
    assert not (cache_root / escape_path(mountpoint)).exists()
    assert await service.list_mounts() == []
    assert bus.file_states[service.unit_name_for(mountpoint)] == 'disabled'


@pytest.mark.asyncio
async def test_delete_unloaded_mount_still_removes_cache(
    service,
    cache_root,
    make_known_mount,
):
    mountpoint = make_known_mount('Personal')

    result = await service.delete_mount(str(mountpoint))

    assert result.success
    assert not (cache_root / escape_path(mountpoint)).exists()


@pytest.mark.asyncio
async def test_delete_keeps_cache_when_stop_fails(
    service,
    bus,
    cache_root,
    make_known_mount,
):
    mountpoint = make_known_mount('Personal')
    bus.fail_with = RemoteCallError('Access denied')

    result = await service.delete_mount(str(mountpoint))

    assert result.success is False
    assert (cache_root / escape_path(mountpoint)).exists()
