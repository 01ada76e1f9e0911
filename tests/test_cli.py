import pytest
from click.testing import CliRunner

from odlauncher.cli import cli
from odlauncher.cli.commands import common
from odlauncher.cli.commands.list_mounts import format_mounts_table
from odlauncher.errors import RemoteCallError
from odlauncher.models.mount import MountInfo
from odlauncher.services.mount_service import MountService
from odlauncher.systemd.escape import escape_path
from odlauncher.systemd.types import UnitState


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def invoke(runner, cache_root, controller, monkeypatch):
    """Invoke the CLI with the fake bus behind every MountService.
    """
    monkeypatch.setattr(
        common,
        'build_service',
        lambda config: MountService(config=config, controller=controller),
    )

    def _invoke(*args: str, **kwargs):
        return runner.invoke(
            cli,
            ['--cache-root', str(cache_root), *args],
            **kwargs,
        )

    return _invoke


def test_escape(runner):
    result = runner.invoke(cli, ['escape', '/home/test/yesYes'])
    assert result.exit_code == 0
    assert result.output == 'home-test-yesYes\n'


def test_escape_unit(runner):
    result = runner.invoke(cli, ['escape', '--unit', '/home/test/yesYes'])
    assert result.output == 'onedriver@home-test-yesYes.service\n'


def test_escape_custom_template(runner):
    result = runner.invoke(
        cli,
        ['--template', 'drive@.mount', 'escape', '--unit', '/srv/a'],
    )
    assert result.output == 'drive@srv-a.mount\n'


def test_invalid_template_is_a_usage_error(runner):
    result = runner.invoke(cli, ['--template', 'nope', 'escape', '/srv'])
    assert result.exit_code == 2


def test_unescape(runner):
    result = runner.invoke(
        cli,
        ['unescape', '--unit', 'onedriver@home-me-One\\x20Drive.service'],
    )
    assert result.exit_code == 0
    assert result.output == '/home/me/One Drive\n'


def test_unescape_malformed(runner):
    result = runner.invoke(cli, ['unescape', 'bad\\xZZ'])
    assert result.exit_code == 2
    assert 'Malformed escape' in result.output


def test_mount_status_unmount(invoke, bus, tmp_path):
    mountpoint = (tmp_path / 'OneDrive').resolve()
    mountpoint.mkdir()

    result = invoke('mount', '--create', '--timeout', '0.1', str(mountpoint))
    assert result.exit_code == 0, result.output
    assert 'not available yet' in result.output

    result = invoke('status', str(mountpoint))
    assert result.output == 'active\n'

    result = invoke('unmount', str(mountpoint))
    assert result.exit_code == 0
    assert result.output == f'Unmounted {mountpoint}\n'
    assert bus.active_states[
        f'onedriver@{escape_path(mountpoint)}.service'
    ] == 'inactive'


def test_mount_create_rejects_non_empty(invoke, tmp_path):
    (tmp_path / 'file').write_text('')

    result = invoke('mount', '--create', str(tmp_path))
    assert result.exit_code == 1
    assert 'Error: Mountpoint must be an existing empty directory' in \
        result.output


def test_enable_failure_exit_code(invoke, bus, tmp_path):
    bus.fail_with = RemoteCallError('Access denied')

    result = invoke('enable', str(tmp_path))
    assert result.exit_code == 1
    assert 'Failed to enable' in result.output


def test_list(invoke, make_known_mount):
    mountpoint = make_known_mount('OneDrive', account='me@example.com')

    result = invoke('list', '--full')
    assert result.exit_code == 0
    assert 'me@example.com' in result.output
    assert 'not-loaded' in result.output
    assert f'onedriver@{escape_path(mountpoint)}.service' in result.output


def test_list_empty(invoke):
    result = invoke('list')
    assert result.output == 'No mounts found.\n'


def test_delete_requires_confirmation(invoke, cache_root, make_known_mount):
    mountpoint = make_known_mount('OneDrive')

    result = invoke('delete', str(mountpoint), input='n\n')
    assert result.exit_code == 1
    assert (cache_root / escape_path(mountpoint)).exists()

    result = invoke('delete', '--yes', str(mountpoint))
    assert result.exit_code == 0
    assert not (cache_root / escape_path(mountpoint)).exists()


def test_format_mounts_table():
    mounts = [
        MountInfo(
            mountpoint='/home/me/OneDrive',
            display_path='~/OneDrive',
            instance='home-me-OneDrive',
            unit_name='onedriver@home-me-OneDrive.service',
            state=UnitState.ACTIVE,
            enabled=True,
            account='me@example.com',
        ),
    ]

    lines = format_mounts_table(mounts).splitlines()
    assert lines[0].split() == ['MOUNTPOINT', 'STATE', 'ENABLED', 'ACCOUNT']
    assert lines[2].split() == [
        '~/OneDrive',
        'active',
        'yes',
        'me@example.com',
    ]
