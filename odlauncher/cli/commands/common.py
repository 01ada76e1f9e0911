import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click

from odlauncher.config import LauncherConfig
from odlauncher.dbus.connection import DBusConnectionManager
from odlauncher.errors import LauncherError
from odlauncher.models.mount import MountOperationResult
from odlauncher.services.mount_service import MountService

T = TypeVar('T')


def build_service(config: LauncherConfig) -> MountService:
    """Create the mount service used by CLI commands.
    """
    return MountService(config=config)


def run_with_service(
    ctx: click.Context,
    operation: Callable[[MountService], Awaitable[T]],
) -> T:
    """Run an async operation against a fresh MountService.

    The D-Bus connection is closed before the event loop ends. Launcher
    errors are reported on stderr with exit status 1.
    """
    async def _run() -> T:
        try:
            return await operation(build_service(ctx.obj))
        finally:
            await DBusConnectionManager.get_instance().disconnect()

    try:
        return asyncio.run(_run())
    except (LauncherError, ConnectionError) as e:
        click.echo(f'Error: {e}', err=True)
        ctx.exit(1)


def report(ctx: click.Context, result: MountOperationResult) -> None:
    """Print an operation result and set the exit status.
    """
    click.echo(result.message, err=not result.success)
    if not result.success:
        ctx.exit(1)
