from pathlib import Path

import click

from odlauncher.cli.commands.codec import escape, unescape
from odlauncher.cli.commands.lifecycle import (
    delete,
    disable,
    enable,
    mount,
    status,
    unmount,
)
from odlauncher.cli.commands.list_mounts import list_mounts
from odlauncher.config import LauncherConfig, add_stderr_handler, setup_logger


@click.group()
@click.option(
    '--cache-root',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Cache directory of the mount daemon.',
)
@click.option(
    '--template',
    'unit_template',
    default=None,
    help='Template unit serving each mount, e.g. onedriver@.service.',
)
@click.option('-v', '--verbose', is_flag=True, help='Log to stderr.')
@click.pass_context
def cli(
    ctx: click.Context,
    cache_root: Path | None,
    unit_template: str | None,
    verbose: bool,
) -> None:
    """odlauncher - Manage onedriver mountpoints.
    """
    if verbose:
        add_stderr_handler()

    try:
        ctx.obj = LauncherConfig.from_environment(
            cache_root=cache_root,
            unit_template=unit_template,
        )
    except ValueError as e:
        raise click.UsageError(str(e))


for command in (
    list_mounts,
    status,
    mount,
    unmount,
    enable,
    disable,
    delete,
    escape,
    unescape,
):
    cli.add_command(command)


def run_cli() -> None:
    """Run the CLI interface.
    """
    setup_logger()

    cli(prog_name='odlauncher')


__all__ = [
    'cli',
    'run_cli',
]
