import click

from odlauncher.cli.commands.common import run_with_service
from odlauncher.models.mount import MountInfo


def format_mounts_table(
    mounts: list[MountInfo],
    show_full: bool = False,
) -> str:
    """Format mounts into a simple table.
    """
    if not mounts:
        return 'No mounts found.'

    path_width = max(len('MOUNTPOINT'), max(len(m.display_path) for m in mounts))
    state_width = max(len('STATE'), max(len(m.state.value) for m in mounts))
    account_width = max(
        len('ACCOUNT'),
        max(len(m.account or '-') for m in mounts),
    )

    header = (
        f'{"MOUNTPOINT":<{path_width}} '
        f'{"STATE":<{state_width}} '
        f'{"ENABLED":<7} '
        f'{"ACCOUNT":<{account_width}}'
    )
    if show_full:
        header += ' UNIT'

    lines = [header, '-' * len(header)]

    for mount in mounts:
        row = (
            f'{mount.display_path:<{path_width}} '
            f'{mount.state.value:<{state_width}} '
            f'{"yes" if mount.enabled else "no":<7} '
            f'{mount.account or "-":<{account_width}}'
        )
        if show_full:
            row += f' {mount.unit_name}'
        lines.append(row)

    return '\n'.join(lines)


@click.command('list')
@click.option(
    '--full',
    is_flag=True,
    help='Show the unit name of each mount.',
)
@click.pass_context
def list_mounts(ctx: click.Context, full: bool) -> None:
    """List known mountpoints and their state.
    """
    mounts = run_with_service(ctx, lambda service: service.list_mounts())
    click.echo(format_mounts_table(mounts, show_full=full))
