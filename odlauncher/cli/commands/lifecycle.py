import click

from odlauncher.cli.commands.common import report, run_with_service

mountpoint_argument = click.argument(
    'mountpoint',
    type=click.Path(file_okay=False, resolve_path=True),
)


@click.command('status')
@mountpoint_argument
@click.pass_context
def status(ctx: click.Context, mountpoint: str) -> None:
    """Show the unit state of MOUNTPOINT.
    """
    state = run_with_service(ctx, lambda service: service.status(mountpoint))
    click.echo(state.value)


@click.command('mount')
@mountpoint_argument
@click.option(
    '--create',
    is_flag=True,
    help='Set up a new mount; MOUNTPOINT must be an empty directory.',
)
@click.option(
    '--timeout',
    type=click.FloatRange(min=0),
    default=None,
    help='Seconds to wait for the mount to become available.',
)
@click.pass_context
def mount(
    ctx: click.Context,
    mountpoint: str,
    create: bool,
    timeout: float | None,
) -> None:
    """Start the mount for MOUNTPOINT and wait until it is usable.
    """
    if create:
        result = run_with_service(
            ctx,
            lambda service: service.create_mount(mountpoint, timeout),
        )
    else:
        result = run_with_service(
            ctx,
            lambda service: service.mount(mountpoint, timeout),
        )
    report(ctx, result)


@click.command('unmount')
@mountpoint_argument
@click.pass_context
def unmount(ctx: click.Context, mountpoint: str) -> None:
    """Stop the mount for MOUNTPOINT.
    """
    report(ctx, run_with_service(
        ctx,
        lambda service: service.unmount(mountpoint),
    ))


@click.command('enable')
@mountpoint_argument
@click.pass_context
def enable(ctx: click.Context, mountpoint: str) -> None:
    """Mount MOUNTPOINT automatically on login.
    """
    report(ctx, run_with_service(
        ctx,
        lambda service: service.set_enabled(mountpoint, True),
    ))


@click.command('disable')
@mountpoint_argument
@click.pass_context
def disable(ctx: click.Context, mountpoint: str) -> None:
    """Stop mounting MOUNTPOINT on login.
    """
    report(ctx, run_with_service(
        ctx,
        lambda service: service.set_enabled(mountpoint, False),
    ))


@click.command('delete')
@mountpoint_argument
@click.confirmation_option(
    prompt='This removes all cached data for the mount. Continue?',
)
@click.pass_context
def delete(ctx: click.Context, mountpoint: str) -> None:
    """Stop MOUNTPOINT and delete its cached data and credentials.
    """
    report(ctx, run_with_service(
        ctx,
        lambda service: service.delete_mount(mountpoint),
    ))
