import click

from odlauncher.errors import LauncherError
from odlauncher.systemd.escape import (
    escape_path,
    template_unit,
    unescape_path,
    untemplate_unit,
)


@click.command('escape')
@click.argument('path')
@click.option(
    '--unit',
    is_flag=True,
    help='Print the full unit name instead of the instance.',
)
@click.pass_context
def escape(ctx: click.Context, path: str, unit: bool) -> None:
    """Escape PATH into a unit instance name.
    """
    instance = escape_path(path)
    if unit:
        click.echo(template_unit(ctx.obj.unit_template, instance))
    else:
        click.echo(instance)


@click.command('unescape')
@click.argument('name')
@click.option(
    '--unit',
    is_flag=True,
    help='NAME is a full unit name rather than an instance.',
)
def unescape(name: str, unit: bool) -> None:
    """Decode a unit instance NAME back into a path.
    """
    try:
        instance = untemplate_unit(name) if unit else name
        click.echo(unescape_path(instance))
    except LauncherError as e:
        raise click.BadParameter(str(e), param_hint='NAME')
