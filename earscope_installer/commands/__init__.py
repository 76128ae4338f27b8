"""CLI command definitions for earscope-installer."""

import click

from earscope_installer import __version__
from earscope_installer.commands.install import install
from earscope_installer.commands.launch import launch
from earscope_installer.commands.uninstall import uninstall


@click.group()
@click.version_option(__version__, prog_name="earscope")
@click.option("--debug", is_flag=True, help="Enable debug output for troubleshooting")
@click.pass_context
def cli(ctx, debug):
    """Install, uninstall and launch EARSCOPE."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


cli.add_command(install)
cli.add_command(uninstall)
cli.add_command(launch)

__all__ = [
    "cli",
]


if __name__ == "__main__":
    cli()
