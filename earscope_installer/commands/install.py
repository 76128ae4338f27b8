"""Install command implementation."""

import sys

import click

from earscope_installer.commands.utils import (
    build_context,
    check_platform_or_exit,
    load_product_config,
    run_plan,
    runtime_options,
)
from earscope_installer.plans import build_install_plan


@click.command()
@runtime_options
@click.pass_context
def install(ctx, dry_run: bool, mock: bool, assets_dir: str | None):
    """Install the product and its dependencies."""
    debug = ctx.obj.get("debug", False)
    config = load_product_config()
    context = build_context(config, dry_run or mock, assets_dir)
    check_platform_or_exit(context, "installer")

    outcome = run_plan(
        context,
        build_install_plan(config),
        title=f"{config.display_name} Installer",
        operation="Installation",
        banner=f"{config.display_name} Installation Started",
        debug=debug,
    )
    if outcome.exit_code:
        sys.exit(outcome.exit_code)
