"""Uninstall command implementation."""

import dataclasses
import os
import sys
import tempfile

import click

from earscope_installer.commands.utils import (
    build_context,
    check_platform_or_exit,
    load_product_config,
    run_plan,
    runtime_options,
)
from earscope_installer.plans import build_uninstall_plan


@click.command()
@runtime_options
@click.pass_context
def uninstall(ctx, dry_run: bool, mock: bool, assets_dir: str | None):
    """Remove the product, its shortcuts and its startup entry."""
    debug = ctx.obj.get("debug", False)
    config = load_product_config()
    context = build_context(config, dry_run or mock, assets_dir, log_name="uninstall.log")
    check_platform_or_exit(context, "uninstaller")

    # The install dir is deleted by the last step, so the log must live elsewhere.
    if not context.dry_run:
        context = dataclasses.replace(
            context,
            log_file=os.path.join(tempfile.gettempdir(), f"{config.product}-uninstall.log"),
        )

    outcome = run_plan(
        context,
        build_uninstall_plan(config, context.install_dir),
        title=f"{config.display_name} Uninstaller",
        operation="Uninstallation",
        banner=f"{config.display_name} Uninstallation Started",
        debug=debug,
    )
    if outcome.exit_code:
        sys.exit(outcome.exit_code)
