"""Launch command implementation."""

import os
import subprocess
import sys

import click

from earscope_installer.commands.utils import (
    build_context,
    check_platform_or_exit,
    load_product_config,
    runtime_options,
)
from earscope_installer.config import resolve_target


@click.command()
@runtime_options
@click.pass_context
def launch(ctx, dry_run: bool, mock: bool, assets_dir: str | None):
    """Start every installed application."""
    config = load_product_config()
    context = build_context(config, dry_run or mock, assets_dir)
    check_platform_or_exit(context, "launcher")

    launched = 0
    for app in config.launch:
        target = resolve_target(context.install_dir, app.target)
        if not os.path.exists(target):
            if app.optional:
                click.echo(f"{app.name} not found, skipping...")
            else:
                click.echo(f"{app.name} not found: {target}", err=True)
            continue

        click.echo(f"Launching {app.name}: {target}")
        if not context.dry_run:
            subprocess.Popen(
                [target],
                cwd=os.path.dirname(target),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        launched += 1

    if launched == 0:
        click.echo("No applications found to launch.", err=True)
        sys.exit(1)

    click.echo("Applications launched successfully.")
