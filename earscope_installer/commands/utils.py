"""Shared helpers for commands."""

import asyncio
import os
import sys
import tempfile
from collections.abc import Callable

import click

from earscope_installer.config import ConfigError, ProductConfig, load_config
from earscope_installer.engine import Orchestrator, RunOutcome, StepSpec
from earscope_installer.errors import PreconditionError, format_error, format_suggestion
from earscope_installer.logs import setup_logging
from earscope_installer.runtime import (
    RuntimeContext,
    RuntimeOptions,
    is_windows,
    resolve_runtime_context,
)
from earscope_installer.tui import Renderer


def runtime_options(func: Callable) -> Callable:
    """Attach the --dry-run / --mock / --assets-dir options to a command."""
    func = click.option(
        "--assets-dir",
        type=click.Path(file_okay=False),
        default=None,
        help="Directory containing the installer payload",
    )(func)
    func = click.option(
        "--mock", is_flag=True, help="Alias for --dry-run"
    )(func)
    func = click.option(
        "--dry-run",
        is_flag=True,
        help="Simulate every step without making changes",
    )(func)
    return func


def current_executable() -> str:
    """Return the path of the running installer binary (or script)."""
    if getattr(sys, "frozen", False):
        return sys.executable
    return os.path.abspath(sys.argv[0])


def load_product_config() -> ProductConfig:
    try:
        return load_config()
    except ConfigError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)


def build_context(
    config: ProductConfig,
    dry_run: bool,
    assets_dir: str | None,
    log_name: str = "install.log",
    env: dict[str, str] | None = None,
) -> RuntimeContext:
    """Build the RuntimeContext for a command from its flags and the manifest.

    Args:
        config: Loaded product manifest
        dry_run: Whether --dry-run or --mock was given
        assets_dir: Value of --assets-dir, if any
        log_name: File name of the run log
        env: Environment to read DRY_RUN from; defaults to os.environ

    Returns:
        A frozen RuntimeContext rooted at the manifest's install directory,
        or at the temp sandbox in dry run
    """
    env = dict(os.environ) if env is None else env
    options = RuntimeOptions.from_flags(dry_run, assets_dir, env)
    return resolve_runtime_context(
        options,
        executable=current_executable(),
        cwd=os.getcwd(),
        temp_dir=tempfile.gettempdir(),
        product=config.product,
        install_dir=config.install_dir,
        log_name=log_name,
    )


def ensure_supported_platform(context: RuntimeContext, tool: str) -> None:
    """Raise PreconditionError off Windows unless the run is simulated."""
    if not context.dry_run and not is_windows():
        raise PreconditionError(f"This {tool} is only supported on Windows")


def run_plan(
    context: RuntimeContext,
    plan: list[StepSpec],
    *,
    title: str,
    operation: str,
    banner: str,
    debug: bool,
) -> RunOutcome:
    """Open the log, drive the plan through the orchestrator, close the log."""
    log = setup_logging(debug)
    try:
        log.open(context.log_file, banner=banner)
        renderer = Renderer(title, log=log)
        orchestrator = Orchestrator(plan, context, renderer, operation=operation)
        return asyncio.run(orchestrator.run())
    finally:
        log.close()


def check_platform_or_exit(context: RuntimeContext, tool: str) -> None:
    try:
        ensure_supported_platform(context, tool)
    except PreconditionError as e:
        click.echo(format_suggestion(str(e), "use --dry-run to simulate"), err=True)
        sys.exit(1)
