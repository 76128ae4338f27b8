"""Runtime context resolution.

Everything a step needs to know about the run (whether effects are real or
simulated, and where things live) is resolved once here from explicit inputs
and then frozen for the lifetime of the run.
"""

import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .paths import INSTALL_DIR, PRODUCT, resolve_assets_dir, resolve_install_paths

DRY_RUN_FLAGS = ("--dry-run", "--mock")
ASSETS_DIR_FLAG = "--assets-dir"
TRUTHY_VALUES = ("1", "true", "yes")


def is_truthy(value: str | None) -> bool:
    if not value:
        return False
    return value.strip().lower() in TRUTHY_VALUES


@dataclass(frozen=True)
class RuntimeOptions:
    """Options parsed from the command line and environment."""
    dry_run: bool = False
    assets_dir: str | None = None

    @classmethod
    def from_flags(
        cls,
        dry_run: bool,
        assets_dir: str | None,
        env: Mapping[str, str],
    ) -> "RuntimeOptions":
        """Build options from already-parsed CLI flags plus the environment."""
        return cls(dry_run=dry_run or is_truthy(env.get("DRY_RUN")), assets_dir=assets_dir)


@dataclass(frozen=True)
class RuntimeContext:
    """Resolved configuration shared by every step of a run."""
    dry_run: bool
    install_dir: str
    log_file: str
    assets_dir: str
    product: str = PRODUCT

    def is_dry_run(self) -> bool:
        return self.dry_run


def parse_runtime_options(argv: Sequence[str], env: Mapping[str, str]) -> RuntimeOptions:
    """Parse runtime options from raw argv and env.

    Args:
        argv: Full command line; argv[0] is the program and is ignored
        env: Environment mapping; a truthy DRY_RUN turns dry run on

    Returns:
        RuntimeOptions with dry_run and the last --assets-dir value seen
    """
    args = list(argv[1:])
    dry_run = is_truthy(env.get("DRY_RUN"))
    assets_dir = None

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in DRY_RUN_FLAGS:
            dry_run = True
        elif arg == ASSETS_DIR_FLAG and i + 1 < len(args) and args[i + 1]:
            assets_dir = args[i + 1]
            i += 1
        elif arg.startswith(f"{ASSETS_DIR_FLAG}="):
            assets_dir = arg[len(ASSETS_DIR_FLAG) + 1:]
        i += 1

    return RuntimeOptions(dry_run=dry_run, assets_dir=assets_dir)


def is_dry_run(env: Mapping[str, str], override: bool | None = None) -> bool:
    """Return the effective dry-run flag; an explicit override beats the env."""
    if override is not None:
        return override
    return is_truthy(env.get("DRY_RUN"))


def resolve_runtime_context(
    options: RuntimeOptions,
    *,
    executable: str,
    cwd: str,
    temp_dir: str,
    dry_run_override: bool | None = None,
    product: str = PRODUCT,
    install_dir: str = INSTALL_DIR,
    log_name: str = "install.log",
) -> RuntimeContext:
    """Resolve the frozen RuntimeContext for a run.

    Pure function of its inputs: no environment, argv or filesystem reads.

    Args:
        options: Parsed dry-run flag and assets directory override
        executable: Path of the running program, used to locate bundled assets
        cwd: Working directory, the fallback assets location
        temp_dir: System temp directory that hosts the dry-run sandbox
        dry_run_override: When not None, replaces options.dry_run
        product: Product name used for the dry-run sandbox directory
        install_dir: Real install directory, used when not in dry run
        log_name: File name of the run log inside the install directory

    Returns:
        The RuntimeContext every step of the run reads from
    """
    if dry_run_override is not None:
        options = RuntimeOptions(dry_run=dry_run_override, assets_dir=options.assets_dir)

    resolved_install_dir, log_file = resolve_install_paths(
        options, temp_dir, product=product, install_dir=install_dir, log_name=log_name
    )
    return RuntimeContext(
        dry_run=options.dry_run,
        install_dir=resolved_install_dir,
        log_file=log_file,
        assets_dir=resolve_assets_dir(executable, options, cwd),
        product=product,
    )


def resolve(
    argv: Sequence[str],
    env: Mapping[str, str],
    *,
    executable: str,
    cwd: str,
    temp_dir: str,
    dry_run_override: bool | None = None,
) -> RuntimeContext:
    """Parse argv/env and resolve the RuntimeContext in one call."""
    return resolve_runtime_context(
        parse_runtime_options(argv, env),
        executable=executable,
        cwd=cwd,
        temp_dir=temp_dir,
        dry_run_override=dry_run_override,
    )


def is_windows(platform: str | None = None) -> bool:
    return (platform or sys.platform) == "win32"


__all__ = [
    "RuntimeOptions",
    "RuntimeContext",
    "is_truthy",
    "parse_runtime_options",
    "is_dry_run",
    "resolve_runtime_context",
    "resolve",
    "is_windows",
]
