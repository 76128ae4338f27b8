"""Install and asset path helpers."""

import ntpath
import os
from typing import Protocol

PRODUCT = "earscope"
INSTALL_DIR = "C:\\hes"
DRY_RUN_INSTALL_DIR_NAME = "hes"


class _PathOptions(Protocol):
    dry_run: bool
    assets_dir: str | None


def dry_run_root(temp_dir: str, product: str = PRODUCT) -> str:
    """Return the temp subtree that stands in for the install location in dry run."""
    return os.path.join(temp_dir, f"{product}-installer-dry-run")


def resolve_install_paths(
    options: _PathOptions,
    temp_dir: str,
    product: str = PRODUCT,
    install_dir: str = INSTALL_DIR,
    log_name: str = "install.log",
) -> tuple[str, str]:
    """Return (install_dir, log_file) for the run.

    In dry run both live under `<temp_dir>/<product>-installer-dry-run` so no
    real filesystem state is touched. Otherwise the fixed product location is
    used and `temp_dir` is ignored.
    """
    if options.dry_run:
        base_dir = dry_run_root(temp_dir, product)
        return (
            os.path.join(base_dir, DRY_RUN_INSTALL_DIR_NAME),
            os.path.join(base_dir, log_name),
        )

    return install_dir, ntpath.join(install_dir, log_name)


def resolve_assets_dir(executable: str, options: _PathOptions, cwd: str) -> str:
    """Return the directory holding the installer payload.

    Priority:
    1. Explicit --assets-dir override (if not blank)
    2. The working directory, in dry run
    3. The directory containing the running executable
    """
    if options.assets_dir and options.assets_dir.strip():
        return options.assets_dir
    if options.dry_run:
        return cwd
    return os.path.dirname(executable)


__all__ = [
    "PRODUCT",
    "INSTALL_DIR",
    "dry_run_root",
    "resolve_install_paths",
    "resolve_assets_dir",
]
