"""Payload extraction, copying and removal."""

import logging
import os
import shutil

from ..config import ArchiveConfig, resolve_target
from ..engine import ActionResult, BlockingAction
from ..runtime import RuntimeContext

_logging = logging.getLogger(__name__)


def _asset_path(assets_dir: str, relative: str) -> str:
    return os.path.join(assets_dir, *relative.split("/"))


class ExtractArchives(BlockingAction):
    """Unzip each payload archive into the install dir and verify its executable.

    The archives carry their own top-level folder, so they are extracted
    straight into the install dir. A missing archive is only a warning; a
    missing executable after extraction fails the step.
    """

    def __init__(self, archives: list[ArchiveConfig]):
        self.archives = archives

    def run_blocking(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            for archive in self.archives:
                _logging.info(f"Dry run: skipping extraction of {archive.path}")
            return ActionResult.skipped("Dry run")

        os.makedirs(context.install_dir, exist_ok=True)
        extracted = 0
        for archive in self.archives:
            src = _asset_path(context.assets_dir, archive.path)
            if not os.path.isfile(src):
                _logging.warning(f"{os.path.basename(src)} not found: {src}")
                continue

            _logging.info(f"Extracting {src} to {context.install_dir}...")
            try:
                shutil.unpack_archive(src, context.install_dir, format="zip")
            except (shutil.ReadError, OSError) as e:
                return ActionResult.failed(f"Failed to extract {src}: {e}")

            expected = resolve_target(context.install_dir, archive.executable)
            if not os.path.exists(expected):
                return ActionResult.failed(
                    f"{os.path.basename(expected)} not found after extraction: {expected}"
                )
            _logging.info(f"Extracted {src} successfully")
            extracted += 1

        if extracted == 0:
            return ActionResult.skipped("No archives found")
        return ActionResult.completed(f"{extracted} archives")


class CopyLauncher(BlockingAction):
    def __init__(self, launcher: str):
        self.launcher = launcher

    def run_blocking(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            return ActionResult.skipped("Dry run")

        src = _asset_path(context.assets_dir, self.launcher)
        if not os.path.isfile(src):
            _logging.warning(f"{self.launcher} not found: {src}")
            return ActionResult.skipped("Not found")

        os.makedirs(context.install_dir, exist_ok=True)
        shutil.copy2(src, resolve_target(context.install_dir, self.launcher))
        _logging.info(f"Copied {self.launcher} to installation directory")
        return ActionResult.completed("OK")


class RemoveDirectory(BlockingAction):
    """Delete the install dir and everything in it."""

    def run_blocking(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            _logging.info(f'Dry run: skipping directory removal for "{context.install_dir}"')
            return ActionResult.skipped("Dry run")

        if not os.path.exists(context.install_dir):
            return ActionResult.skipped("Not installed")

        shutil.rmtree(context.install_dir)
        _logging.info(f"Removed directory: {context.install_dir}")
        return ActionResult.completed("OK")


__all__ = [
    "ExtractArchives",
    "CopyLauncher",
    "RemoveDirectory",
]
