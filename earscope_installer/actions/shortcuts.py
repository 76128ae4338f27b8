"""Desktop shortcut creation and removal via WScript.Shell."""

import logging
import os

from ..config import ShortcutConfig, resolve_target
from ..engine import Action, ActionResult
from ..execution import escape_powershell_string, run_powershell
from ..runtime import RuntimeContext

_logging = logging.getLogger(__name__)


def shortcut_script(target: str, name: str, folder: bool = False) -> str:
    safe_target = escape_powershell_string(target)
    safe_name = escape_powershell_string(name)
    working_dir = ""
    if not folder:
        safe_dir = escape_powershell_string(os.path.dirname(target))
        working_dir = f"$shortcut.WorkingDirectory = '{safe_dir}'"

    return f"""
$ErrorActionPreference = 'Stop'
try {{
  $desktop = [Environment]::GetFolderPath('Desktop')
  $linkPath = Join-Path $desktop ('{safe_name}' + '.lnk')
  $WshShell = New-Object -ComObject WScript.Shell
  $shortcut = $WshShell.CreateShortcut($linkPath)
  $shortcut.TargetPath = '{safe_target}'
  {working_dir}
  $shortcut.Save()
}} catch {{
  Write-Host ('Failed to create shortcut: ' + $_.Exception.Message)
  exit 1
}}
"""


def remove_shortcut_script(name: str) -> str:
    safe_name = escape_powershell_string(name)
    return f"""
$ErrorActionPreference = 'SilentlyContinue'
$desktop = [Environment]::GetFolderPath('Desktop')
$linkPath = Join-Path $desktop ('{safe_name}' + '.lnk')
if (Test-Path $linkPath) {{ Remove-Item $linkPath -Force }}
"""


class CreateShortcuts(Action):
    """Create a desktop shortcut for every configured target that exists.

    Folder targets are created first so their shortcut always has a target.
    """

    def __init__(self, shortcuts: list[ShortcutConfig]):
        self.shortcuts = shortcuts

    async def run(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            _logging.info("Dry run: skipping desktop shortcuts")
            return ActionResult.skipped("Dry run")

        created = 0
        for shortcut in self.shortcuts:
            target = resolve_target(context.install_dir, shortcut.target)
            if shortcut.folder:
                os.makedirs(target, exist_ok=True)
            if not os.path.exists(target):
                _logging.warning(f'Target not found for shortcut "{shortcut.name}": {target}')
                continue

            output, returncode = await run_powershell(
                shortcut_script(target, shortcut.name, shortcut.folder)
            )
            if returncode != 0:
                _logging.warning(f"Failed to create shortcut: {shortcut.name} - {output}")
                continue
            _logging.info(f"Shortcut created: {shortcut.name}")
            created += 1

        return ActionResult.completed(f"{created} shortcuts")


class RemoveShortcuts(Action):
    def __init__(self, names: list[str]):
        self.names = names

    async def run(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            for name in self.names:
                _logging.info(f'Dry run: skipping shortcut removal for "{name}"')
            return ActionResult.skipped("Dry run")

        for name in self.names:
            await run_powershell(remove_shortcut_script(name))
            _logging.info(f"Removed shortcut: {name}")
        return ActionResult.completed(f"{len(self.names)} shortcuts")


__all__ = [
    "CreateShortcuts",
    "RemoveShortcuts",
    "shortcut_script",
    "remove_shortcut_script",
]
