"""Third-party package installs: winget, Google Chrome and YNC Neo."""

import glob
import logging
import os

from ..config import YncConfig
from ..engine import Action, ActionResult
from ..execution import (
    INSTALL_TIMEOUT,
    escape_powershell_string,
    run_command_async,
    run_powershell,
)
from ..runtime import RuntimeContext

_logging = logging.getLogger(__name__)

WINGET_DOWNLOAD_URL = (
    "https://github.com/microsoft/winget-cli/releases/latest/download/"
    "Microsoft.DesktopAppInstaller_8wekyb3d8bbwe.msixbundle"
)

# PATH is not refreshed in this process after winget installs, so call it by path.
_WINGET_PATH = (
    '$wingetPath = "$env:LOCALAPPDATA\\Microsoft\\WindowsApps\\winget.exe"\n'
    'if (!(Test-Path $wingetPath)) { $wingetPath = "winget" }\n'
)


def _winget_install_script(temp_path: str) -> str:
    safe_temp_path = escape_powershell_string(temp_path)
    return f"""
$ErrorActionPreference = 'Stop'
$ProgressPreference = 'SilentlyContinue'
try {{
  Invoke-WebRequest -Uri '{WINGET_DOWNLOAD_URL}' -OutFile '{safe_temp_path}'
  Add-AppxPackage -Path '{safe_temp_path}' -ForceApplicationShutdown -ForceUpdateFromAnyVersion 2>$null
  Remove-Item '{safe_temp_path}' -ErrorAction SilentlyContinue
}} catch {{
  Write-Host ('Error: ' + $_.Exception.Message)
  exit 1
}}
"""


class SetupWinget(Action):
    """Install winget and refresh its sources."""

    async def run(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            _logging.info("Dry run: skipping winget installation")
            return ActionResult.skipped("Dry run")

        temp_dir = os.environ.get("TEMP") or os.environ.get("TMP") or "C:\\Temp"
        temp_path = os.path.join(temp_dir, "winget_installer.msixbundle")

        _logging.info("Installing winget...")
        output, returncode = await run_powershell(
            _winget_install_script(temp_path), timeout=INSTALL_TIMEOUT
        )
        if returncode != 0:
            return ActionResult.failed(f"winget installation failed: {output}")

        _logging.info("Initializing winget...")
        init_script = (
            _WINGET_PATH
            + "& $wingetPath upgrade --id Microsoft.DesktopAppInstaller -s msstore -e 2>$null\n"
            + "& $wingetPath source reset 2>$null\n"
            + "& $wingetPath source update 2>$null\n"
        )
        _, returncode = await run_powershell(init_script, timeout=INSTALL_TIMEOUT)
        if returncode != 0:
            _logging.warning(
                "winget initialization returned non-zero exit code (may be normal)"
            )
        return ActionResult.completed("OK")


class InstallChrome(Action):
    """Install Google Chrome through winget; a non-zero exit is not fatal."""

    async def run(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            _logging.info("Dry run: skipping Google Chrome installation")
            return ActionResult.skipped("Dry run")

        _logging.info("Installing Google Chrome...")
        script = (
            "$ErrorActionPreference = 'Stop'\n"
            + _WINGET_PATH
            + "& $wingetPath install --id Google.Chrome -e "
            "--accept-package-agreements --accept-source-agreements --silent\n"
        )
        output, returncode = await run_powershell(script, timeout=INSTALL_TIMEOUT)
        if returncode != 0:
            _logging.warning(
                f"Chrome installation returned non-zero exit code "
                f"(may already be installed): {output}"
            )
            return ActionResult.skipped("May already be installed")

        _logging.info("Google Chrome installed successfully")
        return ActionResult.completed("OK")


class InstallYnc(Action):
    """Run the bundled YNC Neo installer when its assets ship with the payload."""

    def __init__(self, ync: YncConfig):
        self.ync = ync

    def find_installer(self, assets_dir: str) -> str | None:
        pattern = os.path.join(assets_dir, self.ync.assets_dir, self.ync.installer_glob)
        matches = sorted(glob.glob(pattern))
        return matches[0] if matches else None

    async def run(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            _logging.info("Dry run: skipping YNCneo installation")
            return ActionResult.skipped("Dry run")

        if not os.path.isdir(os.path.join(context.assets_dir, self.ync.assets_dir)):
            _logging.info("YNCneo assets not found, skipping YNCneo installation")
            return ActionResult.skipped("Assets not found")

        if os.path.exists(self.ync.executable):
            _logging.info("YNCneo is already installed, skipping...")
            return ActionResult.skipped("Already installed")

        installer = self.find_installer(context.assets_dir)
        if not installer:
            _logging.info("YNCneo installer not found, skipping...")
            return ActionResult.skipped("Installer not found")

        _logging.info(f"Launching YNCneo installer: {installer}")
        _, returncode = await run_command_async(
            ["cmd", "/c", "start", "/wait", "", installer], timeout=INSTALL_TIMEOUT
        )
        if returncode != 0:
            _logging.warning(f"YNCneo installer exited with code {returncode}")
            return ActionResult.skipped(f"Installer exited with code {returncode}")

        _logging.info("YNCneo installation completed")
        return ActionResult.completed("OK")


__all__ = [
    "SetupWinget",
    "InstallChrome",
    "InstallYnc",
]
