"""Environment and privilege actions."""

import logging
import subprocess
import sys
from collections.abc import Sequence

from ..engine import Action, ActionResult
from ..execution import escape_powershell_string, run_powershell
from ..runtime import RuntimeContext, is_windows

_logging = logging.getLogger(__name__)

IS_ADMIN_SCRIPT = (
    "([Security.Principal.WindowsPrincipal]"
    "[Security.Principal.WindowsIdentity]::GetCurrent())"
    ".IsInRole([Security.Principal.WindowsBuiltInRole]::Administrator)"
)
ELEVATION_DECLINED = "ElevationDeclined"


def elevation_script(exe: str, args: str) -> str:
    """Build the RunAs relaunch script; it exits with the elevated copy's code.

    Args:
        exe: Escaped path of the program to relaunch
        args: Escaped command line for it, possibly empty

    Returns:
        PowerShell that prints ELEVATION_DECLINED when the UAC prompt is refused
    """
    start = f"Start-Process -FilePath '{exe}' -Verb RunAs -Wait -PassThru"
    if args:
        start += f" -ArgumentList '{args}'"
    return f"""
try {{
  $p = {start} -ErrorAction Stop
}} catch {{
  Write-Host ('{ELEVATION_DECLINED}: ' + $_.Exception.Message)
  exit 1
}}
exit $p.ExitCode
"""


def relaunch_command() -> list[str]:
    """Return the argv that re-runs this process (frozen binary or script)."""
    if getattr(sys, "frozen", False):
        return [sys.executable, *sys.argv[1:]]
    return [sys.executable, *sys.argv]


class CheckEnvironment(Action):
    """Confirm the host can run the suite; bypassed in dry run."""

    def __init__(self, platform: str | None = None):
        self.platform = platform

    async def run(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            return ActionResult.completed("Dry run")
        if not is_windows(self.platform):
            return ActionResult.failed("Windows only")
        return ActionResult.completed("Windows")


class EnsureAdmin(Action):
    """Make sure the run has administrator rights.

    When not elevated, the same command is relaunched through a UAC prompt and
    this process exits with the elevated copy's exit code once it finishes.
    A declined prompt is reported as a failed step.
    """

    def __init__(self, command: Sequence[str] | None = None):
        self.command = list(command) if command is not None else None

    async def run(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            _logging.info("Dry run: skipping administrator elevation")
            return ActionResult.skipped("Dry run")

        output, returncode = await run_powershell(IS_ADMIN_SCRIPT)
        if returncode == 0 and output.strip().lower() == "true":
            _logging.info("Running with administrator privileges.")
            return ActionResult.completed("OK")

        _logging.warning("Not running as administrator. Requesting elevation...")
        command = self.command or relaunch_command()
        exe = escape_powershell_string(command[0])
        args = escape_powershell_string(subprocess.list2cmdline(command[1:]))
        output, returncode = await run_powershell(elevation_script(exe, args), timeout=None)
        if returncode != 0 and output:
            _logging.error(f"Elevation failed: {output}")
            if ELEVATION_DECLINED in output:
                return ActionResult.failed("Administrator elevation was declined")
            return ActionResult.failed(f"Elevation failed: {output}")

        _logging.info(f"Elevated process finished with exit code {returncode}; exiting")
        raise SystemExit(returncode)


__all__ = [
    "CheckEnvironment",
    "EnsureAdmin",
    "elevation_script",
    "relaunch_command",
]
