"""Startup registration and running-process handling."""

import logging
import os

from ..config import StartupConfig, resolve_target
from ..engine import Action, ActionResult
from ..execution import escape_powershell_string, run_powershell
from ..runtime import RuntimeContext

_logging = logging.getLogger(__name__)

RUN_KEY = "HKCU:\\Software\\Microsoft\\Windows\\CurrentVersion\\Run"


class RegisterStartup(Action):
    """Add the target to the current user's Run key."""

    def __init__(self, startup: StartupConfig):
        self.startup = startup

    async def run(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            _logging.info(f"Dry run: skipping startup registration for {self.startup.name}")
            return ActionResult.skipped("Dry run")

        target = resolve_target(context.install_dir, self.startup.target)
        if not os.path.exists(target):
            _logging.warning(f"{self.startup.name} not found: {target}")
            return ActionResult.skipped("Not found")

        _logging.info(f"Registering {self.startup.name} to Windows startup...")
        safe_name = escape_powershell_string(self.startup.name)
        safe_target = escape_powershell_string(target)
        script = (
            "$ErrorActionPreference = 'Stop'\n"
            f"Set-ItemProperty -Path '{RUN_KEY}' -Name '{safe_name}' "
            f"-Value '\"{safe_target}\"'\n"
        )
        output, returncode = await run_powershell(script)
        if returncode != 0:
            _logging.warning(f"Failed to register to startup: {self.startup.name} - {output}")
            return ActionResult.skipped("Registration failed")

        _logging.info(f"Registered to startup: {self.startup.name}")
        return ActionResult.completed(self.startup.name)


class UnregisterStartup(Action):
    def __init__(self, name: str):
        self.name = name

    async def run(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            _logging.info(f"Dry run: skipping startup removal for {self.name}")
            return ActionResult.skipped("Dry run")

        safe_name = escape_powershell_string(self.name)
        await run_powershell(
            f"Remove-ItemProperty -Path '{RUN_KEY}' -Name '{safe_name}' "
            "-ErrorAction SilentlyContinue"
        )
        _logging.info(f"Removed from startup: {self.name}")
        return ActionResult.completed("OK")


class StopProcesses(Action):
    """Stop the product's processes so their files can be removed."""

    def __init__(self, names: list[str]):
        self.names = names

    async def is_running(self, name: str) -> bool:
        safe_name = escape_powershell_string(name)
        output, _ = await run_powershell(
            f"if (Get-Process -Name '{safe_name}' -ErrorAction SilentlyContinue) "
            "{ Write-Host 'true' } else { Write-Host 'false' }"
        )
        return output.strip().lower() == "true"

    async def stop(self, name: str) -> None:
        safe_name = escape_powershell_string(name)
        await run_powershell(
            f"Stop-Process -Name '{safe_name}' -Force -ErrorAction SilentlyContinue\n"
            "Start-Sleep -Milliseconds 500"
        )
        _logging.info(f"Stopped process: {name}")

    async def run(self, context: RuntimeContext) -> ActionResult:
        if context.dry_run:
            _logging.info("Dry run: assuming no processes are running")
            return ActionResult.skipped("Dry run")

        stopped = []
        for name in self.names:
            if await self.is_running(name):
                _logging.info(f"Process {name} is running, stopping...")
                await self.stop(name)
                stopped.append(name)

        if stopped:
            return ActionResult.completed(f"Stopped: {', '.join(stopped)}")
        return ActionResult.completed("No processes running")


__all__ = [
    "RegisterStartup",
    "UnregisterStartup",
    "StopProcesses",
]
