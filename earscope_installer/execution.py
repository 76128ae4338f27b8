"""Async command execution utilities."""

import asyncio
import logging
from collections.abc import Sequence
from typing import Tuple

DEFAULT_TIMEOUT = 30
POWERSHELL_TIMEOUT = 120
INSTALL_TIMEOUT = 600

_logging = logging.getLogger(__name__)


def escape_powershell_string(value: str) -> str:
    """Escape a value for use inside a single-quoted PowerShell string."""
    return value.replace("'", "''")


async def run_command_async(
    command: str | Sequence[str], timeout: int | None = DEFAULT_TIMEOUT, debug: bool = False
) -> Tuple[str, int]:
    """Run a command asynchronously and return output and return code.

    A string runs through the shell; a sequence is executed directly.
    """
    process = None
    try:
        if debug:
            _logging.debug(f"Running command: {command}")
        if isinstance(command, str):
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        else:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout
            )
            output = stdout.decode(errors="replace").strip()
            if stderr:
                err_text = stderr.decode(errors="replace").strip()
                if debug:
                    _logging.debug(f"stderr: {err_text}")
                if process.returncode and not output:
                    output = err_text
            return output, process.returncode if process.returncode is not None else 1
        except asyncio.TimeoutError:
            process.kill()
            _ = await process.wait()
            _logging.error(f"Command timed out after {timeout} seconds: {command}")
            return f"Command timed out after {timeout} seconds", 1
    except Exception as e:
        _logging.error(f"Command execution failed: {type(e).__name__}: {e} | Command: {command}")
        return f"Error: {str(e)}", 1
    finally:
        if process:
            transport = getattr(process, "_transport", None)
            if transport:
                transport.close()


async def run_powershell(
    script: str, timeout: int | None = POWERSHELL_TIMEOUT, debug: bool = False
) -> Tuple[str, int]:
    """Run a PowerShell script without loading the user's profile."""
    return await run_command_async(
        ["powershell", "-NoProfile", "-Command", script], timeout=timeout, debug=debug
    )


__all__ = [
    "DEFAULT_TIMEOUT",
    "POWERSHELL_TIMEOUT",
    "INSTALL_TIMEOUT",
    "escape_powershell_string",
    "run_command_async",
    "run_powershell",
]
