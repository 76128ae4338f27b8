"""Concrete step actions for the install and uninstall plans."""

from .environment import CheckEnvironment, EnsureAdmin, elevation_script, relaunch_command
from .files import CopyLauncher, ExtractArchives, RemoveDirectory
from .packages import InstallChrome, InstallYnc, SetupWinget
from .shortcuts import CreateShortcuts, RemoveShortcuts
from .system import RegisterStartup, StopProcesses, UnregisterStartup

__all__ = [
    "CheckEnvironment",
    "EnsureAdmin",
    "elevation_script",
    "relaunch_command",
    "CopyLauncher",
    "ExtractArchives",
    "RemoveDirectory",
    "InstallChrome",
    "InstallYnc",
    "SetupWinget",
    "CreateShortcuts",
    "RemoveShortcuts",
    "RegisterStartup",
    "StopProcesses",
    "UnregisterStartup",
]
