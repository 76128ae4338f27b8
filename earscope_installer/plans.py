"""Install and uninstall step plans."""

from .actions import (
    CheckEnvironment,
    CopyLauncher,
    CreateShortcuts,
    EnsureAdmin,
    ExtractArchives,
    InstallChrome,
    InstallYnc,
    RegisterStartup,
    RemoveDirectory,
    RemoveShortcuts,
    SetupWinget,
    StopProcesses,
    UnregisterStartup,
)
from .config import ProductConfig
from .engine import ActionResult, FunctionAction, StepSpec


def _not_configured(context) -> ActionResult:
    return ActionResult.skipped("Not configured")


def build_install_plan(config: ProductConfig) -> list[StepSpec]:
    steps = [
        StepSpec("check", "Check environment", CheckEnvironment()),
        StepSpec("admin", "Ensure admin privileges", EnsureAdmin(), "Elevate if prompted"),
        StepSpec("winget", "Install winget", SetupWinget()),
        StepSpec("chrome", "Install Google Chrome", InstallChrome()),
    ]

    if config.ync is not None:
        steps.append(StepSpec("ync", "Install YNC Neo", InstallYnc(config.ync)))

    steps.append(StepSpec("extract", "Extract assets", ExtractArchives(config.archives)))

    if config.launcher:
        steps.append(StepSpec("launcher", "Copy launcher", CopyLauncher(config.launcher)))

    steps.append(
        StepSpec("shortcuts", "Create desktop shortcuts", CreateShortcuts(config.shortcuts))
    )

    if config.startup is not None:
        startup = RegisterStartup(config.startup)
        detail = config.startup.name
    else:
        startup = FunctionAction(_not_configured)
        detail = None
    steps.append(StepSpec("startup", "Register startup entry", startup, detail))
    return steps


def build_uninstall_plan(
    config: ProductConfig, install_dir: str | None = None
) -> list[StepSpec]:
    startup_name = config.startup.name if config.startup is not None else None
    registry_action = (
        UnregisterStartup(startup_name) if startup_name else FunctionAction(_not_configured)
    )
    return [
        StepSpec("check", "Check environment", CheckEnvironment()),
        StepSpec("admin", "Ensure admin privileges", EnsureAdmin(), "Elevate if prompted"),
        StepSpec(
            "stop",
            "Stop running processes",
            StopProcesses(config.processes_to_stop),
            "Checking processes",
        ),
        StepSpec("registry", "Remove registry entry", registry_action, startup_name),
        StepSpec(
            "shortcuts",
            "Remove desktop shortcuts",
            RemoveShortcuts(config.shortcuts_to_remove),
        ),
        StepSpec(
            "directory", "Remove installation directory", RemoveDirectory(), install_dir
        ),
    ]


__all__ = [
    "build_install_plan",
    "build_uninstall_plan",
]
