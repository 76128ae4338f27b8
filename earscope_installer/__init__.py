"""EARSCOPE installer, uninstaller and launcher."""

__version__ = "1.0.0"

from .config import ConfigError, ProductConfig, load_config
from .engine import (
    Action,
    ActionOutcome,
    ActionResult,
    BlockingAction,
    Orchestrator,
    RunOutcome,
    Step,
    StepRegistry,
    StepSpec,
    StepStatus,
)
from .errors import PreconditionError, format_error, format_suggestion
from .logs import InstallLog, setup_logging
from .runtime import (
    RuntimeContext,
    RuntimeOptions,
    is_dry_run,
    parse_runtime_options,
    resolve,
    resolve_runtime_context,
)
from .tui import Renderer
from .versions import compare_versions, parse_version

__all__ = [
    "__version__",
    "ConfigError",
    "ProductConfig",
    "load_config",
    "Action",
    "ActionOutcome",
    "ActionResult",
    "BlockingAction",
    "Orchestrator",
    "RunOutcome",
    "Step",
    "StepRegistry",
    "StepSpec",
    "StepStatus",
    "PreconditionError",
    "format_error",
    "format_suggestion",
    "InstallLog",
    "setup_logging",
    "RuntimeContext",
    "RuntimeOptions",
    "is_dry_run",
    "parse_runtime_options",
    "resolve",
    "resolve_runtime_context",
    "Renderer",
    "compare_versions",
    "parse_version",
]
