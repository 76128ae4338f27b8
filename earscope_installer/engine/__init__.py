"""Step-sequenced orchestration engine."""

from .contract import Action, BlockingAction, FunctionAction, as_action
from .models import (
    ActionOutcome,
    ActionResult,
    RunOutcome,
    RunSnapshot,
    Step,
    StepSpec,
    StepStatus,
)
from .orchestrator import Orchestrator, wait_for_enter
from .registry import StepRegistry

__all__ = [
    "Action",
    "BlockingAction",
    "FunctionAction",
    "as_action",
    "ActionOutcome",
    "ActionResult",
    "RunOutcome",
    "RunSnapshot",
    "Step",
    "StepSpec",
    "StepStatus",
    "Orchestrator",
    "wait_for_enter",
    "StepRegistry",
]
