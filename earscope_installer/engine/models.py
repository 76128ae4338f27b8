"""Data models for the step engine."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .contract import Action


class StepStatus(Enum):
    PENDING = "pending"
    ACTIVE = "active"
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (StepStatus.DONE, StepStatus.SKIPPED, StepStatus.FAILED)


@dataclass(frozen=True)
class Step:
    id: str
    label: str
    status: StepStatus = StepStatus.PENDING
    detail: str | None = None


@dataclass(frozen=True)
class RunSnapshot:
    """Immutable view of a run taken at render time."""
    steps: tuple[Step, ...]
    status_line: str | None = None
    elapsed: float = 0.0
    spinner_index: int = 0

    @property
    def completed(self) -> int:
        return sum(
            1 for s in self.steps if s.status in (StepStatus.DONE, StepStatus.SKIPPED)
        )


class ActionOutcome(Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one external action invocation."""
    outcome: ActionOutcome
    detail: str | None = None

    @classmethod
    def completed(cls, detail: str | None = None) -> "ActionResult":
        return cls(ActionOutcome.COMPLETED, detail)

    @classmethod
    def skipped(cls, reason: str) -> "ActionResult":
        return cls(ActionOutcome.SKIPPED, reason)

    @classmethod
    def failed(cls, message: str) -> "ActionResult":
        return cls(ActionOutcome.FAILED, message)

    @property
    def is_failure(self) -> bool:
        return self.outcome == ActionOutcome.FAILED


@dataclass
class StepSpec:
    """A step of a plan: identity, label and the action bound to it."""
    id: str
    label: str
    action: "Action"
    active_detail: str | None = None


@dataclass
class RunOutcome:
    success: bool
    message: str
    failed_step: str | None = None

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


__all__ = [
    "StepStatus",
    "Step",
    "RunSnapshot",
    "ActionOutcome",
    "ActionResult",
    "StepSpec",
    "RunOutcome",
]
