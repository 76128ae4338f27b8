"""Ordered step registry and its state machine."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace

from .models import Step, StepStatus

_logging = logging.getLogger(__name__)

# Legal moves; `active -> pending` only happens as a demotion in set_active.
_TRANSITIONS = {
    StepStatus.PENDING: {StepStatus.ACTIVE, StepStatus.SKIPPED, StepStatus.FAILED},
    StepStatus.ACTIVE: {StepStatus.DONE, StepStatus.SKIPPED, StepStatus.FAILED},
}

StepListener = Callable[[Step], None]


class StepRegistry:
    """Fixed-size ordered list of steps driven through their lifecycle.

    Every operation is a no-op for unknown ids or illegal transitions and
    never raises, not even when a listener does: the failure is logged and
    the transition stands.
    Steps are frozen values, so `steps()` hands out a safe snapshot.
    """

    def __init__(self, steps: Iterable[tuple[str, str]]):
        self._order: list[str] = []
        self._steps: dict[str, Step] = {}
        for step_id, label in steps:
            if step_id in self._steps:
                raise ValueError(f"Duplicate step id: {step_id}")
            self._order.append(step_id)
            self._steps[step_id] = Step(id=step_id, label=label)
        self._active_id: str | None = None
        self._listeners: list[StepListener] = []

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps

    @property
    def active_id(self) -> str | None:
        return self._active_id

    def steps(self) -> tuple[Step, ...]:
        return tuple(self._steps[step_id] for step_id in self._order)

    def get(self, step_id: str) -> Step | None:
        return self._steps.get(step_id)

    def counts(self) -> dict[StepStatus, int]:
        counts = {status: 0 for status in StepStatus}
        for step in self._steps.values():
            counts[step.status] += 1
        return counts

    @property
    def is_finished(self) -> bool:
        return all(step.status.is_terminal for step in self._steps.values())

    def subscribe(self, listener: StepListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: StepListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_active(self, step_id: str, detail: str | None = None) -> None:
        step = self._steps.get(step_id)
        if step is None:
            _logging.debug(f"set_active ignored for unknown step '{step_id}'")
            return
        if step.status not in (StepStatus.PENDING, StepStatus.ACTIVE):
            _logging.debug(f"set_active ignored for {step.status.value} step '{step_id}'")
            return

        if self._active_id is not None and self._active_id != step_id:
            demoted = self._steps[self._active_id]
            if demoted.status == StepStatus.ACTIVE:
                self._replace(demoted, StepStatus.PENDING, None)

        self._active_id = step_id
        self._replace(step, StepStatus.ACTIVE, detail)

    def complete(self, step_id: str, detail: str | None = None) -> None:
        self._finish(step_id, StepStatus.DONE, detail)

    def skip(self, step_id: str, detail: str | None = None) -> None:
        self._finish(step_id, StepStatus.SKIPPED, detail)

    def fail(self, step_id: str, detail: str | None = None) -> None:
        self._finish(step_id, StepStatus.FAILED, detail)

    def fail_active(self, detail: str | None = None) -> None:
        """Fail whichever step is active; no-op when none is."""
        if self._active_id is not None:
            self.fail(self._active_id, detail)

    def _finish(self, step_id: str, status: StepStatus, detail: str | None) -> None:
        step = self._steps.get(step_id)
        if step is None:
            _logging.debug(f"{status.value} ignored for unknown step '{step_id}'")
            return
        if status not in _TRANSITIONS.get(step.status, set()):
            _logging.debug(
                f"Illegal transition {step.status.value} -> {status.value} for '{step_id}'"
            )
            return

        if self._active_id == step_id:
            self._active_id = None
        self._replace(step, status, detail)

    def _replace(self, step: Step, status: StepStatus, detail: str | None) -> None:
        updated = replace(step, status=status, detail=detail if detail else step.detail)
        self._steps[step.id] = updated
        for listener in list(self._listeners):
            try:
                listener(updated)
            except Exception:
                _logging.exception(f"Listener failed for step '{step.id}'")


__all__ = [
    "StepRegistry",
    "StepListener",
]
