"""Sequential step driver."""

import asyncio
import logging
import sys
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

import click

from ..errors import format_error
from ..runtime import RuntimeContext
from .contract import as_action
from .models import ActionOutcome, ActionResult, RunOutcome, StepSpec
from .registry import StepRegistry

if TYPE_CHECKING:
    from ..tui import Renderer

_logging = logging.getLogger(__name__)


def wait_for_enter(show_prompt: bool = True) -> None:
    """Block until the user presses Enter (or stdin closes)."""
    if show_prompt:
        click.echo("\nPress Enter to exit...")
    sys.stdin.readline()


class Orchestrator:
    """Run a plan of steps strictly in order against one RuntimeContext.

    The first failed step aborts the run; the remaining steps stay pending.
    Exceptions raised by an action are recovered here and treated exactly like
    a `Failed` result, so the finish / cursor restore / acknowledgment path
    always runs. Dry run is not special-cased: actions read it from the context.
    """

    def __init__(
        self,
        plan: Sequence[StepSpec],
        context: RuntimeContext,
        renderer: "Renderer",
        *,
        acknowledge: Callable[[bool], None] = wait_for_enter,
        operation: str = "Installation",
    ):
        self.plan = list(plan)
        self.context = context
        self.renderer = renderer
        self.acknowledge = acknowledge
        self.operation = operation
        self.registry = StepRegistry((spec.id, spec.label) for spec in self.plan)

    async def run(self) -> RunOutcome:
        async with self.renderer.session(self.registry):
            if self.context.dry_run:
                self.renderer.note("Dry run mode: no changes will be made.")

            failure = await self._run_steps()
            outcome = self._conclude(failure)

        self._print_summary(outcome)
        await asyncio.to_thread(self.acknowledge, not self.renderer.enabled)
        return outcome

    async def _run_steps(self) -> tuple[StepSpec, str] | None:
        for spec in self.plan:
            self.registry.set_active(spec.id, spec.active_detail)
            _logging.info(f"=== {spec.label} ===")

            result = await self._invoke(spec)

            if result.outcome == ActionOutcome.COMPLETED:
                self.registry.complete(spec.id, result.detail)
            elif result.outcome == ActionOutcome.SKIPPED:
                _logging.info(f"{spec.label} skipped: {result.detail}")
                self.registry.skip(spec.id, result.detail)
            else:
                message = result.detail or "Failed"
                _logging.error(f"{spec.label} failed: {message}")
                self.registry.fail(spec.id, message)
                return spec, message
        return None

    async def _invoke(self, spec: StepSpec) -> ActionResult:
        try:
            result = await as_action(spec.action).run(self.context)
        except Exception as e:
            _logging.exception(f"{spec.label} raised {type(e).__name__}")
            return ActionResult.failed(str(e) or type(e).__name__)

        if not isinstance(result, ActionResult):
            return ActionResult.failed(
                f"Action returned {type(result).__name__}, expected ActionResult"
            )
        return result

    def _conclude(self, failure: tuple[StepSpec, str] | None) -> RunOutcome:
        if failure is None:
            _logging.info(f"=== {self.operation} completed successfully ===")
            self.renderer.finish(True, f"{self.operation} complete. Press Enter to exit.")
            return RunOutcome(success=True, message=f"{self.operation} complete")

        spec, message = failure
        _logging.error(f"{self.operation} failed: {message}")
        _logging.info(f"Log file: {self.context.log_file}")
        self.renderer.finish(
            False, f"{message}. Log file: {self.context.log_file}. Press Enter to exit."
        )
        return RunOutcome(success=False, message=message, failed_step=spec.id)

    def _print_summary(self, outcome: RunOutcome) -> None:
        if self.renderer.enabled:
            if not outcome.success:
                click.echo(f"\n{format_error(outcome.message)}", err=True)
            return

        if outcome.success:
            click.echo(f"\n===== {self.operation} Complete =====")
        else:
            click.echo(f"\n{format_error(outcome.message)}", err=True)
        click.echo(f"Log file: {self.context.log_file}")


__all__ = [
    "Orchestrator",
    "wait_for_enter",
]
