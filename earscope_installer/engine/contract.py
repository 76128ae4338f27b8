"""The contract every external action satisfies.

An action receives the RuntimeContext and returns exactly one ActionResult.
Actions honour `context.dry_run` themselves: in dry run they skip real
effects and report `Skipped` or a simulated `Completed`.
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from ..runtime import RuntimeContext
from .models import ActionResult


class Action(ABC):
    """Base class for a side-effecting step action."""

    @abstractmethod
    async def run(self, context: RuntimeContext) -> ActionResult:
        ...


class BlockingAction(Action):
    """An action whose work blocks; it runs in a worker thread.

    Keeping the event loop free lets the spinner keep animating while the
    action waits on the filesystem or a child process.
    """

    @abstractmethod
    def run_blocking(self, context: RuntimeContext) -> ActionResult:
        ...

    async def run(self, context: RuntimeContext) -> ActionResult:
        return await asyncio.to_thread(self.run_blocking, context)


class FunctionAction(Action):
    """Adapt a plain callable (sync or async) to the Action contract."""

    def __init__(
        self,
        func: Callable[[RuntimeContext], ActionResult | Awaitable[ActionResult]],
    ):
        self.func = func

    async def run(self, context: RuntimeContext) -> ActionResult:
        if inspect.iscoroutinefunction(self.func):
            return await self.func(context)
        result = await asyncio.to_thread(self.func, context)
        if inspect.isawaitable(result):
            return await result
        return result


def as_action(
    action: Action | Callable[[RuntimeContext], ActionResult | Awaitable[ActionResult]],
) -> Action:
    if isinstance(action, Action):
        return action
    return FunctionAction(action)


__all__ = [
    "Action",
    "BlockingAction",
    "FunctionAction",
    "as_action",
]
