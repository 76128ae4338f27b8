"""Live progress display for step runs.

This module renders the step registry as a terminal frame:
- title, progress bar with elapsed time, one line per step, status line
- differential repaint: a frame is written only when it changed
- spinner animation for the active step, driven by an owned asyncio task

When the output is not an interactive terminal (or NO_TUI / TERM=dumb say
so) the renderer falls back to plain log lines through `logging`, one per
step transition, with no cursor control and no animation.
"""

import asyncio
import atexit
import contextlib
import logging
import os
import sys
import time
from collections.abc import Callable, Mapping, Sequence
from typing import TextIO

import click
from prompt_toolkit.output import Output, create_output

from .engine.models import RunSnapshot, Step, StepStatus
from .engine.registry import StepRegistry
from .logs import InstallLog

SPINNER_FRAMES = ("-", "\\", "|", "/")
DEFAULT_SPINNER_INTERVAL = 0.12
DEFAULT_BAR_WIDTH = 24

_STATUS_ICONS = {
    StepStatus.DONE: ("[OK]", "green"),
    StepStatus.SKIPPED: ("[SKIP]", "yellow"),
    StepStatus.FAILED: ("[FAIL]", "red"),
    StepStatus.PENDING: ("[..]", "bright_black"),
}

_logging = logging.getLogger(__name__)


def terminal_supports_tui(stream: TextIO, env: Mapping[str, str]) -> bool:
    """Return True when live redraw is allowed on `stream`."""
    no_tui = env.get("NO_TUI", "").strip().lower() in ("1", "true")
    term = env.get("TERM", "").lower()
    try:
        is_tty = stream.isatty()
    except (AttributeError, ValueError):
        is_tty = False
    return is_tty and not no_tui and term != "dumb"


def format_duration(seconds: float) -> str:
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def compute_progress(
    steps: Sequence[Step], bar_width: int = DEFAULT_BAR_WIDTH
) -> tuple[int, int, int, int]:
    """Return (completed, total, percent, filled) where done and skipped count."""
    total = len(steps)
    completed = sum(
        1 for s in steps if s.status in (StepStatus.DONE, StepStatus.SKIPPED)
    )
    if total == 0:
        return 0, 0, 0, 0
    percent = (100 * completed) // total
    filled = min(bar_width, (bar_width * completed) // total)
    return completed, total, percent, filled


def format_progress_line(
    steps: Sequence[Step], elapsed: float, bar_width: int = DEFAULT_BAR_WIDTH
) -> str:
    completed, total, percent, filled = compute_progress(steps, bar_width)
    bar = "=" * filled + "-" * (bar_width - filled)
    return (
        f"Progress: [{bar}] {percent}% ({completed}/{total}) "
        f"Elapsed: {format_duration(elapsed)}"
    )


def status_icon(status: StepStatus, spinner_index: int = 0, color: bool = False) -> str:
    if status == StepStatus.ACTIVE:
        frame = SPINNER_FRAMES[spinner_index % len(SPINNER_FRAMES)]
        text, fg = f"[{frame}]", "cyan"
    else:
        text, fg = _STATUS_ICONS[status]
    return click.style(text, fg=fg) if color else text


def format_step_line(
    step: Step, index: int, spinner_index: int = 0, color: bool = False
) -> str:
    """Format one step as `NN. [ICON] label[ - detail]` (index is 0-based)."""
    line = f"{index + 1:02d}. {status_icon(step.status, spinner_index, color)} {step.label}"
    if step.detail:
        return f"{line} - {step.detail}"
    return line


def format_frame(snapshot: RunSnapshot, title: str, color: bool = False) -> str:
    lines = [title, format_progress_line(snapshot.steps, snapshot.elapsed), ""]
    for index, step in enumerate(snapshot.steps):
        lines.append(format_step_line(step, index, snapshot.spinner_index, color))
    if snapshot.status_line:
        lines.append("")
        lines.append(snapshot.status_line)
    return "\n".join(lines)


class Renderer:
    """Draws a StepRegistry to the terminal, or logs it when that's not possible."""

    def __init__(
        self,
        title: str = "Installer",
        *,
        enabled: bool | None = None,
        output: Output | None = None,
        stream: TextIO | None = None,
        env: Mapping[str, str] | None = None,
        spinner_interval: float = DEFAULT_SPINNER_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        log: InstallLog | None = None,
    ):
        stream = stream or sys.stdout
        env = os.environ if env is None else env
        self.enabled = terminal_supports_tui(stream, env) if enabled is None else enabled
        self.title = title
        self.spinner_interval = spinner_interval
        self.use_color = self.enabled
        self._output = output
        if self.enabled and self._output is None:
            self._output = create_output(stdout=stream)
        self._clock = clock
        self._log = log
        self._registry: StepRegistry | None = None
        self._status_line: str | None = None
        self._start_time: float | None = None
        self._spinner_index = 0
        self._spinner_task: asyncio.Task | None = None
        self._cursor_hidden = False
        self._finished = False
        self._last_rendered = ""

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def spinner_running(self) -> bool:
        return self._spinner_task is not None and not self._spinner_task.done()

    @property
    def status_line(self) -> str | None:
        return self._status_line

    def attach(self, registry: StepRegistry) -> None:
        self.detach()
        self._registry = registry
        registry.subscribe(self._on_step_changed)

    def detach(self) -> None:
        if self._registry is not None:
            self._registry.unsubscribe(self._on_step_changed)
            self._registry = None

    def snapshot(self) -> RunSnapshot:
        steps = self._registry.steps() if self._registry is not None else ()
        start = self._start_time if self._start_time is not None else self._clock()
        return RunSnapshot(
            steps=steps,
            status_line=self._status_line,
            elapsed=self._clock() - start,
            spinner_index=self._spinner_index,
        )

    def start(self) -> None:
        self._start_time = self._clock()
        if not self.enabled:
            return

        if self._log is not None:
            self._log.console_enabled = False
        self._hide_cursor()
        atexit.register(self._restore_terminal)
        self._start_spinner()
        self.render(force=True)

    def note(self, message: str) -> None:
        self._status_line = message
        if self.enabled:
            self.render()
        else:
            _logging.info(message)

    def finish(self, success: bool, message: str | None = None) -> None:
        """Stop the spinner for good and write the final frame."""
        if self._finished:
            return
        self._finished = True
        self._stop_spinner()

        if not self.enabled:
            return

        status = "Completed" if success else "Failed"
        self._status_line = f"{status}: {message}" if message else f"Status: {status}"
        self.render(force=True)
        self._restore_terminal()

    def render(self, force: bool = False) -> bool:
        """Write the current frame; returns False when nothing was written."""
        if not self.enabled or self._output is None:
            return False

        frame = format_frame(self.snapshot(), self.title, color=self.use_color)
        if not force and frame == self._last_rendered:
            return False
        self._last_rendered = frame

        # Home and overwrite rather than clearing the screen, then erase leftovers.
        self._output.cursor_goto(0, 0)
        self._output.write_raw(f"{frame}\n")
        self._output.erase_down()
        self._output.flush()
        return True

    @contextlib.asynccontextmanager
    async def session(self, registry: StepRegistry):
        """Bind `registry` for one run; cleanup happens on every exit path."""
        self.attach(registry)
        self.start()
        try:
            yield self
        finally:
            self._stop_spinner()
            task, self._spinner_task = self._spinner_task, None
            if task is not None:
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            self._restore_terminal()
            self.detach()

    def _on_step_changed(self, step: Step) -> None:
        if self.enabled:
            self.render()
            return

        index = 0
        if self._registry is not None:
            ids = [s.id for s in self._registry.steps()]
            index = ids.index(step.id) if step.id in ids else 0
        _logging.info(format_step_line(step, index))

    def _start_spinner(self) -> None:
        if self._spinner_task is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._spinner_task = loop.create_task(self._spin())

    def _stop_spinner(self) -> None:
        if self._spinner_task is not None and not self._spinner_task.done():
            self._spinner_task.cancel()

    async def _spin(self) -> None:
        while not self._finished:
            await asyncio.sleep(self.spinner_interval)
            if self._finished or self._registry is None:
                continue
            if self._registry.active_id is None:
                continue
            self._spinner_index = (self._spinner_index + 1) % len(SPINNER_FRAMES)
            try:
                self.render()
            except Exception:
                _logging.exception("Spinner repaint failed; animation stopped")
                return

    def _hide_cursor(self) -> None:
        if self._output is not None and not self._cursor_hidden:
            self._output.hide_cursor()
            self._output.flush()
            self._cursor_hidden = True

    def _restore_terminal(self) -> None:
        if self._output is not None and self._cursor_hidden:
            self._output.show_cursor()
            self._output.flush()
            self._cursor_hidden = False
        if self._log is not None:
            self._log.console_enabled = True
        atexit.unregister(self._restore_terminal)


__all__ = [
    "SPINNER_FRAMES",
    "terminal_supports_tui",
    "format_duration",
    "compute_progress",
    "format_progress_line",
    "status_icon",
    "format_step_line",
    "format_frame",
    "Renderer",
]
