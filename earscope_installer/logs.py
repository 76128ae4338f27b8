"""Install log: persistent append-only file plus optional console echo."""

import logging
import os
from datetime import datetime

import click

LOGGER_NAME = "earscope_installer"
FILE_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
CONSOLE_FORMAT = "[%(levelname)s] %(message)s"


class ClickEchoHandler(logging.Handler):
    """Echo records to the terminal through click; errors go to stderr."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            click.echo(msg, err=record.levelno >= logging.ERROR)
        except Exception:
            self.handleError(record)


class _ConsoleGate(logging.Filter):
    def __init__(self):
        super().__init__()
        self.enabled = True

    def filter(self, record: logging.LogRecord) -> bool:
        return self.enabled


class InstallLog:
    """Owns the handlers of the `earscope_installer` logger for one process.

    Module code logs through `logging.getLogger(__name__)` as usual; this
    object decides where those records end up. The console echo can be
    switched off while the terminal UI owns the screen.
    """

    def __init__(self, name: str = LOGGER_NAME):
        self.logger = logging.getLogger(name)
        self.path: str | None = None
        self._file_handler: logging.FileHandler | None = None
        self._gate = _ConsoleGate()
        self._console_handler = ClickEchoHandler()
        self._console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        self._console_handler.addFilter(self._gate)
        self._saved_state: tuple[int, bool] | None = None

    def configure(self, debug: bool = False) -> None:
        """Attach the console handler and set the level."""
        if self._saved_state is None:
            self._saved_state = (self.logger.level, self.logger.propagate)
        self.logger.setLevel(logging.DEBUG if debug else logging.INFO)
        self.logger.propagate = False
        if self._console_handler not in self.logger.handlers:
            self.logger.addHandler(self._console_handler)

    @property
    def console_enabled(self) -> bool:
        return self._gate.enabled

    @console_enabled.setter
    def console_enabled(self, enabled: bool) -> None:
        self._gate.enabled = enabled

    def open(self, path: str, banner: str | None = None) -> None:
        """Start appending to `path`, creating its directory if needed."""
        if self._file_handler is not None:
            self._detach_file()

        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        if banner:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            with open(path, "a", encoding="utf-8") as f:
                f.write(f"===== {banner} at {timestamp} =====\n")

        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
        self.logger.addHandler(handler)
        self._file_handler = handler
        self.path = path

    def _detach_file(self) -> None:
        if self._file_handler is None:
            return
        self.logger.removeHandler(self._file_handler)
        self._file_handler.close()
        self._file_handler = None

    def close(self) -> None:
        """Flush and detach every handler this object attached."""
        self._detach_file()
        if self._console_handler in self.logger.handlers:
            self.logger.removeHandler(self._console_handler)
        self._gate.enabled = True
        if self._saved_state is not None:
            level, propagate = self._saved_state
            self.logger.setLevel(level)
            self.logger.propagate = propagate
            self._saved_state = None


def setup_logging(debug: bool = False) -> InstallLog:
    """Create and configure the process install log."""
    log = InstallLog()
    log.configure(debug)
    return log


__all__ = [
    "LOGGER_NAME",
    "ClickEchoHandler",
    "InstallLog",
    "setup_logging",
]
