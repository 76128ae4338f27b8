"""Pytest fixtures and utilities for earscope_installer tests."""

import tempfile
import zipfile
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, patch

import pytest

from earscope_installer.runtime import RuntimeContext
from earscope_installer.tui import Renderer


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dry_run_context(temp_dir: Path) -> RuntimeContext:
    root = temp_dir / "earscope-installer-dry-run"
    return RuntimeContext(
        dry_run=True,
        install_dir=str(root / "hes"),
        log_file=str(root / "install.log"),
        assets_dir=str(temp_dir / "assets"),
    )


@pytest.fixture
def live_context(temp_dir: Path) -> RuntimeContext:
    """A non-simulated context whose install and assets dirs are throwaway."""
    assets = temp_dir / "assets"
    assets.mkdir()
    return RuntimeContext(
        dry_run=False,
        install_dir=str(temp_dir / "hes"),
        log_file=str(temp_dir / "hes" / "install.log"),
        assets_dir=str(assets),
    )


@pytest.fixture
def no_subprocess() -> Generator[None, None, None]:
    """Fail the test if anything tries to spawn a child process."""
    failing = AsyncMock(side_effect=AssertionError("subprocess spawned"))
    with patch("asyncio.create_subprocess_exec", failing), patch(
        "asyncio.create_subprocess_shell", failing
    ):
        yield


class RecordingOutput:
    """Stands in for a prompt_toolkit Output and records what was sent to it."""

    def __init__(self):
        self.events: list[str] = []
        self.frames: list[str] = []

    def cursor_goto(self, row: int = 0, column: int = 0) -> None:
        self.events.append(f"goto {row},{column}")

    def write_raw(self, data: str) -> None:
        self.events.append("write")
        self.frames.append(data)

    def erase_down(self) -> None:
        self.events.append("erase_down")

    def hide_cursor(self) -> None:
        self.events.append("hide_cursor")

    def show_cursor(self) -> None:
        self.events.append("show_cursor")

    def flush(self) -> None:
        self.events.append("flush")

    @property
    def last_frame(self) -> str:
        return self.frames[-1] if self.frames else ""


@pytest.fixture
def recording_output() -> RecordingOutput:
    return RecordingOutput()


@pytest.fixture
def tui_renderer(recording_output: RecordingOutput) -> Renderer:
    """An enabled renderer drawing uncolored frames to a RecordingOutput."""
    renderer = Renderer(
        "EARSCOPE Installer",
        enabled=True,
        output=recording_output,
        clock=lambda: 100.0,
        spinner_interval=0.01,
    )
    renderer.use_color = False
    return renderer


@pytest.fixture
def plain_renderer() -> Renderer:
    return Renderer("EARSCOPE Installer", enabled=False, clock=lambda: 100.0)


@pytest.fixture
def isolated_tempdir(temp_dir: Path, monkeypatch) -> Path:
    """Point tempfile.gettempdir() (and so every dry-run path) at temp_dir."""
    monkeypatch.setattr(tempfile, "tempdir", str(temp_dir))
    monkeypatch.delenv("DRY_RUN", raising=False)
    monkeypatch.delenv("EARSCOPE_CONFIG", raising=False)
    monkeypatch.setenv("NO_TUI", "1")
    return temp_dir


@pytest.fixture
def product_assets(temp_dir: Path) -> Path:
    """Build an assets dir holding the two payload zips and the launcher."""
    assets = temp_dir / "payload"
    (assets / "win32-x64").mkdir(parents=True)
    with zipfile.ZipFile(assets / "win32-x64" / "bin.zip", "w") as zf:
        zf.writestr("bin/EARSCOPE_Viewer.exe", b"MZ")
        zf.writestr("bin/data/readme.txt", "data")
    with zipfile.ZipFile(
        assets / "win32-x64" / "ElectronViewer-win32-x64.zip", "w"
    ) as zf:
        zf.writestr("ElectronViewer-win32-x64/ElectronViewer.exe", b"MZ")
    (assets / "launcher.exe").write_bytes(b"MZ")
    return assets
