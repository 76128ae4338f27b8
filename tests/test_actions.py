"""Tests for the concrete install and uninstall actions."""

import dataclasses
import os
import zipfile
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from earscope_installer.actions import (
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
from earscope_installer.actions.shortcuts import shortcut_script
from earscope_installer.config import (
    ArchiveConfig,
    ShortcutConfig,
    StartupConfig,
    YncConfig,
    load_config,
)
from earscope_installer.engine import ActionOutcome
from earscope_installer.execution import escape_powershell_string

VIEWER = ArchiveConfig("win32-x64/bin.zip", "bin/EARSCOPE_Viewer.exe")


def write_zip(path: Path, members: dict[str, bytes]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in members.items():
            zf.writestr(name, data)


class TestDryRun:
    """Every action must report without side effects when the run is simulated."""

    @pytest.mark.asyncio
    async def test_all_actions_skip(self, dry_run_context, no_subprocess):
        config = load_config()
        actions = [
            EnsureAdmin(),
            SetupWinget(),
            InstallChrome(),
            InstallYnc(config.ync),
            ExtractArchives(config.archives),
            CopyLauncher(config.launcher),
            CreateShortcuts(config.shortcuts),
            RegisterStartup(config.startup),
            StopProcesses(config.processes_to_stop),
            UnregisterStartup(config.startup.name),
            RemoveShortcuts(config.shortcuts_to_remove),
            RemoveDirectory(),
        ]
        for action in actions:
            result = await action.run(dry_run_context)
            assert result.outcome == ActionOutcome.SKIPPED, type(action).__name__
            assert result.detail == "Dry run"

        assert not os.path.exists(dry_run_context.install_dir)

    @pytest.mark.asyncio
    async def test_environment_check_passes(self, dry_run_context):
        result = await CheckEnvironment(platform="linux").run(dry_run_context)
        assert result.outcome == ActionOutcome.COMPLETED


class TestCheckEnvironment:
    @pytest.mark.asyncio
    async def test_windows(self, live_context):
        result = await CheckEnvironment(platform="win32").run(live_context)
        assert result.outcome == ActionOutcome.COMPLETED
        assert result.detail == "Windows"

    @pytest.mark.asyncio
    async def test_other_platform_fails(self, live_context):
        result = await CheckEnvironment(platform="linux").run(live_context)
        assert result.is_failure
        assert result.detail == "Windows only"


class TestEnsureAdmin:
    @pytest.mark.asyncio
    async def test_already_admin(self, live_context):
        with patch(
            "earscope_installer.actions.environment.run_powershell",
            AsyncMock(return_value=("True", 0)),
        ):
            result = await EnsureAdmin().run(live_context)
        assert result.outcome == ActionOutcome.COMPLETED

    @pytest.mark.asyncio
    async def test_declined_elevation_fails(self, live_context):
        declined = ("ElevationDeclined: The operation was canceled by the user.", 1)
        mock = AsyncMock(side_effect=[("False", 0), declined])
        with patch("earscope_installer.actions.environment.run_powershell", mock):
            result = await EnsureAdmin(["C:\\setup.exe", "install"]).run(live_context)
        assert result.is_failure
        assert "declined" in result.detail
        script = mock.call_args_list[1].args[0]
        assert "-FilePath 'C:\\setup.exe' -Verb RunAs -Wait" in script
        assert "-ArgumentList 'install'" in script
        assert "-PassThru" in script

    @pytest.mark.asyncio
    async def test_elevated_copy_takes_over(self, live_context):
        mock = AsyncMock(side_effect=[("False", 0), ("", 0)])
        with patch("earscope_installer.actions.environment.run_powershell", mock):
            with pytest.raises(SystemExit) as exc_info:
                await EnsureAdmin(["C:\\setup.exe"]).run(live_context)
        assert exc_info.value.code == 0

    @pytest.mark.asyncio
    async def test_exit_code_of_elevated_copy_is_propagated(self, live_context):
        mock = AsyncMock(side_effect=[("False", 0), ("", 1)])
        with patch("earscope_installer.actions.environment.run_powershell", mock):
            with pytest.raises(SystemExit) as exc_info:
                await EnsureAdmin(["C:\\setup.exe", "install"]).run(live_context)
        assert exc_info.value.code == 1
        assert "exit $p.ExitCode" in mock.call_args_list[1].args[0]

    @pytest.mark.asyncio
    async def test_powershell_error_is_not_an_exit(self, live_context):
        mock = AsyncMock(side_effect=[("False", 0), ("Error: powershell not found", 1)])
        with patch("earscope_installer.actions.environment.run_powershell", mock):
            result = await EnsureAdmin(["C:\\setup.exe"]).run(live_context)
        assert result.is_failure
        assert "powershell not found" in result.detail


class TestExtractArchives:
    def test_extracts_and_verifies(self, live_context):
        write_zip(
            Path(live_context.assets_dir) / "win32-x64" / "bin.zip",
            {"bin/EARSCOPE_Viewer.exe": b"MZ"},
        )
        result = ExtractArchives([VIEWER]).run_blocking(live_context)
        assert result.outcome == ActionOutcome.COMPLETED
        assert result.detail == "1 archives"
        assert os.path.isfile(
            os.path.join(live_context.install_dir, "bin", "EARSCOPE_Viewer.exe")
        )

    def test_missing_executable_fails(self, live_context):
        write_zip(
            Path(live_context.assets_dir) / "win32-x64" / "bin.zip",
            {"bin/other.exe": b"MZ"},
        )
        result = ExtractArchives([VIEWER]).run_blocking(live_context)
        assert result.is_failure
        assert "EARSCOPE_Viewer.exe not found after extraction" in result.detail

    def test_corrupt_archive_fails(self, live_context):
        path = Path(live_context.assets_dir) / "win32-x64" / "bin.zip"
        path.parent.mkdir(parents=True)
        path.write_bytes(b"not a zip")
        result = ExtractArchives([VIEWER]).run_blocking(live_context)
        assert result.is_failure
        assert result.detail.startswith("Failed to extract")

    def test_no_archives_present(self, live_context):
        result = ExtractArchives([VIEWER]).run_blocking(live_context)
        assert result.outcome == ActionOutcome.SKIPPED
        assert result.detail == "No archives found"

    @pytest.mark.asyncio
    async def test_full_payload(self, live_context, product_assets):
        context = dataclasses.replace(live_context, assets_dir=str(product_assets))
        result = await ExtractArchives(load_config().archives).run(context)
        assert result.detail == "2 archives"


class TestCopyAndRemove:
    def test_copy_launcher(self, live_context):
        Path(live_context.assets_dir, "launcher.exe").write_bytes(b"MZ")
        result = CopyLauncher("launcher.exe").run_blocking(live_context)
        assert result.outcome == ActionOutcome.COMPLETED
        assert os.path.isfile(os.path.join(live_context.install_dir, "launcher.exe"))

    def test_missing_launcher_skips(self, live_context):
        result = CopyLauncher("launcher.exe").run_blocking(live_context)
        assert result.outcome == ActionOutcome.SKIPPED

    def test_remove_directory(self, live_context):
        os.makedirs(os.path.join(live_context.install_dir, "bin"))
        result = RemoveDirectory().run_blocking(live_context)
        assert result.outcome == ActionOutcome.COMPLETED
        assert not os.path.exists(live_context.install_dir)

    def test_remove_missing_directory(self, live_context):
        result = RemoveDirectory().run_blocking(live_context)
        assert result.outcome == ActionOutcome.SKIPPED
        assert result.detail == "Not installed"


class TestPackages:
    @pytest.mark.asyncio
    async def test_winget_failure_fails_step(self, live_context):
        with patch(
            "earscope_installer.actions.packages.run_powershell",
            AsyncMock(return_value=("Error: offline", 1)),
        ):
            result = await SetupWinget().run(live_context)
        assert result.is_failure
        assert "offline" in result.detail

    @pytest.mark.asyncio
    async def test_winget_init_failure_is_tolerated(self, live_context):
        with patch(
            "earscope_installer.actions.packages.run_powershell",
            AsyncMock(side_effect=[("", 0), ("", 1)]),
        ):
            result = await SetupWinget().run(live_context)
        assert result.outcome == ActionOutcome.COMPLETED

    @pytest.mark.asyncio
    async def test_chrome_non_zero_is_skipped(self, live_context):
        with patch(
            "earscope_installer.actions.packages.run_powershell",
            AsyncMock(return_value=("already installed", 1)),
        ):
            result = await InstallChrome().run(live_context)
        assert result.outcome == ActionOutcome.SKIPPED
        assert result.detail == "May already be installed"


class TestInstallYnc:
    def ync(self, temp_dir: Path) -> YncConfig:
        return YncConfig("ync", "YNCneo*.exe", str(temp_dir / "YNC_Neo" / "YNC_Neo.exe"))

    @pytest.mark.asyncio
    async def test_assets_missing(self, live_context, temp_dir):
        result = await InstallYnc(self.ync(temp_dir)).run(live_context)
        assert result.detail == "Assets not found"

    @pytest.mark.asyncio
    async def test_already_installed(self, live_context, temp_dir):
        Path(live_context.assets_dir, "ync").mkdir()
        exe = temp_dir / "YNC_Neo" / "YNC_Neo.exe"
        exe.parent.mkdir()
        exe.write_bytes(b"MZ")
        result = await InstallYnc(self.ync(temp_dir)).run(live_context)
        assert result.detail == "Already installed"

    @pytest.mark.asyncio
    async def test_installer_missing(self, live_context, temp_dir):
        Path(live_context.assets_dir, "ync").mkdir()
        result = await InstallYnc(self.ync(temp_dir)).run(live_context)
        assert result.detail == "Installer not found"

    @pytest.mark.asyncio
    async def test_runs_installer(self, live_context, temp_dir):
        ync_dir = Path(live_context.assets_dir, "ync")
        ync_dir.mkdir()
        (ync_dir / "YNCneo_2.1.exe").write_bytes(b"MZ")
        mock = AsyncMock(return_value=("", 0))
        with patch("earscope_installer.actions.packages.run_command_async", mock):
            result = await InstallYnc(self.ync(temp_dir)).run(live_context)
        assert result.outcome == ActionOutcome.COMPLETED
        command = mock.call_args.args[0]
        assert command[:4] == ["cmd", "/c", "start", "/wait"]
        assert command[-1] == str(ync_dir / "YNCneo_2.1.exe")

    @pytest.mark.asyncio
    async def test_installer_error_is_skipped(self, live_context, temp_dir):
        ync_dir = Path(live_context.assets_dir, "ync")
        ync_dir.mkdir()
        (ync_dir / "YNCneo.exe").write_bytes(b"MZ")
        with patch(
            "earscope_installer.actions.packages.run_command_async",
            AsyncMock(return_value=("", 1602)),
        ):
            result = await InstallYnc(self.ync(temp_dir)).run(live_context)
        assert result.outcome == ActionOutcome.SKIPPED
        assert "1602" in result.detail


class TestShortcutsAndStartup:
    @pytest.mark.asyncio
    async def test_creates_existing_targets(self, live_context):
        viewer = Path(live_context.install_dir, "bin", "EARSCOPE_Viewer.exe")
        viewer.parent.mkdir(parents=True)
        viewer.write_bytes(b"MZ")
        shortcuts = [
            ShortcutConfig("EARSCOPE Viewer", "bin/EARSCOPE_Viewer.exe"),
            ShortcutConfig("EARSCOPE Recordings", "bin/data/recordings", folder=True),
            ShortcutConfig("Missing", "bin/missing.exe"),
        ]
        mock = AsyncMock(return_value=("", 0))
        with patch("earscope_installer.actions.shortcuts.run_powershell", mock):
            result = await CreateShortcuts(shortcuts).run(live_context)

        assert result.detail == "2 shortcuts"
        assert mock.await_count == 2
        assert os.path.isdir(os.path.join(live_context.install_dir, "bin", "data", "recordings"))

    def test_shortcut_script_escapes_quotes(self):
        script = shortcut_script("C:\\hes\\it's.exe", "Bob's Viewer")
        assert "'C:\\hes\\it''s.exe'" in script
        assert "'Bob''s Viewer'" in script
        assert "WorkingDirectory" in script
        assert "WorkingDirectory" not in shortcut_script("C:\\hes\\data", "Data", folder=True)

    @pytest.mark.asyncio
    async def test_remove_shortcuts(self, live_context):
        mock = AsyncMock(return_value=("", 0))
        with patch("earscope_installer.actions.shortcuts.run_powershell", mock):
            result = await RemoveShortcuts(["A", "B"]).run(live_context)
        assert result.detail == "2 shortcuts"
        assert mock.await_count == 2

    @pytest.mark.asyncio
    async def test_register_startup_missing_target(self, live_context):
        result = await RegisterStartup(StartupConfig("ElectronViewer", "viewer.exe")).run(
            live_context
        )
        assert result.outcome == ActionOutcome.SKIPPED
        assert result.detail == "Not found"

    @pytest.mark.asyncio
    async def test_register_startup(self, live_context):
        target = Path(live_context.install_dir, "viewer.exe")
        target.parent.mkdir(parents=True)
        target.write_bytes(b"MZ")
        mock = AsyncMock(return_value=("", 0))
        with patch("earscope_installer.actions.system.run_powershell", mock):
            result = await RegisterStartup(StartupConfig("ElectronViewer", "viewer.exe")).run(
                live_context
            )
        assert result.outcome == ActionOutcome.COMPLETED
        assert "-Name 'ElectronViewer'" in mock.call_args.args[0]


class TestStopProcesses:
    @pytest.mark.asyncio
    async def test_stops_only_running(self, live_context):
        mock = AsyncMock(side_effect=[("true", 0), ("", 0), ("false", 0)])
        with patch("earscope_installer.actions.system.run_powershell", mock):
            result = await StopProcesses(["ElectronViewer", "EARSCOPE_Viewer"]).run(
                live_context
            )
        assert result.detail == "Stopped: ElectronViewer"
        assert "Stop-Process -Name 'ElectronViewer'" in mock.call_args_list[1].args[0]

    @pytest.mark.asyncio
    async def test_nothing_running(self, live_context):
        with patch(
            "earscope_installer.actions.system.run_powershell",
            AsyncMock(return_value=("false", 0)),
        ):
            result = await StopProcesses(["ElectronViewer"]).run(live_context)
        assert result.detail == "No processes running"


def test_escape_powershell_string():
    assert escape_powershell_string("it's") == "it''s"
    assert escape_powershell_string("plain") == "plain"
