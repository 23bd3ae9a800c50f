"""Tests for TestConsole and ConsoleTestService."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pmc_harness import ConsoleNotFoundError, ConsoleTestService, HarnessConfig, TestConsole
from pmc_harness.types import ProjectStyle
from tests.conftest import FakeCommandHost, FakeConsoleWindow, FakePackageManager, make_project


@pytest.fixture
def manager(tmp_path: Path) -> FakePackageManager:
    project = make_project(tmp_path, ProjectStyle.PACKAGE_REFERENCE)
    return FakePackageManager(project, ProjectStyle.PACKAGE_REFERENCE)


@pytest.fixture
def console(manager: FakePackageManager, harness_config: HarnessConfig) -> TestConsole:
    host = FakeCommandHost(handler=manager)
    return TestConsole(FakeConsoleWindow(host), "TestProject", harness_config)


class TestRunCommand:
    """Commands go through the host and block until completion."""

    def test_run_command_echoes_and_executes(self, harness_config: HarnessConfig) -> None:
        host = FakeCommandHost(handler=lambda command: ["done"])
        window = FakeConsoleWindow(host)
        console = TestConsole(window, "TestProject", harness_config)

        assert console.run_command("Get-Help") is True
        assert host.executed == ["Get-Help"]
        assert window.output_lines() == ["Get-Help", "done"]

    def test_disabled_host_skips_command_and_times_out(
        self, harness_config: HarnessConfig
    ) -> None:
        host = FakeCommandHost()
        host.is_command_enabled = False
        window = FakeConsoleWindow(host)
        console = TestConsole(window, "TestProject", harness_config)

        assert console.run_command("Get-Help", timeout=0.1) is False
        assert host.executed == []
        assert window.output_lines() == []

    def test_empty_command_is_ignored(self, harness_config: HarnessConfig) -> None:
        host = FakeCommandHost()
        console = TestConsole(FakeConsoleWindow(host), "TestProject", harness_config)

        console.run_command_without_wait("")

        assert console.run_command("", timeout=0.05) is False
        assert host.executed == []

    def test_host_execute_failure_surfaces_as_timeout(
        self, harness_config: HarnessConfig
    ) -> None:
        host = MagicMock()
        host.is_command_enabled = True
        host.execute.side_effect = RuntimeError("host crashed")
        window = FakeConsoleWindow()
        window.attach(host)
        console = TestConsole(window, "TestProject", harness_config)

        assert console.run_command("Get-Help", timeout=0.1) is False
        host.add_completion_listener.assert_called_once()
        host.remove_completion_listener.assert_called_once()

    def test_clear(self, console: TestConsole) -> None:
        console.window.write_line("noise")
        console.clear()
        assert console.window.output_lines() == []


class TestPackageCommands:
    """Install/Update/Uninstall command shapes and Get-Package checks."""

    def test_install_command(self, console: TestConsole) -> None:
        assert console.install_package("TestPackage", "1.0.0") is True
        assert console.window.host.executed == [
            "Install-Package TestPackage -ProjectName TestProject -Version 1.0.0"
        ]

    def test_install_with_source(self, console: TestConsole) -> None:
        console.install_package("newtonsoft.json", "9.0.1", "https://api.nuget.org/v3/index.json")
        assert console.window.host.executed == [
            "Install-Package newtonsoft.json -ProjectName TestProject -Version 9.0.1 "
            "-Source https://api.nuget.org/v3/index.json"
        ]

    def test_update_and_uninstall_commands(self, console: TestConsole) -> None:
        console.update_package("TestPackage", "2.0.0")
        console.uninstall_package("TestPackage")
        assert console.window.host.executed == [
            "Update-Package TestPackage -ProjectName TestProject -Version 2.0.0",
            "Uninstall-Package TestPackage -ProjectName TestProject",
        ]

    def test_get_package_finds_installed_version(self, console: TestConsole) -> None:
        console.install_package("TestPackage", "1.0.0")

        assert console.is_package_installed("TestPackage", "1.0.0") is True
        assert console.is_package_installed("testpackage", "1.0.0") is True

    def test_get_package_rejects_other_version(self, console: TestConsole) -> None:
        console.install_package("TestPackage", "1.0.0")

        assert console.is_package_installed("TestPackage", "2.0.0") is False

    def test_get_package_after_uninstall(self, console: TestConsole) -> None:
        console.install_package("TestPackage", "1.0.0")
        console.uninstall_package("TestPackage")

        assert console.is_package_installed("TestPackage", "1.0.0") is False

    def test_get_package_clears_previous_output(self, console: TestConsole) -> None:
        console.window.write_line("TestPackage {1.0.0} left over from earlier")

        assert console.is_package_installed("TestPackage", "1.0.0") is False

    def test_get_package_requires_whole_word_id(self, console: TestConsole) -> None:
        console.install_package("TestPackage1", "1.0.0")

        assert console.is_package_installed("TestPackage", "1.0.0") is False

    def test_get_package_timeout_means_not_installed(
        self, harness_config: HarnessConfig
    ) -> None:
        host = FakeCommandHost(signal_completion=False)
        console = TestConsole(FakeConsoleWindow(host), "TestProject", harness_config)

        assert console.is_package_installed("TestPackage", "1.0.0", timeout=0.05) is False

    @pytest.mark.parametrize(
        "listed",
        ["{1.0.0-beta}", "{1.0.0.1}", "{11.0.0}", "{2.1.0.0}"],
    )
    def test_get_package_rejects_near_miss_versions(
        self, listed: str, harness_config: HarnessConfig
    ) -> None:
        host = FakeCommandHost(handler=lambda command: [f"TestPackage   {listed}   TestProject"])
        console = TestConsole(FakeConsoleWindow(host), "TestProject", harness_config)

        assert console.is_package_installed("TestPackage", "1.0.0") is False

    @pytest.mark.parametrize(
        "listed",
        ["{1.0}", "{1.0.0+build.5}", "{0.9.0, 1.0.0}", "1.0.0"],
    )
    def test_get_package_matches_equal_versions(
        self, listed: str, harness_config: HarnessConfig
    ) -> None:
        host = FakeCommandHost(handler=lambda command: [f"TestPackage   {listed}   TestProject"])
        console = TestConsole(FakeConsoleWindow(host), "TestProject", harness_config)

        assert console.is_package_installed("TestPackage", "1.0.0") is True

    def test_get_package_rejects_dotted_id_prefix(self, harness_config: HarnessConfig) -> None:
        host = FakeCommandHost(handler=lambda command: ["TestPackage.Core   {1.0.0}   TestProject"])
        console = TestConsole(FakeConsoleWindow(host), "TestProject", harness_config)

        assert console.is_package_installed("TestPackage", "1.0.0") is False


class TestConsoleTestService:
    """Console window lookup with retries and caching."""

    def test_retries_until_factory_succeeds(self, harness_config: HarnessConfig) -> None:
        window = FakeConsoleWindow(FakeCommandHost())
        factory = MagicMock(side_effect=[RuntimeError("loading"), None, window])

        service = ConsoleTestService(factory, harness_config)

        assert service.get_window() is window
        assert factory.call_count == 3

    def test_window_is_cached(self, harness_config: HarnessConfig) -> None:
        window = FakeConsoleWindow(FakeCommandHost())
        factory = MagicMock(return_value=window)
        service = ConsoleTestService(factory, harness_config)

        first = service.get_console("ProjectA")
        second = service.get_console("ProjectB")

        assert factory.call_count == 1
        assert first.window is second.window is window
        assert (first.project_name, second.project_name) == ("ProjectA", "ProjectB")

    def test_gives_up_after_timeout(self) -> None:
        config = HarnessConfig(console_timeout=0.05, console_interval=0.01)
        factory = MagicMock(side_effect=RuntimeError("console package not loaded"))

        with pytest.raises(ConsoleNotFoundError) as exc_info:
            ConsoleTestService(factory, config).get_window()

        assert isinstance(exc_info.value.last_error, RuntimeError)
        assert "console package not loaded" in str(exc_info.value)
        assert factory.call_count > 1
