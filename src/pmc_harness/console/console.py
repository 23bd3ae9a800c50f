"""TestConsole: drives package-manager commands through a console window."""

from __future__ import annotations

__all__ = ["TestConsole"]

import logging
import re
import threading

from pmc_harness.config import HarnessConfig
from pmc_harness.console.host import ConsoleWindow
from pmc_harness.console.synchronizer import CommandSynchronizer
from pmc_harness.versioning import PackageVersion

logger = logging.getLogger(__name__)

_BRACED_VERSIONS = re.compile(r"\{([^}]*)\}")


class TestConsole:
    """Package-manager console bound to one project.

    Every command goes through a CommandSynchronizer, so the methods here block
    until the host signals completion or the timeout passes.

    Usage:
        console = TestConsole(window, "TestProject", config)
        assert console.install_package("TestPackage", "1.0.0")
        assert console.is_package_installed("TestPackage", "1.0.0")
    """

    # Not a pytest test class despite the name
    __test__ = False

    def __init__(
        self,
        window: ConsoleWindow,
        project_name: str,
        config: HarnessConfig | None = None,
        synchronizer: CommandSynchronizer | None = None,
    ) -> None:
        self._window = window
        self.project_name = project_name
        self._config = config or HarnessConfig()
        self._synchronizer = synchronizer or CommandSynchronizer(window, self._config)

    @property
    def window(self) -> ConsoleWindow:
        return self._window

    def clear(self) -> None:
        """Clear console output."""
        self._window.clear()

    def run_command(self, command: str, timeout: float | None = None) -> bool:
        """Run a command and wait for it to finish.

        Returns:
            True if the completion signal arrived within the timeout.
        """
        outcome = self._synchronizer.wait_for_completion(
            lambda: self.run_command_without_wait(command), timeout
        )
        return outcome.completed

    def run_command_without_wait(self, command: str) -> None:
        """Hand a command to the host without waiting for it.

        The command runs on a dispatcher thread. If the host is not accepting
        commands it is skipped, and any waiter times out.
        """
        if not command:
            return

        thread = threading.Thread(
            target=self._dispatch,
            args=(command,),
            name="pmc-console-dispatch",
            daemon=True,
        )
        thread.start()

    def _dispatch(self, command: str) -> None:
        host = self._window.host
        if host is None or not host.is_command_enabled:
            logger.warning("Console host is not accepting commands; skipped %r", command)
            return

        self._window.write_line(command)
        try:
            host.execute(self._window, command, None)
        except Exception as e:
            # Runs on a daemon thread; the waiting caller sees a timeout
            logger.error("Console command %r failed: %s", command, e)

    def install_package(
        self,
        package_id: str,
        version: str | PackageVersion,
        source: str | None = None,
        timeout: float | None = None,
    ) -> bool:
        """Install a package version into the bound project."""
        command = (
            f"Install-Package {package_id} -ProjectName {self.project_name} -Version {version}"
        )
        if source:
            command += f" -Source {source}"
        return self.run_command(command, timeout)

    def update_package(
        self,
        package_id: str,
        version: str | PackageVersion,
        timeout: float | None = None,
    ) -> bool:
        """Move an installed package to another version (up or down)."""
        command = (
            f"Update-Package {package_id} -ProjectName {self.project_name} -Version {version}"
        )
        return self.run_command(command, timeout)

    def uninstall_package(self, package_id: str, timeout: float | None = None) -> bool:
        """Remove a package from the bound project."""
        command = f"Uninstall-Package {package_id} -ProjectName {self.project_name}"
        return self.run_command(command, timeout)

    def is_package_installed(
        self,
        package_id: str,
        version: str | PackageVersion,
        timeout: float | None = None,
    ) -> bool:
        """Ask the console whether a package version is installed.

        Runs Get-Package on a cleared console. A line counts when it names the
        package id as a whole word and one of its listed versions equals the
        requested one, so 1.0.0 does not match 1.0.0.1 or 1.0.0-beta.

        Raises:
            ValueError: If version is not a valid version string.
        """
        wanted = PackageVersion.coerce(version)
        self._window.clear()
        command = f"Get-Package {package_id} -ProjectName {self.project_name}"
        if not self.run_command(command, timeout):
            return False

        id_pattern = re.compile(rf"(?<![\w.]){re.escape(package_id)}(?![\w.])", re.IGNORECASE)
        for line in self._window.output_lines():
            if id_pattern.search(line) and wanted in _listed_versions(line):
                return True
        return False


def _listed_versions(line: str) -> list[PackageVersion]:
    """Versions shown on a Get-Package line, braced lists first."""
    braced = _BRACED_VERSIONS.findall(line)
    tokens = [t for group in braced for t in group.split(",")] if braced else line.split()
    versions = []
    for token in tokens:
        try:
            versions.append(PackageVersion.parse(token.strip()))
        except ValueError:
            continue
    return versions
