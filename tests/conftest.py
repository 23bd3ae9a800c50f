"""Test fixtures for pmc-harness.

FakeConsoleWindow / FakeCommandHost stand in for the IDE-hosted console: the
host runs each command on a timer thread and fires completion listeners from
there, like the real asynchronous host. FakePackageManager plays the external
restore process that rewrites project artifacts.
"""

from __future__ import annotations

import json
import shlex
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from pmc_harness import HarnessConfig
from pmc_harness.artifacts import assets_file_path, packages_config_path
from pmc_harness.types import ProjectStyle

CommandHandler = Callable[[str], list[str]]


class FakeCommandHost:
    """Command host completing each command after `latency` seconds."""

    def __init__(
        self,
        handler: CommandHandler | None = None,
        latency: float = 0.01,
        signal_completion: bool = True,
    ) -> None:
        self.handler = handler
        self.latency = latency
        self.signal_completion = signal_completion
        self.is_command_enabled = True
        self.window: FakeConsoleWindow | None = None
        self.executed: list[str] = []
        self.add_calls = 0
        self.remove_calls = 0
        self._listeners: list[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def add_completion_listener(self, listener: Callable[[], None]) -> None:
        with self._lock:
            self.add_calls += 1
            self._listeners.append(listener)

    def remove_completion_listener(self, listener: Callable[[], None]) -> None:
        with self._lock:
            self.remove_calls += 1
            if listener in self._listeners:
                self._listeners.remove(listener)

    def execute(self, console: Any, command: str, callback: Any) -> None:
        self.executed.append(command)
        timer = threading.Timer(self.latency, self._finish, args=(console, command))
        timer.daemon = True
        timer.start()

    def fire_completion(self) -> None:
        """Signal completion to whoever is listening right now."""
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener()

    def _finish(self, console: Any, command: str) -> None:
        if self.handler is not None:
            for line in self.handler(command):
                console.write_line(line)
        if self.signal_completion:
            self.fire_completion()


class FakeConsoleWindow:
    """In-memory console window."""

    def __init__(self, host: FakeCommandHost | None = None, started: bool = True) -> None:
        self._host = host
        self.is_start_completed = started
        self.lines: list[str] = []
        self.executing = False
        self.executing_history: list[bool] = []
        self._lock = threading.Lock()
        if host is not None:
            host.window = self

    @property
    def host(self) -> FakeCommandHost | None:
        return self._host

    def attach(self, host: FakeCommandHost) -> None:
        self._host = host
        host.window = self

    def clear(self) -> None:
        with self._lock:
            self.lines.clear()

    def write_line(self, text: str) -> None:
        with self._lock:
            self.lines.append(text)

    def output_lines(self) -> list[str]:
        with self._lock:
            return list(self.lines)

    def set_executing_command(self, executing: bool) -> None:
        self.executing = executing
        self.executing_history.append(executing)


class FakePackageManager:
    """Applies console commands to a project's artifact, like a restore would.

    Handles Install-Package, Update-Package, Uninstall-Package and Get-Package
    for the project it was created for.
    """

    def __init__(self, project_path: Path, style: ProjectStyle) -> None:
        self.project_path = project_path
        self.style = style
        self.installed: dict[str, str] = {}

    def __call__(self, command: str) -> list[str]:
        verb, *rest = shlex.split(command)
        package_id = rest[0]
        options = dict(zip(rest[1::2], rest[2::2], strict=False))

        if verb in ("Install-Package", "Update-Package"):
            for key in list(self.installed):
                if key.lower() == package_id.lower():
                    del self.installed[key]
            self.installed[package_id] = options["-Version"]
            self.write_artifact()
            return [f"Successfully installed '{package_id} {options['-Version']}'"]
        if verb == "Uninstall-Package":
            for key in list(self.installed):
                if key.lower() == package_id.lower():
                    del self.installed[key]
            self.write_artifact()
            return [f"Successfully uninstalled '{package_id}'"]
        if verb == "Get-Package":
            lines = ["Id            Versions   ProjectName", "--            --------   -----------"]
            for name, version in self.installed.items():
                if name.lower() == package_id.lower():
                    lines.append(f"{name}   {{{version}}}   {options.get('-ProjectName', '')}")
            return lines
        return [f"Unknown command: {verb}"]

    def write_artifact(self) -> None:
        if self.style is ProjectStyle.PACKAGES_CONFIG:
            write_packages_config(packages_config_path(self.project_path), self.installed)
        else:
            write_lock_file(assets_file_path(self.project_path), self.installed)


def write_lock_file(path: Path, packages: dict[str, str]) -> None:
    """Write a minimal project.assets.json."""
    path.parent.mkdir(parents=True, exist_ok=True)
    document = {
        "version": 3,
        "targets": {"net6.0": {}},
        "libraries": {
            f"{name}/{version}": {"type": "package", "path": f"{name.lower()}/{version}"}
            for name, version in packages.items()
        },
    }
    path.write_text(json.dumps(document, indent=2))


def write_packages_config(path: Path, packages: dict[str, str]) -> None:
    """Write a packages.config file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    entries = "".join(
        f'  <package id="{name}" version="{version}" targetFramework="net46" />\n'
        for name, version in packages.items()
    )
    path.write_text(f'<?xml version="1.0" encoding="utf-8"?>\n<packages>\n{entries}</packages>\n')


@pytest.fixture
def harness_config() -> HarnessConfig:
    """Short timeouts so negative paths finish quickly."""
    return HarnessConfig(
        readiness_timeout=1.0,
        readiness_interval=0.01,
        command_timeout=2.0,
        artifact_timeout=0.5,
        artifact_interval=0.01,
        console_timeout=0.5,
        console_interval=0.01,
    )


@pytest.fixture
def host() -> FakeCommandHost:
    return FakeCommandHost()


@pytest.fixture
def window(host: FakeCommandHost) -> FakeConsoleWindow:
    return FakeConsoleWindow(host)


def make_project(root: Path, style: ProjectStyle, name: str = "TestProject") -> Path:
    """Create a project directory; legacy projects get an empty packages.config."""
    project_dir = root / name
    project_dir.mkdir(parents=True, exist_ok=True)
    project_path = project_dir / f"{name}.csproj"
    project_path.write_text("<Project />\n")
    if style is ProjectStyle.PACKAGES_CONFIG:
        write_packages_config(packages_config_path(project_path), {})
    return project_path
