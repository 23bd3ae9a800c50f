"""Protocols for the externally owned console window and command host.

The harness never implements a console itself. An IDE integration (or a test
fake) provides objects satisfying these protocols and passes them in.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

CompletionListener = Callable[[], None]


@runtime_checkable
class CommandHost(Protocol):
    """The command-executing side of a console.

    Completion listeners are invoked once per finished command, from whatever
    thread or event loop the host uses.
    """

    @property
    def is_command_enabled(self) -> bool:
        """Whether the host currently accepts commands."""
        ...

    def execute(
        self, console: Any, command: str, callback: Callable[..., Any] | None
    ) -> Any:
        """Execute a command against a console window."""
        ...

    def add_completion_listener(self, listener: CompletionListener) -> None:
        """Subscribe to command completion."""
        ...

    def remove_completion_listener(self, listener: CompletionListener) -> None:
        """Unsubscribe from command completion."""
        ...


@runtime_checkable
class ConsoleWindow(Protocol):
    """The visible console: text buffer plus dispatcher state."""

    @property
    def is_start_completed(self) -> bool:
        """Whether the dispatcher finished starting."""
        ...

    @property
    def host(self) -> CommandHost | None:
        """The attached command host, None while still loading."""
        ...

    def clear(self) -> None:
        """Clear console output."""
        ...

    def write_line(self, text: str) -> None:
        """Append a line to the console."""
        ...

    def output_lines(self) -> list[str]:
        """Snapshot of the current console text, one entry per line."""
        ...

    def set_executing_command(self, executing: bool) -> None:
        """Mark whether a command is running (reentrancy guard)."""
        ...


def is_window_ready(window: ConsoleWindow) -> bool:
    """A window is ready once started and attached to a host."""
    return window.is_start_completed and window.host is not None
