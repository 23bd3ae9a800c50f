"""Console driving: host protocols, command synchronization, test consoles."""

from pmc_harness.console.console import TestConsole
from pmc_harness.console.host import CommandHost, ConsoleWindow, is_window_ready
from pmc_harness.console.service import ConsoleTestService
from pmc_harness.console.synchronizer import (
    AsyncCommandSynchronizer,
    CommandSynchronizer,
    completion_listener,
)

__all__ = [
    "AsyncCommandSynchronizer",
    "CommandHost",
    "CommandSynchronizer",
    "ConsoleTestService",
    "ConsoleWindow",
    "TestConsole",
    "completion_listener",
    "is_window_ready",
]
