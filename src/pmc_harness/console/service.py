"""Locate the console window and hand out TestConsole instances."""

from __future__ import annotations

__all__ = ["ConsoleTestService", "WindowFactory"]

import logging
import threading
import time
from collections.abc import Callable

from pmc_harness.config import HarnessConfig
from pmc_harness.console.console import TestConsole
from pmc_harness.console.host import ConsoleWindow
from pmc_harness.errors import ConsoleNotFoundError

logger = logging.getLogger(__name__)

WindowFactory = Callable[[], ConsoleWindow | None]


class ConsoleTestService:
    """Provides TestConsoles for a lazily located console window.

    The window comes from an injected factory instead of a global lookup. The
    factory may raise or return None while the IDE is still loading the
    console; it is retried until console_timeout.
    """

    def __init__(self, window_factory: WindowFactory, config: HarnessConfig | None = None) -> None:
        self._window_factory = window_factory
        self._config = config or HarnessConfig()
        self._window: ConsoleWindow | None = None
        self._lock = threading.Lock()

    def get_window(self) -> ConsoleWindow:
        """Return the console window, locating it on first use.

        Raises:
            ConsoleNotFoundError: If the factory never produced a window.
        """
        with self._lock:
            if self._window is None:
                self._window = self._locate_window()
            return self._window

    def _locate_window(self) -> ConsoleWindow:
        last_error: Exception | None = None
        start_time = time.monotonic()
        while True:
            try:
                window = self._window_factory()
                if window is not None:
                    return window
                logger.debug("Console window not loaded yet")
            except Exception as e:
                # Expected while the console is still loading
                logger.debug("Console lookup failed (still loading): %s", e)
                last_error = e

            if time.monotonic() - start_time >= self._config.console_timeout:
                raise ConsoleNotFoundError(self._config.console_timeout, last_error) from last_error
            time.sleep(self._config.console_interval)

    def get_console(self, project_name: str) -> TestConsole:
        """Return a TestConsole bound to project_name."""
        return TestConsole(self.get_window(), project_name, self._config)
