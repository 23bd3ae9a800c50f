"""Command/completion synchronization for an asynchronous console host.

A console host runs commands on its own worker and announces completion by
invoking listeners. The synchronizer turns that into a blocking call:

    sync = CommandSynchronizer(window, config)
    outcome = sync.wait_for_completion(lambda: console.run_command_without_wait(cmd))
    if outcome is WaitOutcome.TIMED_OUT:
        ...

Ordering rules:
- The listener is registered before the command is issued, so a command that
  completes immediately cannot be missed.
- The listener is removed and the executing flag cleared on every exit path,
  so a late signal from a timed-out command never leaks into the next call.
"""

from __future__ import annotations

__all__ = [
    "AsyncCommandSynchronizer",
    "CommandSynchronizer",
    "completion_listener",
]

import asyncio
import inspect
import logging
import threading
import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from typing import Any

from pmc_harness.config import HarnessConfig
from pmc_harness.console.host import (
    CommandHost,
    CompletionListener,
    ConsoleWindow,
    is_window_ready,
)
from pmc_harness.errors import HostNotReadyError
from pmc_harness.types import WaitOutcome

logger = logging.getLogger(__name__)

# Upper bound on a single wait slice while a cancel event is being watched
_CANCEL_POLL_SLICE = 0.05


@contextmanager
def completion_listener(
    window: ConsoleWindow, host: CommandHost, listener: CompletionListener
) -> Iterator[None]:
    """Subscribe listener and mark the window busy for the duration of the block.

    Cleanup runs in reverse order whether the block returns, times out or raises.
    """
    host.add_completion_listener(listener)
    try:
        window.set_executing_command(True)
        try:
            yield
        finally:
            window.set_executing_command(False)
    finally:
        host.remove_completion_listener(listener)


def _resolve_timeout(timeout: float | None, default: float) -> float:
    if timeout is None:
        return default
    if timeout < 0:
        raise ValueError(f"timeout must be non-negative, got: {timeout}")
    return timeout


class CommandSynchronizer:
    """Blocks a calling thread until a console command signals completion.

    The window is injected; nothing is discovered globally. The completion
    signal may arrive from any thread.
    """

    def __init__(self, window: ConsoleWindow, config: HarnessConfig | None = None) -> None:
        self._window = window
        self._config = config or HarnessConfig()

    @property
    def config(self) -> HarnessConfig:
        return self._config

    def ensure_ready(self) -> bool:
        """Poll until the host is ready or the readiness ceiling passes.

        This is a fallback for slow-starting hosts that offer no readiness
        notification. It checks at a fixed interval rather than waiting on an
        event, so it can add up to one interval of latency.

        Returns:
            True if the host became ready in time.
        """
        deadline = time.monotonic() + self._config.readiness_timeout
        while True:
            if is_window_ready(self._window):
                return True
            if time.monotonic() >= deadline:
                logger.warning(
                    "Console host not ready after %ss", self._config.readiness_timeout
                )
                return False
            time.sleep(self._config.readiness_interval)

    def wait_for_completion(
        self,
        issue_command: Callable[[], Any],
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> WaitOutcome:
        """Issue a command and wait for its completion signal.

        Args:
            issue_command: Called exactly once, after the listener is registered.
            timeout: Seconds to wait for completion. Defaults to
                config.command_timeout.
            cancel_event: Optional event; setting it ends the wait early.

        Returns:
            COMPLETED, TIMED_OUT, or CANCELLED.

        Raises:
            HostNotReadyError: If the host never became ready. issue_command is
                not called in that case.
            Exception: Whatever issue_command raises, after cleanup.
        """
        timeout = _resolve_timeout(timeout, self._config.command_timeout)

        if not self.ensure_ready():
            raise HostNotReadyError(self._config.readiness_timeout)

        host = self._window.host
        if host is None:
            raise HostNotReadyError(self._config.readiness_timeout)

        completed = threading.Event()

        def on_complete() -> None:
            completed.set()

        with completion_listener(self._window, host, on_complete):
            issue_command()
            outcome = self._wait(completed, timeout, cancel_event)

        if outcome is WaitOutcome.TIMED_OUT:
            logger.warning("Command did not complete within %ss", timeout)
        return outcome

    @staticmethod
    def _wait(
        completed: threading.Event,
        timeout: float,
        cancel_event: threading.Event | None,
    ) -> WaitOutcome:
        if cancel_event is None:
            return WaitOutcome.COMPLETED if completed.wait(timeout) else WaitOutcome.TIMED_OUT

        deadline = time.monotonic() + timeout
        while True:
            if completed.is_set():
                return WaitOutcome.COMPLETED
            if cancel_event.is_set():
                return WaitOutcome.CANCELLED
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return WaitOutcome.TIMED_OUT
            completed.wait(min(remaining, _CANCEL_POLL_SLICE))


class AsyncCommandSynchronizer:
    """asyncio counterpart of CommandSynchronizer.

    The listener forwards the signal into the running loop with
    call_soon_threadsafe, so hosts may fire it from any thread. Cancelling the
    awaiting task is the cancellation mechanism; cleanup still runs.
    """

    def __init__(self, window: ConsoleWindow, config: HarnessConfig | None = None) -> None:
        self._window = window
        self._config = config or HarnessConfig()

    async def ensure_ready(self) -> bool:
        """Async variant of CommandSynchronizer.ensure_ready."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._config.readiness_timeout
        while True:
            if is_window_ready(self._window):
                return True
            if loop.time() >= deadline:
                logger.warning(
                    "Console host not ready after %ss", self._config.readiness_timeout
                )
                return False
            await asyncio.sleep(self._config.readiness_interval)

    async def wait_for_completion(
        self,
        issue_command: Callable[[], Awaitable[Any] | Any],
        timeout: float | None = None,
    ) -> WaitOutcome:
        """Issue a command and await its completion signal.

        issue_command may be a plain callable or return an awaitable; either way
        it runs exactly once, after the listener is registered.

        Raises:
            HostNotReadyError: If the host never became ready.
        """
        timeout = _resolve_timeout(timeout, self._config.command_timeout)

        if not await self.ensure_ready():
            raise HostNotReadyError(self._config.readiness_timeout)

        host = self._window.host
        if host is None:
            raise HostNotReadyError(self._config.readiness_timeout)

        loop = asyncio.get_running_loop()
        completed = asyncio.Event()

        def on_complete() -> None:
            try:
                loop.call_soon_threadsafe(completed.set)
            except RuntimeError:
                # Loop already closed; the waiter is gone.
                logger.debug("Completion signal arrived after the loop closed")

        with completion_listener(self._window, host, on_complete):
            result = issue_command()
            if inspect.isawaitable(result):
                await result
            try:
                await asyncio.wait_for(completed.wait(), timeout)
            except asyncio.TimeoutError:
                logger.warning("Command did not complete within %ss", timeout)
                return WaitOutcome.TIMED_OUT

        return WaitOutcome.COMPLETED
