"""Error types for pmc-harness.

All errors inherit from HarnessError for easy catching at framework level.
Expected conditions (a command timing out, a package being absent) are not
errors: they are reported as WaitOutcome / PollResult values.
"""

from __future__ import annotations

from pathlib import Path


class HarnessError(Exception):
    """Base class for all pmc-harness errors."""

    pass


class HostNotReadyError(HarnessError):
    """Raised when the console host does not become ready in time."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Console host was not ready after {timeout_seconds}s")


class ConsoleNotFoundError(HarnessError):
    """Raised when the console window cannot be located."""

    def __init__(self, timeout_seconds: float, last_error: Exception | None = None) -> None:
        self.timeout_seconds = timeout_seconds
        self.last_error = last_error
        msg = f"Console window not available after {timeout_seconds}s"
        if last_error is not None:
            msg += f". Last error: {last_error}"
        super().__init__(msg)


class ArtifactError(HarnessError):
    """Base exception for artifact operations."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class ArtifactNotFoundError(ArtifactError):
    """Raised when an artifact never appeared on disk."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"Not found: {path}", path)


class ArtifactUnreadableError(ArtifactError):
    """Raised when an artifact exists but never parsed cleanly."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f"Unable to read: {path}", path)


class ArtifactParseError(ArtifactError):
    """A single parse attempt failed (partial write, malformed content)."""

    def __init__(self, path: Path | str | None, reason: str) -> None:
        self.reason = reason
        where = f" '{path}'" if path is not None else ""
        super().__init__(f"Cannot parse artifact{where}: {reason}", path)


class ConfigurationError(HarnessError):
    """Error in configuration (invalid values, unknown keys)."""

    pass
