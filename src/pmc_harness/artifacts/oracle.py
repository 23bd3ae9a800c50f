"""Artifact polling oracle.

Artifacts are written by an external restore process and may be caught
mid-write. The oracle never locks them; it retries reads at a fixed interval
until one parses cleanly or its time budget runs out.

Absence policy: the first clean parse is authoritative. If it lacks the record
the answer is NOT_FOUND right away; the oracle does not keep waiting for a
slow writer. Callers poll after a command's completion signal, by which time
the write has been issued.
"""

from __future__ import annotations

__all__ = ["ArtifactOracle"]

import logging
import threading
import time
from pathlib import Path

from pmc_harness.artifacts.formats import (
    ArtifactParser,
    parse_lock_file,
    parser_for,
    select_artifact,
)
from pmc_harness.config import HarnessConfig
from pmc_harness.errors import (
    ArtifactNotFoundError,
    ArtifactParseError,
    ArtifactUnreadableError,
)
from pmc_harness.types import ArtifactRecord, PollResult
from pmc_harness.versioning import PackageVersion

logger = logging.getLogger(__name__)


class ArtifactOracle:
    """Answers "is this package recorded in that artifact?" with bounded retries."""

    def __init__(self, config: HarnessConfig | None = None) -> None:
        self._config = config or HarnessConfig()

    @property
    def config(self) -> HarnessConfig:
        return self._config

    def poll_for_record(
        self,
        path: Path | str,
        name: str,
        version: str | PackageVersion,
        timeout: float | None = None,
        parser: ArtifactParser = parse_lock_file,
        cancel_event: threading.Event | None = None,
    ) -> PollResult:
        """Poll an artifact until it parses, then look for (name, version).

        Args:
            path: Artifact file.
            name: Package name, matched case-insensitively.
            version: Package version, matched by semantic equality.
            timeout: Poll budget in seconds. Defaults to config.artifact_timeout.
            parser: Turns file content into records.
            cancel_event: Optional event; setting it stops polling early.

        Returns:
            FOUND or NOT_FOUND after a clean parse. UNREADABLE if the file
            exists but never parsed, MISSING if it never existed.

        Raises:
            ValueError: If version is not a valid version string.
        """
        path = Path(path)
        wanted = PackageVersion.coerce(version)

        records = self._poll(path, timeout, parser, cancel_event)
        if records is None:
            result = self._classify_exhausted(path)
            logger.warning(
                "Artifact %s %s while looking for %s %s", path, result.value, name, wanted
            )
            return result

        if any(record.matches(name, wanted) for record in records):
            return PollResult.FOUND
        logger.debug("%s %s not recorded in %s", name, wanted, path)
        return PollResult.NOT_FOUND

    def poll_project(
        self,
        project_path: Path | str,
        name: str,
        version: str | PackageVersion,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> PollResult:
        """Poll whichever artifact backs the project (packages.config or lock file)."""
        path, style = select_artifact(project_path)
        return self.poll_for_record(
            path, name, version, timeout, parser_for(style), cancel_event
        )

    def read_records(
        self,
        path: Path | str,
        timeout: float | None = None,
        parser: ArtifactParser = parse_lock_file,
    ) -> list[ArtifactRecord]:
        """Read all records from an artifact, retrying transient failures.

        Raises:
            ArtifactUnreadableError: The file exists but never parsed.
            ArtifactNotFoundError: The file never appeared.
        """
        path = Path(path)
        records = self._poll(path, timeout, parser, None)
        if records is not None:
            return records
        if self._classify_exhausted(path) is PollResult.UNREADABLE:
            raise ArtifactUnreadableError(path)
        raise ArtifactNotFoundError(path)

    def _poll(
        self,
        path: Path,
        timeout: float | None,
        parser: ArtifactParser,
        cancel_event: threading.Event | None,
    ) -> list[ArtifactRecord] | None:
        """Retry loop. Returns parsed records, or None once the budget is spent."""
        if timeout is None:
            timeout = self._config.artifact_timeout
        elif timeout < 0:
            raise ValueError(f"timeout must be non-negative, got: {timeout}")

        deadline = time.monotonic() + timeout
        attempts = 0
        while True:
            attempts += 1
            records = self._try_read(path, parser)
            if records is not None:
                return records

            if cancel_event is not None and cancel_event.is_set():
                logger.debug("Polling %s cancelled after %d attempts", path, attempts)
                return None
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.debug("Polling %s gave up after %d attempts", path, attempts)
                return None
            time.sleep(min(self._config.artifact_interval, remaining))

    @staticmethod
    def _try_read(path: Path, parser: ArtifactParser) -> list[ArtifactRecord] | None:
        """One read attempt. None means "not available yet"."""
        if not path.exists():
            return None
        try:
            text = path.read_text(encoding="utf-8-sig")
            return parser(text, path)
        except IsADirectoryError:
            raise
        except (OSError, UnicodeDecodeError, ArtifactParseError) as e:
            # Expected while another process is rewriting the file
            logger.debug("Transient read failure for %s: %s", path, e)
            return None

    @staticmethod
    def _classify_exhausted(path: Path) -> PollResult:
        return PollResult.UNREADABLE if path.exists() else PollResult.MISSING
