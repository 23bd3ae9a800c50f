"""Core types for pmc-harness."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pmc_harness.versioning import PackageVersion


class WaitOutcome(Enum):
    """Result of waiting for a console command to finish."""

    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def completed(self) -> bool:
        return self is WaitOutcome.COMPLETED


class PollResult(Enum):
    """Result of polling an artifact for a package record.

    MISSING means the artifact itself never existed, as opposed to NOT_FOUND
    where the artifact parsed cleanly but lacked the record.
    """

    FOUND = "found"
    NOT_FOUND = "not_found"
    MISSING = "missing"
    UNREADABLE = "unreadable"

    @property
    def found(self) -> bool:
        return self is PollResult.FOUND

    @property
    def is_absent(self) -> bool:
        return self in (PollResult.NOT_FOUND, PollResult.MISSING)


class ProjectStyle(Enum):
    """How a project records its installed packages."""

    PACKAGES_CONFIG = "packages_config"
    PACKAGE_REFERENCE = "package_reference"


@dataclass(frozen=True)
class ArtifactRecord:
    """A single (name, version) entry read from an artifact."""

    name: str
    version: PackageVersion

    def matches(self, name: str, version: str | PackageVersion) -> bool:
        """Check identity: case-insensitive name, semantically equal version."""
        return (
            self.name.casefold() == name.casefold()
            and self.version == PackageVersion.coerce(version)
        )

    def __str__(self) -> str:
        return f"{self.name} {self.version}"
