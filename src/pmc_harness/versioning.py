"""Package version parsing with NuGet-style equality.

Versions are compared semantically, not as strings: "1.0" equals "1.0.0",
prerelease labels are case-insensitive and build metadata is ignored.
"""

from __future__ import annotations

__all__ = ["PackageVersion"]

import re
from dataclasses import dataclass, field

# major[.minor[.patch[.revision]]][-prerelease][+metadata]
_VERSION_PATTERN = re.compile(
    r"^(?P<numbers>\d+(?:\.\d+){0,3})"
    r"(?:-(?P<release>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<metadata>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True)
class PackageVersion:
    """A parsed package version.

    Attributes:
        major: Major version.
        minor: Minor version (0 when omitted).
        patch: Patch version (0 when omitted).
        revision: Fourth component (0 when omitted).
        release: Prerelease label, empty for stable versions.
        metadata: Build metadata. Not part of equality.
    """

    major: int
    minor: int = 0
    patch: int = 0
    revision: int = 0
    release: str = ""
    metadata: str = field(default="", compare=False)

    @classmethod
    def parse(cls, text: str) -> PackageVersion:
        """Parse a version string.

        Raises:
            ValueError: If text is not a valid version.
        """
        if not isinstance(text, str):
            raise ValueError(f"Version must be a string, got: {type(text).__name__}")
        match = _VERSION_PATTERN.match(text.strip())
        if match is None:
            raise ValueError(f"Invalid version: {text!r}")

        numbers = [int(part) for part in match.group("numbers").split(".")]
        numbers.extend([0] * (4 - len(numbers)))
        return cls(
            major=numbers[0],
            minor=numbers[1],
            patch=numbers[2],
            revision=numbers[3],
            release=(match.group("release") or "").lower(),
            metadata=match.group("metadata") or "",
        )

    @classmethod
    def coerce(cls, value: str | PackageVersion) -> PackageVersion:
        """Return value as a PackageVersion, parsing strings."""
        if isinstance(value, PackageVersion):
            return value
        return cls.parse(value)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.release)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.release:
            text += f"-{self.release}"
        return text
