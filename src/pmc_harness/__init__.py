"""pmc-harness: end-to-end harness for a package-manager console."""

# All errors (foundational)
from pmc_harness.errors import (
    ArtifactError,
    ArtifactNotFoundError,
    ArtifactParseError,
    ArtifactUnreadableError,
    ConfigurationError,
    ConsoleNotFoundError,
    HarnessError,
    HostNotReadyError,
)

# Artifacts
from pmc_harness.artifacts import ArtifactOracle, is_package_installed
from pmc_harness.config import HarnessConfig, get_iterations

# Console
from pmc_harness.console import (
    AsyncCommandSynchronizer,
    CommandHost,
    CommandSynchronizer,
    ConsoleTestService,
    ConsoleWindow,
    TestConsole,
)

# Core types (foundational, used everywhere)
from pmc_harness.types import ArtifactRecord, PollResult, ProjectStyle, WaitOutcome
from pmc_harness.versioning import PackageVersion

__version__ = "0.1.0"

__all__ = [
    # Config
    "HarnessConfig",
    "get_iterations",
    # Types
    "ArtifactRecord",
    "PackageVersion",
    "PollResult",
    "ProjectStyle",
    "WaitOutcome",
    # Console
    "AsyncCommandSynchronizer",
    "CommandHost",
    "CommandSynchronizer",
    "ConsoleTestService",
    "ConsoleWindow",
    "TestConsole",
    # Artifacts
    "ArtifactOracle",
    "is_package_installed",
    # Errors
    "HarnessError",
    "HostNotReadyError",
    "ConsoleNotFoundError",
    "ArtifactError",
    "ArtifactNotFoundError",
    "ArtifactUnreadableError",
    "ArtifactParseError",
    "ConfigurationError",
]
