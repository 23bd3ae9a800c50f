"""Strict installation checks built on the oracle and the console."""

from __future__ import annotations

__all__ = ["is_package_installed"]

import logging
from pathlib import Path

from pmc_harness.artifacts.formats import parser_for, select_artifact
from pmc_harness.artifacts.oracle import ArtifactOracle
from pmc_harness.console.console import TestConsole
from pmc_harness.errors import ArtifactNotFoundError, ArtifactUnreadableError
from pmc_harness.types import PollResult, ProjectStyle
from pmc_harness.versioning import PackageVersion

logger = logging.getLogger(__name__)


def is_package_installed(
    project_path: Path | str,
    name: str,
    version: str | PackageVersion,
    oracle: ArtifactOracle,
    console: TestConsole | None = None,
    timeout: float | None = None,
) -> bool:
    """Check whether a package version is installed in a project.

    packages.config projects are asked through the console (Get-Package) when
    one is given, otherwise packages.config is polled. Lock-file projects are
    always answered from the lock file.

    Raises:
        ArtifactUnreadableError: The artifact exists but never parsed.
        ArtifactNotFoundError: The artifact never appeared.
    """
    path, style = select_artifact(project_path)

    if style is ProjectStyle.PACKAGES_CONFIG and console is not None:
        logger.debug("Checking %s %s via console for %s", name, version, project_path)
        return console.is_package_installed(name, version, timeout)

    result = oracle.poll_for_record(path, name, version, timeout, parser_for(style))
    if result is PollResult.UNREADABLE:
        raise ArtifactUnreadableError(path)
    if result is PollResult.MISSING:
        raise ArtifactNotFoundError(path)
    return result.found
