"""Artifact formats and the polling oracle for installation state."""

from pmc_harness.artifacts.formats import (
    assets_file_path,
    packages_config_path,
    parse_lock_file,
    parse_packages_config,
    parser_for,
    select_artifact,
)
from pmc_harness.artifacts.installation import is_package_installed
from pmc_harness.artifacts.oracle import ArtifactOracle

__all__ = [
    "ArtifactOracle",
    "assets_file_path",
    "is_package_installed",
    "packages_config_path",
    "parse_lock_file",
    "parse_packages_config",
    "parser_for",
    "select_artifact",
]
