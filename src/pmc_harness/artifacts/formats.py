"""Parsers for the artifacts that record installed packages.

Two formats exist depending on project style:

- Lock file (obj/project.assets.json): JSON whose "libraries" mapping is keyed
  by "<name>/<version>".
- packages.config: legacy XML list of <package id=".." version=".."/>. Its mere
  presence marks a project as legacy style.
"""

from __future__ import annotations

__all__ = [
    "ASSETS_FILE_NAME",
    "PACKAGES_CONFIG_NAME",
    "ArtifactParser",
    "assets_file_path",
    "packages_config_path",
    "parse_lock_file",
    "parse_packages_config",
    "parser_for",
    "select_artifact",
]

import json
import xml.etree.ElementTree as ET
from collections.abc import Callable
from pathlib import Path

from pmc_harness.errors import ArtifactParseError
from pmc_harness.types import ArtifactRecord, ProjectStyle
from pmc_harness.versioning import PackageVersion

ASSETS_FILE_NAME = "project.assets.json"
PACKAGES_CONFIG_NAME = "packages.config"

ArtifactParser = Callable[[str, Path | None], list[ArtifactRecord]]


def _record(name: str, version: str, path: Path | None) -> ArtifactRecord:
    if not name or not name.strip():
        raise ArtifactParseError(path, "empty package name")
    try:
        return ArtifactRecord(name=name.strip(), version=PackageVersion.parse(version))
    except ValueError as e:
        raise ArtifactParseError(path, f"bad version for {name!r}: {e}") from e


def parse_lock_file(text: str, path: Path | None = None) -> list[ArtifactRecord]:
    """Parse lock file content into records.

    Raises:
        ArtifactParseError: Invalid JSON or malformed library entries. A lock
            file mid-write typically fails here.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ArtifactParseError(path, f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ArtifactParseError(path, "lock file root must be an object")

    libraries = data.get("libraries", {})
    if not isinstance(libraries, dict):
        raise ArtifactParseError(path, "'libraries' must be an object")

    records = []
    for key in libraries:
        name, sep, version = key.partition("/")
        if not sep:
            raise ArtifactParseError(path, f"library key without version: {key!r}")
        records.append(_record(name, version, path))
    return records


def parse_packages_config(text: str, path: Path | None = None) -> list[ArtifactRecord]:
    """Parse packages.config content into records.

    Raises:
        ArtifactParseError: Malformed XML, wrong root, or missing attributes.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ArtifactParseError(path, f"invalid XML: {e}") from e

    if root.tag != "packages":
        raise ArtifactParseError(path, f"expected <packages> root, got <{root.tag}>")

    records = []
    for element in root.findall("package"):
        package_id = element.get("id")
        version = element.get("version")
        if package_id is None or version is None:
            raise ArtifactParseError(path, "<package> requires id and version attributes")
        records.append(_record(package_id, version, path))
    return records


def assets_file_path(project_path: Path | str) -> Path:
    """Lock file location for a project file."""
    return Path(project_path).parent / "obj" / ASSETS_FILE_NAME


def packages_config_path(project_path: Path | str) -> Path:
    """packages.config location for a project file."""
    return Path(project_path).parent / PACKAGES_CONFIG_NAME


def select_artifact(project_path: Path | str) -> tuple[Path, ProjectStyle]:
    """Pick the artifact backing a project's installation state.

    packages.config wins when it exists; otherwise the lock file is used, even
    if it does not exist yet. Decided once per query.
    """
    config_path = packages_config_path(project_path)
    if config_path.exists():
        return config_path, ProjectStyle.PACKAGES_CONFIG
    return assets_file_path(project_path), ProjectStyle.PACKAGE_REFERENCE


def parser_for(style: ProjectStyle) -> ArtifactParser:
    """Parser matching a project style."""
    if style is ProjectStyle.PACKAGES_CONFIG:
        return parse_packages_config
    return parse_lock_file
