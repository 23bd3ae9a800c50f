"""Project templates and iteration-aware scenario parameters.

Use with pytest parametrization:

    @pytest.mark.parametrize("template", get_templates())
    def test_install(template): ...

Each list repeats get_iterations() times, so PMC_HARNESS_TEST_ITERATIONS=5
runs every scenario five times per template.
"""

from __future__ import annotations

__all__ = [
    "PACKAGE_REFERENCE_TEMPLATES",
    "ProjectTemplate",
    "get_netcore_templates",
    "get_package_reference_templates",
    "get_templates",
]

from collections.abc import Mapping, Sequence
from enum import Enum

from pmc_harness.config import get_iterations


class ProjectTemplate(Enum):
    """Project kinds the scenarios run against."""

    CLASS_LIBRARY = "ClassLibrary"
    NETCORE_CONSOLE_APP = "NetCoreConsoleApp"
    NETSTANDARD_CLASS_LIB = "NetStandardClassLib"

    @property
    def uses_lock_file(self) -> bool:
        return self in PACKAGE_REFERENCE_TEMPLATES


# Templates whose projects record packages in a lock file; the rest use packages.config
PACKAGE_REFERENCE_TEMPLATES = frozenset(
    {ProjectTemplate.NETCORE_CONSOLE_APP, ProjectTemplate.NETSTANDARD_CLASS_LIB}
)


def _repeat(
    templates: Sequence[ProjectTemplate], environ: Mapping[str, str] | None
) -> list[ProjectTemplate]:
    return list(templates) * get_iterations(environ)


def get_templates(environ: Mapping[str, str] | None = None) -> list[ProjectTemplate]:
    """Legacy and lock-file project templates."""
    return _repeat(
        (ProjectTemplate.CLASS_LIBRARY, ProjectTemplate.NETCORE_CONSOLE_APP), environ
    )


def get_package_reference_templates(
    environ: Mapping[str, str] | None = None,
) -> list[ProjectTemplate]:
    """Templates that produce lock files only."""
    return _repeat(
        (ProjectTemplate.NETCORE_CONSOLE_APP, ProjectTemplate.NETSTANDARD_CLASS_LIB), environ
    )


def get_netcore_templates(environ: Mapping[str, str] | None = None) -> list[ProjectTemplate]:
    """SDK-style templates, used by transitive reference scenarios."""
    return _repeat(
        (ProjectTemplate.NETCORE_CONSOLE_APP, ProjectTemplate.NETSTANDARD_CLASS_LIB), environ
    )
