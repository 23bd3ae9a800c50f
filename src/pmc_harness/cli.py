"""CLI for checking recorded package state outside a test run.

Commands:
    check - Poll a project's artifact for a package version
    records - Print the records parsed from an artifact
    iterations - Print the effective scenario iteration count

Usage:
    pmc-harness check --project ./App/App.csproj --package TestPackage --version 1.0.0
    pmc-harness records --artifact ./App/obj/project.assets.json
    pmc-harness iterations
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from pmc_harness.artifacts import ArtifactOracle, parse_lock_file, parse_packages_config
from pmc_harness.config import HarnessConfig, get_iterations
from pmc_harness.errors import ArtifactError, ConfigurationError
from pmc_harness.types import PollResult

logger = logging.getLogger(__name__)

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_UNAVAILABLE = 2

_PARSERS = {
    "lock": parse_lock_file,
    "config": parse_packages_config,
}


def _load_config(config_path: Path | None) -> HarnessConfig:
    if config_path is not None:
        return HarnessConfig.from_yaml(config_path)
    return HarnessConfig.from_env()


def check(
    project: Path,
    package: str,
    version: str,
    timeout: float | None = None,
    config: HarnessConfig | None = None,
) -> int:
    """Poll the artifact backing project for package/version.

    Returns:
        Exit code: 0 found, 1 not found, 2 artifact missing or unreadable.
    """
    oracle = ArtifactOracle(config)
    result = oracle.poll_project(project, package, version, timeout)
    print(f"{package} {version}: {result.value}")

    if result is PollResult.FOUND:
        return EXIT_FOUND
    if result is PollResult.NOT_FOUND:
        return EXIT_NOT_FOUND
    return EXIT_UNAVAILABLE


def records(
    artifact: Path,
    fmt: str = "lock",
    timeout: float | None = None,
    config: HarnessConfig | None = None,
) -> int:
    """Print every record in an artifact.

    Returns:
        Number of records printed.

    Raises:
        ArtifactError: The artifact is missing or unreadable.
    """
    oracle = ArtifactOracle(config)
    found = oracle.read_records(artifact, timeout, _PARSERS[fmt])
    for record in sorted(found, key=lambda r: r.name.casefold()):
        print(f"  {record.name} {record.version}")
    print(f"\n{len(found)} packages in {artifact}")
    return len(found)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the harness CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="pmc-harness",
        description="Inspect package installation state recorded in project artifacts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Is TestPackage 1.0.0 installed? (exit code 0/1/2)
  pmc-harness check \\
    --project ./TestProject/TestProject.csproj \\
    --package TestPackage \\
    --version 1.0.0

  # List packages in a lock file
  pmc-harness records --artifact ./TestProject/obj/project.assets.json

  # List packages in packages.config
  pmc-harness records --artifact ./TestProject/packages.config --format config
""",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file with timeouts (default: PMC_HARNESS_* environment variables)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # check
    chk = subparsers.add_parser(
        "check",
        help="Poll a project's artifact for a package version",
    )
    chk.add_argument(
        "--project",
        type=Path,
        required=True,
        help="Path to the project file",
    )
    chk.add_argument(
        "--package",
        required=True,
        help="Package id (case-insensitive)",
    )
    chk.add_argument(
        "--version",
        required=True,
        help="Package version (e.g., 1.0.0)",
    )
    chk.add_argument(
        "--timeout",
        type=float,
        help="Poll budget in seconds (default: artifact_timeout from config)",
    )

    # records
    rec = subparsers.add_parser(
        "records",
        help="Print records parsed from an artifact",
    )
    rec.add_argument(
        "--artifact",
        type=Path,
        required=True,
        help="Path to project.assets.json or packages.config",
    )
    rec.add_argument(
        "--format",
        choices=sorted(_PARSERS),
        default="lock",
        help="Artifact format (default: lock)",
    )
    rec.add_argument(
        "--timeout",
        type=float,
        help="Poll budget in seconds (default: artifact_timeout from config)",
    )

    # iterations
    subparsers.add_parser(
        "iterations",
        help="Print the scenario iteration count",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the harness CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _load_config(args.config)
    except (ConfigurationError, OSError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNAVAILABLE

    if args.command == "check":
        try:
            return check(args.project, args.package, args.version, args.timeout, config)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_UNAVAILABLE
    elif args.command == "records":
        try:
            records(args.artifact, args.format, args.timeout, config)
        except ArtifactError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_UNAVAILABLE
        return 0
    elif args.command == "iterations":
        print(get_iterations())
        return 0
    return EXIT_UNAVAILABLE


if __name__ == "__main__":
    sys.exit(main())
