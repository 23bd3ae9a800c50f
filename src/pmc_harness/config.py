"""Configuration for pmc-harness timeouts and polling intervals."""

from __future__ import annotations

__all__ = [
    "ITERATIONS_ENV_VAR",
    "ENV_PREFIX",
    "HarnessConfig",
    "get_iterations",
]

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from pmc_harness.errors import ConfigurationError

ENV_PREFIX = "PMC_HARNESS_"
ITERATIONS_ENV_VAR = "PMC_HARNESS_TEST_ITERATIONS"

# (timeout field, interval field) pairs validated together
_TIMEOUT_PAIRS = (
    ("readiness_timeout", "readiness_interval"),
    ("artifact_timeout", "artifact_interval"),
    ("console_timeout", "console_interval"),
)


@dataclass(frozen=True)
class HarnessConfig:
    """Timeouts and poll intervals, all in seconds.

    Attributes:
        readiness_timeout: Ceiling for the console host to finish starting.
        readiness_interval: How often host readiness is checked.
        command_timeout: Default time to wait for a command's completion signal.
        artifact_timeout: Default budget for polling an artifact file.
        artifact_interval: Delay between artifact read attempts.
        console_timeout: Ceiling for locating the console window.
        console_interval: Delay between console lookup attempts.
    """

    readiness_timeout: float = 300.0
    readiness_interval: float = 0.1
    command_timeout: float = 300.0
    artifact_timeout: float = 10.0
    artifact_interval: float = 0.1
    console_timeout: float = 600.0
    console_interval: float = 0.1

    def __post_init__(self) -> None:
        """Validate configuration values."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{f.name} must be a number, got: {value!r}")
            if value <= 0.0:
                raise ConfigurationError(f"{f.name} must be positive, got: {value}")

        for timeout_name, interval_name in _TIMEOUT_PAIRS:
            if getattr(self, interval_name) > getattr(self, timeout_name):
                raise ConfigurationError(
                    f"{interval_name} must not exceed {timeout_name}, "
                    f"got: {getattr(self, interval_name)} > {getattr(self, timeout_name)}"
                )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> HarnessConfig:
        """Load configuration from PMC_HARNESS_* environment variables.

        Unset variables keep their defaults.

        Raises:
            ConfigurationError: If a variable is not a number.
        """
        env = os.environ if environ is None else environ
        values: dict[str, float] = {}
        for f in fields(cls):
            raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None or not raw.strip():
                continue
            try:
                values[f.name] = float(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"{ENV_PREFIX}{f.name.upper()} must be a number, got: {raw!r}"
                ) from e
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Path) -> HarnessConfig:
        """Load configuration from a YAML file.

        Raises:
            ConfigurationError: If the file is not a mapping or has unknown keys.
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> HarnessConfig:
        """Create config from dictionary."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)


def get_iterations(environ: Mapping[str, str] | None = None) -> int:
    """How many times parametrized scenarios repeat.

    Reads PMC_HARNESS_TEST_ITERATIONS; anything missing, non-integer or
    non-positive means 1.
    """
    env = os.environ if environ is None else environ
    raw = env.get(ITERATIONS_ENV_VAR)
    if raw is None:
        return 1
    try:
        iterations = int(raw.strip())
    except ValueError:
        return 1
    return iterations if iterations > 0 else 1
