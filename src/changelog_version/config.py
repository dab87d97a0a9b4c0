# SPDX-License-Identifier: MIT
"""Selector configuration loaded from pyproject.toml and the environment."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

from .client import DEFAULT_API_URL
from .suggest import MAX_PROBES

# Seconds of input inactivity before a conflict check runs
SETTLE_DELAY = 0.3

TOOL_SECTION = "changelog-version"

_ENV_VARS = {
    "api_url": "CHANGELOG_API_URL",
    "token": "CHANGELOG_TOKEN",
    "project_id": "CHANGELOG_PROJECT",
    "timezone": "CHANGELOG_TIMEZONE",
    "settle_delay": "CHANGELOG_SETTLE_DELAY",
    "max_probes": "CHANGELOG_MAX_PROBES",
    "request_timeout": "CHANGELOG_REQUEST_TIMEOUT",
}


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


@dataclass
class SelectorConfig:
    """Settings for the version selector and its API client.

    Attributes:
        api_url: Base URL of the changelog API
        token: Bearer token sent to the API, if any
        project_id: Default project whose versions are read
        timezone: Time zone used when the API does not provide one
        settle_delay: Seconds of input inactivity before a conflict check
        max_probes: Candidates tried per bump type when suggesting versions
        request_timeout: HTTP timeout in seconds
    """

    api_url: str = DEFAULT_API_URL
    token: Optional[str] = None
    project_id: Optional[str] = None
    timezone: str = "UTC"
    settle_delay: float = SETTLE_DELAY
    max_probes: int = MAX_PROBES
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.settle_delay < 0:
            raise ConfigError(f"settle_delay must not be negative, got {self.settle_delay}")
        if self.max_probes < 1:
            raise ConfigError(f"max_probes must be at least 1, got {self.max_probes}")
        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive, got {self.request_timeout}")

    @classmethod
    def from_mapping(cls, values: dict[str, Any], source: str = "configuration") -> "SelectorConfig":
        """Build a config from a flat mapping, coercing values to field types.

        Keys may use dashes or underscores. Unknown keys are ignored.

        Raises:
            ConfigError: If a value cannot be converted
        """
        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for raw_key, value in values.items():
            key = raw_key.replace("-", "_")
            if key not in known or value is None:
                continue
            kwargs[key] = _coerce(key, value, source)
        return cls(**kwargs)

    @classmethod
    def from_pyproject(cls, project_dir: str | Path) -> "SelectorConfig":
        """Load ``[tool.changelog-version]`` from a project's pyproject.toml.

        Raises:
            ConfigError: If the file is not valid TOML
            FileNotFoundError: If pyproject.toml doesn't exist
        """
        pyproject_path = Path(project_dir) / "pyproject.toml"
        if not pyproject_path.exists():
            raise FileNotFoundError(f"pyproject.toml not found in {project_dir}")

        try:
            with open(pyproject_path, "rb") as f:
                pyproject = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML syntax: {e}") from e

        section = pyproject.get("tool", {}).get(TOOL_SECTION, {})
        if not isinstance(section, dict):
            raise ConfigError(f"[tool.{TOOL_SECTION}] must be a table")
        return cls.from_mapping(section, source=str(pyproject_path))

    def with_env(self, environ: Optional[dict[str, str]] = None) -> "SelectorConfig":
        """Return a copy with ``CHANGELOG_*`` environment variables applied."""
        env = os.environ if environ is None else environ
        values = {name: getattr(self, name) for name in _ENV_VARS}
        for name, var in _ENV_VARS.items():
            if raw := env.get(var):
                values[name] = raw
        return type(self).from_mapping(values, source="environment")


def _coerce(key: str, value: Any, source: str) -> Any:
    try:
        if key == "max_probes":
            return int(value)
        if key in ("settle_delay", "request_timeout"):
            return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {key} in {source}: {value!r}") from e
    return str(value)


def find_project_root(start_dir: Optional[str | Path] = None) -> Optional[Path]:
    """Find the nearest directory at or above ``start_dir`` with a pyproject.toml."""
    current = (Path(start_dir) if start_dir else Path.cwd()).resolve()
    while True:
        if (current / "pyproject.toml").exists():
            return current
        if current == current.parent:
            return None
        current = current.parent


def load_config(
    project_dir: Optional[str | Path] = None,
    environ: Optional[dict[str, str]] = None,
) -> SelectorConfig:
    """Load configuration: defaults, then pyproject.toml, then environment.

    A missing pyproject.toml is not an error; the defaults are used instead.

    Raises:
        ConfigError: If a configuration source is invalid
    """
    root = find_project_root(project_dir)
    config = SelectorConfig.from_pyproject(root) if root else SelectorConfig()
    return config.with_env(environ)
