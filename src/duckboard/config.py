"""Configuration loading for the Duckboard dashboard."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from duckboard import __version__

CONFIG_FILENAME = "duckboard.yaml"

# Where the local Duck server listens when no server address is configured
DEFAULT_BASE_URL = "http://127.0.0.1:15825"

# Environment variable -> config field
ENV_VARS = {
    "DUCKBOARD_SERVER": "default_server",
    "DUCKBOARD_VERSION": "version",
    "DUCKBOARD_BASE_URL": "base_url",
    "DUCKBOARD_TIMEOUT": "request_timeout",
    "DUCKBOARD_POLL_INTERVAL": "poll_interval",
    "DUCKBOARD_VIEW": "default_view",
}


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class DashboardConfig:
    """Dashboard configuration, injected once at startup.

    Attributes:
        default_server: Server address used when a sync names none.
            Empty means the local Duck server.
        version: Version string of the dashboard itself.
        base_url: Origin that relative request paths resolve against.
        request_timeout: Seconds before a single request is abandoned.
        poll_interval: Seconds between background synchronizations.
        default_view: View the poller targets on startup (None = all builds).
    """

    default_server: str = ""
    version: str = __version__
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = 10.0
    poll_interval: float = 15.0
    default_view: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DashboardConfig:
        """Create config from a dictionary.

        Unknown keys are rejected so typos in the YAML file surface early.

        Raises:
            ConfigError: If a key is unknown or a value has the wrong type.
        """
        config = cls()
        config.update(data)
        return config

    def update(self, data: Mapping[str, Any]) -> None:
        """Overlay values from a mapping onto this config.

        Raises:
            ConfigError: If a key is unknown or a value has the wrong type.
        """
        known = set(self.__dataclass_fields__)
        unknown = [key for key in data if key not in known]
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        for key, value in data.items():
            if key in ("request_timeout", "poll_interval"):
                value = _positive_float(key, value)
            elif key == "default_view":
                value = str(value) if value not in (None, "") else None
            else:
                value = "" if value is None else str(value)
            setattr(self, key, value)

    @property
    def server_label(self) -> str:
        """Human-readable name of the default server."""
        return self.default_server or "local"


def _positive_float(key: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' must be a number, got {value!r}") from e
    if number <= 0:
        raise ConfigError(f"'{key}' must be positive, got {number}")
    return number


def load_config(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> DashboardConfig:
    """Load dashboard configuration.

    Sources are applied in order, later ones winning: defaults, the YAML
    file (if given), then DUCKBOARD_* environment variables.

    Args:
        config_path: Path to duckboard.yaml. Skipped when None.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If the file doesn't exist or a value is invalid.
    """
    config = DashboardConfig()

    if config_path is not None:
        config.update(_read_yaml(Path(config_path)))

    if environ is None:
        environ = os.environ
    overrides = {field: environ[var] for var, field in ENV_VARS.items() if var in environ}
    config.update(overrides)

    return config


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")
    return data


def find_config(start_path: Path | str | None = None) -> Path | None:
    """Find duckboard.yaml by walking up the directory tree.

    Args:
        start_path: Starting directory. Defaults to current directory.

    Returns:
        Path to duckboard.yaml, or None if there is none.
    """
    current = Path.cwd() if start_path is None else Path(start_path)
    current = current.resolve()

    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
