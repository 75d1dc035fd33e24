#!/usr/bin/env python3
"""Configuration loading and saving.

Configuration lives in a YAML file in the per-user application directory
reported by click.get_app_dir(). A missing file means defaults; values
given on the command line override the file.

Example config.yaml:
    max_history_size: 100
    check_interval_ms: 1000
    storage_path: /home/user/.config/lanclip/history.json
    sync_enabled: true
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields

import click
import yaml

from lanclip.constants import DEFAULT_CHECK_INTERVAL_MS, DEFAULT_MAX_HISTORY_SIZE

APP_NAME = "lanclip"


class ConfigurationError(ValueError):
    """Raised for invalid configuration values or unreadable config files."""


def default_config_path() -> str:
    """Return the default path of the YAML configuration file."""
    return os.path.join(click.get_app_dir(APP_NAME), "config.yaml")


def default_storage_path() -> str:
    """Return the default path of the persisted history file."""
    return os.path.join(click.get_app_dir(APP_NAME), "history.json")


def validate_max_size(value: object) -> int:
    """Check that a history capacity is a positive integer.

    Args:
        value: The candidate capacity.

    Returns:
        The validated capacity.

    Raises:
        ConfigurationError: If value is not a positive int.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"max history size must be a positive integer, got {value!r}")
    return value


@dataclass
class Config:
    """Runtime configuration.

    Attributes:
        max_history_size: Capacity of the clipboard history.
        check_interval_ms: Clipboard polling interval in milliseconds.
        storage_path: Path of the persisted history JSON file.
        sync_enabled: Whether LAN discovery and sync run at all.
    """

    max_history_size: int = DEFAULT_MAX_HISTORY_SIZE
    check_interval_ms: int = DEFAULT_CHECK_INTERVAL_MS
    storage_path: str = field(default_factory=default_storage_path)
    sync_enabled: bool = True

    def __post_init__(self) -> None:
        validate_max_size(self.max_history_size)
        if (
            isinstance(self.check_interval_ms, bool)
            or not isinstance(self.check_interval_ms, int)
            or self.check_interval_ms <= 0
        ):
            raise ConfigurationError(
                f"check interval must be a positive number of milliseconds, "
                f"got {self.check_interval_ms!r}"
            )
        if not isinstance(self.storage_path, str) or not self.storage_path:
            raise ConfigurationError("storage path must be a non-empty string")
        if not isinstance(self.sync_enabled, bool):
            raise ConfigurationError(f"sync_enabled must be a boolean, got {self.sync_enabled!r}")

    @property
    def check_interval(self) -> float:
        """Polling interval in seconds."""
        return self.check_interval_ms / 1000


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML file.

    Unknown keys are ignored so that newer config files keep working with
    older versions.

    Args:
        path: Path of the YAML file, or None for default_config_path().

    Returns:
        The loaded Config, or defaults if the file does not exist.

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or holds
            invalid values.
    """
    path = path or default_config_path()
    if not os.path.exists(path):
        return Config()

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot load config {path}: {e}") from e

    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config {path} must contain a mapping")

    known = {f.name for f in fields(Config)}
    return Config(**{key: value for key, value in raw.items() if key in known})


def save_config(config: Config, path: str | None = None) -> None:
    """Write configuration to a YAML file, creating parent directories.

    Args:
        config: The configuration to save.
        path: Destination path, or None for default_config_path().
    """
    path = path or default_config_path()
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(asdict(config), f, default_flow_style=False, sort_keys=True)
