"""Configuration loaded from ``shuntyard.yaml``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "shuntyard.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "macros": False,
    "max_macro_depth": 64,
    "logging_enabled": False,
    "logging_dir": "logs",
    "logging_fsync": False,
    "logging_tail_bytes": 2_097_152,  # 2 MB
}

_BOOL_KEYS = ("macros", "logging_enabled", "logging_fsync")
_INT_KEYS = ("max_macro_depth", "logging_tail_bytes")


def load_config(project_dir: Path) -> dict[str, Any]:
    """Load configuration from ``shuntyard.yaml``, with defaults.

    Args:
        project_dir: Directory that may contain ``shuntyard.yaml``.

    Returns:
        Merged configuration dict.

    Raises:
        ValueError: If a known key holds a value of the wrong type.
    """
    config = dict(DEFAULT_CONFIG)
    config_path = project_dir / CONFIG_FILENAME
    if config_path.exists():
        user_config = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"{CONFIG_FILENAME} must contain a mapping")
        config.update(user_config)
    _validate(config)
    return config


def _validate(config: dict[str, Any]) -> None:
    for key in _BOOL_KEYS:
        if not isinstance(config[key], bool):
            raise ValueError(f"Config key {key!r} must be a boolean, got {config[key]!r}")
    for key in _INT_KEYS:
        value = config[key]
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"Config key {key!r} must be a non-negative integer, got {value!r}")


def configure_logging(config: dict[str, Any], project_dir: Path) -> None:
    """Enable the event sink when ``logging_enabled`` is set."""
    if not config.get("logging_enabled"):
        return
    from shuntyard.logging.events import set_log_dir

    set_log_dir(
        project_dir / config["logging_dir"],
        fsync=bool(config["logging_fsync"]),
        tail_bytes=int(config["logging_tail_bytes"]),
    )
