"""Configuration manager for TypeGraph CLI using TOML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import toml

logger = logging.getLogger(__name__)


LAYOUTS = ("force", "tree", "cluster")
NODE_SIZES = ("propertyCount", "uniform")

# Defaults for the [graph] section
DEFAULT_CONFIG: Dict[str, Any] = {
    "root_suffix": "Instance",
    "layout": "force",
    "node_size": "propertyCount",
    "show_properties": True,
    "auto_refresh": True,
    "watch_debounce": 1.0,
}


def load_full_config(config_file: Path) -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return toml.load(f)
    except toml.TomlDecodeError:
        return {}


def load_config(config_file: Path) -> Dict[str, Any]:
    """Load the ``[graph]`` section merged over the defaults.

    Returns:
        Graph settings dictionary. Unknown keys in the file are ignored and
        invalid values fall back to their defaults.
    """
    merged = DEFAULT_CONFIG.copy()
    section = load_full_config(config_file).get("graph", {})
    if not isinstance(section, dict):
        return merged
    for key, value in section.items():
        if key not in DEFAULT_CONFIG:
            continue
        try:
            merged[key] = validate_value(key, value)
        except ValueError:
            logger.warning("Ignoring invalid setting %s = %r in %s", key, value, config_file)
    return merged


def _save_full_config(config: Dict[str, Any], config_file: Path) -> None:
    """Write entire config dict to TOML file, preserving all sections."""
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w", encoding="utf-8") as f:
        toml.dump(config, f)


def validate_value(key: str, value: Any) -> Any:
    """Coerce and validate a single ``[graph]`` setting.

    Args:
        key: Setting name, one of ``DEFAULT_CONFIG``'s keys.
        value: Raw value (strings from the command line are coerced).

    Returns:
        The coerced value.

    Raises:
        ValueError: Unknown key or value out of range.
    """
    if key not in DEFAULT_CONFIG:
        raise ValueError(f"Unknown setting '{key}'. Valid: {', '.join(DEFAULT_CONFIG)}")

    if key in ("show_properties", "auto_refresh"):
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off"):
            return False
        raise ValueError(f"'{key}' expects a boolean, got '{value}'")

    if key == "watch_debounce":
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"'{key}' expects a number of seconds, got '{value}'")
        if seconds < 0:
            raise ValueError(f"'{key}' must not be negative")
        return seconds

    if key == "layout" and value not in LAYOUTS:
        raise ValueError(f"layout must be one of: {', '.join(LAYOUTS)}")
    if key == "node_size" and value not in NODE_SIZES:
        raise ValueError(f"node_size must be one of: {', '.join(NODE_SIZES)}")
    # An empty root_suffix makes every parentless declaration a root
    return str(value).strip()


def save_config(config_file: Path, **values: Any) -> Dict[str, Any]:
    """Validate and persist ``[graph]`` settings.

    Preserves other sections in the file. Nothing is written if any
    value is invalid.

    Returns:
        The resulting ``[graph]`` settings merged over the defaults.
    """
    full = load_full_config(config_file)
    section = dict(full.get("graph", {}))
    for key, value in values.items():
        section[key] = validate_value(key, value)
    full["graph"] = section
    _save_full_config(full, config_file)
    return load_config(config_file)


def reset_config(config_file: Path) -> None:
    """Remove the ``[graph]`` section, restoring defaults."""
    full = load_full_config(config_file)
    full.pop("graph", None)
    _save_full_config(full, config_file)
