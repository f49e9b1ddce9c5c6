"""
Configuration for the recipe formatter.
Default thresholds plus loading of JSON / YAML override files.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from error_handling import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "sections": {
        "title_reserved_lines": 2,
        "min_ingredient_run": 3,
        "min_step_run": 2,
        "max_header_words": 6,
    },
    "title": {
        "min_length": 4,
    },
    "steps": {
        "short_step_threshold": 20,
    },
    "spatial": {
        "enabled": True,
        "row_tolerance": 0.5,
        "max_gap_ratio": 2.0,
    },
    "logging": {
        "level": "INFO",
        "format": "text",
    },
}

# Expected value type per leaf, used to reject malformed overrides
_VALUE_TYPES = {
    "sections": {
        "title_reserved_lines": int,
        "min_ingredient_run": int,
        "min_step_run": int,
        "max_header_words": int,
    },
    "title": {"min_length": int},
    "steps": {"short_step_threshold": int},
    "spatial": {"enabled": bool, "row_tolerance": (int, float), "max_gap_ratio": (int, float)},
    "logging": {"level": str, "format": str},
}


def merge_config(base: Dict[str, Any], override: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Deep-merge ``override`` over a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check value types of known keys.

    Unknown sections and keys are left alone.

    Raises:
        ConfigurationError: if a known key carries a value of the wrong type
    """
    for section, types in _VALUE_TYPES.items():
        values = config.get(section, {})
        if not isinstance(values, dict):
            raise ConfigurationError(f"Config section '{section}' must be a mapping")
        for key, expected in types.items():
            if key not in values:
                continue
            value = values[key]
            # bool is an int subclass; only accept it where a bool is expected
            if isinstance(value, bool) and expected is not bool:
                valid = False
            else:
                valid = isinstance(value, expected)
            if not valid:
                raise ConfigurationError(
                    f"Config value {section}.{key} has the wrong type",
                    details={"section": section, "key": key, "value": repr(value)},
                )
            if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
                raise ConfigurationError(
                    f"Config value {section}.{key} must not be negative",
                    details={"section": section, "key": key, "value": value},
                )
    return config


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load formatter configuration.

    Args:
        config_path: Optional ``.json``, ``.yaml`` or ``.yml`` override file

    Returns:
        Defaults merged with the file's contents

    Raises:
        ConfigurationError: if the file cannot be read or parsed
    """
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}", details={"path": str(path)})

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                overrides = yaml.safe_load(f) or {}
            else:
                overrides = json.load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config from {path}: {e}", details={"path": str(path)}) from e

    if not isinstance(overrides, dict):
        raise ConfigurationError("Config file must contain a mapping", details={"path": str(path)})

    config = validate_config(merge_config(DEFAULT_CONFIG, overrides))
    logger.debug("Loaded formatter config from %s", path)
    return config
