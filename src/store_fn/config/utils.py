"""Helpers shared by the configuration manager."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

SUPPORTED_TYPES = {"str", "int", "float", "bool"}

_TRUE_VALUES = {"true", "True", "1"}
_FALSE_VALUES = {"false", "False", "0"}


def mask_secret(value: str) -> str:
    """Mask a secret for safe logging."""

    if len(value) < 10:
        return "*" * 10
    return f"{value[:2]}****{value[-4:]}"


def _to_bool(value: str, variable_name: str) -> bool:
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(
        f"Invalid boolean value for '{variable_name}': '{value}'. "
        f"Must be one of: {', '.join(sorted(_TRUE_VALUES | _FALSE_VALUES))}"
    )


def coerce_type(raw_value: Any, target_type: str, variable_name: str) -> Any:
    """Convert ``raw_value`` to ``target_type``; ``None`` passes through."""

    if target_type not in SUPPORTED_TYPES:
        raise ValueError(
            f"Unsupported type '{target_type}' for variable '{variable_name}'"
        )
    if raw_value is None:
        return None

    if target_type == "str":
        if isinstance(raw_value, bool):
            return str(raw_value).lower()
        return str(raw_value)
    if target_type == "bool":
        return _to_bool(str(raw_value), variable_name)

    converter = int if target_type == "int" else float
    try:
        return converter(str(raw_value))
    except ValueError as exc:
        raise ValueError(
            f"Cannot convert '{variable_name}' value '{raw_value}' to {target_type}"
        ) from exc


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file whose root is a mapping."""

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file '{config_path}' does not exist.")

    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        raise ValueError(
            f"Configuration file '{config_path}' must define a mapping at the root."
        )
    return data


__all__ = ["SUPPORTED_TYPES", "coerce_type", "load_yaml", "mask_secret"]
