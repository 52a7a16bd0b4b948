"""Configuration manager for Polar credentials and client settings.

Variables are declared in a YAML file (``config_vars.yaml`` ships with the
package) and resolved from the process environment first, then from a
``.env`` file. Resolution never writes back into ``os.environ``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import dotenv_values, find_dotenv

from store_fn.config.utils import SUPPORTED_TYPES, coerce_type, load_yaml, mask_secret

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config_vars.yaml")


class ConfigManager:
    """Load and validate configuration variables declared in a YAML file."""

    def __init__(
        self,
        config_path: str | Path | None = None,
        *,
        strict: Optional[bool] = None,
        auto_load: bool = True,
        dotenv_path: str | Path | None = None,
        debug: bool = False,
    ) -> None:
        self._config_path = Path(config_path or DEFAULT_CONFIG_PATH).expanduser().resolve()
        self._raw_config = load_yaml(self._config_path)
        self._variables = self._parse_variables()
        self._validation = self._parse_validation()
        self._dotenv_path = self._resolve_dotenv_path(dotenv_path)
        self._dotenv_values = self._read_dotenv()
        self._debug = debug

        self.strict = strict if strict is not None else bool(self._validation.get("strict", False))

        self._values: dict[str, Any] = {}
        self._loaded = False

        if auto_load:
            self.load()

    def _resolve_dotenv_path(self, provided: str | Path | None) -> Optional[str]:
        if provided:
            candidate = Path(provided).expanduser()
            return str(candidate.resolve()) if candidate.exists() else None
        discovered = find_dotenv(usecwd=True)
        return discovered or None

    def _read_dotenv(self) -> dict[str, str]:
        if not self._dotenv_path:
            return {}
        # Bare "NAME" lines parse to None and count as unset.
        parsed = dotenv_values(self._dotenv_path)
        return {name: raw for name, raw in parsed.items() if raw is not None}

    def _parse_variables(self) -> dict[str, dict[str, Any]]:
        declared = self._raw_config.get("variables") or {}
        if not isinstance(declared, dict):
            raise ValueError(
                "Config key 'variables' must map variable names to definitions."
            )
        for name, entry in declared.items():
            if not isinstance(entry, dict):
                raise ValueError(f"Variable '{name}' must be declared as a mapping.")
            declared_type = str(entry.get("type", "str"))
            if declared_type not in SUPPORTED_TYPES:
                raise ValueError(f"Variable '{name}' uses unsupported type '{declared_type}'.")
        return declared

    def _parse_validation(self) -> dict[str, Any]:
        validation = self._raw_config.get("validation") or {}
        if not isinstance(validation, dict):
            raise ValueError("Config key 'validation' must be a mapping.")
        for key in ("required", "optional"):
            collection = validation.get(key)
            if collection is not None and not isinstance(collection, list):
                raise ValueError(f"Validation '{key}' entry must be a list if provided.")
        return validation

    def _lookup(self, source: str) -> Optional[str]:
        return os.environ.get(source, self._dotenv_values.get(source))

    def load(self) -> None:
        """Resolve every declared variable."""

        if self._loaded:
            return

        required = set(self._validation.get("required") or [])
        optional = set(self._validation.get("optional") or [])

        for var_name, definition in self._variables.items():
            source = str(definition.get("source") or var_name)
            target_type = str(definition.get("type", "str"))
            raw_value = self._lookup(source)

            if raw_value is None:
                message = f"Variable '{var_name}' not found in source '{source}'."
                if self.strict:
                    logger.error(message)
                    raise RuntimeError(message)
                if var_name in required:
                    logger.error("Required variable %s not found", var_name)
                    raise RuntimeError(
                        f"Required variable '{var_name}' not found in .env file or environment."
                    )
                if var_name in optional:
                    logger.warning("Optional variable %s not found", var_name)
                raw_value = definition.get("default")

            value = coerce_type(raw_value, target_type, var_name)
            self._values[var_name] = value
            if value is not None:
                display = str(value) if self._debug else mask_secret(str(value))
                logger.debug("Loaded %s: %s", var_name, display)

        self._loaded = True

    def get(self, key: str, default: Any = None) -> Any:
        """Resolved value of ``key``, or ``default`` when unset."""

        if not self._loaded:
            self.load()
        value = self._values.get(key)
        return default if value is None else value

    def require(self, key: str) -> Any:
        """Resolved value of ``key``; ``RuntimeError`` when unset."""

        if not self._loaded:
            self.load()
        if self._values.get(key) is None:
            raise RuntimeError(
                f"Required configuration '{key}' is missing. "
                "Set it in the environment or in a .env file."
            )
        return self._values[key]

    @property
    def dotenv_path(self) -> Optional[str]:
        return self._dotenv_path

    @property
    def values(self) -> dict[str, Any]:
        """Every resolved variable, as a new dict."""

        if not self._loaded:
            self.load()
        return dict(self._values)


_SINGLETON: Optional[ConfigManager] = None


def init_config(
    config_path: str | Path | None = None,
    *,
    strict: Optional[bool] = None,
    dotenv_path: str | Path | None = None,
    debug: bool = False,
) -> ConfigManager:
    """Create the process-wide manager, replacing any previous one."""

    global _SINGLETON
    if _SINGLETON is not None:
        logger.warning(
            "init_config called twice; the previous configuration is discarded."
        )
    _SINGLETON = ConfigManager(
        config_path,
        strict=strict,
        dotenv_path=dotenv_path,
        debug=debug,
    )
    return _SINGLETON


def _ensure_singleton() -> ConfigManager:
    # Store configuration files may be run without the CLI having initialised
    # anything; fall back to the packaged variables and the nearest .env.
    global _SINGLETON
    if _SINGLETON is None:
        _SINGLETON = ConfigManager()
    return _SINGLETON


def get_config(key: str, default: Any = None) -> Any:
    """Look up ``key`` in the process-wide manager."""

    return _ensure_singleton().get(key, default)


def require_config(key: str) -> Any:
    """Retrieve a mandatory configuration value or raise ``RuntimeError``."""

    return _ensure_singleton().require(key)


def reset_config() -> None:
    """Drop the singleton so the next lookup re-reads the environment."""

    global _SINGLETON
    _SINGLETON = None
