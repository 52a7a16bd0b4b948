"""Configuration for store-fn: YAML-declared variables resolved from env and .env."""

from .manager import (
    DEFAULT_CONFIG_PATH,
    ConfigManager,
    get_config,
    init_config,
    require_config,
    reset_config,
)
from .utils import coerce_type, load_yaml, mask_secret

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ConfigManager",
    "coerce_type",
    "get_config",
    "init_config",
    "load_yaml",
    "mask_secret",
    "require_config",
    "reset_config",
]
