"""Error hierarchy raised by store-fn."""

from __future__ import annotations

from typing import Any


class StoreFnError(RuntimeError):
    """Base error for every failure raised by store-fn."""

    def __init__(self, message: str, *, payload: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.payload: dict[str, Any] = payload or {}


class DefinitionValidationError(StoreFnError, ValueError):
    """A product definition is malformed (missing key, duplicate key, bad price)."""


class RemoteCallError(StoreFnError):
    """The remote catalog API rejected a call or could not be reached."""


class SerializationError(StoreFnError):
    """The product snapshot could not be written."""


class ConfigurationLoadError(StoreFnError):
    """The store configuration file could not be loaded or has the wrong shape."""


__all__ = [
    "ConfigurationLoadError",
    "DefinitionValidationError",
    "RemoteCallError",
    "SerializationError",
    "StoreFnError",
]
