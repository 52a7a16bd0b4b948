from __future__ import annotations

from store_fn.errors import RemoteCallError


class PolarAdapterError(RemoteCallError):
    """Custom error raised when Polar adapters fail to complete a call."""


__all__ = ["PolarAdapterError"]
