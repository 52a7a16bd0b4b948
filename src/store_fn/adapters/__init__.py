from __future__ import annotations

import logging

from store_fn.adapters.errors import PolarAdapterError
from store_fn.adapters.mock_polar_adapter import MockPolarAdapter
from store_fn.adapters.polar_rest import POLAR_SERVERS, PolarRESTAdapter
from store_fn.config import get_config, require_config
from store_fn.interfaces.protocols import CatalogClient

logger = logging.getLogger(__name__)


def get_polar_adapter(server: str | None = None) -> CatalogClient:
    """Build the catalog client for ``server`` (defaults to ``POLAR_SERVER``).

    ``"mock"`` returns an in-memory adapter; any other value must name a
    Polar server and requires ``POLAR_ACCESS_TOKEN``.
    """

    server = (server or get_config("POLAR_SERVER", default="production")).strip().lower()
    if server == "mock":
        organization_id = str(get_config("POLAR_ORGANIZATION_ID", default="org_mock"))
        logger.info("Initialising mock Polar adapter organization_id=%s", organization_id)
        return MockPolarAdapter(organization_id)

    logger.info("Initialising Polar REST adapter server=%s", server)
    return PolarRESTAdapter(
        str(require_config("POLAR_ACCESS_TOKEN")),
        server=server,
        timeout=float(get_config("POLAR_TIMEOUT", default=30.0)),
    )


__all__ = [
    "POLAR_SERVERS",
    "MockPolarAdapter",
    "PolarAdapterError",
    "PolarRESTAdapter",
    "get_polar_adapter",
]
