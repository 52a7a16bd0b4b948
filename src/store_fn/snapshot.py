"""Fetching a point-in-time snapshot of the remote catalog."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, TypeVar

from store_fn.errors import ConfigurationLoadError
from store_fn.interfaces.protocols import CatalogClient
from store_fn.models import Benefit, Page, Product

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SyncContext:
    """Client and organization used by one sync; passed explicitly, never global."""

    client: CatalogClient
    organization_id: str

    def __post_init__(self) -> None:
        if not self.organization_id:
            raise ConfigurationLoadError(
                "organization_id must be provided; set POLAR_ORGANIZATION_ID or pass it to create_store"
            )


@dataclass(frozen=True)
class RemoteSnapshot:
    products: list[Product] = field(default_factory=list)
    benefits: list[Benefit] = field(default_factory=list)


async def fetch_all(pages: AsyncIterator[Page[T]]) -> list[T]:
    """Drain a paginated listing into one flat list."""

    items: list[T] = []
    async for page in pages:
        items.extend(page.items)
    return items


async def download_store_from_cloud(context: SyncContext) -> RemoteSnapshot:
    """Fetch every product and benefit of the organization, concurrently."""

    logger.debug("Fetching remote catalog organization_id=%s", context.organization_id)
    products, benefits = await asyncio.gather(
        fetch_all(context.client.products.list(context.organization_id)),
        fetch_all(context.client.benefits.list(context.organization_id)),
    )
    logger.info(
        "Fetched remote catalog: %s product(s), %s benefit(s)",
        len(products),
        len(benefits),
    )
    return RemoteSnapshot(products=products, benefits=benefits)


__all__ = ["RemoteSnapshot", "SyncContext", "download_store_from_cloud", "fetch_all"]
