from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from conftest import ORGANIZATION_ID, make_remote_product
from store_fn.adapters import MockPolarAdapter
from store_fn.errors import ConfigurationLoadError
from store_fn.models import Benefit, Page, Pagination
from store_fn.snapshot import SyncContext, download_store_from_cloud, fetch_all


def _benefit(index: int) -> Benefit:
    return Benefit(
        id=f"benefit_{index}",
        type="custom",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.mark.asyncio
async def test_snapshot_drains_every_page():
    products = [make_remote_product(f"key-{index}") for index in range(5)]
    client = MockPolarAdapter(
        ORGANIZATION_ID,
        products=products,
        benefits=[_benefit(1), _benefit(2), _benefit(3)],
        page_size=2,
    )

    snapshot = await download_store_from_cloud(SyncContext(client, ORGANIZATION_ID))

    assert [product.key for product in snapshot.products] == [f"key-{i}" for i in range(5)]
    assert [benefit.id for benefit in snapshot.benefits] == ["benefit_1", "benefit_2", "benefit_3"]
    assert sorted(client.calls) == [
        ("list_benefits", ORGANIZATION_ID),
        ("list_products", ORGANIZATION_ID),
    ]


@pytest.mark.asyncio
async def test_empty_catalog_gives_empty_snapshot(mock_client):
    snapshot = await download_store_from_cloud(SyncContext(mock_client, ORGANIZATION_ID))

    assert snapshot.products == []
    assert snapshot.benefits == []


@pytest.mark.asyncio
async def test_fetch_all_flattens_pages():
    async def pages():
        yield Page(items=[1, 2], pagination=Pagination(total_count=3, max_page=2))
        yield Page(items=[3], pagination=Pagination(total_count=3, max_page=2))

    assert await fetch_all(pages()) == [1, 2, 3]


class _GatedResource:
    """Listing that only finishes once the other listing has started."""

    def __init__(self, started: asyncio.Event, other: asyncio.Event) -> None:
        self._started = started
        self._other = other

    async def list(self, organization_id):
        self._started.set()
        await self._other.wait()
        yield Page(items=[], pagination=Pagination(total_count=0, max_page=1))


class _GatedClient:
    def __init__(self) -> None:
        products_started = asyncio.Event()
        benefits_started = asyncio.Event()
        self.products = _GatedResource(products_started, benefits_started)
        self.benefits = _GatedResource(benefits_started, products_started)


@pytest.mark.asyncio
async def test_products_and_benefits_are_fetched_concurrently():
    context = SyncContext(_GatedClient(), ORGANIZATION_ID)

    snapshot = await asyncio.wait_for(download_store_from_cloud(context), timeout=2)

    assert snapshot.products == []


def test_sync_context_requires_organization(mock_client):
    with pytest.raises(ConfigurationLoadError, match="organization_id must be provided"):
        SyncContext(mock_client, "")
