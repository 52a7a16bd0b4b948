from __future__ import annotations

import asyncio
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import AsyncIterator, Iterable, Sequence, TypeVar

from store_fn.adapters.errors import PolarAdapterError
from store_fn.models import Benefit, Page, Pagination, Product, ProductCreateDefinition
from store_fn.virtual import map_virtual_price

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")


class MockPolarAdapter:
    """Asynchronous in-memory stand-in for the Polar catalog of one organization."""

    def __init__(
        self,
        organization_id: str = "org_mock",
        *,
        products: Iterable[Product] | None = None,
        benefits: Iterable[Benefit] | None = None,
        page_size: int = 100,
        latency: float = 0.0,
        fail_on: Iterable[str] | None = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be a positive integer")
        self.organization_id = organization_id
        self.page_size = page_size
        self.latency = latency
        self.fail_on = set(fail_on or ())
        self._products: list[Product] = list(products or [])
        self._benefits: list[Benefit] = list(benefits or [])
        self._calls: list[tuple[str, str]] = []

        self.products = MockProductsResource(self)
        self.benefits = MockBenefitsResource(self)

    async def paginate(
        self, items: Sequence[ItemT], operation: str, organization_id: str
    ) -> AsyncIterator[Page[ItemT]]:
        self._calls.append((operation, organization_id))
        max_page = max(1, math.ceil(len(items) / self.page_size))
        for page_number in range(max_page):
            await asyncio.sleep(self.latency)
            start = page_number * self.page_size
            yield Page(
                items=list(items[start : start + self.page_size]),
                pagination=Pagination(total_count=len(items), max_page=max_page),
            )

    def build_product(
        self,
        definition: ProductCreateDefinition,
        *,
        product_id: str,
        created_at: datetime,
        modified_at: datetime | None,
    ) -> Product:
        recurring = definition.recurring_interval is not None
        return Product(
            id=product_id,
            name=definition.name,
            description=definition.description,
            metadata=dict(definition.metadata),
            is_recurring=recurring,
            recurring_interval=definition.recurring_interval,
            recurring_interval_count=definition.recurring_interval_count,
            organization_id=self.organization_id,
            created_at=created_at,
            modified_at=modified_at,
            prices=[
                map_virtual_price(
                    price,
                    product_id=product_id,
                    recurring=recurring,
                    created_at=modified_at or created_at,
                )
                for price in definition.prices
            ],
        )

    def check_failure(self, operation: str, definition: ProductCreateDefinition) -> None:
        if definition.key in self.fail_on:
            logger.warning(
                "Mock Polar simulated failure operation=%s key=%s",
                operation,
                definition.key,
            )
            raise PolarAdapterError(
                f"Mock Polar {operation} failed",
                payload={"status": "failed", "operation": operation, "key": definition.key},
            )

    @property
    def calls(self) -> list[tuple[str, str]]:
        return list(self._calls)

    @property
    def mutations(self) -> list[tuple[str, str]]:
        """Create and update calls only, in the order they were issued."""

        return [call for call in self._calls if call[0] in {"create", "update"}]

    @property
    def stored_products(self) -> list[Product]:
        return list(self._products)


class MockProductsResource:
    def __init__(self, adapter: MockPolarAdapter) -> None:
        self._adapter = adapter

    def list(self, organization_id: str) -> AsyncIterator[Page[Product]]:
        return self._adapter.paginate(
            self._adapter._products, "list_products", organization_id
        )

    async def create(self, definition: ProductCreateDefinition) -> Product:
        adapter = self._adapter
        adapter._calls.append(("create", definition.key or ""))
        await asyncio.sleep(adapter.latency)
        adapter.check_failure("create", definition)

        product = adapter.build_product(
            definition,
            product_id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc),
            modified_at=None,
        )
        adapter._products.append(product)
        logger.info("Mock Polar created product id=%s", product.id)
        return product

    async def update(self, id: str, payload: ProductCreateDefinition) -> Product:
        adapter = self._adapter
        adapter._calls.append(("update", id))
        await asyncio.sleep(adapter.latency)
        adapter.check_failure("update", payload)

        for index, existing in enumerate(adapter._products):
            if existing.id == id:
                product = adapter.build_product(
                    payload,
                    product_id=id,
                    created_at=existing.created_at,
                    modified_at=datetime.now(timezone.utc),
                )
                adapter._products[index] = product
                logger.info("Mock Polar updated product id=%s", id)
                return product

        raise PolarAdapterError(
            "Mock Polar update failed: product not found",
            payload={"status": "failed", "operation": "update", "status_code": 404, "id": id},
        )


class MockBenefitsResource:
    def __init__(self, adapter: MockPolarAdapter) -> None:
        self._adapter = adapter

    def list(self, organization_id: str) -> AsyncIterator[Page[Benefit]]:
        return self._adapter.paginate(
            self._adapter._benefits, "list_benefits", organization_id
        )


__all__ = ["MockBenefitsResource", "MockPolarAdapter", "MockProductsResource"]
