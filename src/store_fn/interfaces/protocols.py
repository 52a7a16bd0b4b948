from typing import AsyncIterator, Protocol, runtime_checkable

from store_fn.models import Benefit, Page, Product, ProductCreateDefinition


class ProductsAPI(Protocol):
    def list(self, organization_id: str) -> AsyncIterator[Page[Product]]:
        ...

    async def create(self, definition: ProductCreateDefinition) -> Product:
        ...

    async def update(self, id: str, payload: ProductCreateDefinition) -> Product:
        ...


class BenefitsAPI(Protocol):
    def list(self, organization_id: str) -> AsyncIterator[Page[Benefit]]:
        ...


@runtime_checkable
class CatalogClient(Protocol):
    products: ProductsAPI
    benefits: BenefitsAPI


__all__ = ["BenefitsAPI", "CatalogClient", "ProductsAPI"]
