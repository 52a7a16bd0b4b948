"""The store factory used by catalog configuration files.

A configuration file builds one store, defines its products and exposes the
store as a module-level ``store`` object::

    from store_fn import create_store, get_polar_adapter, require_config

    store = create_store(
        client=get_polar_adapter(),
        organization_id=require_config("POLAR_ORGANIZATION_ID"),
    )

    store.define_product(
        key="pro",
        name="Pro Plan",
        recurring_interval="month",
        prices=[{"amount_type": "fixed", "price_amount": 19.99}],
    )

``store-fn push`` then loads the file, awaits ``store.push()`` and writes the
returned products to a snapshot module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from store_fn.errors import DefinitionValidationError
from store_fn.interfaces.protocols import CatalogClient
from store_fn.models import Product, ProductCreateDefinition, ProductDefinition
from store_fn.reconciler import SyncAction, plan_sync, sync
from store_fn.snapshot import SyncContext, download_store_from_cloud
from store_fn.units import convert_price_amounts

logger = logging.getLogger(__name__)


@dataclass
class PushResult:
    updated_products: list[Product] = field(default_factory=list)


class Store:
    def __init__(self, client: CatalogClient, organization_id: str) -> None:
        self._client = client
        self._organization_id = organization_id
        self._definitions: list[ProductCreateDefinition] = []

    @property
    def definitions(self) -> tuple[ProductCreateDefinition, ...]:
        return tuple(self._definitions)

    def define_product(self, definition: ProductDefinition | None = None, /, **fields: Any) -> ProductCreateDefinition:
        """Register a product; monetary amounts are converted to minor units here."""

        if definition is None:
            try:
                definition = ProductDefinition.model_validate(fields)
            except ValidationError as exc:
                name = fields.get("name", "<unnamed>")
                raise DefinitionValidationError(
                    f"Invalid product definition '{name}': {exc}"
                ) from exc
        elif fields:
            raise TypeError("Pass either a ProductDefinition or keyword fields, not both")

        if any(existing.key == definition.key for existing in self._definitions):
            raise DefinitionValidationError(
                f"Duplicate product key '{definition.key}' in product {definition.name}"
            )

        metadata = {"key": definition.key}
        metadata.update(
            {name: value for name, value in definition.metadata.items() if name != "key"}
        )

        created = ProductCreateDefinition(
            name=definition.name,
            description=definition.description,
            prices=[convert_price_amounts(price) for price in definition.prices],
            recurring_interval=definition.recurring_interval,
            recurring_interval_count=definition.recurring_interval_count,
            metadata=metadata,
            medias=list(definition.medias),
            virtual=definition.virtual,
            id=definition.id,
        )
        self._definitions.append(created)
        logger.debug("Defined product key=%s virtual=%s", definition.key, definition.virtual)
        return created

    def _context(self) -> SyncContext:
        return SyncContext(client=self._client, organization_id=self._organization_id)

    async def plan(self) -> list[SyncAction]:
        """Return what ``push`` would do, without creating or updating anything."""

        snapshot = await download_store_from_cloud(self._context())
        return plan_sync(self._definitions, snapshot)

    async def push(self) -> PushResult:
        """Sync every defined product and return the resulting records in order."""

        products = await sync(self._definitions, self._context())
        return PushResult(updated_products=products)


def create_store(client: CatalogClient, organization_id: str) -> Store:
    return Store(client=client, organization_id=organization_id)


__all__ = ["PushResult", "Store", "create_store"]
