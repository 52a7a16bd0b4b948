"""Reconciliation of local product definitions against the remote catalog.

Definitions are matched to remote products by ``metadata["key"]``. A match is
updated, a miss is created and a virtual definition is synthesized locally.
Definitions are processed one at a time, in definition order, so the remote
side sees the same ordering as the operator reading the log. Any failure
aborts the remaining definitions; nothing already pushed is rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Optional, Sequence

from store_fn.errors import DefinitionValidationError
from store_fn.models import Product, ProductCreateDefinition
from store_fn.snapshot import RemoteSnapshot, SyncContext, download_store_from_cloud
from store_fn.virtual import map_virtual_product

logger = logging.getLogger(__name__)


class SyncActionKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    VIRTUAL = "virtual"


@dataclass(frozen=True)
class SyncAction:
    kind: SyncActionKind
    definition: ProductCreateDefinition
    existing: Optional[Product] = None

    @property
    def unchanged(self) -> bool:
        """True when an update would resend values the remote already holds."""

        return self.existing is not None and product_matches_definition(
            self.existing, self.definition
        )


def find_existing_product(snapshot: RemoteSnapshot, key: str) -> Optional[Product]:
    """Return the first remote product whose metadata key equals ``key``."""

    # Duplicate keys on the remote side are not diagnosed; first match wins.
    return next(
        (product for product in snapshot.products if product.metadata.get("key") == key),
        None,
    )


def plan_action(definition: ProductCreateDefinition, snapshot: RemoteSnapshot) -> SyncAction:
    key = definition.key
    if not key:
        raise DefinitionValidationError(f"Missing 'key' in product {definition.name}")

    if definition.virtual:
        return SyncAction(SyncActionKind.VIRTUAL, definition)

    existing = find_existing_product(snapshot, key)
    if existing is not None:
        return SyncAction(SyncActionKind.UPDATE, definition, existing)
    return SyncAction(SyncActionKind.CREATE, definition)


def plan_sync(
    definitions: Sequence[ProductCreateDefinition], snapshot: RemoteSnapshot
) -> list[SyncAction]:
    """Decide the action for every definition without touching the remote side."""

    return [plan_action(definition, snapshot) for definition in definitions]


async def reconcile(
    definitions: Sequence[ProductCreateDefinition],
    snapshot: RemoteSnapshot,
    context: SyncContext,
) -> list[Product]:
    """Push every definition and return the resulting records in definition order."""

    updated_products: list[Product] = []

    for definition in definitions:
        action = plan_action(definition, snapshot)

        if action.kind is SyncActionKind.VIRTUAL:
            updated_products.append(map_virtual_product(definition))
            continue

        if action.existing is not None:
            product = await context.client.products.update(action.existing.id, definition)
            logger.info("Updated product %s", definition.name)
        else:
            product = await context.client.products.create(definition)
            logger.info("Created new product %s", definition.name)

        updated_products.append(product)

    return updated_products


async def sync(
    definitions: Sequence[ProductCreateDefinition], context: SyncContext
) -> list[Product]:
    """Fetch a fresh snapshot and reconcile ``definitions`` against it."""

    snapshot = await download_store_from_cloud(context)
    return await reconcile(definitions, snapshot, context)


def _matches(expected: Any, actual: Any) -> bool:
    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return False
        return all(
            name in actual and _matches(value, actual[name])
            for name, value in expected.items()
        )
    if isinstance(expected, list):
        if not isinstance(actual, list) or len(expected) != len(actual):
            return False
        return all(_matches(left, right) for left, right in zip(expected, actual))
    return expected == actual


def product_matches_definition(product: Product, definition: ProductCreateDefinition) -> bool:
    """Non-strict comparison: every field the definition sets must equal the remote one.

    Remote-only fields (ids, timestamps, archival flags) are ignored, and media
    references are compared against the remote media ids.
    """

    expected = definition.to_payload()
    actual = product.model_dump(mode="json")
    actual["medias"] = [media["id"] for media in actual.get("medias", [])]
    return _matches(expected, actual)


__all__ = [
    "SyncAction",
    "SyncActionKind",
    "find_existing_product",
    "plan_action",
    "plan_sync",
    "product_matches_definition",
    "reconcile",
    "sync",
]
