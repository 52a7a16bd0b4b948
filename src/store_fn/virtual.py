"""Client-side synthesis of products flagged ``virtual``.

Virtual products never reach the remote catalog; they are expanded here into
a complete :class:`~store_fn.models.Product` so the written snapshot can treat
them like any synced product.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import assert_never

from store_fn.errors import DefinitionValidationError
from store_fn.models import (
    CustomPriceDefinition,
    FixedPriceDefinition,
    FreePriceDefinition,
    MeteredUnitPriceDefinition,
    PriceDefinition,
    PriceMeter,
    Product,
    ProductCreateDefinition,
    ProductMedia,
    ProductPrice,
    ProductPriceCustom,
    ProductPriceFixed,
    ProductPriceFree,
    ProductPriceMeteredUnit,
    ProductPriceSeatBased,
    SeatBasedPriceDefinition,
)

DEFAULT_CURRENCY = "usd"
METER_PLACEHOLDER_NAME = "usage base"


def _new_id() -> str:
    return str(uuid.uuid4())


def _placeholder_media(reference: str, created_at: datetime) -> ProductMedia:
    # Media references are kept as the storage path until uploads are modelled.
    return ProductMedia(id=_new_id(), path=reference, created_at=created_at)


def map_virtual_price(
    price: PriceDefinition,
    *,
    product_id: str,
    recurring: bool,
    created_at: datetime,
) -> ProductPrice:
    common = {
        "id": _new_id(),
        "type": "recurring" if recurring else "one_time",
        "recurring_interval": None,
        "is_archived": False,
        "product_id": product_id,
        "created_at": created_at,
        "modified_at": None,
        "source": "catalog",
    }

    match price:
        case FreePriceDefinition():
            return ProductPriceFree(**common)
        case FixedPriceDefinition():
            return ProductPriceFixed(
                **common,
                price_amount=price.price_amount,
                price_currency=price.price_currency or DEFAULT_CURRENCY,
            )
        case CustomPriceDefinition():
            return ProductPriceCustom(
                **common,
                preset_amount=price.preset_amount or 0,
                minimum_amount=price.minimum_amount or 0,
                maximum_amount=price.maximum_amount or 0,
                price_currency=price.price_currency or DEFAULT_CURRENCY,
            )
        case MeteredUnitPriceDefinition():
            # Placeholder meter; virtual products are not wired to real meters.
            return ProductPriceMeteredUnit(
                **common,
                cap_amount=price.cap_amount,
                price_currency=price.price_currency or DEFAULT_CURRENCY,
                meter=PriceMeter(id=_new_id(), name=METER_PLACEHOLDER_NAME),
                meter_id=_new_id(),
                unit_amount="1",
            )
        case SeatBasedPriceDefinition():
            return ProductPriceSeatBased(
                **common,
                seat_tiers=price.seat_tiers,
                price_currency=price.price_currency or DEFAULT_CURRENCY,
            )
        case _:
            assert_never(price)


def map_virtual_product(definition: ProductCreateDefinition) -> Product:
    """Build the full product record for a virtual definition without any I/O."""

    if not definition.id:
        raise DefinitionValidationError(
            f"Virtual product '{definition.name}' must define an 'id'"
        )

    now = datetime.now(timezone.utc)
    recurring = definition.recurring_interval is not None

    return Product(
        id=definition.id,
        name=definition.name,
        description=definition.description or "",
        metadata=dict(definition.metadata),
        is_recurring=recurring,
        attached_custom_fields=[],
        benefits=[],
        medias=[_placeholder_media(media, now) for media in definition.medias],
        created_at=now,
        modified_at=None,
        organization_id="",
        is_archived=False,
        trial_interval=None,
        trial_interval_count=None,
        recurring_interval=definition.recurring_interval,
        recurring_interval_count=definition.recurring_interval_count,
        prices=[
            map_virtual_price(
                price,
                product_id=definition.id,
                recurring=recurring,
                created_at=now,
            )
            for price in definition.prices
        ],
    )


__all__ = ["DEFAULT_CURRENCY", "map_virtual_price", "map_virtual_product"]
