"""Conversion of author-entered currency amounts into minor units."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from numbers import Real

from store_fn.errors import DefinitionValidationError
from store_fn.models import Amount, PriceDefinition

MONETARY_FIELDS = ("price_amount", "preset_amount", "minimum_amount", "maximum_amount")


def to_minor_units(amount: Amount) -> int:
    """Return ``amount`` (major units, e.g. dollars) as an integer of cents.

    The multiplication happens on the decimal form of the number so that
    ``19.99`` becomes ``1999`` rather than ``1998.9999...``; halves round up.
    """

    scaled = Decimal(str(amount)) * 100
    if not scaled.is_finite():
        raise DefinitionValidationError(f"Price amount must be a finite number, got {amount!r}")
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _is_amount(value: object) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (Real, Decimal))


def convert_price_amounts(price: PriceDefinition) -> PriceDefinition:
    """Return a copy of ``price`` with every monetary field in minor units.

    Not idempotent: converting an already converted price multiplies it
    again, so this must run exactly once per definition.
    """

    updates = {}
    for field_name in MONETARY_FIELDS:
        value = getattr(price, field_name, None)
        if _is_amount(value):
            updates[field_name] = to_minor_units(value)
    if not updates:
        return price
    return price.model_copy(update=updates)


__all__ = ["MONETARY_FIELDS", "convert_price_amounts", "to_minor_units"]
