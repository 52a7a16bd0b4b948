from __future__ import annotations

import pytest
from pydantic import ValidationError

from store_fn.models import (
    FixedPriceDefinition,
    Product,
    ProductCreateDefinition,
    ProductDefinition,
    ProductPriceFixed,
    SeatBasedPriceDefinition,
)


def test_prices_are_parsed_by_amount_type():
    definition = ProductDefinition(
        key="team",
        name="Team",
        prices=[
            {"amount_type": "fixed", "price_amount": 10},
            {
                "amount_type": "seat_based",
                "seat_tiers": {"tiers": [{"min_seats": 1, "price_per_seat": 500}]},
            },
        ],
    )

    assert isinstance(definition.prices[0], FixedPriceDefinition)
    assert isinstance(definition.prices[1], SeatBasedPriceDefinition)


def test_unknown_amount_type_is_rejected():
    with pytest.raises(ValidationError):
        ProductDefinition(key="x", name="X", prices=[{"amount_type": "barter"}])


def test_empty_key_is_rejected():
    with pytest.raises(ValidationError):
        ProductDefinition(key="", name="X", prices=[])


def test_virtual_definition_requires_id():
    with pytest.raises(ValidationError) as exc:
        ProductDefinition(key="v", name="Virtual", prices=[], virtual=True)

    assert "must define an 'id'" in str(exc.value)


def test_definitions_reject_unknown_fields():
    with pytest.raises(ValidationError):
        ProductDefinition(key="x", name="X", prices=[], colour="blue")


def test_payload_omits_local_only_fields():
    definition = ProductCreateDefinition(
        name="Pro",
        prices=[FixedPriceDefinition(price_amount=1999)],
        recurring_interval="month",
        metadata={"key": "pro"},
        virtual=False,
        id="local-id",
    )

    payload = definition.to_payload()

    assert payload == {
        "name": "Pro",
        "prices": [{"amount_type": "fixed", "price_amount": 1999}],
        "recurring_interval": "month",
        "metadata": {"key": "pro"},
        "medias": [],
    }
    assert definition.key == "pro"


def test_create_definition_key_requires_non_empty_string():
    assert ProductCreateDefinition(name="X", prices=[], metadata={}).key is None
    assert ProductCreateDefinition(name="X", prices=[], metadata={"key": 3}).key is None


def test_remote_product_keeps_unknown_fields():
    product = Product.model_validate(
        {
            "id": "prod_1",
            "name": "Pro",
            "created_at": "2024-05-01T12:30:00Z",
            "metadata": {"key": "pro"},
            "prices": [
                {
                    "id": "price_1",
                    "amount_type": "fixed",
                    "price_amount": 1999,
                    "product_id": "prod_1",
                    "created_at": "2024-05-01T12:30:00Z",
                }
            ],
            "newer_api_field": {"nested": True},
        }
    )

    assert product.key == "pro"
    assert isinstance(product.prices[0], ProductPriceFixed)
    assert product.model_dump()["newer_api_field"] == {"nested": True}
