"""Pydantic models for catalog definitions and Polar product records.

Two families live here:

* definitions authored in a store configuration file (``*Definition``), which
  are frozen and reject unknown fields;
* records returned by (or synthesized for) the remote catalog, which accept
  unknown fields so newer API payloads keep parsing.

Field names follow the Polar REST API JSON, so ``model_dump(mode="json")`` is
the wire shape.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Any, Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Amount = Union[int, float, Decimal]
MetadataValue = Union[str, bool, int, float]

T = TypeVar("T")


class RecurringInterval(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class SeatTier(BaseModel):
    min_seats: int
    max_seats: Optional[int] = None
    price_per_seat: int

    model_config = ConfigDict(extra="allow")


class SeatTiers(BaseModel):
    tiers: list[SeatTier]

    model_config = ConfigDict(extra="allow")


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------


class _DefinitionModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)


class FreePriceDefinition(_DefinitionModel):
    amount_type: Literal["free"] = "free"


class FixedPriceDefinition(_DefinitionModel):
    amount_type: Literal["fixed"] = "fixed"
    price_amount: Amount
    price_currency: Optional[str] = None


class CustomPriceDefinition(_DefinitionModel):
    amount_type: Literal["custom"] = "custom"
    preset_amount: Optional[Amount] = None
    minimum_amount: Optional[Amount] = None
    maximum_amount: Optional[Amount] = None
    price_currency: Optional[str] = None


class MeteredUnitPriceDefinition(_DefinitionModel):
    amount_type: Literal["metered_unit"] = "metered_unit"
    meter_id: Optional[str] = None
    unit_amount: Optional[Union[str, Amount]] = None
    cap_amount: Optional[int] = None
    price_currency: Optional[str] = None


class SeatBasedPriceDefinition(_DefinitionModel):
    amount_type: Literal["seat_based"] = "seat_based"
    seat_tiers: SeatTiers
    price_currency: Optional[str] = None


PriceDefinition = Annotated[
    Union[
        FreePriceDefinition,
        FixedPriceDefinition,
        CustomPriceDefinition,
        MeteredUnitPriceDefinition,
        SeatBasedPriceDefinition,
    ],
    Field(discriminator="amount_type"),
]


class ProductDefinition(_DefinitionModel):
    """A product as written by the catalog author, amounts in major units."""

    key: str = Field(min_length=1)
    name: str
    description: Optional[str] = None
    prices: list[PriceDefinition]
    recurring_interval: Optional[RecurringInterval] = None
    recurring_interval_count: Optional[int] = None
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)
    medias: list[str] = Field(default_factory=list)
    virtual: bool = False
    id: Optional[str] = None

    @model_validator(mode="after")
    def _virtual_requires_id(self) -> "ProductDefinition":
        if self.virtual and not self.id:
            raise ValueError(f"Virtual product '{self.name}' must define an 'id'")
        return self


class ProductCreateDefinition(_DefinitionModel):
    """A defined product ready to be pushed, amounts in minor units.

    ``metadata["key"]`` carries the key used to match remote records.
    """

    name: str
    description: Optional[str] = None
    prices: list[PriceDefinition]
    recurring_interval: Optional[RecurringInterval] = None
    recurring_interval_count: Optional[int] = None
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)
    medias: list[str] = Field(default_factory=list)
    virtual: bool = False
    id: Optional[str] = None

    @property
    def key(self) -> Optional[str]:
        value = self.metadata.get("key")
        if isinstance(value, str) and value:
            return value
        return None

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body sent to the create and update endpoints."""

        return self.model_dump(
            mode="json", exclude={"virtual", "id"}, exclude_none=True
        )


# ---------------------------------------------------------------------------
# Remote records
# ---------------------------------------------------------------------------


class _RemoteModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class _ProductPriceBase(_RemoteModel):
    id: str
    source: str = "catalog"
    type: Optional[str] = None
    recurring_interval: Optional[RecurringInterval] = None
    is_archived: bool = False
    product_id: str
    created_at: datetime
    modified_at: Optional[datetime] = None


class ProductPriceFree(_ProductPriceBase):
    amount_type: Literal["free"] = "free"


class ProductPriceFixed(_ProductPriceBase):
    amount_type: Literal["fixed"] = "fixed"
    price_amount: int
    price_currency: str = "usd"


class ProductPriceCustom(_ProductPriceBase):
    amount_type: Literal["custom"] = "custom"
    preset_amount: Optional[int] = None
    minimum_amount: Optional[int] = None
    maximum_amount: Optional[int] = None
    price_currency: str = "usd"


class PriceMeter(_RemoteModel):
    id: str
    name: str


class ProductPriceMeteredUnit(_ProductPriceBase):
    amount_type: Literal["metered_unit"] = "metered_unit"
    price_currency: str = "usd"
    unit_amount: str
    cap_amount: Optional[int] = None
    meter_id: str
    meter: PriceMeter


class ProductPriceSeatBased(_ProductPriceBase):
    amount_type: Literal["seat_based"] = "seat_based"
    price_currency: str = "usd"
    seat_tiers: SeatTiers


ProductPrice = Annotated[
    Union[
        ProductPriceFree,
        ProductPriceFixed,
        ProductPriceCustom,
        ProductPriceMeteredUnit,
        ProductPriceSeatBased,
    ],
    Field(discriminator="amount_type"),
]


class ProductMedia(_RemoteModel):
    id: str
    organization_id: str = ""
    name: str = ""
    path: str
    mime_type: str = ""
    size: int = 0
    storage_version: Optional[str] = None
    checksum_etag: Optional[str] = None
    checksum_sha256_base64: Optional[str] = None
    checksum_sha256_hex: Optional[str] = None
    last_modified_at: Optional[datetime] = None
    version: Optional[str] = None
    service: str = "product_media"
    is_uploaded: bool = False
    created_at: datetime
    size_readable: str = "0 kb"
    public_url: str = ""


class Benefit(_RemoteModel):
    id: str
    type: str
    description: str = ""
    created_at: datetime
    modified_at: Optional[datetime] = None
    organization_id: str = ""
    selectable: bool = True
    deletable: bool = True
    properties: dict[str, Any] = Field(default_factory=dict)


class Product(_RemoteModel):
    """The authoritative product record, as returned by the remote catalog."""

    id: str
    created_at: datetime
    modified_at: Optional[datetime] = None
    trial_interval: Optional[str] = None
    trial_interval_count: Optional[int] = None
    name: str
    description: Optional[str] = None
    recurring_interval: Optional[RecurringInterval] = None
    recurring_interval_count: Optional[int] = None
    is_recurring: bool = False
    is_archived: bool = False
    organization_id: str = ""
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)
    prices: list[ProductPrice] = Field(default_factory=list)
    benefits: list[Benefit] = Field(default_factory=list)
    medias: list[ProductMedia] = Field(default_factory=list)
    attached_custom_fields: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def key(self) -> Optional[str]:
        value = self.metadata.get("key")
        return value if isinstance(value, str) else None


class Pagination(BaseModel):
    total_count: int
    max_page: int


class Page(BaseModel, Generic[T]):
    """One page of a paginated listing endpoint."""

    items: list[T]
    pagination: Pagination


__all__ = [
    "Amount",
    "Benefit",
    "CustomPriceDefinition",
    "FixedPriceDefinition",
    "FreePriceDefinition",
    "MeteredUnitPriceDefinition",
    "MetadataValue",
    "Page",
    "Pagination",
    "PriceDefinition",
    "PriceMeter",
    "Product",
    "ProductCreateDefinition",
    "ProductDefinition",
    "ProductMedia",
    "ProductPrice",
    "ProductPriceCustom",
    "ProductPriceFixed",
    "ProductPriceFree",
    "ProductPriceMeteredUnit",
    "ProductPriceSeatBased",
    "RecurringInterval",
    "SeatBasedPriceDefinition",
    "SeatTier",
    "SeatTiers",
]
