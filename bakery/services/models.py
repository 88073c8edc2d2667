"""Catalog Models - Pydantic models for products and their price rules."""
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from bakery.services.money import to_decimal as _to_decimal


class PriceRule(BaseModel):
    """
    Quantity price break for one product.

    A bracket rule carries ``flat_price`` for the whole ``[min_qty, max_qty]``
    range; an incremental rule carries ``extra_per_unit`` charged for every
    unit once ``min_qty`` is reached. ``max_qty`` of None means unbounded.
    """
    min_qty: int = Field(ge=1)
    max_qty: Optional[int] = None
    flat_price: Optional[Decimal] = Field(default=None, alias="price")
    extra_per_unit: Optional[Decimal] = None

    class Config:
        extra = "ignore"
        frozen = True
        populate_by_name = True

    @field_validator("flat_price", "extra_per_unit", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        if v is None:
            return None
        return _to_decimal(v)

    @property
    def is_bracket(self) -> bool:
        return self.flat_price is not None

    @property
    def is_incremental(self) -> bool:
        return self.extra_per_unit is not None

    def contains(self, quantity: int) -> bool:
        """Inclusive on both ends; no max_qty means no upper bound."""
        return self.min_qty <= quantity and (self.max_qty is None or quantity <= self.max_qty)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Product(BaseModel):
    """Product as returned by the catalog backend."""
    id: str
    name: str
    price: Decimal
    description: Optional[str] = None
    image: Optional[str] = None
    has_chocolate_option: bool = False
    is_available: bool = True
    quantity_rules: Tuple[PriceRule, ...] = Field(default=(), alias="product_quantity_rules")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("price", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("quantity_rules", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or ()
