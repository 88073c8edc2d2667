"""Quantity-tiered pricing."""
from .resolver import (
    QuantityValidationResult,
    describe_rules,
    minimum_quantity,
    resolve,
    unit_price_for,
)

__all__ = [
    "QuantityValidationResult",
    "describe_rules",
    "minimum_quantity",
    "resolve",
    "unit_price_for",
]
