"""
Quantity price resolver.

Maps a requested quantity and a product's price rules to a validity verdict
and the price to charge. Pure and cheap: safe to call on every quantity
change in the UI.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from bakery.errors import ERROR_MINIMUM_QUANTITY, ERROR_QUANTITY_NOT_POSITIVE
from bakery.services.models import PriceRule
from bakery.services.money import format_money, multiply, to_decimal


@dataclass(frozen=True)
class QuantityValidationResult:
    """Outcome of one resolution.

    ``message`` is set only when invalid. ``price`` is set only when valid
    and a rule matched; None means the product's base price applies.
    """
    is_valid: bool
    message: Optional[str] = None
    price: Optional[Decimal] = None

    @classmethod
    def valid(cls, price: Optional[Decimal] = None) -> "QuantityValidationResult":
        return cls(is_valid=True, price=price)

    @classmethod
    def invalid(cls, message: str) -> "QuantityValidationResult":
        return cls(is_valid=False, message=message)


def _sorted_rules(rules: Sequence[PriceRule]) -> List[PriceRule]:
    # sorted() is stable: equal min_qty keeps catalog order
    return sorted(rules, key=lambda rule: rule.min_qty)


def minimum_quantity(rules: Optional[Sequence[PriceRule]]) -> int:
    """Lowest quantity any rule accepts, or 1 when there are no rules."""
    if not rules:
        return 1
    return min(rule.min_qty for rule in rules)


def resolve(quantity: int, rules: Optional[Sequence[PriceRule]]) -> QuantityValidationResult:
    """
    Resolve the price for ``quantity`` under ``rules``.

    Bracket rules win over incremental ones. An incremental rule prices the
    units above the nearest lower bracket at ``extra_per_unit`` on top of
    that bracket's flat price; with no lower bracket every unit from
    ``min_qty`` onward is charged at ``extra_per_unit`` and nothing else.
    """
    if quantity <= 0:
        return QuantityValidationResult.invalid(ERROR_QUANTITY_NOT_POSITIVE)

    if not rules:
        return QuantityValidationResult.valid()

    ordered = _sorted_rules(rules)

    bracket = next(
        (rule for rule in ordered if rule.is_bracket and rule.contains(quantity)),
        None,
    )
    if bracket is not None:
        return QuantityValidationResult.valid(bracket.flat_price)

    incremental = next(
        (rule for rule in ordered if rule.is_incremental and rule.min_qty <= quantity),
        None,
    )
    if incremental is not None:
        preceding = next(
            (
                rule for rule in reversed(ordered)
                if rule.is_bracket and rule.max_qty is not None and rule.max_qty < quantity
            ),
            None,
        )
        if preceding is not None:
            base_price = preceding.flat_price
            base_qty = preceding.max_qty
        else:
            base_price = Decimal("0")
            base_qty = incremental.min_qty - 1

        additional_units = quantity - base_qty
        price = to_decimal(base_price) + multiply(incremental.extra_per_unit, additional_units)
        return QuantityValidationResult.valid(price)

    return QuantityValidationResult.invalid(
        ERROR_MINIMUM_QUANTITY.format(min_qty=ordered[0].min_qty)
    )


def unit_price_for(
    quantity: int,
    rules: Optional[Sequence[PriceRule]],
    base_price: Decimal,
) -> Tuple[QuantityValidationResult, Optional[Decimal]]:
    """Resolve and fall back to ``base_price``; price is None when invalid."""
    result = resolve(quantity, rules)
    if not result.is_valid:
        return result, None
    if result.price is not None:
        return result, result.price
    return result, to_decimal(base_price)


def describe_rules(rules: Optional[Sequence[PriceRule]], currency: str = "BRL") -> str:
    """Short pricing hint shown next to the quantity selector."""
    if not rules:
        return ""

    ordered = _sorted_rules(rules)

    incremental = next((rule for rule in ordered if rule.is_incremental), None)
    if incremental is not None:
        return (
            f"From item #{incremental.min_qty} on, each item is only "
            f"{format_money(incremental.extra_per_unit, currency)}!"
        )

    first = next((rule for rule in ordered if rule.min_qty == 1 and rule.is_bracket), None)
    if first is not None:
        return f"Unit: {format_money(first.flat_price, currency)}"
    return ""
