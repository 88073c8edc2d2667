"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Tuple

from bakery.services.models import PriceRule
from bakery.services.money import multiply, round_money, to_decimal


@dataclass(frozen=True)
class LineItemIdentity:
    """Cart key: product plus the chocolate variant flag."""
    product_id: str
    has_chocolate: bool = False


@dataclass
class CartLineItem:
    """Single line in the cart (or a provisional line inside a kit)."""
    product_id: str
    has_chocolate: bool
    name: str
    quantity: int
    unit_price: Decimal
    base_price: Decimal = Decimal("0")
    unit_quantity: int = 1
    rules: Tuple[PriceRule, ...] = field(default_factory=tuple)
    added_at: str = ""

    def __post_init__(self):
        if not self.added_at:
            self.added_at = datetime.now(timezone.utc).isoformat()
        self.unit_price = to_decimal(self.unit_price)
        self.base_price = to_decimal(self.base_price)
        self.rules = tuple(self.rules)

    @property
    def identity(self) -> LineItemIdentity:
        return LineItemIdentity(self.product_id, self.has_chocolate)

    @property
    def total_price(self) -> Decimal:
        """Priced units times unit price; unit_quantity is bundling metadata only."""
        return round_money(multiply(self.unit_price, self.quantity))

    def copy(self) -> "CartLineItem":
        # rules are frozen models, sharing them is safe
        return replace(self)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "has_chocolate": self.has_chocolate,
            "name": self.name,
            "quantity": self.quantity,
            "unit_quantity": self.unit_quantity,
            "unit_price": str(self.unit_price),
            "base_price": str(self.base_price),
            "rules": [rule.to_dict() for rule in self.rules],
            "added_at": self.added_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLineItem":
        return cls(
            product_id=data["product_id"],
            has_chocolate=bool(data.get("has_chocolate", False)),
            name=data.get("name", ""),
            quantity=int(data["quantity"]),
            unit_quantity=int(data.get("unit_quantity", 1)),
            unit_price=to_decimal(data["unit_price"]),
            base_price=to_decimal(data.get("base_price", 0)),
            rules=tuple(PriceRule.model_validate(rule) for rule in data.get("rules", [])),
            added_at=data.get("added_at", ""),
        )
