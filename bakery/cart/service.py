"""
Cart line-item store.

Every mutation loads the full snapshot, changes it and writes the whole
collection back. Invalid input never raises: it is either healed (driving a
quantity to zero removes the line) or rejected with an Outcome message.
"""
from decimal import Decimal
from typing import List, Optional, Sequence

from bakery.errors import (
    ERROR_ITEM_NOT_IN_CART,
    ERROR_QUANTITY_NOT_POSITIVE,
    ERROR_UNIT_QUANTITY_NOT_POSITIVE,
    ErrorKind,
    Outcome,
)
from bakery.logging import get_logger, sanitize_id_for_logging
from bakery.services.models import PriceRule
from bakery.services.money import round_money, to_decimal, to_float
from bakery.services.notifications import LoggingNotificationSink, NotificationSink
from .models import CartLineItem, LineItemIdentity
from .storage import SnapshotStorage

logger = get_logger(__name__)


def _find(items: List[CartLineItem], identity: LineItemIdentity) -> Optional[CartLineItem]:
    return next((item for item in items if item.identity == identity), None)


class CartStore:
    """Single source of truth for the shopper's cart."""

    def __init__(self, storage: SnapshotStorage, notifier: Optional[NotificationSink] = None):
        self.storage = storage
        self.notifier = notifier or LoggingNotificationSink()

    def _reject(self, error: ErrorKind, message: str) -> Outcome:
        self.notifier.error(message)
        return Outcome.failure(error, message)

    def add(
        self,
        identity: LineItemIdentity,
        quantity_delta: int,
        unit_price: Decimal,
        unit_quantity_delta: int = 0,
        rules: Optional[Sequence[PriceRule]] = None,
        name: str = "",
        base_price: Optional[Decimal] = None,
    ) -> Outcome:
        """
        Add to the line for ``identity``, creating it when absent.

        ``unit_price`` must already be resolved for the resulting total
        quantity; it replaces the stored price. The line keeps its saved rules
        unless ``rules`` is given. A new line starts with
        ``unit_quantity_delta`` physical units per priced unit (1 if zero).
        """
        items = self.storage.load_snapshot()
        existing = _find(items, identity)

        if existing is not None:
            new_quantity = existing.quantity + quantity_delta
            if new_quantity <= 0:
                items.remove(existing)
                self.storage.save_snapshot(items)
                return Outcome.success()

            new_unit_quantity = existing.unit_quantity + unit_quantity_delta
            if new_unit_quantity <= 0:
                return self._reject(ErrorKind.INVALID_QUANTITY, ERROR_UNIT_QUANTITY_NOT_POSITIVE)

            existing.quantity = new_quantity
            existing.unit_quantity = new_unit_quantity
            existing.unit_price = to_decimal(unit_price)
            if rules is not None:
                existing.rules = tuple(rules)
            if name:
                existing.name = name
            if base_price is not None:
                existing.base_price = to_decimal(base_price)
            self.storage.save_snapshot(items)
            return Outcome.success(existing.copy())

        if quantity_delta <= 0:
            return self._reject(ErrorKind.INVALID_QUANTITY, ERROR_QUANTITY_NOT_POSITIVE)
        if unit_quantity_delta < 0:
            return self._reject(ErrorKind.INVALID_QUANTITY, ERROR_UNIT_QUANTITY_NOT_POSITIVE)

        item = CartLineItem(
            product_id=identity.product_id,
            has_chocolate=identity.has_chocolate,
            name=name,
            quantity=quantity_delta,
            unit_quantity=unit_quantity_delta or 1,
            unit_price=unit_price,
            base_price=unit_price if base_price is None else base_price,
            rules=tuple(rules or ()),
        )
        items.append(item)
        self.storage.save_snapshot(items)
        logger.debug(f"New cart line for product {sanitize_id_for_logging(identity.product_id)}")
        return Outcome.success(item.copy())

    def set_quantity(
        self,
        identity: LineItemIdentity,
        quantity: int,
        unit_price: Optional[Decimal] = None,
    ) -> Outcome:
        """Overwrite the quantity; zero or less removes the line."""
        if quantity <= 0:
            return self.remove(identity)

        items = self.storage.load_snapshot()
        item = _find(items, identity)
        if item is None:
            return Outcome.failure(ErrorKind.ITEM_NOT_FOUND, ERROR_ITEM_NOT_IN_CART)

        item.quantity = quantity
        if unit_price is not None:
            item.unit_price = to_decimal(unit_price)
        self.storage.save_snapshot(items)
        return Outcome.success(item.copy())

    def set_unit_quantity(self, identity: LineItemIdentity, unit_quantity: int) -> Outcome:
        if unit_quantity <= 0:
            return self._reject(ErrorKind.INVALID_QUANTITY, ERROR_UNIT_QUANTITY_NOT_POSITIVE)

        items = self.storage.load_snapshot()
        item = _find(items, identity)
        if item is None:
            return Outcome.failure(ErrorKind.ITEM_NOT_FOUND, ERROR_ITEM_NOT_IN_CART)

        item.unit_quantity = unit_quantity
        self.storage.save_snapshot(items)
        return Outcome.success(item.copy())

    def remove(self, identity: LineItemIdentity) -> Outcome:
        items = self.storage.load_snapshot()
        remaining = [item for item in items if item.identity != identity]
        if len(remaining) != len(items):
            self.storage.save_snapshot(remaining)
        return Outcome.success()

    def clear(self) -> Outcome:
        self.storage.save_snapshot([])
        return Outcome.success()

    def items(self) -> List[CartLineItem]:
        """Copies of the current lines; mutating them does not touch the cart."""
        return [item.copy() for item in self.storage.load_snapshot()]

    def get(self, identity: LineItemIdentity) -> Optional[CartLineItem]:
        item = _find(self.storage.load_snapshot(), identity)
        return item.copy() if item is not None else None

    def total(self) -> Decimal:
        """Sum of quantity * unit_price over all lines."""
        return round_money(sum(
            (item.unit_price * item.quantity for item in self.storage.load_snapshot()),
            Decimal("0"),
        ))

    def total_items(self) -> int:
        return sum(item.quantity for item in self.storage.load_snapshot())

    def summary(self) -> dict:
        """Cart summary for checkout screens."""
        items = self.storage.load_snapshot()
        if not items:
            return {"is_empty": True, "total_items": 0, "items": [], "total": 0.0}

        return {
            "is_empty": False,
            "total_items": sum(item.quantity for item in items),
            "items": [
                {
                    "product_id": item.product_id,
                    "name": item.name,
                    "has_chocolate": item.has_chocolate,
                    "quantity": item.quantity,
                    "unit_quantity": item.unit_quantity,
                    "unit_price": to_float(item.unit_price),
                    "total": to_float(item.total_price),
                }
                for item in items
            ],
            "total": to_float(self.total()),
        }
