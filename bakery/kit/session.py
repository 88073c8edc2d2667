"""
Kit composition session.

A guided, in-memory flow where the shopper picks products, adjusts their
quantities and confirms the set before it lands in the cart. Every quantity
change is re-priced immediately, so a session can never reach the
confirmation step holding an invalid line. Provisional lines belong to the
session until ``complete()`` copies them into the cart.
"""
from decimal import Decimal
from typing import Dict, List, Optional

from bakery.cart.models import CartLineItem, LineItemIdentity
from bakery.cart.service import CartStore
from bakery.errors import (
    ERROR_INVALID_TRANSITION,
    ERROR_ITEM_INDEX,
    ERROR_KIT_MERGE,
    ERROR_PRODUCT_UNAVAILABLE,
    ERROR_SESSION_CLOSED,
    ERROR_UNIT_QUANTITY_NOT_POSITIVE,
    MESSAGE_KIT_ADDED,
    ErrorKind,
    Outcome,
)
from bakery.logging import get_logger
from bakery.pricing import minimum_quantity, unit_price_for
from bakery.services.models import Product
from bakery.services.money import round_money, to_float
from bakery.services.notifications import NotificationSink
from .states import KitEvent, KitStep, advance

logger = get_logger(__name__)


class KitSession:
    """Selecting -> Reviewing -> Confirming, then complete or cancel."""

    def __init__(self, store: CartStore, notifier: Optional[NotificationSink] = None):
        self.store = store
        self.notifier = notifier or store.notifier
        self._step = KitStep.SELECTING
        self._items: List[CartLineItem] = []

    @property
    def step(self) -> KitStep:
        return self._step

    @property
    def items(self) -> List[CartLineItem]:
        return [item.copy() for item in self._items]

    def _reject(self, outcome: Outcome) -> Outcome:
        self.notifier.error(outcome.message)
        return outcome

    def _check_step(self, action: str, *allowed: KitStep) -> Optional[Outcome]:
        if self._step in allowed:
            return None
        if self._step.is_closed:
            message = ERROR_SESSION_CLOSED.format(step=self._step.value)
        else:
            message = ERROR_INVALID_TRANSITION.format(event=action, step=self._step.value)
        return self._reject(Outcome.failure(ErrorKind.INVALID_TRANSITION, message))

    def _item_at(self, index: int) -> Optional[CartLineItem]:
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def _missing_item(self, index: int) -> Outcome:
        return self._reject(
            Outcome.failure(ErrorKind.ITEM_NOT_FOUND, ERROR_ITEM_INDEX.format(index=index))
        )

    def _move(self, event: KitEvent) -> Outcome:
        target, outcome = advance(self._step, event, bool(self._items))
        if target is None:
            return self._reject(outcome)
        self._step = target
        return outcome

    # Selecting

    def select_item(self, product: Product, has_chocolate: bool = False) -> Outcome:
        """
        Append ``product`` at its minimum valid quantity.

        Selections are never merged inside a session; picking the same
        product twice gives two lines.
        """
        rejected = self._check_step("select an item", KitStep.SELECTING)
        if rejected is not None:
            return rejected

        if not product.is_available:
            return self._reject(Outcome.failure(
                ErrorKind.PRODUCT_UNAVAILABLE,
                ERROR_PRODUCT_UNAVAILABLE.format(name=product.name),
            ))

        quantity = minimum_quantity(product.quantity_rules)
        result, price = unit_price_for(quantity, product.quantity_rules, product.price)
        if not result.is_valid:
            return self._reject(Outcome.failure(ErrorKind.INVALID_QUANTITY, result.message))

        item = CartLineItem(
            product_id=product.id,
            has_chocolate=has_chocolate and product.has_chocolate_option,
            name=product.name,
            quantity=quantity,
            unit_price=price,
            base_price=product.price,
            rules=product.quantity_rules,
        )
        self._items.append(item)
        return Outcome.success(item.copy())

    # Reviewing

    def change_quantity(self, index: int, new_quantity: int) -> Outcome:
        rejected = self._check_step("change quantity", KitStep.REVIEWING)
        if rejected is not None:
            return rejected

        item = self._item_at(index)
        if item is None:
            return self._missing_item(index)

        result, price = unit_price_for(new_quantity, item.rules, item.base_price)
        if not result.is_valid:
            return self._reject(Outcome.failure(ErrorKind.INVALID_QUANTITY, result.message))

        item.quantity = new_quantity
        item.unit_price = price
        return Outcome.success(item.copy())

    def change_unit_quantity(self, index: int, new_unit_quantity: int) -> Outcome:
        rejected = self._check_step("change unit quantity", KitStep.REVIEWING)
        if rejected is not None:
            return rejected

        item = self._item_at(index)
        if item is None:
            return self._missing_item(index)

        if new_unit_quantity <= 0:
            return self._reject(
                Outcome.failure(ErrorKind.INVALID_QUANTITY, ERROR_UNIT_QUANTITY_NOT_POSITIVE)
            )

        result, price = unit_price_for(item.quantity, item.rules, item.base_price)
        if not result.is_valid:
            return self._reject(Outcome.failure(ErrorKind.INVALID_QUANTITY, result.message))

        item.unit_quantity = new_unit_quantity
        item.unit_price = price
        return Outcome.success(item.copy())

    def remove_item(self, index: int) -> Outcome:
        rejected = self._check_step("remove an item", KitStep.REVIEWING)
        if rejected is not None:
            return rejected

        if self._item_at(index) is None:
            return self._missing_item(index)

        removed = self._items.pop(index)
        return Outcome.success(removed.copy())

    # Navigation

    def next(self) -> Outcome:
        return self._move(KitEvent.NEXT)

    def back(self) -> Outcome:
        return self._move(KitEvent.BACK)

    def cancel(self) -> Outcome:
        """Discard the session; the cart is left untouched."""
        outcome = self._move(KitEvent.CANCEL)
        if outcome.ok:
            self._items = []
        return outcome

    def complete(self) -> Outcome:
        """
        Copy every provisional line into the cart and close the session.

        Lines merge with matching cart lines by identity, and the price is
        re-resolved for the merged quantity. Every merge is checked before
        anything is written; one invalid merge keeps the session in
        Confirming and leaves the cart untouched.
        """
        target, outcome = advance(self._step, KitEvent.COMPLETE, bool(self._items))
        if target is None:
            return self._reject(outcome)

        planned: Dict[LineItemIdentity, int] = {}
        writes = []
        for item in self._items:
            identity = item.identity
            if identity not in planned:
                existing = self.store.get(identity)
                planned[identity] = existing.quantity if existing else 0
            is_new_line = planned[identity] == 0
            planned[identity] += item.quantity

            result, price = unit_price_for(planned[identity], item.rules, item.base_price)
            if not result.is_valid:
                return self._reject(Outcome.failure(
                    ErrorKind.INVALID_QUANTITY,
                    ERROR_KIT_MERGE.format(name=item.name, message=result.message),
                ))
            writes.append((item, price, is_new_line))

        for item, price, is_new_line in writes:
            added = self.store.add(
                item.identity,
                item.quantity,
                price,
                unit_quantity_delta=item.unit_quantity if is_new_line else 0,
                rules=item.rules,
                name=item.name,
                base_price=item.base_price,
            )
            if not added.ok:
                logger.error(f"Kit line {item.name} was not added to the cart: {added.message}")
                return self._reject(added)

        logger.info(f"Kit completed with {len(self._items)} item(s)")
        self._items = []
        self._step = target
        self.notifier.success(MESSAGE_KIT_ADDED)
        return Outcome.success(self.store.items(), MESSAGE_KIT_ADDED)

    # Read side

    def total(self) -> Decimal:
        """Same aggregation as the cart: quantity * unit price per line."""
        return round_money(sum(
            (item.unit_price * item.quantity for item in self._items),
            Decimal("0"),
        ))

    def summary(self) -> dict:
        """Lines and total for the confirmation screen."""
        return {
            "step": self._step.value,
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
                for item in self._items
            ],
            "total": to_float(self.total()),
        }
