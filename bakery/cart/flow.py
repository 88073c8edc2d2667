"""
Simple add-to-cart flow.

Resolves the price before touching the store, so the store itself never
needs catalog or pricing knowledge. Re-pricing on quantity edits uses the
rule snapshot kept on the line instead of fetching the catalog again.
"""
from bakery.errors import (
    ERROR_ITEM_NOT_IN_CART,
    ERROR_PRODUCT_UNAVAILABLE,
    MESSAGE_ADDED_TO_CART,
    ErrorKind,
    Outcome,
)
from bakery.pricing import unit_price_for
from bakery.services.models import Product
from .models import LineItemIdentity
from .service import CartStore


def add_product(
    store: CartStore,
    product: Product,
    quantity: int,
    has_chocolate: bool = False,
    unit_quantity: int = 1,
) -> Outcome:
    """Validate ``quantity`` for ``product`` and merge it into the cart."""
    if not product.is_available:
        message = ERROR_PRODUCT_UNAVAILABLE.format(name=product.name)
        store.notifier.error(message)
        return Outcome.failure(ErrorKind.PRODUCT_UNAVAILABLE, message)

    identity = LineItemIdentity(product.id, has_chocolate and product.has_chocolate_option)

    requested, requested_price = unit_price_for(quantity, product.quantity_rules, product.price)
    if not requested.is_valid:
        store.notifier.error(requested.message)
        return Outcome.failure(ErrorKind.INVALID_QUANTITY, requested.message)

    # the tier depends on the merged line quantity, not just this request
    existing = store.get(identity)
    price = requested_price
    if existing is not None:
        merged, price = unit_price_for(
            existing.quantity + quantity, product.quantity_rules, product.price
        )
        if not merged.is_valid:
            store.notifier.error(merged.message)
            return Outcome.failure(ErrorKind.INVALID_QUANTITY, merged.message)

    outcome = store.add(
        identity,
        quantity,
        price,
        unit_quantity_delta=unit_quantity if existing is None else 0,
        rules=product.quantity_rules,
        name=product.name,
        base_price=product.price,
    )
    if outcome.ok:
        store.notifier.success(MESSAGE_ADDED_TO_CART.format(name=product.name))
    return outcome


def change_quantity(store: CartStore, identity: LineItemIdentity, quantity: int) -> Outcome:
    """Set a line's quantity, re-pricing it from its rule snapshot."""
    if quantity <= 0:
        return store.remove(identity)

    item = store.get(identity)
    if item is None:
        return Outcome.failure(ErrorKind.ITEM_NOT_FOUND, ERROR_ITEM_NOT_IN_CART)

    result, price = unit_price_for(quantity, item.rules, item.base_price)
    if not result.is_valid:
        store.notifier.error(result.message)
        return Outcome.failure(ErrorKind.INVALID_QUANTITY, result.message)

    return store.set_quantity(identity, quantity, price)


__all__ = ["add_product", "change_quantity"]
