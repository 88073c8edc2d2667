"""Order payload builder and cart submission."""
from decimal import Decimal
from typing import Any, Callable, Dict, List, Sequence

from bakery.cart.models import CartLineItem
from bakery.cart.service import CartStore
from bakery.errors import (
    ERROR_CART_EMPTY,
    ERROR_ORDER_SUBMISSION,
    MESSAGE_ORDER_SUBMITTED,
    ErrorKind,
    Outcome,
)
from bakery.logging import get_logger
from bakery.services.money import round_money, to_float

logger = get_logger(__name__)


def build_item_payload(item: CartLineItem) -> Dict[str, Any]:
    return {
        "product_id": item.product_id,
        "quantity": item.quantity,
        "unit_quantity": item.unit_quantity,
        "unit_price": to_float(item.unit_price),
        "has_chocolate": item.has_chocolate,
    }


def build_order_payload(items: Sequence[CartLineItem]) -> Dict[str, Any]:
    """
    Build the order body sent to the orders endpoint.

    Args:
        items: Cart lines, already priced

    Returns:
        Dict with ``total_amount`` and one entry per line
    """
    total = round_money(sum((item.unit_price * item.quantity for item in items), Decimal("0")))
    return {
        "total_amount": to_float(total),
        "items": [build_item_payload(item) for item in items],
    }


def submit_cart(store: CartStore, submit: Callable[[Dict[str, Any]], Any]) -> Outcome:
    """
    Send the cart to ``submit`` and clear it once the order is accepted.

    ``submit`` is the application's order call; a falsy return value or an
    exception means the order was not created and the cart is kept.
    """
    items: List[CartLineItem] = store.items()
    if not items:
        store.notifier.error(ERROR_CART_EMPTY)
        return Outcome.failure(ErrorKind.EMPTY_SELECTION, ERROR_CART_EMPTY)

    payload = build_order_payload(items)
    try:
        accepted = submit(payload)
    except Exception as e:
        logger.error(f"Order submission failed: {e}", exc_info=True)
        accepted = False

    if not accepted:
        store.notifier.error(ERROR_ORDER_SUBMISSION)
        return Outcome.failure(ErrorKind.SUBMISSION_FAILED, ERROR_ORDER_SUBMISSION)

    store.clear()
    store.notifier.success(MESSAGE_ORDER_SUBMITTED)
    return Outcome.success(accepted, MESSAGE_ORDER_SUBMITTED)
