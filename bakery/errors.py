"""
Common Error Constants and result values.

Nothing in the core raises for bad user input: operations return an
``Outcome`` carrying one of the kinds below and a message for the UI.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

# Quantity errors
ERROR_QUANTITY_NOT_POSITIVE = "quantity must be greater than zero"
ERROR_UNIT_QUANTITY_NOT_POSITIVE = "unit quantity must be greater than zero"
ERROR_MINIMUM_QUANTITY = "minimum quantity is {min_qty} units"

# Kit errors
ERROR_EMPTY_SELECTION = "select at least one item"
ERROR_INVALID_TRANSITION = "cannot {event} from the {step} step"
ERROR_ITEM_INDEX = "no kit item at position {index}"
ERROR_SESSION_CLOSED = "kit session is already {step}"
ERROR_KIT_MERGE = "{name}: {message} once merged with the cart"

# Cart errors
ERROR_ITEM_NOT_IN_CART = "item is not in the cart"
ERROR_CART_EMPTY = "cart is empty"
ERROR_PRODUCT_UNAVAILABLE = "{name} is not available"
ERROR_ORDER_SUBMISSION = "failed to submit order"

# Success messages
MESSAGE_ADDED_TO_CART = "{name} added to cart"
MESSAGE_KIT_ADDED = "kit added to cart"
MESSAGE_ORDER_SUBMITTED = "order submitted"


class ErrorKind(str, Enum):
    """Recoverable failure categories."""
    INVALID_QUANTITY = "invalid_quantity"
    EMPTY_SELECTION = "empty_selection"
    MALFORMED_RULE_SET = "malformed_rule_set"
    INVALID_TRANSITION = "invalid_transition"
    ITEM_NOT_FOUND = "item_not_found"
    PRODUCT_UNAVAILABLE = "product_unavailable"
    SUBMISSION_FAILED = "submission_failed"


@dataclass(frozen=True)
class Outcome:
    """Result of a cart, kit or order operation."""
    ok: bool
    error: Optional[ErrorKind] = None
    message: Optional[str] = None
    item: Any = None

    @classmethod
    def success(cls, item: Any = None, message: Optional[str] = None) -> "Outcome":
        return cls(ok=True, message=message, item=item)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "Outcome":
        return cls(ok=False, error=error, message=message)

    def __bool__(self) -> bool:
        return self.ok
