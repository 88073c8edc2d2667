"""Order hand-off: turn the cart into an order payload."""
from .serializer import build_order_payload, submit_cart

__all__ = ["build_order_payload", "submit_cart"]
