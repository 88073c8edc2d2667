"""Kit builder: guided multi-step selection that feeds the cart."""
from .session import KitSession
from .states import KitEvent, KitStep, advance

__all__ = ["KitSession", "KitEvent", "KitStep", "advance"]
