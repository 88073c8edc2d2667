"""
Kit builder steps.

Selecting -> Reviewing -> Confirming, with back moves in between and
cancellation from any open step. Moves not in the table are rejected.
"""
from enum import Enum
from typing import Dict, Optional, Tuple

from bakery.errors import (
    ERROR_EMPTY_SELECTION,
    ERROR_INVALID_TRANSITION,
    ERROR_SESSION_CLOSED,
    ErrorKind,
    Outcome,
)


class KitStep(str, Enum):
    """Where the shopper is in the kit flow."""
    SELECTING = "selecting"
    REVIEWING = "reviewing"
    CONFIRMING = "confirming"
    COMPLETED = "completed"  # Final state
    CANCELLED = "cancelled"  # Final state

    @property
    def is_closed(self) -> bool:
        return self in (KitStep.COMPLETED, KitStep.CANCELLED)


class KitEvent(str, Enum):
    NEXT = "next"
    BACK = "back"
    COMPLETE = "complete"
    CANCEL = "cancel"


TRANSITIONS: Dict[KitStep, Dict[KitEvent, KitStep]] = {
    KitStep.SELECTING: {
        KitEvent.NEXT: KitStep.REVIEWING,
        KitEvent.CANCEL: KitStep.CANCELLED,
    },
    KitStep.REVIEWING: {
        KitEvent.NEXT: KitStep.CONFIRMING,
        KitEvent.BACK: KitStep.SELECTING,
        KitEvent.CANCEL: KitStep.CANCELLED,
    },
    KitStep.CONFIRMING: {
        KitEvent.BACK: KitStep.REVIEWING,
        KitEvent.COMPLETE: KitStep.COMPLETED,
        KitEvent.CANCEL: KitStep.CANCELLED,
    },
    KitStep.COMPLETED: {},
    KitStep.CANCELLED: {},
}

# Moves that need at least one selected item
NEEDS_ITEMS = {KitEvent.NEXT, KitEvent.COMPLETE}


def advance(step: KitStep, event: KitEvent, has_items: bool) -> Tuple[Optional[KitStep], Outcome]:
    """
    Apply ``event`` to ``step``.

    Returns:
        (next_step, outcome); next_step is None when the move is rejected
    """
    if step.is_closed:
        message = ERROR_SESSION_CLOSED.format(step=step.value)
        return None, Outcome.failure(ErrorKind.INVALID_TRANSITION, message)

    target = TRANSITIONS[step].get(event)
    if target is None:
        message = ERROR_INVALID_TRANSITION.format(event=event.value, step=step.value)
        return None, Outcome.failure(ErrorKind.INVALID_TRANSITION, message)

    if event in NEEDS_ITEMS and not has_items:
        return None, Outcome.failure(ErrorKind.EMPTY_SELECTION, ERROR_EMPTY_SELECTION)

    return target, Outcome.success(target)
