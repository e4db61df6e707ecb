"""
Kitchen Flow — State machine tables

Each aggregate declares its lifecycle as an explicit mapping of
(state, event) -> next state. Anything missing from the table is rejected.
"""
import uuid
from enum import Enum
from typing import Mapping, TypeVar

from kitchen_flow.core.errors import InvalidStateTransitionError, ValidationError

S = TypeVar("S", bound=Enum)
E = TypeVar("E", bound=Enum)

TransitionTable = Mapping[tuple[S, E], S]


def next_state(table: TransitionTable, entity: str, current: S, event: E) -> S:
    try:
        return table[(current, event)]
    except KeyError:
        raise InvalidStateTransitionError(entity, current.value, event.value) from None


def allowed_events(table: TransitionTable, current: S) -> list[E]:
    return [event for (state, event) in table if state == current]


def new_id() -> str:
    return str(uuid.uuid4())


def clean_text(value: str | None, *, field: str, max_length: int) -> str | None:
    """Trim free text; blank becomes None, oversized text is rejected."""
    if value is None:
        return None
    if len(value) > max_length:
        raise ValidationError(f"{field} cannot exceed {max_length} characters.")
    value = value.strip()
    return value or None


def require_reason(reason: str | None) -> str:
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Cancellation reason cannot be empty.")
    return reason
