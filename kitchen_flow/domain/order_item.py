"""
Kitchen Flow — Order item

One priced line of an order. The recipe is a read-only snapshot taken when the
item was ordered, so later menu edits never change an existing order.
"""
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kitchen_flow.core.clock import utcnow
from kitchen_flow.core.errors import InvalidStateTransitionError, ValidationError
from kitchen_flow.domain.transitions import clean_text, new_id, next_state, require_reason

MAX_QUANTITY = 50
MAX_INSTRUCTIONS_LENGTH = 500
CENTS = Decimal("0.01")


class RecipeSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    recipe_id: str
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0)
    preparation_minutes: int = Field(0, ge=0)
    cooking_minutes: int = Field(0, ge=0)
    category: str | None = None

    @field_validator("price")
    @classmethod
    def _round_price(cls, value: Decimal) -> Decimal:
        return value.quantize(CENTS, rounding=ROUND_HALF_UP)

    @property
    def total_minutes(self) -> int:
        return self.preparation_minutes + self.cooking_minutes


class OrderItemStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItemEvent(str, Enum):
    START_PREPARATION = "start_preparation"
    COMPLETE_PREPARATION = "complete_preparation"
    DELIVER = "deliver"
    CANCEL = "cancel"


ORDER_ITEM_TRANSITIONS = {
    (OrderItemStatus.PENDING, OrderItemEvent.START_PREPARATION): OrderItemStatus.PREPARING,
    (OrderItemStatus.PREPARING, OrderItemEvent.COMPLETE_PREPARATION): OrderItemStatus.READY,
    (OrderItemStatus.READY, OrderItemEvent.DELIVER): OrderItemStatus.DELIVERED,
    (OrderItemStatus.PENDING, OrderItemEvent.CANCEL): OrderItemStatus.CANCELLED,
    (OrderItemStatus.PREPARING, OrderItemEvent.CANCEL): OrderItemStatus.CANCELLED,
    (OrderItemStatus.READY, OrderItemEvent.CANCEL): OrderItemStatus.CANCELLED,
}

TERMINAL_ITEM_STATUSES = frozenset({OrderItemStatus.DELIVERED, OrderItemStatus.CANCELLED})


def _validate_quantity(quantity: int) -> int:
    if quantity <= 0:
        raise ValidationError("Order item quantity must be greater than zero.")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"Order item quantity cannot exceed {MAX_QUANTITY}.")
    return quantity


class OrderItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    recipe: RecipeSnapshot
    quantity: int
    special_instructions: str | None = None
    status: OrderItemStatus = OrderItemStatus.PENDING
    is_modified: bool = False
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None

    @classmethod
    def create(
        cls,
        recipe: RecipeSnapshot,
        quantity: int,
        special_instructions: str | None = None,
        *,
        item_id: str | None = None,
        now: datetime | None = None,
    ) -> "OrderItem":
        return cls(
            id=item_id or new_id(),
            recipe=recipe,
            quantity=_validate_quantity(quantity),
            special_instructions=clean_text(
                special_instructions, field="Special instructions", max_length=MAX_INSTRUCTIONS_LENGTH
            ),
            created_at=now or utcnow(),
        )

    # ── Derived values ─────────────────────────────────────────────────────
    @property
    def total_price(self) -> Decimal:
        return (self.recipe.price * self.quantity).quantize(CENTS, rounding=ROUND_HALF_UP)

    @property
    def estimated_time_minutes(self) -> int:
        return self.recipe.total_minutes

    @property
    def is_completed(self) -> bool:
        return self.status == OrderItemStatus.DELIVERED

    @property
    def is_cancelled(self) -> bool:
        return self.status == OrderItemStatus.CANCELLED

    @property
    def can_be_modified(self) -> bool:
        return self.status == OrderItemStatus.PENDING

    @property
    def can_be_cancelled(self) -> bool:
        return self.status not in TERMINAL_ITEM_STATUSES

    @property
    def requires_special_handling(self) -> bool:
        return self.special_instructions is not None

    @property
    def actual_preparation_duration(self) -> timedelta | None:
        if self.started_at is None or self.completed_at is None:
            return None
        return self.completed_at - self.started_at

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Preparing for longer than the recipe's prep + cook time."""
        if self.status != OrderItemStatus.PREPARING or self.started_at is None:
            return False
        elapsed = (now or utcnow()) - self.started_at
        return elapsed > timedelta(minutes=self.estimated_time_minutes)

    # ── Transitions ────────────────────────────────────────────────────────
    def _advance(self, event: OrderItemEvent, **changes) -> "OrderItem":
        status = next_state(ORDER_ITEM_TRANSITIONS, "order item", self.status, event)
        return self.model_copy(update={"status": status, **changes})

    def start_preparation(self, now: datetime | None = None) -> "OrderItem":
        return self._advance(OrderItemEvent.START_PREPARATION, started_at=now or utcnow())

    def complete_preparation(self, now: datetime | None = None) -> "OrderItem":
        return self._advance(OrderItemEvent.COMPLETE_PREPARATION, completed_at=now or utcnow())

    def deliver(self, now: datetime | None = None) -> "OrderItem":
        return self._advance(OrderItemEvent.DELIVER, delivered_at=now or utcnow())

    def cancel(self, reason: str, now: datetime | None = None) -> "OrderItem":
        status = next_state(ORDER_ITEM_TRANSITIONS, "order item", self.status, OrderItemEvent.CANCEL)
        return self.model_copy(
            update={
                "status": status,
                "cancellation_reason": require_reason(reason),
                "cancelled_at": now or utcnow(),
            }
        )

    # ── Edits (pending only) ───────────────────────────────────────────────
    def _require_modifiable(self, operation: str) -> None:
        if not self.can_be_modified:
            raise InvalidStateTransitionError("order item", self.status.value, operation)

    def update_quantity(self, quantity: int) -> "OrderItem":
        self._require_modifiable("update_quantity")
        return self.model_copy(update={"quantity": _validate_quantity(quantity), "is_modified": True})

    def update_special_instructions(self, instructions: str | None) -> "OrderItem":
        self._require_modifiable("update_special_instructions")
        cleaned = clean_text(instructions, field="Special instructions", max_length=MAX_INSTRUCTIONS_LENGTH)
        return self.model_copy(update={"special_instructions": cleaned, "is_modified": True})
