"""
Kitchen Flow — Order aggregate

The order is the consistency unit for itself and its items: every item edit
goes through the order, and status transitions move the items in lockstep.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict

from kitchen_flow.core.clock import utcnow
from kitchen_flow.core.errors import InvalidStateTransitionError, NotFoundError, ValidationError
from kitchen_flow.domain.order_item import OrderItem, OrderItemStatus, RecipeSnapshot
from kitchen_flow.domain.priority import Priority
from kitchen_flow.domain.transitions import allowed_events, clean_text, new_id, next_state, require_reason

MAX_ITEMS = 100
MAX_INSTRUCTIONS_LENGTH = 1000
DEFAULT_OVERDUE_THRESHOLD = timedelta(minutes=30)


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_final(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    @property
    def is_active(self) -> bool:
        return not self.is_final

    @property
    def is_in_kitchen(self) -> bool:
        return self in (OrderStatus.PREPARING, OrderStatus.READY)

    @property
    def sort_order(self) -> int:
        """Board position: work in progress first, finished orders last."""
        return _DISPLAY_ORDER.index(self)


_DISPLAY_ORDER = [
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.CONFIRMED,
    OrderStatus.PENDING,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
]


class OrderEvent(str, Enum):
    CONFIRM = "confirm"
    START_PREPARATION = "start_preparation"
    MARK_READY = "mark_ready"
    COMPLETE = "complete"
    CANCEL = "cancel"


ORDER_TRANSITIONS = {
    (OrderStatus.PENDING, OrderEvent.CONFIRM): OrderStatus.CONFIRMED,
    (OrderStatus.CONFIRMED, OrderEvent.START_PREPARATION): OrderStatus.PREPARING,
    (OrderStatus.PREPARING, OrderEvent.MARK_READY): OrderStatus.READY,
    (OrderStatus.READY, OrderEvent.COMPLETE): OrderStatus.COMPLETED,
    (OrderStatus.PENDING, OrderEvent.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.CONFIRMED, OrderEvent.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.PREPARING, OrderEvent.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.READY, OrderEvent.CANCEL): OrderStatus.CANCELLED,
}


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    customer_id: str
    table_id: str | None = None
    items: tuple[OrderItem, ...]
    priority: Priority = Priority.MEDIUM
    status: OrderStatus = OrderStatus.PENDING
    special_instructions: str | None = None
    cancellation_reason: str | None = None
    assigned_station_id: str | None = None
    created_at: datetime
    confirmed_at: datetime | None = None
    started_at: datetime | None = None
    ready_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    escalated_at: datetime | None = None
    version: int = 0

    @classmethod
    def create(
        cls,
        customer_id: str,
        items: list[OrderItem],
        table_id: str | None = None,
        priority: Priority | None = None,
        special_instructions: str | None = None,
        *,
        order_id: str | None = None,
        now: datetime | None = None,
    ) -> "Order":
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer id cannot be empty.")
        if not items:
            raise ValidationError("Order must contain at least one item.")
        if len(items) > MAX_ITEMS:
            raise ValidationError(f"Order cannot contain more than {MAX_ITEMS} items.")
        return cls(
            id=order_id or new_id(),
            customer_id=customer_id.strip(),
            table_id=table_id,
            items=tuple(items),
            priority=priority or Priority.default(),
            special_instructions=clean_text(
                special_instructions, field="Special instructions", max_length=MAX_INSTRUCTIONS_LENGTH
            ),
            created_at=now or utcnow(),
        )

    # ── Derived values ─────────────────────────────────────────────────────
    @property
    def total_amount(self) -> Decimal:
        return sum((item.total_price for item in self.items), Decimal("0.00"))

    @property
    def estimated_time_minutes(self) -> int:
        """Items are cooked in parallel, so the slowest one sets the pace."""
        return max((item.estimated_time_minutes for item in self.items), default=0)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def can_be_modified(self) -> bool:
        return self.status == OrderStatus.PENDING

    @property
    def can_be_cancelled(self) -> bool:
        return not self.status.is_final

    @property
    def next_events(self) -> list[OrderEvent]:
        return allowed_events(ORDER_TRANSITIONS, self.status)

    @property
    def requires_immediate_attention(self) -> bool:
        return self.priority.requires_immediate_attention

    def is_overdue(self, now: datetime | None = None, threshold: timedelta = DEFAULT_OVERDUE_THRESHOLD) -> bool:
        if self.status != OrderStatus.PREPARING or self.started_at is None:
            return False
        return (now or utcnow()) - self.started_at > threshold

    def escalation_due(self, now: datetime | None = None) -> bool:
        if not self.is_active or not self.priority.can_escalate:
            return False
        since = self.escalated_at or self.created_at
        return (now or utcnow()) - since >= self.priority.escalation_timeout

    def get_item(self, item_id: str) -> OrderItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise NotFoundError("order item", item_id)

    # ── Status transitions ─────────────────────────────────────────────────
    def _advance(self, event: OrderEvent, **changes) -> "Order":
        status = next_state(ORDER_TRANSITIONS, "order", self.status, event)
        return self.model_copy(update={"status": status, **changes})

    def _items_where(self, status: OrderItemStatus, move) -> tuple[OrderItem, ...]:
        return tuple(move(item) if item.status == status else item for item in self.items)

    def confirm(self, now: datetime | None = None) -> "Order":
        return self._advance(OrderEvent.CONFIRM, confirmed_at=now or utcnow())

    def start_preparation(self, now: datetime | None = None) -> "Order":
        now = now or utcnow()
        items = self._items_where(OrderItemStatus.PENDING, lambda item: item.start_preparation(now))
        return self._advance(OrderEvent.START_PREPARATION, started_at=now, items=items)

    def mark_ready(self, now: datetime | None = None) -> "Order":
        now = now or utcnow()
        items = self._items_where(OrderItemStatus.PREPARING, lambda item: item.complete_preparation(now))
        return self._advance(OrderEvent.MARK_READY, ready_at=now, items=items)

    def complete(self, now: datetime | None = None) -> "Order":
        now = now or utcnow()
        items = self._items_where(OrderItemStatus.READY, lambda item: item.deliver(now))
        return self._advance(OrderEvent.COMPLETE, completed_at=now, items=items)

    def cancel(self, reason: str, now: datetime | None = None) -> "Order":
        status = next_state(ORDER_TRANSITIONS, "order", self.status, OrderEvent.CANCEL)
        reason = require_reason(reason)
        now = now or utcnow()
        items = tuple(
            item.cancel(reason, now) if item.can_be_cancelled else item for item in self.items
        )
        return self.model_copy(
            update={
                "status": status,
                "cancellation_reason": reason,
                "cancelled_at": now,
                "items": items,
            }
        )

    # ── Item edits (pending only) ──────────────────────────────────────────
    def _require_modifiable(self, operation: str) -> None:
        if not self.can_be_modified:
            raise InvalidStateTransitionError("order", self.status.value, operation)

    def _replace_item(self, updated: OrderItem) -> "Order":
        items = tuple(updated if item.id == updated.id else item for item in self.items)
        return self.model_copy(update={"items": items})

    def add_item(
        self,
        recipe: RecipeSnapshot,
        quantity: int,
        special_instructions: str | None = None,
        now: datetime | None = None,
    ) -> "Order":
        self._require_modifiable("add_item")
        if len(self.items) >= MAX_ITEMS:
            raise ValidationError(f"Order cannot contain more than {MAX_ITEMS} items.")
        item = OrderItem.create(recipe, quantity, special_instructions, now=now)
        return self.model_copy(update={"items": self.items + (item,)})

    def remove_item(self, item_id: str) -> "Order":
        self._require_modifiable("remove_item")
        self.get_item(item_id)
        if len(self.items) == 1:
            raise ValidationError("Cannot remove the last item from an order.")
        return self.model_copy(update={"items": tuple(i for i in self.items if i.id != item_id)})

    def update_item(
        self,
        item_id: str,
        quantity: int | None = None,
        special_instructions: str | None = None,
    ) -> "Order":
        self._require_modifiable("update_item")
        item = self.get_item(item_id)
        if quantity is not None:
            item = item.update_quantity(quantity)
        if special_instructions is not None:
            item = item.update_special_instructions(special_instructions)
        return self._replace_item(item)

    def cancel_item(self, item_id: str, reason: str, now: datetime | None = None) -> "Order":
        self._require_modifiable("cancel_item")
        return self._replace_item(self.get_item(item_id).cancel(reason, now))

    # ── Priority ───────────────────────────────────────────────────────────
    def escalate_priority(self, now: datetime | None = None) -> "Order":
        """One tier up. At CRITICAL this is a no-op whatever the status."""
        if not self.priority.can_escalate:
            return self
        if self.status.is_final:
            raise InvalidStateTransitionError("order", self.status.value, "escalate_priority")
        return self.model_copy(update={"priority": self.priority.escalate(), "escalated_at": now or utcnow()})

    def update_priority(self, priority: Priority) -> "Order":
        if self.status.is_final:
            raise InvalidStateTransitionError("order", self.status.value, "update_priority")
        return self.model_copy(update={"priority": priority})

    # ── Station reference ──────────────────────────────────────────────────
    def assign_to_station(self, station_id: str) -> "Order":
        return self.model_copy(update={"assigned_station_id": station_id})

    def unassign_from_station(self) -> "Order":
        return self.model_copy(update={"assigned_station_id": None})
