"""
Kitchen Flow — Order schemas
"""
from datetime import datetime, timedelta
from decimal import Decimal

from pydantic import BaseModel, Field

from kitchen_flow.core.clock import utcnow
from kitchen_flow.domain import Order, OrderItem, RecipeSnapshot


class OrderItemRequest(BaseModel):
    recipe: RecipeSnapshot
    quantity: int = Field(..., examples=[2])
    special_instructions: str | None = None


class OrderCreateRequest(BaseModel):
    customer_id: str = Field(..., examples=["customer-001"])
    table_id: str | None = None
    items: list[OrderItemRequest] = Field(..., min_length=1)
    priority: int | None = Field(None, description="1 (low) to 5 (critical); defaults to 2")
    special_instructions: str | None = None


class OrderItemUpdateRequest(BaseModel):
    quantity: int | None = None
    special_instructions: str | None = None


class CancelRequest(BaseModel):
    reason: str = Field(..., examples=["customer request"])


class PriorityRequest(BaseModel):
    priority: int


class AssignRequest(BaseModel):
    station_id: str


class OrderItemView(BaseModel):
    id: str
    recipe_id: str
    recipe_name: str
    unit_price: Decimal
    quantity: int
    total_price: Decimal
    special_instructions: str | None
    status: str
    is_modified: bool
    estimated_time_minutes: int
    started_at: datetime | None
    completed_at: datetime | None
    delivered_at: datetime | None
    cancellation_reason: str | None

    @classmethod
    def from_domain(cls, item: OrderItem) -> "OrderItemView":
        return cls(
            id=item.id,
            recipe_id=item.recipe.recipe_id,
            recipe_name=item.recipe.name,
            unit_price=item.recipe.price,
            quantity=item.quantity,
            total_price=item.total_price,
            special_instructions=item.special_instructions,
            status=item.status.value,
            is_modified=item.is_modified,
            estimated_time_minutes=item.estimated_time_minutes,
            started_at=item.started_at,
            completed_at=item.completed_at,
            delivered_at=item.delivered_at,
            cancellation_reason=item.cancellation_reason,
        )


class OrderView(BaseModel):
    id: str
    customer_id: str
    table_id: str | None
    status: str
    priority: int
    priority_name: str
    special_instructions: str | None
    cancellation_reason: str | None
    assigned_station_id: str | None
    items: list[OrderItemView]
    total_amount: Decimal
    estimated_time_minutes: int
    item_count: int
    can_be_modified: bool
    can_be_cancelled: bool
    requires_immediate_attention: bool
    is_overdue: bool
    next_actions: list[str]
    created_at: datetime
    confirmed_at: datetime | None
    started_at: datetime | None
    ready_at: datetime | None
    completed_at: datetime | None
    version: int

    @classmethod
    def from_domain(cls, order: Order, overdue_after: timedelta) -> "OrderView":
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            table_id=order.table_id,
            status=order.status.value,
            priority=order.priority.level,
            priority_name=order.priority.display_name,
            special_instructions=order.special_instructions,
            cancellation_reason=order.cancellation_reason,
            assigned_station_id=order.assigned_station_id,
            items=[OrderItemView.from_domain(item) for item in order.items],
            total_amount=order.total_amount,
            estimated_time_minutes=order.estimated_time_minutes,
            item_count=order.item_count,
            can_be_modified=order.can_be_modified,
            can_be_cancelled=order.can_be_cancelled,
            requires_immediate_attention=order.requires_immediate_attention,
            is_overdue=order.is_overdue(utcnow(), overdue_after),
            next_actions=[event.value for event in order.next_events],
            created_at=order.created_at,
            confirmed_at=order.confirmed_at,
            started_at=order.started_at,
            ready_at=order.ready_at,
            completed_at=order.completed_at,
            version=order.version,
        )
