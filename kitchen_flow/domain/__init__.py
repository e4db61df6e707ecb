"""
Kitchen Flow — Domain layer

Immutable aggregates. Every transition returns a new instance and leaves the
receiver untouched; failures raise KitchenError subclasses.
"""
from kitchen_flow.domain.priority import Priority
from kitchen_flow.domain.order_item import OrderItem, OrderItemStatus, RecipeSnapshot
from kitchen_flow.domain.order import Order, OrderStatus
from kitchen_flow.domain.station import Station, StationStatus, StationType
from kitchen_flow.domain.kitchen_timer import KitchenTimer, TimerPriority, TimerStatus, TimerType

__all__ = [
    "Priority",
    "OrderItem",
    "OrderItemStatus",
    "RecipeSnapshot",
    "Order",
    "OrderStatus",
    "Station",
    "StationStatus",
    "StationType",
    "KitchenTimer",
    "TimerPriority",
    "TimerStatus",
    "TimerType",
]
