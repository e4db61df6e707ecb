"""
Kitchen Flow — Station

A capacity-bounded work center. The station only knows order ids, never
order objects; capacity checks against order state live in the assignment
service.
"""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from kitchen_flow.core.clock import utcnow
from kitchen_flow.core.errors import CapacityExceededError, ValidationError
from kitchen_flow.domain.transitions import clean_text, new_id

MAX_NAME_LENGTH = 100


class StationType(str, Enum):
    GRILL = "grill"
    PREP = "prep"
    FRYER = "fryer"
    SALAD = "salad"
    DESSERT = "dessert"
    BEVERAGE = "beverage"


class StationStatus(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    MAINTENANCE = "maintenance"
    OFFLINE = "offline"


class Station(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    station_type: StationType
    capacity: int
    location: str | None = None
    status: StationStatus = StationStatus.AVAILABLE
    is_active: bool = True
    current_workload: int = 0
    assigned_staff: frozenset[str] = frozenset()
    current_orders: frozenset[str] = frozenset()
    created_at: datetime
    version: int = 0

    @classmethod
    def create(
        cls,
        name: str,
        station_type: StationType,
        capacity: int,
        location: str | None = None,
        *,
        station_id: str | None = None,
        now: datetime | None = None,
    ) -> "Station":
        name = clean_text(name, field="Station name", max_length=MAX_NAME_LENGTH)
        if name is None:
            raise ValidationError("Station name cannot be empty.")
        if capacity <= 0:
            raise ValidationError("Station capacity must be greater than zero.")
        return cls(
            id=station_id or new_id(),
            name=name,
            station_type=station_type,
            capacity=capacity,
            location=clean_text(location, field="Station location", max_length=MAX_NAME_LENGTH),
            created_at=now or utcnow(),
        )

    # ── Capacity ───────────────────────────────────────────────────────────
    @property
    def is_at_capacity(self) -> bool:
        return self.current_workload >= self.capacity

    @property
    def has_available_capacity(self) -> bool:
        return self.current_workload < self.capacity

    @property
    def available_capacity(self) -> int:
        return self.capacity - self.current_workload

    @property
    def workload_percentage(self) -> float:
        return self.current_workload / self.capacity * 100

    @property
    def can_accept_order(self) -> bool:
        return self.is_active and self.status == StationStatus.AVAILABLE and not self.is_at_capacity

    # ── Status / type checks ───────────────────────────────────────────────
    @property
    def is_available(self) -> bool:
        return self.status == StationStatus.AVAILABLE

    @property
    def is_busy(self) -> bool:
        return self.status == StationStatus.BUSY

    @property
    def is_in_maintenance(self) -> bool:
        return self.status == StationStatus.MAINTENANCE

    @property
    def is_offline(self) -> bool:
        return self.status == StationStatus.OFFLINE

    def is_type(self, station_type: StationType) -> bool:
        return self.station_type == station_type

    # ── Status setters ─────────────────────────────────────────────────────
    def activate(self) -> "Station":
        return self.model_copy(update={"is_active": True, "status": StationStatus.AVAILABLE})

    def deactivate(self) -> "Station":
        return self.model_copy(update={"is_active": False, "status": StationStatus.OFFLINE})

    def set_maintenance(self) -> "Station":
        return self.model_copy(update={"status": StationStatus.MAINTENANCE})

    def set_busy(self) -> "Station":
        return self.model_copy(update={"status": StationStatus.BUSY})

    def set_available(self) -> "Station":
        return self.model_copy(update={"status": StationStatus.AVAILABLE})

    # ── Staff ──────────────────────────────────────────────────────────────
    def assign_staff(self, staff_id: str) -> "Station":
        if not staff_id or not staff_id.strip():
            raise ValidationError("Staff id cannot be empty.")
        if staff_id in self.assigned_staff:
            raise ValidationError(f"Staff '{staff_id}' is already assigned to this station.")
        return self.model_copy(update={"assigned_staff": self.assigned_staff | {staff_id}})

    def unassign_staff(self, staff_id: str) -> "Station":
        if staff_id not in self.assigned_staff:
            raise ValidationError(f"Staff '{staff_id}' is not assigned to this station.")
        return self.model_copy(update={"assigned_staff": self.assigned_staff - {staff_id}})

    # ── Workload ───────────────────────────────────────────────────────────
    def update_workload(self, workload: int) -> "Station":
        if workload < 0:
            raise ValidationError("Station workload cannot be negative.")
        if workload > self.capacity:
            raise CapacityExceededError(self.id, self.capacity, workload)
        return self.model_copy(update={"current_workload": workload})

    def add_order(self, order_id: str) -> "Station":
        """Track an order on this station and take one unit of workload."""
        if order_id in self.current_orders:
            raise ValidationError(f"Order '{order_id}' is already on this station.")
        if self.is_at_capacity:
            raise CapacityExceededError(self.id, self.capacity, self.current_workload + 1)
        return self.model_copy(
            update={
                "current_orders": self.current_orders | {order_id},
                "current_workload": self.current_workload + 1,
            }
        )

    def remove_order(self, order_id: str) -> "Station":
        if order_id not in self.current_orders:
            raise ValidationError(f"Order '{order_id}' is not on this station.")
        return self.model_copy(
            update={
                "current_orders": self.current_orders - {order_id},
                "current_workload": max(0, self.current_workload - 1),
            }
        )
