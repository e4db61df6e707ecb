"""
Kitchen Flow — Station schemas
"""
from pydantic import BaseModel, Field

from kitchen_flow.domain import Station, StationType


class StationCreateRequest(BaseModel):
    name: str = Field(..., examples=["Grill 1"])
    station_type: StationType
    capacity: int = Field(..., examples=[5])
    location: str | None = None


class StaffRequest(BaseModel):
    staff_id: str


class WorkloadRequest(BaseModel):
    workload: int


class StationView(BaseModel):
    id: str
    name: str
    station_type: str
    location: str | None
    status: str
    is_active: bool
    capacity: int
    current_workload: int
    available_capacity: int
    workload_percentage: float
    can_accept_order: bool
    assigned_staff: list[str]
    current_orders: list[str]
    version: int

    @classmethod
    def from_domain(cls, station: Station) -> "StationView":
        return cls(
            id=station.id,
            name=station.name,
            station_type=station.station_type.value,
            location=station.location,
            status=station.status.value,
            is_active=station.is_active,
            capacity=station.capacity,
            current_workload=station.current_workload,
            available_capacity=station.available_capacity,
            workload_percentage=round(station.workload_percentage, 1),
            can_accept_order=station.can_accept_order,
            assigned_staff=sorted(station.assigned_staff),
            current_orders=sorted(station.current_orders),
            version=station.version,
        )
