"""
Kitchen Flow — Kitchen timer schemas

Durations travel as seconds; remaining/elapsed values are computed at
response time from the wall clock.
"""
from datetime import datetime

from pydantic import BaseModel, Field

from kitchen_flow.core.clock import utcnow
from kitchen_flow.domain import KitchenTimer, TimerPriority, TimerType
from kitchen_flow.domain.kitchen_timer import MAX_DURATION

MAX_SECONDS = MAX_DURATION.total_seconds()


class TimerCreateRequest(BaseModel):
    label: str = Field(..., examples=["Sear steak"])
    duration_seconds: float = Field(..., gt=0, le=MAX_SECONDS, allow_inf_nan=False, examples=[1800])
    timer_type: TimerType = TimerType.COOKING
    priority: TimerPriority = TimerPriority.NORMAL
    order_id: str | None = None
    station_id: str | None = None
    created_by: str | None = None
    notes: str | None = None
    is_repeating: bool = False
    sound_alert: bool = True
    visual_alert: bool = True


class ExtendRequest(BaseModel):
    seconds: float = Field(..., ge=0, le=MAX_SECONDS, allow_inf_nan=False, examples=[120])


class NotesRequest(BaseModel):
    notes: str | None = None


class TimerView(BaseModel):
    id: str
    label: str
    timer_type: str
    priority: str
    status: str
    original_seconds: float
    remaining_seconds: float
    elapsed_seconds: float
    percent_complete: float
    is_overdue: bool
    next_actions: list[str]
    order_id: str | None
    station_id: str | None
    created_by: str | None
    notes: str | None
    is_repeating: bool
    repeat_count: int
    sound_alert: bool
    visual_alert: bool
    started_at: datetime | None
    paused_at: datetime | None
    completed_at: datetime | None
    version: int

    @classmethod
    def from_domain(cls, timer: KitchenTimer) -> "TimerView":
        now = utcnow()
        return cls(
            id=timer.id,
            label=timer.label,
            timer_type=timer.timer_type.value,
            priority=timer.priority.value,
            status=timer.status.value,
            original_seconds=timer.original_duration.total_seconds(),
            remaining_seconds=timer.remaining_at(now).total_seconds(),
            elapsed_seconds=timer.elapsed(now).total_seconds(),
            percent_complete=round(timer.percent_complete(now), 1),
            is_overdue=timer.is_overdue(now),
            next_actions=[event.value for event in timer.next_events],
            order_id=timer.order_id,
            station_id=timer.station_id,
            created_by=timer.created_by,
            notes=timer.notes,
            is_repeating=timer.is_repeating,
            repeat_count=timer.repeat_count,
            sound_alert=timer.sound_alert,
            visual_alert=timer.visual_alert,
            started_at=timer.started_at,
            paused_at=timer.paused_at,
            completed_at=timer.completed_at,
            version=timer.version,
        )
