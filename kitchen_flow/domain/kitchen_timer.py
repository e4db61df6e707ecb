"""
Kitchen Flow — Kitchen timer

Countdown with pause/resume. `remaining_duration` is the value at the last
state change; while running, the live value is derived from the wall clock
since `resumed_at`, so a background sweep and a user action can both read the
same snapshot without either one ticking the timer.
"""
from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict

from kitchen_flow.core.clock import utcnow
from kitchen_flow.core.errors import InvalidStateTransitionError, ValidationError
from kitchen_flow.domain.transitions import allowed_events, clean_text, new_id, next_state

MIN_DURATION = timedelta(seconds=1)
MAX_DURATION = timedelta(hours=10)
MAX_LABEL_LENGTH = 100
MAX_NOTES_LENGTH = 500


class TimerType(str, Enum):
    COOKING = "cooking"
    HOLD = "hold"
    PREP = "prep"
    TEMPERATURE_CHECK = "temperature_check"
    MAINTENANCE = "maintenance"
    FOOD_SAFETY = "food_safety"
    STAFF_BREAK = "staff_break"
    CLEANING = "cleaning"


class TimerStatus(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in (TimerStatus.COMPLETED, TimerStatus.CANCELLED, TimerStatus.EXPIRED)


class TimerPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class TimerEvent(str, Enum):
    START = "start"
    RESUME = "resume"
    PAUSE = "pause"
    COMPLETE = "complete"
    CANCEL = "cancel"
    EXPIRE = "mark_expired"


TIMER_TRANSITIONS = {
    (TimerStatus.CREATED, TimerEvent.START): TimerStatus.RUNNING,
    (TimerStatus.PAUSED, TimerEvent.START): TimerStatus.RUNNING,
    (TimerStatus.PAUSED, TimerEvent.RESUME): TimerStatus.RUNNING,
    (TimerStatus.RUNNING, TimerEvent.PAUSE): TimerStatus.PAUSED,
    (TimerStatus.RUNNING, TimerEvent.COMPLETE): TimerStatus.COMPLETED,
    (TimerStatus.RUNNING, TimerEvent.CANCEL): TimerStatus.CANCELLED,
    (TimerStatus.PAUSED, TimerEvent.CANCEL): TimerStatus.CANCELLED,
    (TimerStatus.RUNNING, TimerEvent.EXPIRE): TimerStatus.EXPIRED,
}


def _validate_duration(duration: timedelta) -> timedelta:
    if duration < MIN_DURATION:
        raise ValidationError("Timer duration must be at least 1 second.")
    if duration > MAX_DURATION:
        raise ValidationError("Timer duration cannot exceed 10 hours.")
    return duration


class KitchenTimer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    timer_type: TimerType
    original_duration: timedelta
    remaining_duration: timedelta
    status: TimerStatus = TimerStatus.CREATED
    priority: TimerPriority = TimerPriority.NORMAL
    order_id: str | None = None
    station_id: str | None = None
    created_by: str | None = None
    notes: str | None = None
    is_repeating: bool = False
    repeat_count: int = 0
    sound_alert: bool = True
    visual_alert: bool = True
    created_at: datetime
    started_at: datetime | None = None
    resumed_at: datetime | None = None
    paused_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    expired_at: datetime | None = None
    version: int = 0

    @classmethod
    def create(
        cls,
        label: str,
        duration: timedelta,
        timer_type: TimerType = TimerType.COOKING,
        priority: TimerPriority = TimerPriority.NORMAL,
        *,
        order_id: str | None = None,
        station_id: str | None = None,
        created_by: str | None = None,
        notes: str | None = None,
        is_repeating: bool = False,
        sound_alert: bool = True,
        visual_alert: bool = True,
        timer_id: str | None = None,
        now: datetime | None = None,
    ) -> "KitchenTimer":
        label = clean_text(label, field="Timer label", max_length=MAX_LABEL_LENGTH)
        if label is None:
            raise ValidationError("Timer label cannot be empty.")
        duration = _validate_duration(duration)
        return cls(
            id=timer_id or new_id(),
            label=label,
            timer_type=timer_type,
            original_duration=duration,
            remaining_duration=duration,
            priority=priority,
            order_id=order_id,
            station_id=station_id,
            created_by=created_by,
            notes=clean_text(notes, field="Timer notes", max_length=MAX_NOTES_LENGTH),
            is_repeating=is_repeating,
            sound_alert=sound_alert,
            visual_alert=visual_alert,
            created_at=now or utcnow(),
        )

    # ── Clock-derived values ───────────────────────────────────────────────
    def remaining_at(self, now: datetime | None = None) -> timedelta:
        if self.status in (TimerStatus.COMPLETED, TimerStatus.EXPIRED):
            return timedelta(0)
        if self.status != TimerStatus.RUNNING or self.resumed_at is None:
            return self.remaining_duration
        running_for = (now or utcnow()) - self.resumed_at
        return max(timedelta(0), self.remaining_duration - running_for)

    def elapsed(self, now: datetime | None = None) -> timedelta:
        """Active countdown time; paused intervals do not count."""
        if self.started_at is None:
            return timedelta(0)
        return self.original_duration - self.remaining_at(now)

    def percent_complete(self, now: datetime | None = None) -> float:
        """Wall-clock time since the first start over the original duration, pauses included."""
        if self.started_at is None:
            return 0.0
        if self.status in (TimerStatus.COMPLETED, TimerStatus.EXPIRED):
            return 100.0
        until = self.cancelled_at or now or utcnow()
        percent = (until - self.started_at) / self.original_duration * 100
        return min(100.0, max(0.0, percent))

    def is_overdue(self, now: datetime | None = None) -> bool:
        return self.status == TimerStatus.RUNNING and self.remaining_at(now) == timedelta(0)

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def next_events(self) -> list[TimerEvent]:
        """Lifecycle events accepted in the current status; mark_expired is left to the sweep."""
        return [e for e in allowed_events(TIMER_TRANSITIONS, self.status) if e != TimerEvent.EXPIRE]

    @property
    def can_start(self) -> bool:
        return (self.status, TimerEvent.START) in TIMER_TRANSITIONS

    @property
    def can_pause(self) -> bool:
        return (self.status, TimerEvent.PAUSE) in TIMER_TRANSITIONS

    @property
    def can_cancel(self) -> bool:
        return (self.status, TimerEvent.CANCEL) in TIMER_TRANSITIONS

    # ── Transitions ────────────────────────────────────────────────────────
    def _advance(self, event: TimerEvent, **changes) -> "KitchenTimer":
        status = next_state(TIMER_TRANSITIONS, "timer", self.status, event)
        return self.model_copy(update={"status": status, **changes})

    def _run(self, event: TimerEvent, now: datetime | None) -> "KitchenTimer":
        now = now or utcnow()
        return self._advance(event, started_at=self.started_at or now, resumed_at=now, paused_at=None)

    def start(self, now: datetime | None = None) -> "KitchenTimer":
        return self._run(TimerEvent.START, now)

    def resume(self, now: datetime | None = None) -> "KitchenTimer":
        return self._run(TimerEvent.RESUME, now)

    def pause(self, now: datetime | None = None) -> "KitchenTimer":
        now = now or utcnow()
        return self._advance(
            TimerEvent.PAUSE,
            remaining_duration=self.remaining_at(now),
            paused_at=now,
            resumed_at=None,
        )

    def complete(self, now: datetime | None = None) -> "KitchenTimer":
        return self._advance(
            TimerEvent.COMPLETE,
            remaining_duration=timedelta(0),
            completed_at=now or utcnow(),
            resumed_at=None,
        )

    def cancel(self, now: datetime | None = None) -> "KitchenTimer":
        now = now or utcnow()
        return self._advance(
            TimerEvent.CANCEL,
            remaining_duration=self.remaining_at(now),
            cancelled_at=now,
            resumed_at=None,
        )

    def mark_expired(self, now: datetime | None = None) -> "KitchenTimer":
        """Expire a running timer. Any other status is returned unchanged."""
        if self.status != TimerStatus.RUNNING:
            return self
        return self._advance(
            TimerEvent.EXPIRE,
            remaining_duration=timedelta(0),
            expired_at=now or utcnow(),
            resumed_at=None,
        )

    def extend(self, delta: timedelta, now: datetime | None = None) -> "KitchenTimer":
        if self.is_terminal:
            raise InvalidStateTransitionError("timer", self.status.value, "extend")
        if delta < timedelta(0):
            raise ValidationError("Timer extension cannot be negative.")
        original = self.original_duration + delta
        if original > MAX_DURATION:
            raise ValidationError("Timer duration cannot exceed 10 hours.")
        now = now or utcnow()
        changes = {"original_duration": original, "remaining_duration": self.remaining_at(now) + delta}
        if self.status == TimerStatus.RUNNING:
            changes["resumed_at"] = now
        return self.model_copy(update=changes)

    def repeat(self, now: datetime | None = None) -> "KitchenTimer":
        """Start over as a new timer; this instance stays as the history record."""
        if not self.is_repeating:
            raise ValidationError("Timer is not configured to repeat.")
        if self.status not in (TimerStatus.COMPLETED, TimerStatus.EXPIRED):
            raise InvalidStateTransitionError("timer", self.status.value, "repeat")
        return self.model_copy(
            update={
                "id": new_id(),
                "status": TimerStatus.CREATED,
                "remaining_duration": self.original_duration,
                "repeat_count": self.repeat_count + 1,
                "created_at": now or utcnow(),
                "started_at": None,
                "resumed_at": None,
                "paused_at": None,
                "completed_at": None,
                "cancelled_at": None,
                "expired_at": None,
                "version": 0,
            }
        )

    def update_notes(self, notes: str | None) -> "KitchenTimer":
        return self.model_copy(
            update={"notes": clean_text(notes, field="Timer notes", max_length=MAX_NOTES_LENGTH)}
        )
