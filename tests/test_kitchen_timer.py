"""
KitchenTimer tests

Tests:
  1. Creation validation
  2. Countdown while running, frozen while paused
  3. Completion, cancellation and expiry
  4. Extension
  5. Repeat
"""
from datetime import timedelta

import pytest

from kitchen_flow.core.errors import InvalidStateTransitionError, ValidationError
from kitchen_flow.domain import KitchenTimer, TimerStatus, TimerType

THIRTY_MIN = timedelta(minutes=30)


@pytest.fixture
def timer(now) -> KitchenTimer:
    return KitchenTimer.create("Sear steak", THIRTY_MIN, TimerType.COOKING, now=now)


# ─── Test 1: Creation ──────────────────────────────────────────────────────────
@pytest.mark.parametrize("duration", [timedelta(0), timedelta(milliseconds=500), timedelta(hours=10, seconds=1)])
def test_duration_bounds(duration):
    with pytest.raises(ValidationError):
        KitchenTimer.create("Rest dough", duration)


def test_label_bounds():
    with pytest.raises(ValidationError):
        KitchenTimer.create("  ", THIRTY_MIN)
    with pytest.raises(ValidationError):
        KitchenTimer.create("x" * 101, THIRTY_MIN)
    assert KitchenTimer.create("x" * 100, timedelta(hours=10)).status == TimerStatus.CREATED


def test_new_timer_reports_nothing_elapsed(timer, now):
    assert timer.percent_complete(now + timedelta(hours=1)) == 0.0
    assert timer.remaining_at(now + timedelta(hours=1)) == THIRTY_MIN


# ─── Test 2: Countdown ─────────────────────────────────────────────────────────
def test_remaining_is_non_increasing_while_running(timer, now):
    running = timer.start(now)
    samples = [running.remaining_at(now + timedelta(seconds=s)) for s in (0, 10, 600, 1800, 2400)]
    assert samples == sorted(samples, reverse=True)
    assert samples[1] == THIRTY_MIN - timedelta(seconds=10)
    assert samples[-1] == timedelta(0)


def test_pause_freezes_and_resume_continues(timer, now):
    paused = timer.start(now).pause(now + timedelta(minutes=10))
    assert paused.remaining_at(now + timedelta(minutes=10)) == timedelta(minutes=20)
    assert paused.remaining_at(now + timedelta(minutes=50)) == timedelta(minutes=20)

    resumed = paused.resume(now + timedelta(minutes=50))
    assert resumed.remaining_at(now + timedelta(minutes=55)) == timedelta(minutes=15)
    assert resumed.elapsed(now + timedelta(minutes=55)) == timedelta(minutes=15)
    assert resumed.percent_complete(now + timedelta(minutes=55)) == 100.0


def test_percent_complete_counts_paused_wall_clock_time(timer, now):
    paused = timer.start(now).pause(now + timedelta(minutes=10))
    assert paused.percent_complete(now + timedelta(minutes=20)) == pytest.approx(200 / 3)
    assert paused.elapsed(now + timedelta(minutes=20)) == timedelta(minutes=10)
    assert paused.percent_complete(now + timedelta(hours=2)) == 100.0


def test_percent_complete_of_finished_timers(timer, now):
    running = timer.start(now)
    assert running.complete(now + timedelta(minutes=3)).percent_complete(now + timedelta(minutes=4)) == 100.0
    cancelled = running.cancel(now + timedelta(minutes=6))
    assert cancelled.percent_complete(now + timedelta(hours=1)) == pytest.approx(20.0)


def test_start_is_allowed_from_paused(timer, now):
    paused = timer.start(now).pause(now)
    assert paused.can_start
    assert paused.start(now).status == TimerStatus.RUNNING


def test_invalid_moves(timer, now):
    with pytest.raises(InvalidStateTransitionError):
        timer.pause(now)
    with pytest.raises(InvalidStateTransitionError):
        timer.cancel(now)
    with pytest.raises(InvalidStateTransitionError):
        timer.resume(now)
    with pytest.raises(InvalidStateTransitionError):
        timer.start(now).start(now)
    with pytest.raises(InvalidStateTransitionError):
        timer.start(now).pause(now).complete(now)


# ─── Test 3: Terminal states ───────────────────────────────────────────────────
def test_complete_zeroes_remaining(timer, now):
    done = timer.start(now).complete(now + timedelta(minutes=5))
    assert done.status == TimerStatus.COMPLETED
    assert done.remaining_at(now + timedelta(minutes=6)) == timedelta(0)
    assert done.remaining_duration == timedelta(0)


def test_cancel_from_running_or_paused(timer, now):
    assert timer.start(now).cancel(now).status == TimerStatus.CANCELLED
    assert timer.start(now).pause(now).cancel(now).status == TimerStatus.CANCELLED


def test_mark_expired_only_affects_running_timers(timer, now):
    running = timer.start(now)
    assert running.is_overdue(now + timedelta(minutes=30))
    expired = running.mark_expired(now + timedelta(minutes=30))
    assert expired.status == TimerStatus.EXPIRED
    assert expired.remaining_at(now + timedelta(hours=1)) == timedelta(0)

    completed = running.complete(now)
    cancelled = running.cancel(now)
    paused = running.pause(now)
    for snapshot in (completed, cancelled, paused, expired, timer):
        assert snapshot.mark_expired(now + timedelta(hours=1)) is snapshot


# ─── Test 4: Extension ─────────────────────────────────────────────────────────
def test_extend_adds_to_both_durations(timer, now):
    running = timer.start(now)
    extended = running.extend(timedelta(minutes=5), now)
    assert extended.original_duration == timedelta(minutes=35)
    assert extended.remaining_at(now + timedelta(minutes=10)) == timedelta(minutes=25)


def test_extend_rejections(timer, now):
    with pytest.raises(ValidationError):
        timer.extend(timedelta(seconds=-1))
    with pytest.raises(ValidationError):
        timer.extend(timedelta(hours=10))
    with pytest.raises(InvalidStateTransitionError):
        timer.start(now).complete(now).extend(timedelta(minutes=1))


def test_extend_after_running_out_restarts_the_countdown(timer, now):
    ran_out = timer.start(now)
    late = now + timedelta(minutes=45)
    assert ran_out.is_overdue(late)

    extended = ran_out.extend(timedelta(minutes=5), late)
    assert extended.original_duration == timedelta(minutes=35)
    assert not extended.is_overdue(late)
    assert extended.remaining_at(late + timedelta(minutes=2)) == timedelta(minutes=3)
    assert extended.is_overdue(late + timedelta(minutes=5))
    assert not extended.is_overdue(late + timedelta(minutes=4))


def test_extend_while_paused_keeps_frozen_remaining(timer, now):
    paused = timer.start(now).pause(now + timedelta(minutes=10))
    extended = paused.extend(timedelta(minutes=5), now + timedelta(hours=3))
    assert extended.remaining_at(now + timedelta(hours=4)) == timedelta(minutes=25)


# ─── Test 5: Repeat ────────────────────────────────────────────────────────────
def test_repeat_creates_a_new_timer(now):
    timer = KitchenTimer.create("Stir sauce", THIRTY_MIN, is_repeating=True, now=now)
    completed = timer.start(now).complete(now + THIRTY_MIN)
    again = completed.repeat(now + THIRTY_MIN)

    assert again.id != completed.id
    assert again.status == TimerStatus.CREATED
    assert again.remaining_duration == THIRTY_MIN
    assert again.repeat_count == completed.repeat_count + 1
    assert again.started_at is None
    assert completed.status == TimerStatus.COMPLETED


def test_repeat_uses_extended_duration(now):
    timer = KitchenTimer.create("Proof", THIRTY_MIN, is_repeating=True, now=now)
    expired = timer.start(now).extend(timedelta(minutes=10), now).mark_expired(now + timedelta(minutes=40))
    assert expired.repeat().remaining_duration == timedelta(minutes=40)


def test_repeat_rejections(timer, now):
    with pytest.raises(ValidationError):
        timer.start(now).complete(now).repeat()
    repeating = KitchenTimer.create("Baste", THIRTY_MIN, is_repeating=True)
    with pytest.raises(InvalidStateTransitionError):
        repeating.start(now).repeat()
    with pytest.raises(InvalidStateTransitionError):
        repeating.start(now).cancel(now).repeat()


def test_next_events_leave_expiry_to_the_sweep(timer, now):
    assert [e.value for e in timer.next_events] == ["start"]
    running = timer.start(now)
    assert [e.value for e in running.next_events] == ["pause", "complete", "cancel"]
    assert [e.value for e in running.pause(now).next_events] == ["start", "resume", "cancel"]
    assert running.complete(now).next_events == []
