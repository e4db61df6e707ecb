"""
OrderItem tests

Tests:
  1. Creation validation
  2. Lifecycle transitions and rejection of backward moves
  3. Pending-only edits
  4. Overdue detection
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from kitchen_flow.core.errors import InvalidStateTransitionError, ValidationError
from kitchen_flow.domain import OrderItem, OrderItemStatus


# ─── Test 1: Creation ──────────────────────────────────────────────────────────
@pytest.mark.parametrize("quantity", [0, -2, 51])
def test_quantity_bounds(burger, quantity):
    with pytest.raises(ValidationError):
        OrderItem.create(burger, quantity)


def test_instructions_are_trimmed_and_bounded(burger):
    assert OrderItem.create(burger, 1, "   ").special_instructions is None
    assert OrderItem.create(burger, 1, "  no onions ").special_instructions == "no onions"
    with pytest.raises(ValidationError):
        OrderItem.create(burger, 1, "x" * 501)


def test_total_price_and_estimate(burger):
    item = OrderItem.create(burger, 3)
    assert item.total_price == Decimal("38.97")
    assert item.estimated_time_minutes == 25
    assert item.status == OrderItemStatus.PENDING


# ─── Test 2: Transitions ───────────────────────────────────────────────────────
def test_happy_path_sets_timestamps(burger, now):
    item = OrderItem.create(burger, 1, now=now)
    preparing = item.start_preparation(now + timedelta(minutes=1))
    ready = preparing.complete_preparation(now + timedelta(minutes=20))
    delivered = ready.deliver(now + timedelta(minutes=22))

    assert item.status == OrderItemStatus.PENDING
    assert delivered.status == OrderItemStatus.DELIVERED
    assert delivered.is_completed
    assert delivered.actual_preparation_duration == timedelta(minutes=19)
    assert delivered.delivered_at == now + timedelta(minutes=22)


def test_backward_transition_is_rejected(burger):
    ready = OrderItem.create(burger, 1).start_preparation().complete_preparation()
    with pytest.raises(InvalidStateTransitionError) as exc:
        ready.start_preparation()
    assert exc.value.current == "ready"
    assert exc.value.operation == "start_preparation"


def test_cancel_records_reason(burger):
    cancelled = OrderItem.create(burger, 1).start_preparation().cancel("dropped on floor")
    assert cancelled.status == OrderItemStatus.CANCELLED
    assert cancelled.cancellation_reason == "dropped on floor"
    assert not cancelled.can_be_cancelled


def test_cancel_rejects_terminal_and_blank_reason(burger):
    item = OrderItem.create(burger, 1)
    with pytest.raises(ValidationError):
        item.cancel("  ")
    delivered = item.start_preparation().complete_preparation().deliver()
    with pytest.raises(InvalidStateTransitionError):
        delivered.cancel("too late")


# ─── Test 3: Edits ─────────────────────────────────────────────────────────────
def test_update_quantity_recomputes_total(burger):
    item = OrderItem.create(burger, 1).update_quantity(2)
    assert item.total_price == Decimal("25.98")
    assert item.is_modified


def test_edits_fail_after_preparation_starts(burger):
    preparing = OrderItem.create(burger, 1).start_preparation()
    with pytest.raises(InvalidStateTransitionError):
        preparing.update_quantity(2)
    with pytest.raises(InvalidStateTransitionError):
        preparing.update_special_instructions("extra cheese")


# ─── Test 4: Overdue ───────────────────────────────────────────────────────────
def test_overdue_after_recipe_time(burger, now):
    preparing = OrderItem.create(burger, 1, now=now).start_preparation(now)
    assert not preparing.is_overdue(now + timedelta(minutes=25))
    assert preparing.is_overdue(now + timedelta(minutes=26))
    assert not OrderItem.create(burger, 1).is_overdue(now + timedelta(hours=2))
