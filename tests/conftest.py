"""
Shared fixtures.

Settings are read once (lru_cache), so the environment is prepared before any
kitchen_flow module is imported.
"""
import os

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")
os.environ.setdefault("OPT_LOCK_BASE_DELAY_MS", "1")
os.environ.setdefault("OPT_LOCK_MAX_DELAY_MS", "5")
os.environ.setdefault("OPT_LOCK_JITTER_MS", "1")

from datetime import datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from kitchen_flow.db.repositories import in_memory_repositories  # noqa: E402
from kitchen_flow.domain import Order, OrderItem, RecipeSnapshot, Station, StationType  # noqa: E402

T0 = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return T0


@pytest.fixture
def burger() -> RecipeSnapshot:
    return RecipeSnapshot(
        recipe_id="recipe-burger", name="Burger", price=Decimal("12.99"),
        preparation_minutes=10, cooking_minutes=15,
    )


@pytest.fixture
def fries() -> RecipeSnapshot:
    return RecipeSnapshot(
        recipe_id="recipe-fries", name="Fries", price=Decimal("4.99"),
        preparation_minutes=5, cooking_minutes=8,
    )


@pytest.fixture
def order(burger, fries, now) -> Order:
    return Order.create(
        "customer-1",
        [OrderItem.create(burger, 1, now=now), OrderItem.create(fries, 1, now=now)],
        table_id="table-4",
        now=now,
    )


@pytest.fixture
def station(now) -> Station:
    return Station.create("Grill 1", StationType.GRILL, capacity=5, now=now)


@pytest.fixture
def repos():
    return in_memory_repositories()
