"""
HTTP API tests (in-process ASGI transport, in-memory repositories)

Tests:
  1. Order lifecycle over HTTP
  2. Error kinds map to status codes
  3. Station assignment and capacity
  4. Timers
  5. Health / root
"""
from contextlib import asynccontextmanager

import httpx
import pytest
import pytest_asyncio

from kitchen_flow.api import health
from kitchen_flow.api.deps import get_repositories
from kitchen_flow.main import app

BURGER = {"recipe_id": "r-burger", "name": "Burger", "price": "12.99",
          "preparation_minutes": 10, "cooking_minutes": 15}
FRIES = {"recipe_id": "r-fries", "name": "Fries", "price": "4.99",
         "preparation_minutes": 5, "cooking_minutes": 8}


@pytest_asyncio.fixture
async def client(repos):
    app.dependency_overrides[get_repositories] = lambda: repos
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def _create_order(client, **overrides) -> dict:
    body = {
        "customer_id": "customer-1",
        "items": [{"recipe": BURGER, "quantity": 1}, {"recipe": FRIES, "quantity": 1}],
        **overrides,
    }
    r = await client.post("/orders", json=body)
    assert r.status_code == 201, r.text
    return r.json()


# ─── Test 1: Order lifecycle ───────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_create_order_returns_derived_values(client):
    order = await _create_order(client)
    assert order["status"] == "pending"
    assert float(order["total_amount"]) == pytest.approx(17.98)
    assert order["estimated_time_minutes"] == 25
    assert order["priority"] == 2
    assert order["can_be_modified"] is True
    assert order["next_actions"] == ["confirm", "cancel"]


@pytest.mark.asyncio
async def test_order_walks_through_every_stage(client):
    order = await _create_order(client)
    for step, expected in [("confirm", "confirmed"), ("start", "preparing"),
                           ("ready", "ready"), ("complete", "completed")]:
        r = await client.post(f"/orders/{order['id']}/{step}")
        assert r.status_code == 200, r.text
        assert r.json()["status"] == expected
    final = (await client.get(f"/orders/{order['id']}")).json()
    assert {item["status"] for item in final["items"]} == {"delivered"}


@pytest.mark.asyncio
async def test_cancel_and_item_edits(client):
    order = await _create_order(client)
    r = await client.post(f"/orders/{order['id']}/items", json={"recipe": FRIES, "quantity": 2})
    assert r.status_code == 200
    assert float(r.json()["total_amount"]) == pytest.approx(27.96)

    fries_id = r.json()["items"][1]["id"]
    r = await client.patch(f"/orders/{order['id']}/items/{fries_id}", json={"quantity": 3})
    assert r.json()["item_count"] == 6

    r = await client.post(f"/orders/{order['id']}/cancel", json={"reason": "customer request"})
    assert r.json()["status"] == "cancelled"
    assert r.json()["cancellation_reason"] == "customer request"


@pytest.mark.asyncio
async def test_list_filters_by_status(client):
    first = await _create_order(client)
    await _create_order(client)
    await client.post(f"/orders/{first['id']}/confirm")

    r = await client.get("/orders", params={"status": "confirmed"})
    assert [o["id"] for o in r.json()] == [first["id"]]
    assert len((await client.get("/orders")).json()) == 2


# ─── Test 2: Error mapping ─────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_invalid_transition_is_409(client):
    order = await _create_order(client)
    r = await client.post(f"/orders/{order['id']}/complete")
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "invalid_state_transition"
    assert r.json()["detail"]["current"] == "pending"


@pytest.mark.asyncio
async def test_validation_errors_are_422(client):
    r = await client.post("/orders", json={"customer_id": "c", "items": [{"recipe": BURGER, "quantity": 0}]})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "validation_error"

    order = await _create_order(client)
    r = await client.put(f"/orders/{order['id']}/priority", json={"priority": 9})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_unknown_order_is_404(client):
    r = await client.get("/orders/does-not-exist")
    assert r.status_code == 404
    assert r.json()["detail"]["entity"] == "order"


@pytest.mark.asyncio
async def test_removing_last_item_is_rejected(client):
    r = await client.post("/orders", json={"customer_id": "c", "items": [{"recipe": BURGER, "quantity": 1}]})
    order = r.json()
    r = await client.delete(f"/orders/{order['id']}/items/{order['items'][0]['id']}")
    assert r.status_code == 422


# ─── Test 3: Stations ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_assignment_respects_capacity(client):
    r = await client.post("/stations", json={"name": "Fryer", "station_type": "fryer", "capacity": 1})
    assert r.status_code == 201
    station = r.json()
    first = await _create_order(client)
    second = await _create_order(client)

    r = await client.post(f"/orders/{first['id']}/assign", json={"station_id": station["id"]})
    assert r.status_code == 200
    assert r.json()["station"]["current_workload"] == 1
    assert r.json()["order"]["assigned_station_id"] == station["id"]

    r = await client.post(f"/orders/{second['id']}/assign", json={"station_id": station["id"]})
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "capacity_exceeded"

    await client.post(f"/orders/{first['id']}/release")
    r = await client.post(f"/orders/{second['id']}/assign", json={"station_id": station["id"]})
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_station_status_and_staff(client):
    station = (await client.post("/stations", json={"name": "Grill", "station_type": "grill", "capacity": 4})).json()
    sid = station["id"]

    assert (await client.post(f"/stations/{sid}/maintenance")).json()["status"] == "maintenance"
    off = (await client.post(f"/stations/{sid}/deactivate")).json()
    assert off["status"] == "offline"
    assert off["is_active"] is False

    assert (await client.post(f"/stations/{sid}/staff", json={"staff_id": "cook-1"})).status_code == 200
    assert (await client.post(f"/stations/{sid}/staff", json={"staff_id": "cook-1"})).status_code == 422
    assert (await client.put(f"/stations/{sid}/workload", json={"workload": 9})).status_code == 409
    assert (await client.get("/stations", params={"status": "offline"})).json()[0]["id"] == sid


# ─── Test 4: Timers ────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_timer_lifecycle(client):
    r = await client.post("/timers", json={"label": "Sear", "duration_seconds": 1800, "is_repeating": True})
    assert r.status_code == 201
    timer = r.json()
    assert timer["status"] == "created"
    assert timer["percent_complete"] == 0.0
    assert timer["next_actions"] == ["start"]

    tid = timer["id"]
    assert (await client.post(f"/timers/{tid}/start")).json()["status"] == "running"
    assert (await client.post(f"/timers/{tid}/repeat")).status_code == 409
    paused = (await client.post(f"/timers/{tid}/pause")).json()
    assert paused["status"] == "paused"
    assert (await client.post(f"/timers/{tid}/extend", json={"seconds": 60})).json()["original_seconds"] == 1860
    assert (await client.post(f"/timers/{tid}/resume")).json()["status"] == "running"
    assert (await client.post(f"/timers/{tid}/complete")).json()["remaining_seconds"] == 0

    again = await client.post(f"/timers/{tid}/repeat")
    assert again.status_code == 201
    assert again.json()["id"] != tid
    assert again.json()["repeat_count"] == 1
    assert len((await client.get("/timers")).json()) == 2


@pytest.mark.asyncio
async def test_timer_validation(client):
    r = await client.post("/timers", json={"label": "Blink", "duration_seconds": 0.2})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "validation_error"


@pytest.mark.asyncio
@pytest.mark.parametrize("duration", [1e20, 36001, -5])
async def test_out_of_range_timer_duration_is_422(client, duration):
    r = await client.post("/timers", json={"label": "Braise", "duration_seconds": duration})
    assert r.status_code == 422
    assert (await client.get("/timers")).json() == []


@pytest.mark.asyncio
async def test_out_of_range_extension_is_422(client):
    tid = (await client.post("/timers", json={"label": "Braise", "duration_seconds": 600})).json()["id"]
    for seconds in (1e20, -1):
        r = await client.post(f"/timers/{tid}/extend", json={"seconds": seconds})
        assert r.status_code == 422
    r = await client.post(f"/timers/{tid}/extend", json={"seconds": 36000})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "validation_error"
    assert (await client.get(f"/timers/{tid}")).json()["original_seconds"] == 600


# ─── Test 5: Health / root ─────────────────────────────────────────────────────
class FakeRedis:
    queued = 3

    async def ping(self):
        return True

    async def llen(self, key):
        return self.queued if key == "celery" else 0


class FakeConnection:
    async def execute(self, statement):
        return None


class FakeEngine:
    @asynccontextmanager
    async def connect(self):
        yield FakeConnection()


@pytest.mark.asyncio
async def test_health_with_memory_storage(client, monkeypatch):
    monkeypatch.setattr(health, "get_redis", lambda: FakeRedis())
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["dependencies"] == {"storage": "memory", "redis": "ok"}


@pytest.mark.asyncio
async def test_health_reports_sweep_backlog_with_sql_storage(client, monkeypatch):
    monkeypatch.setattr(health.settings, "STORAGE_BACKEND", "sql")
    monkeypatch.setattr(health, "engine", FakeEngine())
    monkeypatch.setattr(health, "get_redis", lambda: FakeRedis())
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["dependencies"] == {"postgresql": "ok", "redis": "ok", "sweep_backlog": "3"}


@pytest.mark.asyncio
async def test_root(client):
    r = await client.get("/")
    assert r.json()["service"] == "kitchen-flow"
