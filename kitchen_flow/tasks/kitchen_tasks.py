"""
Kitchen Flow — Celery tasks (periodic sweeps)

Worker processes these tasks on the beat schedule, separate from the FastAPI
container, so they need STORAGE_BACKEND=sql. Each run builds its own repositories, runs the async sweep to
completion and pushes every state change to the Notification Hub via HTTP.
"""
import asyncio
import logging
from contextlib import asynccontextmanager

import httpx
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from kitchen_flow.core.celery_app import celery_app, require_shared_storage
from kitchen_flow.core.config import get_settings
from kitchen_flow.db.repositories import sql_repositories
from kitchen_flow.domain import KitchenTimer, Order
from kitchen_flow.services.escalation import escalate_stale_orders as escalate_orders
from kitchen_flow.services.timer_sweep import sweep_expired_timers as sweep_timers

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def worker_repositories():
    """Repositories bound to an engine owned by this run's event loop."""
    require_shared_storage()
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    try:
        yield sql_repositories(async_sessionmaker(engine, expire_on_commit=False))
    finally:
        await engine.dispose()


async def _run_timer_sweep():
    async with worker_repositories() as repos:
        return await sweep_timers(repos.timers)


async def _run_escalation():
    async with worker_repositories() as repos:
        return await escalate_orders(repos.orders)


def timer_expired_event(timer: KitchenTimer) -> dict:
    return {
        "timer_id": timer.id,
        "label": timer.label,
        "order_id": timer.order_id,
        "station_id": timer.station_id,
        "sound_alert": timer.sound_alert,
        "visual_alert": timer.visual_alert,
    }


def order_escalated_event(order: Order) -> dict:
    return {
        "order_id": order.id,
        "priority": order.priority.level,
        "status": order.status.value,
        "station_id": order.assigned_station_id,
    }


def _notify_hub(event: str, payload: dict):
    """Push state change to Notification Hub."""
    if not settings.NOTIFICATIONS_ENABLED:
        return
    try:
        with httpx.Client(timeout=3.0) as client:
            client.post(
                f"{settings.NOTIFICATION_HUB_URL}/notifications/publish",
                json={"event": event, **payload},
            )
    except Exception as exc:
        # Notification failures MUST NOT affect kitchen processing
        logger.warning("Notification Hub unreachable: %s", exc)


@celery_app.task(
    name="sweep_expired_timers",
    bind=True,
    max_retries=3,
    default_retry_delay=1,
    acks_late=True,
)
def sweep_expired_timers(self) -> list[str]:
    """Expire every running timer that has run out."""
    try:
        expired = asyncio.run(_run_timer_sweep())
    except Exception as exc:
        logger.exception("Timer sweep failed")
        raise self.retry(exc=exc)

    for timer in expired:
        _notify_hub("timer_expired", timer_expired_event(timer))
    if expired:
        logger.info("Timer sweep expired %d timer(s)", len(expired))
    return [timer.id for timer in expired]


@celery_app.task(
    name="escalate_stale_orders",
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    acks_late=True,
)
def escalate_stale_orders(self) -> list[str]:
    """Raise the priority of orders that waited past their tier's timeout."""
    try:
        escalated = asyncio.run(_run_escalation())
    except Exception as exc:
        logger.exception("Priority escalation sweep failed")
        raise self.retry(exc=exc)

    for order in escalated:
        _notify_hub("order_escalated", order_escalated_event(order))
    if escalated:
        logger.info("Escalated %d order(s)", len(escalated))
    return [order.id for order in escalated]
