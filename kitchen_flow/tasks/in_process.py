"""
Kitchen Flow — In-process sweeps (STORAGE_BACKEND=memory)

In-memory repositories live inside the API process, where no Celery worker can
reach them. The FastAPI lifespan runs the same two sweeps here as asyncio
tasks, on the intervals beat would use.
"""
import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable

from kitchen_flow.core.config import get_settings
from kitchen_flow.db.repositories import Repositories
from kitchen_flow.domain import KitchenTimer, Order
from kitchen_flow.services.escalation import escalate_stale_orders
from kitchen_flow.services.timer_sweep import sweep_expired_timers
from kitchen_flow.tasks import kitchen_tasks

settings = get_settings()
logger = logging.getLogger(__name__)


async def expire_timers(repos: Repositories, now: datetime | None = None) -> list[KitchenTimer]:
    expired = await sweep_expired_timers(repos.timers, now)
    for timer in expired:
        await asyncio.to_thread(kitchen_tasks._notify_hub, "timer_expired", kitchen_tasks.timer_expired_event(timer))
    return expired


async def escalate_orders(repos: Repositories, now: datetime | None = None) -> list[Order]:
    escalated = await escalate_stale_orders(repos.orders, now)
    for order in escalated:
        await asyncio.to_thread(
            kitchen_tasks._notify_hub, "order_escalated", kitchen_tasks.order_escalated_event(order)
        )
    return escalated


async def _every(interval: float, name: str, sweep: Callable[[], Awaitable[list]]):
    while True:
        try:
            changed = await sweep()
            if changed:
                logger.info("%s sweep changed %d aggregate(s)", name, len(changed))
        except Exception:
            # Keep ticking; the next run re-reads everything
            logger.exception("%s sweep failed", name)
        await asyncio.sleep(interval)


def start_sweeps(repos: Repositories) -> list[asyncio.Task]:
    logger.info("Running timer and escalation sweeps in-process (storage=memory)")
    return [
        asyncio.create_task(
            _every(settings.TIMER_SWEEP_INTERVAL_SECONDS, "Timer", lambda: expire_timers(repos)),
            name="timer-sweep",
        ),
        asyncio.create_task(
            _every(settings.PRIORITY_SWEEP_INTERVAL_SECONDS, "Escalation", lambda: escalate_orders(repos)),
            name="escalation-sweep",
        ),
    ]


async def stop_sweeps(tasks: list[asyncio.Task]):
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
