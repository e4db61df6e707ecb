"""
Kitchen Flow — Timer expiry sweep

Runs on a fixed tick. Each overdue timer is expired through the versioned
command path, so a sweep racing a user pause/complete/cancel either loses the
race (and re-reads) or finds the timer no longer running and leaves it alone.
"""
import logging
from datetime import datetime

from kitchen_flow.core.clock import utcnow
from kitchen_flow.core.result import Err, Ok
from kitchen_flow.db.repositories import Repository
from kitchen_flow.domain import KitchenTimer, TimerStatus
from kitchen_flow.services.commands import apply

logger = logging.getLogger(__name__)


def _expire_if_due(now: datetime):
    def command(timer: KitchenTimer) -> KitchenTimer:
        return timer.mark_expired(now) if timer.is_overdue(now) else timer
    return command


async def sweep_expired_timers(timers: Repository[KitchenTimer], now: datetime | None = None) -> list[KitchenTimer]:
    now = now or utcnow()
    expired: list[KitchenTimer] = []

    for timer in await timers.list(status=TimerStatus.RUNNING):
        if not timer.is_overdue(now):
            continue
        match await apply(timers, timer.id, _expire_if_due(now)):
            case Ok(value=saved) if saved.status == TimerStatus.EXPIRED:
                logger.info("Timer %s (%s) expired", saved.id, saved.label)
                expired.append(saved)
            case Ok():
                logger.debug("Timer %s changed before it could be expired", timer.id)
            case Err(error=err):
                logger.warning("Could not expire timer %s: %s", timer.id, err.message)

    return expired
