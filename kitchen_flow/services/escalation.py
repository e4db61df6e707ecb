"""
Kitchen Flow — Automatic priority escalation

An active order that has sat at its tier longer than the tier's escalation
timeout moves up one tier. CRITICAL orders are never touched.
"""
import logging
from datetime import datetime, timedelta

from kitchen_flow.core.clock import utcnow
from kitchen_flow.core.result import Err, Ok
from kitchen_flow.db.repositories import Repository
from kitchen_flow.domain import Order, OrderStatus
from kitchen_flow.services.commands import apply

logger = logging.getLogger(__name__)


def _escalate_if_due(now: datetime):
    def command(order: Order) -> Order:
        return order.escalate_priority(now) if order.escalation_due(now) else order
    return command


async def escalate_stale_orders(orders: Repository[Order], now: datetime | None = None) -> list[Order]:
    now = now or utcnow()
    escalated: list[Order] = []

    for order in await orders.list():
        if not order.escalation_due(now):
            continue
        match await apply(orders, order.id, _escalate_if_due(now)):
            case Ok(value=saved) if saved.priority > order.priority:
                logger.info("Order %s escalated %s → %s", saved.id, order.priority.display_name,
                            saved.priority.display_name)
                escalated.append(saved)
            case Ok():
                pass
            case Err(error=err):
                logger.warning("Could not escalate order %s: %s", order.id, err.message)

    return escalated


async def find_overdue_orders(
    orders: Repository[Order], threshold: timedelta, now: datetime | None = None
) -> list[Order]:
    """Orders still preparing after `threshold`, most urgent first."""
    now = now or utcnow()
    preparing = await orders.list(status=OrderStatus.PREPARING)
    overdue = [order for order in preparing if order.is_overdue(now, threshold)]
    return sorted(overdue, key=lambda order: (-order.priority, order.started_at))
