"""
Kitchen Flow — Orders API

Every write goes through services.commands.apply (read → transition →
versioned save, retried on conflict); the resulting Ok/Err is mapped to an
HTTP response by api.errors.
"""
from typing import Callable

from fastapi import APIRouter, Depends, Query, status

from kitchen_flow.api.deps import get_assignment_service, get_repositories, overdue_threshold
from kitchen_flow.api.errors import unwrap_or_raise
from kitchen_flow.db.repositories import Repositories
from kitchen_flow.domain import Order, OrderItem, OrderStatus, Priority
from kitchen_flow.schemas.order import (
    AssignRequest,
    CancelRequest,
    OrderCreateRequest,
    OrderItemRequest,
    OrderItemUpdateRequest,
    OrderView,
    PriorityRequest,
)
from kitchen_flow.schemas.station import StationView
from kitchen_flow.services import commands
from kitchen_flow.services.assignment import AssignmentService
from kitchen_flow.services.escalation import find_overdue_orders

router = APIRouter(prefix="/orders", tags=["orders"])


def _view(order: Order) -> OrderView:
    return OrderView.from_domain(order, overdue_threshold())


async def _apply(repos: Repositories, order_id: str, command: Callable[[Order], Order]) -> OrderView:
    return _view(unwrap_or_raise(await commands.apply(repos.orders, order_id, command)))


def _board_key(order: Order):
    return (order.status.sort_order, -order.priority, order.created_at)


@router.post("", response_model=OrderView, status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderCreateRequest, repos: Repositories = Depends(get_repositories)):
    def factory() -> Order:
        items = [
            OrderItem.create(item.recipe, item.quantity, item.special_instructions)
            for item in payload.items
        ]
        priority = Priority.from_level(payload.priority) if payload.priority is not None else None
        return Order.create(
            payload.customer_id,
            items,
            table_id=payload.table_id,
            priority=priority,
            special_instructions=payload.special_instructions,
        )

    return _view(unwrap_or_raise(await commands.create(repos.orders, factory)))


@router.get("", response_model=list[OrderView])
async def list_orders(
    status: OrderStatus | None = Query(None, description="Filter by status"),
    station_id: str | None = Query(None, description="Filter by assigned station"),
    customer_id: str | None = Query(None),
    repos: Repositories = Depends(get_repositories),
):
    """Kitchen display board: in-progress orders first, then by priority."""
    orders = unwrap_or_raise(
        await commands.query(repos.orders, status=status, assigned_station_id=station_id, customer_id=customer_id)
    )
    return [_view(order) for order in sorted(orders, key=_board_key)]


@router.get("/overdue", response_model=list[OrderView])
async def list_overdue_orders(repos: Repositories = Depends(get_repositories)):
    orders = await find_overdue_orders(repos.orders, overdue_threshold())
    return [_view(order) for order in orders]


@router.get("/{order_id}", response_model=OrderView)
async def get_order(order_id: str, repos: Repositories = Depends(get_repositories)):
    return _view(unwrap_or_raise(await commands.fetch(repos.orders, order_id)))


# ── Status transitions ────────────────────────────────────────────────────────
@router.post("/{order_id}/confirm", response_model=OrderView)
async def confirm_order(order_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, order_id, lambda order: order.confirm())


@router.post("/{order_id}/start", response_model=OrderView)
async def start_order(order_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, order_id, lambda order: order.start_preparation())


@router.post("/{order_id}/ready", response_model=OrderView)
async def mark_order_ready(order_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, order_id, lambda order: order.mark_ready())


@router.post("/{order_id}/complete", response_model=OrderView)
async def complete_order(order_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, order_id, lambda order: order.complete())


@router.post("/{order_id}/cancel", response_model=OrderView)
async def cancel_order(order_id: str, payload: CancelRequest, repos: Repositories = Depends(get_repositories)):
    """Cancel the order. Station workload is not released; call /release for that."""
    return await _apply(repos, order_id, lambda order: order.cancel(payload.reason))


# ── Items ─────────────────────────────────────────────────────────────────────
@router.post("/{order_id}/items", response_model=OrderView)
async def add_item(order_id: str, payload: OrderItemRequest, repos: Repositories = Depends(get_repositories)):
    return await _apply(
        repos,
        order_id,
        lambda order: order.add_item(payload.recipe, payload.quantity, payload.special_instructions),
    )


@router.patch("/{order_id}/items/{item_id}", response_model=OrderView)
async def update_item(
    order_id: str,
    item_id: str,
    payload: OrderItemUpdateRequest,
    repos: Repositories = Depends(get_repositories),
):
    return await _apply(
        repos,
        order_id,
        lambda order: order.update_item(item_id, payload.quantity, payload.special_instructions),
    )


@router.delete("/{order_id}/items/{item_id}", response_model=OrderView)
async def remove_item(order_id: str, item_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, order_id, lambda order: order.remove_item(item_id))


@router.post("/{order_id}/items/{item_id}/cancel", response_model=OrderView)
async def cancel_item(
    order_id: str,
    item_id: str,
    payload: CancelRequest,
    repos: Repositories = Depends(get_repositories),
):
    return await _apply(repos, order_id, lambda order: order.cancel_item(item_id, payload.reason))


# ── Priority ──────────────────────────────────────────────────────────────────
@router.post("/{order_id}/escalate", response_model=OrderView)
async def escalate_order(order_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, order_id, lambda order: order.escalate_priority())


@router.put("/{order_id}/priority", response_model=OrderView)
async def set_priority(order_id: str, payload: PriorityRequest, repos: Repositories = Depends(get_repositories)):
    return await _apply(
        repos, order_id, lambda order: order.update_priority(Priority.from_level(payload.priority))
    )


# ── Station assignment ────────────────────────────────────────────────────────
@router.post("/{order_id}/assign")
async def assign_order(
    order_id: str,
    payload: AssignRequest,
    service: AssignmentService = Depends(get_assignment_service),
):
    assignment = unwrap_or_raise(await service.assign(order_id, payload.station_id))
    return {"order": _view(assignment.order), "station": StationView.from_domain(assignment.station)}


@router.post("/{order_id}/release")
async def release_order(order_id: str, service: AssignmentService = Depends(get_assignment_service)):
    assignment = unwrap_or_raise(await service.release(order_id))
    return {"order": _view(assignment.order), "station": StationView.from_domain(assignment.station)}
