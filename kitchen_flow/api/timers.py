"""
Kitchen Flow — Kitchen timers API
"""
from datetime import timedelta
from typing import Callable

from fastapi import APIRouter, Depends, Query, status

from kitchen_flow.api.deps import get_repositories
from kitchen_flow.api.errors import unwrap_or_raise
from kitchen_flow.db.repositories import Repositories
from kitchen_flow.domain import KitchenTimer, TimerStatus
from kitchen_flow.schemas.timer import ExtendRequest, NotesRequest, TimerCreateRequest, TimerView
from kitchen_flow.services import commands

router = APIRouter(prefix="/timers", tags=["timers"])


async def _apply(repos: Repositories, timer_id: str, command: Callable[[KitchenTimer], KitchenTimer]) -> TimerView:
    return TimerView.from_domain(unwrap_or_raise(await commands.apply(repos.timers, timer_id, command)))


@router.post("", response_model=TimerView, status_code=status.HTTP_201_CREATED)
async def create_timer(payload: TimerCreateRequest, repos: Repositories = Depends(get_repositories)):
    def factory() -> KitchenTimer:
        return KitchenTimer.create(
            payload.label,
            timedelta(seconds=payload.duration_seconds),
            payload.timer_type,
            payload.priority,
            order_id=payload.order_id,
            station_id=payload.station_id,
            created_by=payload.created_by,
            notes=payload.notes,
            is_repeating=payload.is_repeating,
            sound_alert=payload.sound_alert,
            visual_alert=payload.visual_alert,
        )

    return TimerView.from_domain(unwrap_or_raise(await commands.create(repos.timers, factory)))


@router.get("", response_model=list[TimerView])
async def list_timers(
    status: TimerStatus | None = Query(None, description="Filter by status"),
    station_id: str | None = Query(None),
    order_id: str | None = Query(None),
    repos: Repositories = Depends(get_repositories),
):
    timers = unwrap_or_raise(
        await commands.query(repos.timers, status=status, station_id=station_id, order_id=order_id)
    )
    return [TimerView.from_domain(t) for t in timers]


@router.get("/{timer_id}", response_model=TimerView)
async def get_timer(timer_id: str, repos: Repositories = Depends(get_repositories)):
    return TimerView.from_domain(unwrap_or_raise(await commands.fetch(repos.timers, timer_id)))


@router.post("/{timer_id}/start", response_model=TimerView)
async def start_timer(timer_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, timer_id, lambda t: t.start())


@router.post("/{timer_id}/pause", response_model=TimerView)
async def pause_timer(timer_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, timer_id, lambda t: t.pause())


@router.post("/{timer_id}/resume", response_model=TimerView)
async def resume_timer(timer_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, timer_id, lambda t: t.resume())


@router.post("/{timer_id}/complete", response_model=TimerView)
async def complete_timer(timer_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, timer_id, lambda t: t.complete())


@router.post("/{timer_id}/cancel", response_model=TimerView)
async def cancel_timer(timer_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, timer_id, lambda t: t.cancel())


@router.post("/{timer_id}/extend", response_model=TimerView)
async def extend_timer(timer_id: str, payload: ExtendRequest, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, timer_id, lambda t: t.extend(timedelta(seconds=payload.seconds)))


@router.put("/{timer_id}/notes", response_model=TimerView)
async def update_notes(timer_id: str, payload: NotesRequest, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, timer_id, lambda t: t.update_notes(payload.notes))


@router.post("/{timer_id}/repeat", response_model=TimerView, status_code=status.HTTP_201_CREATED)
async def repeat_timer(timer_id: str, repos: Repositories = Depends(get_repositories)):
    """Create the next run of a repeating timer; the finished one is kept as history."""
    return TimerView.from_domain(
        unwrap_or_raise(await commands.derive(repos.timers, timer_id, lambda t: t.repeat()))
    )
