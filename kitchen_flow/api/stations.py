"""
Kitchen Flow — Stations API
"""
from typing import Callable

from fastapi import APIRouter, Depends, Query, status

from kitchen_flow.api.deps import get_repositories
from kitchen_flow.api.errors import unwrap_or_raise
from kitchen_flow.db.repositories import Repositories
from kitchen_flow.domain import Station, StationStatus, StationType
from kitchen_flow.schemas.station import StaffRequest, StationCreateRequest, StationView, WorkloadRequest
from kitchen_flow.services import commands

router = APIRouter(prefix="/stations", tags=["stations"])


async def _apply(repos: Repositories, station_id: str, command: Callable[[Station], Station]) -> StationView:
    return StationView.from_domain(unwrap_or_raise(await commands.apply(repos.stations, station_id, command)))


@router.post("", response_model=StationView, status_code=status.HTTP_201_CREATED)
async def create_station(payload: StationCreateRequest, repos: Repositories = Depends(get_repositories)):
    station = unwrap_or_raise(
        await commands.create(
            repos.stations,
            lambda: Station.create(payload.name, payload.station_type, payload.capacity, payload.location),
        )
    )
    return StationView.from_domain(station)


@router.get("", response_model=list[StationView])
async def list_stations(
    status: StationStatus | None = Query(None, description="Filter by status"),
    station_type: StationType | None = Query(None),
    accepting: bool = Query(False, description="Only stations that can take another order"),
    repos: Repositories = Depends(get_repositories),
):
    stations = unwrap_or_raise(await commands.query(repos.stations, status=status, station_type=station_type))
    if accepting:
        stations = [s for s in stations if s.can_accept_order]
    return [StationView.from_domain(s) for s in stations]


@router.get("/{station_id}", response_model=StationView)
async def get_station(station_id: str, repos: Repositories = Depends(get_repositories)):
    return StationView.from_domain(unwrap_or_raise(await commands.fetch(repos.stations, station_id)))


# ── Status ────────────────────────────────────────────────────────────────────
@router.post("/{station_id}/activate", response_model=StationView)
async def activate_station(station_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, station_id, lambda s: s.activate())


@router.post("/{station_id}/deactivate", response_model=StationView)
async def deactivate_station(station_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, station_id, lambda s: s.deactivate())


@router.post("/{station_id}/maintenance", response_model=StationView)
async def station_maintenance(station_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, station_id, lambda s: s.set_maintenance())


@router.post("/{station_id}/busy", response_model=StationView)
async def station_busy(station_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, station_id, lambda s: s.set_busy())


@router.post("/{station_id}/available", response_model=StationView)
async def station_available(station_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, station_id, lambda s: s.set_available())


# ── Staff / workload ──────────────────────────────────────────────────────────
@router.post("/{station_id}/staff", response_model=StationView)
async def assign_staff(station_id: str, payload: StaffRequest, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, station_id, lambda s: s.assign_staff(payload.staff_id))


@router.delete("/{station_id}/staff/{staff_id}", response_model=StationView)
async def unassign_staff(station_id: str, staff_id: str, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, station_id, lambda s: s.unassign_staff(staff_id))


@router.put("/{station_id}/workload", response_model=StationView)
async def set_workload(station_id: str, payload: WorkloadRequest, repos: Repositories = Depends(get_repositories)):
    return await _apply(repos, station_id, lambda s: s.update_workload(payload.workload))
