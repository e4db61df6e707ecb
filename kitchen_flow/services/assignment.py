"""
Kitchen Flow — Assignment coordinator

The one place where order state and station capacity are checked together.

    assign_order_to_station(order, station)   pure check + new snapshots
    AssignmentService.assign(order_id, ...)   repository-backed, saves the
                                              station first and rolls it back
                                              if the order write fails
"""
import logging
from dataclasses import dataclass
from typing import Callable

from kitchen_flow.core.errors import (
    CapacityExceededError,
    InvalidStateTransitionError,
    KitchenError,
    ValidationError,
)
from kitchen_flow.core.optimistic_lock import with_optimistic_retry
from kitchen_flow.core.result import Result, capture, returns_result
from kitchen_flow.db.repositories import Repository
from kitchen_flow.domain import Order, Station

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    order: Order
    station: Station


def _check_and_assign(order: Order, station: Station) -> Assignment:
    if order.status.is_final:
        raise InvalidStateTransitionError("order", order.status.value, "assign_to_station")
    if not station.is_active or station.is_offline:
        raise InvalidStateTransitionError(
            "station",
            station.status.value,
            "accept_order",
            message=f"Station '{station.id}' is not operational.",
        )
    if order.assigned_station_id is not None:
        raise ValidationError(
            f"Order '{order.id}' is already assigned to station '{order.assigned_station_id}'."
        )
    if station.is_at_capacity:
        raise CapacityExceededError(station.id, station.capacity, station.current_workload + 1)
    return Assignment(order=order.assign_to_station(station.id), station=station.add_order(order.id))


def _check_and_release(order: Order, station: Station) -> Assignment:
    if order.assigned_station_id != station.id:
        raise ValidationError(f"Order '{order.id}' is not assigned to station '{station.id}'.")
    return Assignment(order=order.unassign_from_station(), station=station.remove_order(order.id))


def _drop_order(order_id: str) -> Callable[[Station], Station]:
    def undo(station: Station) -> Station:
        return station.remove_order(order_id) if order_id in station.current_orders else station
    return undo


def _restore_order(order_id: str) -> Callable[[Station], Station]:
    def undo(station: Station) -> Station:
        return station if order_id in station.current_orders else station.add_order(order_id)
    return undo


def assign_order_to_station(order: Order, station: Station) -> Result[Assignment]:
    return capture(_check_and_assign, order, station)


def release_order_from_station(order: Order, station: Station) -> Result[Assignment]:
    return capture(_check_and_release, order, station)


class AssignmentService:
    def __init__(self, orders: Repository[Order], stations: Repository[Station]):
        self.orders = orders
        self.stations = stations

    @returns_result
    @with_optimistic_retry()
    async def assign(self, order_id: str, station_id: str) -> Assignment:
        order = await self.orders.get_by_id(order_id)
        station = await self.stations.get_by_id(station_id)
        planned = assign_order_to_station(order, station).unwrap()
        result = await self._commit(planned, undo=_drop_order(order_id))
        logger.info("Order %s assigned to station %s (workload %d/%d)",
                    order_id, station_id, result.station.current_workload, result.station.capacity)
        return result

    @returns_result
    @with_optimistic_retry()
    async def release(self, order_id: str) -> Assignment:
        order = await self.orders.get_by_id(order_id)
        if order.assigned_station_id is None:
            raise ValidationError(f"Order '{order_id}' is not assigned to a station.")
        station = await self.stations.get_by_id(order.assigned_station_id)
        planned = release_order_from_station(order, station).unwrap()
        result = await self._commit(planned, undo=_restore_order(order_id))
        logger.info("Order %s released from station %s", order_id, station.id)
        return result

    async def _commit(self, planned: Assignment, undo: Callable[[Station], Station]) -> Assignment:
        """Write station then order; undo the station write if the order write fails."""
        station = await self.stations.save(planned.station)
        try:
            order = await self.orders.save(planned.order)
        except KitchenError as exc:
            logger.warning("Order %s write failed (%s), rolling back station %s",
                           planned.order.id, exc.code, station.id)
            await self._compensate(station.id, undo)
            raise
        return Assignment(order=order, station=station)

    @with_optimistic_retry()
    async def _compensate(self, station_id: str, undo: Callable[[Station], Station]) -> Station:
        station = await self.stations.get_by_id(station_id)
        reverted = undo(station)
        if reverted is station:
            return station
        return await self.stations.save(reverted)
