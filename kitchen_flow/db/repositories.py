"""
Kitchen Flow — Aggregate repositories

Each aggregate carries a `version`. `save()` only succeeds when the stored
version still equals the version the caller read; otherwise it raises
ConflictError and the caller re-reads and re-applies its change
(see core/optimistic_lock.py).

Two implementations share the contract:
  - SqlRepository:      one row per aggregate, JSON payload,
                        UPDATE ... WHERE version_id = :expected
  - InMemoryRepository: dict guarded by an asyncio.Lock, used by tests and
                        STORAGE_BACKEND=memory
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kitchen_flow.core.errors import ConflictError, NotFoundError, ValidationError
from kitchen_flow.db.database import SessionLocal
from kitchen_flow.domain import KitchenTimer, Order, Station
from kitchen_flow.models import KitchenTimerRecord, OrderRecord, StationRecord

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=BaseModel)


class Repository(Protocol[A]):
    async def get_by_id(self, entity_id: str) -> A: ...

    async def save(self, entity: A) -> A: ...

    async def list(self, status: Any = None, **filters: Any) -> list[A]: ...


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# ── SQL ────────────────────────────────────────────────────────────────────────
class SqlRepository(Generic[A]):
    record: type
    entity: type[A]
    entity_name: str
    filter_columns: tuple[str, ...] = ()

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._sessions = session_factory

    def _columns(self, entity: A) -> dict[str, Any]:
        return {name: _plain(getattr(entity, name)) for name in self.filter_columns}

    def _to_entity(self, record) -> A:
        return self.entity.model_validate({**record.payload, "version": record.version_id})

    async def get_by_id(self, entity_id: str) -> A:
        async with self._sessions() as session:
            record = await session.get(self.record, entity_id)
        if record is None:
            raise NotFoundError(self.entity_name, entity_id)
        return self._to_entity(record)

    async def save(self, entity: A) -> A:
        new_version = entity.version + 1
        payload = entity.model_dump(mode="json", exclude={"version"})
        status = _plain(entity.status)

        async with self._sessions() as session:
            if entity.version == 0:
                session.add(
                    self.record(
                        id=entity.id,
                        status=status,
                        version_id=new_version,
                        payload=payload,
                        **self._columns(entity),
                    )
                )
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    raise ConflictError(self.entity_name, entity.id, entity.version) from None
            else:
                # Optimistically update: WHERE version_id = <snapshot_version>
                result = await session.execute(
                    update(self.record)
                    .where(self.record.id == entity.id, self.record.version_id == entity.version)
                    .values(status=status, version_id=new_version, payload=payload, **self._columns(entity))
                )
                if result.rowcount == 0:
                    # Another writer won the race → caller retries
                    await session.rollback()
                    raise ConflictError(self.entity_name, entity.id, entity.version)
                await session.commit()

        return entity.model_copy(update={"version": new_version})

    async def list(self, status: Any = None, **filters: Any) -> list[A]:
        query = select(self.record).order_by(self.record.created_at)
        if status is not None:
            query = query.where(self.record.status == _plain(status))
        for name, value in filters.items():
            if name not in self.filter_columns:
                raise ValidationError(f"Unknown {self.entity_name} filter '{name}'.")
            if value is not None:
                query = query.where(getattr(self.record, name) == _plain(value))

        async with self._sessions() as session:
            result = await session.execute(query)
            records = result.scalars().all()
        return [self._to_entity(record) for record in records]


class SqlOrderRepository(SqlRepository[Order]):
    record = OrderRecord
    entity = Order
    entity_name = "order"
    filter_columns = ("customer_id", "assigned_station_id")


class SqlStationRepository(SqlRepository[Station]):
    record = StationRecord
    entity = Station
    entity_name = "station"
    filter_columns = ("station_type",)


class SqlKitchenTimerRepository(SqlRepository[KitchenTimer]):
    record = KitchenTimerRecord
    entity = KitchenTimer
    entity_name = "timer"
    filter_columns = ("order_id", "station_id")


# ── In-memory ──────────────────────────────────────────────────────────────────
class InMemoryRepository(Generic[A]):
    def __init__(self, entity_name: str, filter_fields: tuple[str, ...] = ()):
        self.entity_name = entity_name
        self.filter_fields = filter_fields
        self._items: dict[str, A] = {}
        self._lock = asyncio.Lock()

    async def get_by_id(self, entity_id: str) -> A:
        try:
            return self._items[entity_id]
        except KeyError:
            raise NotFoundError(self.entity_name, entity_id) from None

    async def save(self, entity: A) -> A:
        async with self._lock:
            stored = self._items.get(entity.id)
            current = stored.version if stored is not None else 0
            if entity.version != current:
                raise ConflictError(self.entity_name, entity.id, entity.version)
            saved = entity.model_copy(update={"version": current + 1})
            self._items[entity.id] = saved
            return saved

    async def list(self, status: Any = None, **filters: Any) -> list[A]:
        unknown = set(filters) - set(self.filter_fields)
        if unknown:
            raise ValidationError(f"Unknown {self.entity_name} filter '{sorted(unknown)[0]}'.")
        found = []
        for entity in self._items.values():
            if status is not None and entity.status != status:
                continue
            if any(value is not None and getattr(entity, name) != value for name, value in filters.items()):
                continue
            found.append(entity)
        return found


# ── Wiring ─────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Repositories:
    orders: Repository[Order]
    stations: Repository[Station]
    timers: Repository[KitchenTimer]


def in_memory_repositories() -> Repositories:
    return Repositories(
        orders=InMemoryRepository("order", SqlOrderRepository.filter_columns),
        stations=InMemoryRepository("station", SqlStationRepository.filter_columns),
        timers=InMemoryRepository("timer", SqlKitchenTimerRepository.filter_columns),
    )


def sql_repositories(session_factory: async_sessionmaker[AsyncSession]) -> Repositories:
    return Repositories(
        orders=SqlOrderRepository(session_factory),
        stations=SqlStationRepository(session_factory),
        timers=SqlKitchenTimerRepository(session_factory),
    )


def build_repositories(backend: str) -> Repositories:
    """Repositories for the configured STORAGE_BACKEND."""
    if backend == "memory":
        logger.info("Using in-memory repositories; state is lost on restart")
        return in_memory_repositories()
    if backend == "sql":
        return sql_repositories(SessionLocal)
    raise ValueError(f"Unknown STORAGE_BACKEND '{backend}' (expected 'sql' or 'memory').")
