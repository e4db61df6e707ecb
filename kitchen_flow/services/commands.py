"""
Kitchen Flow — Repository-backed commands

Every write follows the same read → apply → versioned save sequence. A
ConflictError means another writer committed first; the command is re-run on
a fresh read (with_optimistic_retry). Callers get Result values back.
"""
import logging
from typing import Any, Callable, TypeVar

from kitchen_flow.core.optimistic_lock import with_optimistic_retry
from kitchen_flow.core.result import returns_result
from kitchen_flow.db.repositories import Repository

logger = logging.getLogger(__name__)

A = TypeVar("A")


@returns_result
async def create(repo: Repository[A], factory: Callable[[], A]) -> A:
    """Build a new aggregate (factory validates) and insert it."""
    return await repo.save(factory())


@returns_result
async def fetch(repo: Repository[A], entity_id: str) -> A:
    return await repo.get_by_id(entity_id)


@returns_result
async def query(repo: Repository[A], status: Any = None, **filters: Any) -> list[A]:
    return await repo.list(status=status, **filters)


@returns_result
@with_optimistic_retry()
async def apply(repo: Repository[A], entity_id: str, command: Callable[[A], A]) -> A:
    """
    Load the aggregate, run `command` on it and save the result.
    A command that returns the aggregate unchanged is not written.
    """
    entity = await repo.get_by_id(entity_id)
    updated = command(entity)
    if updated is entity:
        return entity
    return await repo.save(updated)


@returns_result
async def derive(repo: Repository[A], entity_id: str, command: Callable[[A], A]) -> A:
    """Insert a new aggregate produced from an existing one (e.g. a repeated timer)."""
    source = await repo.get_by_id(entity_id)
    created = await repo.save(command(source))
    logger.info("Derived %s from %s", created.id, entity_id)
    return created
