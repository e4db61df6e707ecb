"""
Kitchen Flow — Optimistic locking retry decorator

Aggregates carry a version number; repositories raise ConflictError when the
stored version moved between our read and our write. The decorated function
must re-read what it writes, so a retry applies the change to fresh state.
Retries use exponential backoff + jitter.
"""
import asyncio
import random
import functools
import logging

from kitchen_flow.core.config import get_settings
from kitchen_flow.core.errors import ConflictError

settings = get_settings()
logger = logging.getLogger(__name__)


def with_optimistic_retry(max_retries: int | None = None):
    """
    Decorator for async functions that perform versioned repository writes.
    On ConflictError, retries with exponential backoff + jitter.

    Usage:
        @with_optimistic_retry()
        async def assign(order_repo, station_repo, ...):
            ...
    """
    _max = max_retries or settings.OPT_LOCK_MAX_RETRIES

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(1, _max + 1):
                try:
                    return await func(*args, **kwargs)
                except ConflictError as exc:
                    if attempt == _max:
                        logger.error(
                            "%s %s still conflicting after %d attempts at %s (last read v%s)",
                            exc.entity, exc.entity_id, _max, func.__name__, exc.expected_version,
                        )
                        raise
                    # Exponential backoff: base * 2^attempt + jitter
                    base_delay = settings.OPT_LOCK_BASE_DELAY_MS / 1000.0
                    max_delay = settings.OPT_LOCK_MAX_DELAY_MS / 1000.0
                    jitter = random.uniform(0, settings.OPT_LOCK_JITTER_MS / 1000.0)
                    delay = min(base_delay * (2 ** attempt), max_delay) + jitter
                    logger.warning(
                        "%s %s moved past v%s during %s (attempt %d/%d), retrying in %.3fs",
                        exc.entity, exc.entity_id, exc.expected_version, func.__name__, attempt, _max, delay,
                    )
                    await asyncio.sleep(delay)
        return wrapper
    return decorator
