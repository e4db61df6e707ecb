"""
Kitchen Flow — Redis client singleton

Redis is the Celery broker for the timer and escalation sweeps. The API holds
one async client to check the broker is reachable and to report how many sweep
runs are still queued.
"""
import redis.asyncio as aioredis
from kitchen_flow.core.config import get_settings

settings = get_settings()

# Celery's default queue; beat publishes both sweeps there
SWEEP_QUEUE = "celery"

_redis_client: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.HEALTH_CHECK_TIMEOUT,
        )
    return _redis_client


async def sweep_backlog(client: aioredis.Redis) -> int:
    """Sweep runs published by beat that no worker has picked up yet."""
    return await client.llen(SWEEP_QUEUE)


async def close_redis():
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None
