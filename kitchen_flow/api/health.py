"""
Kitchen Flow — Health endpoint
"""
import asyncio
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from kitchen_flow.core.config import get_settings
from kitchen_flow.core.redis_client import get_redis, sweep_backlog
from kitchen_flow.db.database import engine
from kitchen_flow.schemas.health import HealthResponse

settings = get_settings()
router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    deps: dict[str, str] = {}
    healthy = True

    if settings.STORAGE_BACKEND == "sql":
        try:
            async with engine.connect() as conn:
                await asyncio.wait_for(conn.execute(text("SELECT 1")), timeout=settings.HEALTH_CHECK_TIMEOUT)
            deps["postgresql"] = "ok"
        except Exception as e:
            deps["postgresql"] = f"error: {str(e)[:100]}"
            healthy = False
    else:
        deps["storage"] = "memory"

    try:
        redis = get_redis()
        await asyncio.wait_for(redis.ping(), timeout=settings.HEALTH_CHECK_TIMEOUT)
        deps["redis"] = "ok"
        if settings.STORAGE_BACKEND == "sql":
            backlog = await asyncio.wait_for(sweep_backlog(redis), timeout=settings.HEALTH_CHECK_TIMEOUT)
            deps["sweep_backlog"] = str(backlog)
    except Exception as e:
        deps["redis"] = f"error: {str(e)[:100]}"
        healthy = False

    body = HealthResponse(
        status="healthy" if healthy else "degraded",
        service=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        dependencies=deps,
    )
    return JSONResponse(content=body.model_dump(), status_code=200 if healthy else 503)
