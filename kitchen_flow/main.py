"""
Kitchen Flow — FastAPI entrypoint
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from kitchen_flow import models  # noqa: F401  registers tables on Base.metadata
from kitchen_flow.api import health, orders, stations, timers
from kitchen_flow.api.deps import get_repositories
from kitchen_flow.core.config import get_settings
from kitchen_flow.core.redis_client import close_redis
from kitchen_flow.db.database import Base, engine
from kitchen_flow.tasks.in_process import start_sweeps, stop_sweeps

settings = get_settings()
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.STORAGE_BACKEND == "sql":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started (storage=%s)", settings.SERVICE_NAME, settings.SERVICE_VERSION,
                settings.STORAGE_BACKEND)
    # Memory storage is invisible to Celery workers; sweep it from here
    repositories = app.dependency_overrides.get(get_repositories, get_repositories)
    app.state.sweeps = start_sweeps(repositories()) if settings.STORAGE_BACKEND == "memory" else []
    yield
    await stop_sweeps(app.state.sweeps)
    await close_redis()
    await engine.dispose()

app = FastAPI(title="Kitchen Flow", version=settings.SERVICE_VERSION,
              lifespan=lifespan, docs_url="/docs" if settings.DEBUG else None, redoc_url=None)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True,
                   allow_methods=["*"], allow_headers=["*"])
if settings.METRICS_ENABLED:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")
app.include_router(orders.router)
app.include_router(stations.router)
app.include_router(timers.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}
