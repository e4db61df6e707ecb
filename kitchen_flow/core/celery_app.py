"""
Kitchen Flow — Celery application

Uses Redis as both broker and result backend. Beat drives the two periodic
sweeps: timer expiry and priority escalation.

A worker only sees shared storage. With STORAGE_BACKEND=memory the state lives
inside the API process, which runs the sweeps itself (tasks/in_process.py),
and the worker refuses to start.
"""
from celery import Celery
from celery.signals import worker_init
from kitchen_flow.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "kitchen_flow",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["kitchen_flow.tasks.kitchen_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,           # Only ack after task completes (fault-tolerant)
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,  # One task at a time per worker
    task_track_started=True,
    beat_schedule={
        "sweep-expired-timers": {
            "task": "sweep_expired_timers",
            "schedule": settings.TIMER_SWEEP_INTERVAL_SECONDS,
            "options": {"expires": settings.TIMER_SWEEP_INTERVAL_SECONDS},
        },
        "escalate-stale-orders": {
            "task": "escalate_stale_orders",
            "schedule": settings.PRIORITY_SWEEP_INTERVAL_SECONDS,
        },
    },
)


@worker_init.connect
def require_shared_storage(**kwargs):
    if settings.STORAGE_BACKEND != "sql":
        raise RuntimeError(
            f"Celery workers need STORAGE_BACKEND=sql (got '{settings.STORAGE_BACKEND}'); "
            "in-memory state is only visible to the API process, which runs the sweeps itself."
        )
