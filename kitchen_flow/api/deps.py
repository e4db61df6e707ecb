"""
Kitchen Flow — FastAPI dependencies
"""
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends

from kitchen_flow.core.config import get_settings
from kitchen_flow.db.repositories import Repositories, build_repositories
from kitchen_flow.services.assignment import AssignmentService

settings = get_settings()


@lru_cache()
def get_repositories() -> Repositories:
    return build_repositories(settings.STORAGE_BACKEND)


def get_assignment_service(repos: Repositories = Depends(get_repositories)) -> AssignmentService:
    return AssignmentService(repos.orders, repos.stations)


def overdue_threshold() -> timedelta:
    return timedelta(minutes=settings.ORDER_OVERDUE_MINUTES)
