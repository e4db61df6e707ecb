"""
Kitchen Flow — Result → HTTP mapping
"""
from typing import TypeVar

from fastapi import HTTPException, status

from kitchen_flow.core.errors import (
    CapacityExceededError,
    ConflictError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from kitchen_flow.core.result import Err, Ok, Result

T = TypeVar("T")


def unwrap_or_raise(result: Result[T]) -> T:
    """Return the Ok value or raise the HTTPException matching the error kind."""
    match result:
        case Ok(value=value):
            return value
        case Err(error=ValidationError() as err):
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=err.to_dict())
        case Err(error=NotFoundError() as err):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=err.to_dict())
        case Err(error=(InvalidStateTransitionError() | CapacityExceededError() | ConflictError()) as err):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=err.to_dict())
        case Err(error=err):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=err.to_dict())
