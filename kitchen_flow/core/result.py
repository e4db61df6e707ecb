"""
Kitchen Flow — Result values returned by the service layer

    match await apply(repo, order_id, lambda o: o.confirm()):
        case Ok(value=order):
            ...
        case Err(error=InvalidStateTransitionError() as err):
            ...
"""
import functools
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar, Union

from kitchen_flow.core.errors import KitchenError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: KitchenError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err]


def capture(func: Callable[..., T], *args, **kwargs) -> "Result[T]":
    """Run a synchronous domain call and fold KitchenError into Err."""
    try:
        return Ok(func(*args, **kwargs))
    except KitchenError as exc:
        return Err(exc)


def returns_result(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable["Result[T]"]]:
    """Decorator for async use cases: KitchenError becomes Err, anything else propagates."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return Ok(await func(*args, **kwargs))
        except KitchenError as exc:
            return Err(exc)

    return wrapper
