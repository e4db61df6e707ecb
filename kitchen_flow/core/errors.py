"""
Kitchen Flow — Error taxonomy

Every failure raised by the domain or the persistence boundary is a
KitchenError subclass carrying structured fields, so callers branch on the
error type instead of parsing messages.
"""


class KitchenError(Exception):
    """Base class for all kitchen orchestration failures."""

    code = "kitchen_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(KitchenError):
    """Malformed input: empty names, out-of-range numbers, oversized text."""

    code = "validation_error"


class InvalidStateTransitionError(KitchenError):
    """An operation was attempted from a state that does not permit it."""

    code = "invalid_state_transition"

    def __init__(self, entity: str, current: str, operation: str, message: str | None = None):
        self.entity = entity
        self.current = current
        self.operation = operation
        super().__init__(
            message or f"Cannot {operation} {entity} with status '{current}'."
        )

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "entity": self.entity,
            "current": self.current,
            "operation": self.operation,
        }


class CapacityExceededError(KitchenError):
    """A station workload change would go above the station capacity."""

    code = "capacity_exceeded"

    def __init__(self, station_id: str, capacity: int, requested: int):
        self.station_id = station_id
        self.capacity = capacity
        self.requested = requested
        super().__init__(
            f"Station '{station_id}' cannot hold workload {requested}: capacity is {capacity}."
        )

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "station_id": self.station_id,
            "capacity": self.capacity,
            "requested": self.requested,
        }


class NotFoundError(KitchenError):
    """Raised by repositories when a lookup misses."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found.")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "entity": self.entity, "entity_id": self.entity_id}


class ConflictError(KitchenError):
    """Raised when an optimistic lock conflict is detected:
    the stored version changed between our read and our write,
    meaning another concurrent writer won the race.
    """

    code = "conflict"

    def __init__(self, entity: str, entity_id: str, expected_version: int | None = None):
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
        super().__init__(
            f"{entity} '{entity_id}' was modified concurrently (expected version {expected_version})."
        )

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "entity": self.entity,
            "entity_id": self.entity_id,
            "expected_version": self.expected_version,
        }
