"""
Kitchen Flow — Order priority

Five ordered tiers backed by their integer level, so comparisons and sorting
work on the level directly.
"""
from datetime import timedelta
from enum import IntEnum

from kitchen_flow.core.errors import ValidationError


class Priority(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    URGENT = 4
    CRITICAL = 5

    @classmethod
    def from_level(cls, level: int) -> "Priority":
        if level < cls.LOW or level > cls.CRITICAL:
            raise ValidationError(
                f"Priority level must be between {int(cls.LOW)} and {int(cls.CRITICAL)}, got: {level}"
            )
        return cls(level)

    @classmethod
    def default(cls) -> "Priority":
        return cls.MEDIUM

    @property
    def level(self) -> int:
        return int(self)

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    @property
    def is_high_priority(self) -> bool:
        return self >= Priority.HIGH

    @property
    def requires_immediate_attention(self) -> bool:
        return self >= Priority.URGENT

    @property
    def can_escalate(self) -> bool:
        return self < Priority.CRITICAL

    @property
    def escalation_timeout(self) -> timedelta:
        """How long an order may sit at this tier before it is escalated."""
        return timedelta(minutes=_ESCALATION_TIMEOUT_MINUTES[self])

    @property
    def max_preparation_time(self) -> timedelta:
        return timedelta(minutes=_MAX_PREPARATION_MINUTES[self])

    def escalate(self) -> "Priority":
        """Next tier up; CRITICAL escalates to itself."""
        if not self.can_escalate:
            return self
        return Priority(self + 1)


_ESCALATION_TIMEOUT_MINUTES = {
    Priority.LOW: 60,
    Priority.MEDIUM: 30,
    Priority.HIGH: 15,
    Priority.URGENT: 5,
    Priority.CRITICAL: 2,
}

_MAX_PREPARATION_MINUTES = {
    Priority.LOW: 45,
    Priority.MEDIUM: 30,
    Priority.HIGH: 20,
    Priority.URGENT: 10,
    Priority.CRITICAL: 5,
}
