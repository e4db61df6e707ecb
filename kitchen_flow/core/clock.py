"""
Kitchen Flow — Wall clock

Domain transitions accept an explicit ``now``; when omitted they read this.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
