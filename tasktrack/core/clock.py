"""
Wall-clock source injected into services
Services never call datetime.now() directly so tests can pin time
"""
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime: ...


class SystemClock:
    """System clock returning timezone-aware UTC datetimes"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
