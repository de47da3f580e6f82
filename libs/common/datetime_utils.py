"""Datetime utilities: timezone-aware UTC timestamps and an injectable clock.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

Date rules (age limits, "end date is not in the past") read "today" from a
``Clock`` so tests can pin the calendar with ``FixedClock``.
"""

from datetime import date, datetime, timezone
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from libs.common.config import get_settings


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


class Clock(Protocol):
    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Wall clock; "today" is evaluated in the configured business timezone."""

    def __init__(self, tz_name: Optional[str] = None):
        self._tz = ZoneInfo(tz_name or get_settings().TIMEZONE)

    def now(self) -> datetime:
        return datetime.now(self._tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock frozen at a given instant; "today" uses the same timezone as ``SystemClock``."""

    def __init__(self, instant: datetime, tz_name: Optional[str] = None):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._tz = ZoneInfo(tz_name or get_settings().TIMEZONE)
        self._instant = instant.astimezone(self._tz)

    def now(self) -> datetime:
        return self._instant

    def today(self) -> date:
        return self._instant.date()


def get_clock() -> Clock:
    """FastAPI dependency returning the clock used for date rules."""
    return SystemClock()


def age_on(birth_date: date, on: date) -> int:
    """Completed years between ``birth_date`` and ``on``."""
    years = on.year - birth_date.year
    if (on.month, on.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years
