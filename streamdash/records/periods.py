"""
Time Windows

Half-open instant intervals and the lookback ranges offered by the
dashboards.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from .models import ensure_utc


class DateRange(str, Enum):
    """Lookback ranges selectable on the dashboards"""
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    ALL = "all"

    @property
    def days(self) -> Optional[int]:
        return {"7d": 7, "30d": 30, "90d": 90}.get(self.value)


@dataclass(frozen=True)
class Period:
    """
    Half-open interval ``[start, end)``.

    A period with ``start >= end`` is a programming error and is rejected on
    construction.
    """
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"Period start {self.start} must be before end {self.end}")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def previous(self) -> "Period":
        """Equal-length period immediately preceding this one."""
        return Period(start=self.start - self.duration, end=self.start)

    @classmethod
    def lookback(cls, now: datetime, days: int) -> "Period":
        """Period covering the ``days`` days that end at ``now``."""
        return cls(start=now - timedelta(days=days), end=now)


def period_for_range(
    now: datetime,
    date_range: DateRange,
    all_time_start: datetime,
) -> Period:
    """
    Map a dashboard lookback range onto a concrete period ending at ``now``.

    ``all`` starts at ``all_time_start``.
    """
    now = ensure_utc(now)
    date_range = DateRange(date_range)
    if date_range.days is None:
        return Period(start=ensure_utc(all_time_start), end=now)
    return Period.lookback(now, date_range.days)
