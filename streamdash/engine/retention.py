"""
Retention Cohort Calculator

For each day offset, the cohort is the set of users created within a
tolerance band around ``now - offset``; a cohort member counts as retained
when its last activity falls in the trailing activity window.

Creation timestamps are continuous, so an exact-day match would almost always
produce an empty cohort. The tolerance band trades precision for a usable
sample and is a parameter, not a constant.
"""

import math
from datetime import datetime, timedelta
from typing import Iterable, List, Sequence

import structlog

from streamdash.records import CohortPoint, UserRecord, ensure_utc

logger = structlog.get_logger(__name__)

DEFAULT_ACTIVITY_WINDOW_DAYS = 7
DEFAULT_COHORT_TOLERANCE_DAYS = 2


def round_percent(value: float) -> int:
    """Round half up to a whole percent."""
    return int(math.floor(value + 0.5))


def retention_percent(retained: int, cohort_size: int) -> int:
    if cohort_size <= 0:
        return 0
    return round_percent(retained / cohort_size * 100)


def retention_curve(
    users: Iterable[UserRecord],
    offsets: Sequence[int],
    now: datetime,
    activity_window_days: int = DEFAULT_ACTIVITY_WINDOW_DAYS,
    cohort_tolerance_days: int = DEFAULT_COHORT_TOLERANCE_DAYS,
) -> List[CohortPoint]:
    """
    Compute the retention curve in a single pass over ``users``.

    Each user is bucketed into every offset whose cohort window
    ``[now - offset - tolerance, now - offset + tolerance]`` contains its
    creation instant. Cohort windows of neighbouring offsets may overlap, in
    which case a user belongs to both cohorts.

    Args:
        users: User snapshot
        offsets: Day offsets, one point per offset in the given order
        now: Reference instant
        activity_window_days: Trailing days that count a user as retained
        cohort_tolerance_days: Half-width of each cohort window in days

    Returns:
        One CohortPoint per offset
    """
    offsets = tuple(offsets)
    if any(offset < 0 for offset in offsets):
        raise ValueError(f"Offsets must be non-negative, got {list(offsets)}")
    if cohort_tolerance_days < 0:
        raise ValueError(f"Cohort tolerance must be non-negative, got {cohort_tolerance_days}")
    if activity_window_days <= 0:
        raise ValueError(f"Activity window must be positive, got {activity_window_days}")

    now = ensure_utc(now)
    tolerance = timedelta(days=cohort_tolerance_days)
    activity_start = now - timedelta(days=activity_window_days)

    windows = [
        (now - timedelta(days=offset) - tolerance, now - timedelta(days=offset) + tolerance)
        for offset in offsets
    ]
    cohort_sizes = [0] * len(offsets)
    retained_counts = [0] * len(offsets)

    scanned = 0
    for user in users:
        scanned += 1
        retained = activity_start <= user.last_active <= now
        for index, (window_start, window_end) in enumerate(windows):
            if window_start <= user.created_at <= window_end:
                cohort_sizes[index] += 1
                if retained:
                    retained_counts[index] += 1

    points = [
        CohortPoint(
            offset_days=offset,
            cohort_size=cohort_sizes[index],
            retained_count=retained_counts[index],
            retention_percent=retention_percent(retained_counts[index], cohort_sizes[index]),
        )
        for index, offset in enumerate(offsets)
    ]

    logger.debug(
        "Retention curve computed",
        users=scanned,
        offsets=list(offsets),
        cohort_sizes=cohort_sizes,
    )
    return points
