"""
User Activity Metrics

Platform classification, active-user tiers and churn over a user snapshot.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Sequence

import structlog

from streamdash.records import ActiveUserTier, Period, UserRecord, ensure_utc

logger = structlog.get_logger(__name__)

MOBILE_MARKERS = ("mobile", "android", "ios")
TV_MARKERS = ("tv", "television")

_TIER_LABELS = {1: "Daily Active Users", 7: "Weekly Active Users", 30: "Monthly Active Users"}


def classify_platform(device_type: str) -> str:
    """
    Collapse a free-form device type into ``mobile``, ``tv`` or ``web``.

    Anything not recognisably mobile or TV is counted as web.
    """
    device = (device_type or "").lower()
    if any(marker in device for marker in MOBILE_MARKERS):
        return "mobile"
    if any(marker in device for marker in TV_MARKERS):
        return "tv"
    return "web"


def tier_label(window_days: int) -> str:
    return _TIER_LABELS.get(window_days, f"{window_days}-Day Active Users")


def active_user_tiers(
    users: Iterable[UserRecord],
    now: datetime,
    tiers: Sequence[int] = (1, 7, 30),
) -> List[ActiveUserTier]:
    """
    Count users whose last activity falls within ``[now - days, now]`` for
    each tier.
    """
    tiers = tuple(tiers)
    if any(days <= 0 for days in tiers):
        raise ValueError(f"Tier windows must be positive, got {list(tiers)}")

    now = ensure_utc(now)
    starts = [now - timedelta(days=days) for days in tiers]
    counts = [0] * len(tiers)
    total = 0

    for user in users:
        total += 1
        for index, start in enumerate(starts):
            if start <= user.last_active <= now:
                counts[index] += 1

    logger.debug("Active user tiers computed", users=total, tiers=list(tiers), counts=counts)
    return [
        ActiveUserTier(
            label=tier_label(days),
            window_days=days,
            active_users=counts[index],
            percent_of_users=(counts[index] / total * 100) if total > 0 else 0.0,
        )
        for index, days in enumerate(tiers)
    ]


def count_new_users(users: Iterable[UserRecord], period: Period) -> int:
    """Users created within ``period``."""
    return sum(1 for user in users if period.contains(user.created_at))


def count_churned(users: Iterable[UserRecord]) -> int:
    """Users whose subscription was cancelled or has expired."""
    return sum(1 for user in users if user.subscription_status.is_churned)


def churn_rate_percent(users: Iterable[UserRecord]) -> float:
    """Share of users with a cancelled or expired subscription."""
    total = 0
    churned = 0
    for user in users:
        total += 1
        if user.subscription_status.is_churned:
            churned += 1
    return (churned / total * 100) if total > 0 else 0.0
