"""
Record Schemas, Time Windows and Calculator Results
"""
from .models import (
    EPOCH,
    UNKNOWN,
    ContentKind,
    ContentRecord,
    DailyRollupRecord,
    EntityKind,
    SubscriptionStatus,
    UserRecord,
    ensure_utc,
    parse_record,
)
from .periods import DateRange, Period, period_for_range
from .results import (
    ActiveUserTier,
    CohortPoint,
    ContentRanking,
    DistributionBucket,
    GrowthResult,
    KindComparison,
    PerformancePoint,
    RatingBucket,
    ResultModel,
)

__all__ = [
    "EPOCH",
    "UNKNOWN",
    "ContentKind",
    "ContentRecord",
    "DailyRollupRecord",
    "EntityKind",
    "SubscriptionStatus",
    "UserRecord",
    "ensure_utc",
    "parse_record",
    "DateRange",
    "Period",
    "period_for_range",
    "ActiveUserTier",
    "CohortPoint",
    "ContentRanking",
    "DistributionBucket",
    "GrowthResult",
    "KindComparison",
    "PerformancePoint",
    "RatingBucket",
    "ResultModel",
]
