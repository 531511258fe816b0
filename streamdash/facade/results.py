"""
Dashboard Result Models

Result trees returned by the metrics facade. Field names serialize to the
camelCase contract consumed by the rendering layer.
"""

from datetime import datetime
from typing import Dict, Optional, Tuple

from streamdash.records import (
    ActiveUserTier,
    CohortPoint,
    ContentRanking,
    DistributionBucket,
    KindComparison,
    PerformancePoint,
    RatingBucket,
    ResultModel,
)


class OverviewMetrics(ResultModel):
    """
    Overview KPI cards.

    Every ``*_growth`` field is a zero-guarded period-over-period percentage.
    ``churn_change`` stays ``None`` until a prior-period churn baseline is
    available.

    The per-user figures divide current totals by the current user peak
    and are 0 without users.
    """
    total_revenue: float
    revenue_growth: float
    total_users: int
    user_growth: float
    total_views: int
    views_growth: float
    avg_engagement: float
    engagement_growth: float
    active_subscriptions: int
    subscription_growth: float
    total_watch_time_hours: float
    watch_time_growth: float
    conversion_rate_percent: float
    conversion_growth: float
    churn_rate_percent: float
    churn_change: Optional[float] = None
    revenue_per_user: float = 0.0
    watch_hours_per_user: float = 0.0
    views_per_user: float = 0.0


class KpiCard(ResultModel):
    """A formatted overview card; ``change`` is None when no trend is known"""
    title: str
    value: str
    change: Optional[float] = None
    change_label: Optional[str] = None
    trend: Optional[str] = None


class RetentionCurve(ResultModel):
    """User retention points in offset order"""
    points: Tuple[CohortPoint, ...]

    def by_label(self) -> Dict[str, CohortPoint]:
        return {point.label: point for point in self.points}


class ContentTotals(ResultModel):
    total_content: int
    movies_count: int
    series_count: int
    short_films_count: int
    total_views: int
    total_watch_time_hours: float
    total_likes: int
    total_comments: int
    total_shares: int
    average_rating: float
    average_completion_rate: float
    premium_content: int


class ContentDashboard(ResultModel):
    """Catalogue totals, genre/language splits, title rankings and recent releases"""
    totals: ContentTotals
    genres: Tuple[DistributionBucket, ...]
    languages: Tuple[DistributionBucket, ...]
    rating_distribution: Tuple[RatingBucket, ...]
    kind_comparison: Tuple[KindComparison, ...]
    top_content: Tuple[ContentRanking, ...]
    performance: Tuple[PerformancePoint, ...]


class ActiveUsersDashboard(ResultModel):
    """Active-user tiers plus acquisition and churn counts"""
    total_users: int
    new_users: int
    churned_users: int
    churn_rate_percent: float
    tiers: Tuple[ActiveUserTier, ...]


class DashboardBundle(ResultModel):
    """Every dashboard computed for the same instant and range"""
    generated_at: datetime
    range: str
    overview: OverviewMetrics
    platforms: Tuple[DistributionBucket, ...]
    regions: Tuple[DistributionBucket, ...]
    content: ContentDashboard
    retention: RetentionCurve
    active_users: ActiveUsersDashboard
