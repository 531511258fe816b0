"""
Metrics Facade

Orchestrates snapshot loads and the calculators into the named dashboards.

The ``build_*`` functions are pure: they take already loaded records plus a
reference instant or period and return immutable results. ``MetricsFacade``
only adds the loading: independent snapshots are fetched concurrently and
joined before any computation, so a dashboard either completes or raises as
a whole.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from operator import attrgetter
from typing import Iterable, Optional, Sequence, Tuple, Union

import structlog

from streamdash.config import MetricsSettings, get_settings
from streamdash.engine import (
    Aggregation,
    active_user_tiers,
    aggregate,
    churn_rate_percent,
    classify_platform,
    compare,
    compare_values,
    retention_curve,
)
from streamdash.engine.activity import count_churned, count_new_users
from streamdash.engine.content import (
    average_completion_rate,
    average_rating,
    kind_comparison,
    performance_series,
    rating_distribution,
    top_content,
)
from streamdash.engine.formatting import (
    format_currency,
    format_growth,
    format_hours,
    format_number,
)
from streamdash.loader import FilterClause, SnapshotLoader
from streamdash.records import (
    ContentKind,
    ContentRecord,
    DailyRollupRecord,
    DateRange,
    DistributionBucket,
    EntityKind,
    Period,
    UserRecord,
    ensure_utc,
    period_for_range,
)

from .results import (
    ActiveUsersDashboard,
    ContentDashboard,
    ContentTotals,
    DashboardBundle,
    KpiCard,
    OverviewMetrics,
    RetentionCurve,
)

logger = structlog.get_logger(__name__)

MINUTES_PER_HOUR = 60


def _ratio_percent(numerator: float, denominator: float) -> float:
    return (numerator / denominator * 100) if denominator > 0 else 0.0


def _per_user(total: float, users: float) -> float:
    return total / users if users > 0 else 0.0


# =============================================================================
# PURE BUILDERS
# =============================================================================

def build_overview(
    rollups: Iterable[DailyRollupRecord],
    users: Iterable[UserRecord],
    period: Period,
) -> OverviewMetrics:
    """
    Overview KPIs from daily rollups of ``period`` and the period before it.

    Revenue, views and watch time are summed; users and premium users are
    daily peaks; engagement is the mean daily score. Churn is the share of
    cancelled or expired subscriptions over the whole user snapshot. The
    per-user insights divide current totals by the current user peak.
    """
    rollups = tuple(rollups)

    revenue = compare(rollups, attrgetter("revenue"), period)
    peak_users = compare(rollups, attrgetter("peak_users"), period, Aggregation.PEAK)
    views = compare(rollups, attrgetter("views"), period)
    engagement = compare(rollups, attrgetter("engagement_score"), period, Aggregation.MEAN)
    premium = compare(rollups, attrgetter("peak_premium_users"), period, Aggregation.PEAK)
    watch_time = compare(
        rollups,
        lambda rollup: rollup.watch_time_minutes / MINUTES_PER_HOUR,
        period,
    )

    # Previous conversion uses the previous period's own premium peak
    conversion = compare_values(
        _ratio_percent(premium.current, peak_users.current),
        _ratio_percent(premium.previous, peak_users.previous),
    )

    overview = OverviewMetrics(
        total_revenue=revenue.current,
        revenue_growth=revenue.growth_percent,
        total_users=int(peak_users.current),
        user_growth=peak_users.growth_percent,
        total_views=int(views.current),
        views_growth=views.growth_percent,
        avg_engagement=engagement.current,
        engagement_growth=engagement.growth_percent,
        active_subscriptions=int(premium.current),
        subscription_growth=premium.growth_percent,
        total_watch_time_hours=watch_time.current,
        watch_time_growth=watch_time.growth_percent,
        conversion_rate_percent=conversion.current,
        conversion_growth=conversion.growth_percent,
        churn_rate_percent=churn_rate_percent(users),
        churn_change=None,
        revenue_per_user=_per_user(revenue.current, peak_users.current),
        watch_hours_per_user=_per_user(watch_time.current, peak_users.current),
        views_per_user=_per_user(views.current, peak_users.current),
    )
    logger.debug(
        "Overview built",
        rollups=len(rollups),
        period_start=period.start.isoformat(),
        period_end=period.end.isoformat(),
    )
    return overview


def _card(title: str, value: str, change: Optional[float]) -> KpiCard:
    if change is None:
        return KpiCard(title=title, value=value)
    return KpiCard(
        title=title,
        value=value,
        change=change,
        change_label=format_growth(change),
        trend="up" if change >= 0 else "down",
    )


def build_overview_cards(
    overview: OverviewMetrics,
    currency_symbol: str = "₹",
) -> Tuple[KpiCard, ...]:
    """Overview KPIs as display-ready cards, in dashboard order."""
    return (
        _card("Total Revenue", format_currency(overview.total_revenue, currency_symbol), overview.revenue_growth),
        _card("Total Users", format_number(overview.total_users), overview.user_growth),
        _card("Total Views", format_number(overview.total_views), overview.views_growth),
        _card("Avg Engagement", f"{overview.avg_engagement:.1f}", overview.engagement_growth),
        _card("Active Subscriptions", format_number(overview.active_subscriptions), overview.subscription_growth),
        _card("Total Watch Time", format_hours(overview.total_watch_time_hours), overview.watch_time_growth),
        _card("Conversion Rate", f"{overview.conversion_rate_percent:.1f}%", overview.conversion_growth),
        _card("Churn Rate", f"{overview.churn_rate_percent:.1f}%", overview.churn_change),
    )


def build_platform_split(
    users: Iterable[UserRecord],
    top_n: Optional[int] = None,
) -> Tuple[DistributionBucket, ...]:
    """Users per platform (mobile, web, tv), count based."""
    return tuple(aggregate(users, lambda user: classify_platform(user.device_type), top_n=top_n))


def build_region_split(
    users: Iterable[UserRecord],
    top_n: Optional[int] = 5,
) -> Tuple[DistributionBucket, ...]:
    """Users per location, count based, top regions first."""
    return tuple(aggregate(users, attrgetter("location"), top_n=top_n))


def build_content_dashboard(
    contents: Iterable[ContentRecord],
    settings: MetricsSettings,
    now: datetime,
) -> ContentDashboard:
    """
    Catalogue totals plus view-weighted genre and language splits.

    The performance series covers titles released in the
    ``settings.performance_days`` days up to ``now``.
    """
    contents = tuple(contents)
    views = attrgetter("views")

    totals = ContentTotals(
        total_content=len(contents),
        movies_count=sum(1 for c in contents if c.kind == ContentKind.MOVIE),
        series_count=sum(1 for c in contents if c.kind == ContentKind.SERIES),
        short_films_count=sum(1 for c in contents if c.kind == ContentKind.SHORT_FILM),
        total_views=sum(c.views for c in contents),
        total_watch_time_hours=sum(c.watch_time_minutes for c in contents) / MINUTES_PER_HOUR,
        total_likes=sum(c.likes for c in contents),
        total_comments=sum(c.comments for c in contents),
        total_shares=sum(c.shares for c in contents),
        average_rating=average_rating(contents),
        average_completion_rate=average_completion_rate(contents),
        premium_content=sum(1 for c in contents if c.is_premium),
    )

    return ContentDashboard(
        totals=totals,
        genres=tuple(aggregate(contents, attrgetter("genres"), views, top_n=settings.genre_top_n)),
        languages=tuple(aggregate(contents, attrgetter("language"), views, top_n=settings.language_top_n)),
        rating_distribution=tuple(rating_distribution(contents)),
        kind_comparison=tuple(kind_comparison(contents)),
        top_content=tuple(top_content(contents, settings.top_content_limit)),
        performance=tuple(performance_series(contents, now, settings.performance_days)),
    )


def build_retention(
    users: Iterable[UserRecord],
    now: datetime,
    settings: MetricsSettings,
) -> RetentionCurve:
    return RetentionCurve(
        points=tuple(
            retention_curve(
                users,
                settings.retention_offsets,
                now,
                activity_window_days=settings.activity_window_days,
                cohort_tolerance_days=settings.cohort_tolerance_days,
            )
        )
    )


def build_active_users(
    users: Iterable[UserRecord],
    now: datetime,
    period: Period,
    tiers: Sequence[int] = (1, 7, 30),
) -> ActiveUsersDashboard:
    users = tuple(users)
    return ActiveUsersDashboard(
        total_users=len(users),
        new_users=count_new_users(users, period),
        churned_users=count_churned(users),
        churn_rate_percent=churn_rate_percent(users),
        tiers=tuple(active_user_tiers(users, now, tiers)),
    )


# =============================================================================
# FACADE
# =============================================================================

class MetricsFacade:
    """
    Loads snapshots and builds the named dashboards.

    Example:
        facade = MetricsFacade(FileSnapshotLoader())
        overview = await facade.overview(now, DateRange.LAST_30_DAYS)
    """

    def __init__(
        self,
        loader: SnapshotLoader,
        settings: Optional[MetricsSettings] = None,
    ):
        self.loader = loader
        self.settings = settings or get_settings().metrics

    def period(self, now: datetime, date_range: Union[str, DateRange, None] = None) -> Period:
        """Current period for a lookback range ending at ``now``."""
        return period_for_range(
            now,
            DateRange(date_range or self.settings.default_range),
            self.settings.all_time_start,
        )

    async def _load_users(self, now: datetime, created_since: Optional[datetime] = None):
        filters = [FilterClause("created_at", "<=", now)]
        if created_since is not None:
            filters.append(FilterClause("created_at", ">=", created_since))
        return await self.loader.load(EntityKind.USERS, filters=filters)

    async def _load_rollups(self, period: Period):
        return await self.loader.load(
            EntityKind.DAILY_ROLLUPS,
            filters=[
                FilterClause("timestamp", ">=", period.previous().start),
                FilterClause("timestamp", "<", period.end),
            ],
            order_by="date",
        )

    async def overview(
        self,
        now: datetime,
        date_range: Union[str, DateRange, None] = None,
    ) -> OverviewMetrics:
        now = ensure_utc(now)
        period = self.period(now, date_range)
        rollups, users = await asyncio.gather(
            self._load_rollups(period),
            self._load_users(now),
        )
        return build_overview(rollups, users, period)

    async def overview_cards(
        self,
        now: datetime,
        date_range: Union[str, DateRange, None] = None,
    ) -> Tuple[KpiCard, ...]:
        overview = await self.overview(now, date_range)
        return build_overview_cards(overview, self.settings.currency_symbol)

    async def platform_split(self, now: datetime) -> Tuple[DistributionBucket, ...]:
        users = await self._load_users(ensure_utc(now))
        return build_platform_split(users)

    async def region_split(self, now: datetime) -> Tuple[DistributionBucket, ...]:
        users = await self._load_users(ensure_utc(now))
        return build_region_split(users, self.settings.region_top_n)

    async def content(self, now: Optional[datetime] = None) -> ContentDashboard:
        now = ensure_utc(now or datetime.now(timezone.utc))
        contents = await self.loader.load(EntityKind.CONTENT)
        return build_content_dashboard(contents, self.settings, now)

    async def retention(self, now: datetime) -> RetentionCurve:
        now = ensure_utc(now)
        # Only users old enough to fall in some cohort window are needed
        longest = max(self.settings.retention_offsets, default=0)
        created_since = now - timedelta(days=longest + self.settings.cohort_tolerance_days)
        users = await self._load_users(now, created_since=created_since)
        return build_retention(users, now, self.settings)

    async def active_users(
        self,
        now: datetime,
        date_range: Union[str, DateRange, None] = None,
    ) -> ActiveUsersDashboard:
        now = ensure_utc(now)
        period = self.period(now, date_range)
        users = await self._load_users(now)
        return build_active_users(users, now, period, self.settings.active_user_tiers)

    async def all_dashboards(
        self,
        now: Optional[datetime] = None,
        date_range: Union[str, DateRange, None] = None,
    ) -> DashboardBundle:
        """
        Compute every dashboard for one instant from a single set of loads.

        Users, content and rollups are fetched concurrently; if any load
        fails the whole bundle fails.
        """
        now = ensure_utc(now or datetime.now(timezone.utc))
        date_range = DateRange(date_range or self.settings.default_range)
        period = self.period(now, date_range)

        rollups, users, contents = await asyncio.gather(
            self._load_rollups(period),
            self._load_users(now),
            self.loader.load(EntityKind.CONTENT),
        )

        bundle = DashboardBundle(
            generated_at=now,
            range=date_range.value,
            overview=build_overview(rollups, users, period),
            platforms=build_platform_split(users),
            regions=build_region_split(users, self.settings.region_top_n),
            content=build_content_dashboard(contents, self.settings, now),
            retention=build_retention(users, now, self.settings),
            active_users=build_active_users(users, now, period, self.settings.active_user_tiers),
        )
        logger.info(
            "Dashboards computed",
            range=date_range.value,
            users=len(users),
            contents=len(contents),
            rollups=len(rollups),
        )
        return bundle
