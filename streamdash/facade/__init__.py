"""
Metrics Facade
"""
from .dashboards import (
    MetricsFacade,
    build_active_users,
    build_content_dashboard,
    build_overview,
    build_overview_cards,
    build_platform_split,
    build_region_split,
    build_retention,
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

__all__ = [
    "MetricsFacade",
    "build_active_users",
    "build_content_dashboard",
    "build_overview",
    "build_overview_cards",
    "build_platform_split",
    "build_region_split",
    "build_retention",
    "ActiveUsersDashboard",
    "ContentDashboard",
    "ContentTotals",
    "DashboardBundle",
    "KpiCard",
    "OverviewMetrics",
    "RetentionCurve",
]
