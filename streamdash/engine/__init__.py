"""
Metrics Aggregation Engine
"""
from .activity import active_user_tiers, churn_rate_percent, classify_platform
from .comparator import Aggregation, compare, compare_values, growth_percent
from .distribution import aggregate, count_measure
from .retention import retention_curve

__all__ = [
    "active_user_tiers",
    "churn_rate_percent",
    "classify_platform",
    "Aggregation",
    "compare",
    "compare_values",
    "growth_percent",
    "aggregate",
    "count_measure",
    "retention_curve",
]
