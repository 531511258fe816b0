"""
Unit Tests - Activity, Content and Formatting Metrics
"""
from datetime import timedelta

import pytest

from streamdash.engine import active_user_tiers, churn_rate_percent, classify_platform
from streamdash.engine.activity import count_churned, count_new_users, tier_label
from streamdash.engine.content import (
    average_completion_rate,
    average_rating,
    completion_rate,
    engagement_rate,
    kind_comparison,
    performance_series,
    rating_distribution,
    top_content,
)
from streamdash.engine.formatting import format_currency, format_growth, format_hours, format_number
from streamdash.records import ContentRecord, Period, UserRecord


@pytest.fixture
def users(user_documents, now):
    return [
        UserRecord.model_validate(doc)
        for doc in user_documents
        if doc["createdAt"] <= now
    ]


@pytest.fixture
def contents(content_documents):
    return [ContentRecord.model_validate(doc) for doc in content_documents]


class TestPlatform:
    """Tests for device classification"""

    @pytest.mark.parametrize(
        "device,platform",
        [
            ("Android", "mobile"),
            ("iOS", "mobile"),
            ("mobile_web", "mobile"),
            ("Smart TV", "tv"),
            ("television", "tv"),
            ("desktop", "web"),
            ("", "web"),
        ],
    )
    def test_classify(self, device, platform):
        assert classify_platform(device) == platform


class TestActivity:
    """Tests for active-user tiers and churn"""

    def test_tiers(self, users, now):
        tiers = active_user_tiers(users, now)

        assert [t.window_days for t in tiers] == [1, 7, 30]
        assert [t.active_users for t in tiers] == [3, 3, 4]
        assert tiers[0].label == "Daily Active Users"
        assert tiers[0].percent_of_users == pytest.approx(60.0)

    def test_tier_label_fallback(self):
        assert tier_label(14) == "14-Day Active Users"

    def test_tiers_reject_non_positive_windows(self, users, now):
        with pytest.raises(ValueError):
            active_user_tiers(users, now, tiers=[0])

    def test_empty_users(self, now):
        tiers = active_user_tiers([], now)
        assert all(t.active_users == 0 and t.percent_of_users == 0 for t in tiers)
        assert churn_rate_percent([]) == 0.0

    def test_churn(self, users):
        assert count_churned(users) == 2
        assert churn_rate_percent(users) == pytest.approx(40.0)

    def test_new_users(self, users, now):
        period = Period.lookback(now, 30)
        assert count_new_users(users, period) == 4
        assert count_new_users(users, Period.lookback(now - timedelta(days=30), 1)) == 0


class TestContent:
    """Tests for catalogue metrics"""

    def test_engagement_rate(self):
        assert engagement_rate(1000, 50, 10) == pytest.approx(7.0)
        assert engagement_rate(0, 50, 10) == 0.0

    def test_average_rating_skips_unrated(self, contents):
        assert average_rating(contents) == pytest.approx(4.0)
        assert average_rating([]) == 0.0

    def test_rating_distribution(self, contents):
        buckets = rating_distribution(contents)

        assert [(b.stars, b.label, b.count) for b in buckets] == [(3, "3★", 1), (5, "5★", 1)]

    def test_kind_comparison(self, contents):
        comparison = {row.kind: row for row in kind_comparison(contents)}

        assert set(comparison) == {"Movie", "Series", "Short Film"}
        assert comparison["Series"].avg_views == 3000
        assert comparison["Movie"].avg_watch_time_hours == pytest.approx(10.0)
        assert comparison["Series"].avg_completion == pytest.approx(50.0)
        assert comparison["Short Film"].avg_completion == 0.0

    def test_top_content(self, contents):
        ranked = top_content(contents, limit=2)

        assert [row.title for row in ranked] == ["Beta", "Alpha"]
        assert ranked[0].kind == "Series"
        assert ranked[1].genre == "Action, Drama"
        assert ranked[1].engagement_rate == pytest.approx(7.0)
        assert ranked[1].completion_rate == pytest.approx(40.0)

    def test_top_content_rejects_negative_limit(self, contents):
        with pytest.raises(ValueError):
            top_content(contents, limit=-1)

    def test_completion_rate(self, contents):
        assert [completion_rate(c) for c in contents] == [pytest.approx(40.0), pytest.approx(50.0), 0.0]
        assert average_completion_rate(contents) == pytest.approx(45.0)
        assert average_completion_rate([]) == 0.0

    def test_performance_series_buckets_by_release_day(self, contents, now):
        series = performance_series(contents, now, days=7)

        assert len(series) == 7
        assert series[0].day.isoformat() == "2024-06-09"
        assert series[-1].day.isoformat() == "2024-06-15"
        by_day = {point.label: point for point in series}
        released = by_day["Jun 13"]
        assert released.titles == 2
        assert released.views == 4000
        assert released.watch_time_hours == pytest.approx(30.0)
        assert released.engagement == pytest.approx((7.0 + 140 / 30) / 2)
        assert sum(point.titles for point in series) == 2

    def test_performance_series_skips_old_and_future_titles(self, now):
        contents = [
            ContentRecord.model_validate({"id": "old", "views": 10, "createdAt": now - timedelta(days=3)}),
            ContentRecord.model_validate({"id": "new", "views": 10, "createdAt": now + timedelta(hours=1)}),
        ]

        series = performance_series(contents, now, days=3)

        assert [point.titles for point in series] == [0, 0, 0]
        assert all(point.engagement == 0.0 for point in series)

    def test_performance_series_rejects_empty_window(self, contents, now):
        with pytest.raises(ValueError):
            performance_series(contents, now, days=0)


class TestFormatting:
    """Tests for dashboard labels"""

    def test_format_number(self):
        assert format_number(950) == "950"
        assert format_number(1234) == "1.2K"
        assert format_number(2_500_000) == "2.5M"

    def test_format_currency(self):
        assert format_currency(1500) == "₹1.5K"
        assert format_currency(20, symbol="$") == "$20"

    def test_format_hours(self):
        assert format_hours(120) == "120 hrs"
        assert format_hours(1500) == "1.5K hrs"

    def test_format_growth(self):
        assert format_growth(20) == "+20.0%"
        assert format_growth(-3.4) == "-3.4%"
        assert format_growth(0) == "+0.0%"
