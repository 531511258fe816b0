"""
Content Metrics

Catalogue-level statistics for the content dashboard: rating distribution,
completion rates, per-kind comparison, the top content table and the
trailing performance series of recent releases.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List

import structlog

from streamdash.records import (
    ContentKind,
    ContentRanking,
    ContentRecord,
    KindComparison,
    PerformancePoint,
    RatingBucket,
    ensure_utc,
)

logger = structlog.get_logger(__name__)

KIND_LABELS = {
    ContentKind.MOVIE: "Movie",
    ContentKind.SERIES: "Series",
    ContentKind.SHORT_FILM: "Short Film",
}


def engagement_rate(views: int, likes: int, comments: int) -> float:
    """
    Interactions per view as a percentage, comments weighted double.

    Titles without views have an engagement rate of 0.
    """
    if views <= 0:
        return 0.0
    return (likes + comments * 2) / views * 100


def completion_rate(content: ContentRecord) -> float:
    """Completed watches per view as a percentage, 0 without views."""
    if content.views <= 0:
        return 0.0
    return content.watch_count / content.views * 100


def average_completion_rate(contents: Iterable[ContentRecord]) -> float:
    """Mean completion rate over titles with any completed watch."""
    rates = [rate for rate in map(completion_rate, contents) if rate > 0]
    return sum(rates) / len(rates) if rates else 0.0


def average_rating(contents: Iterable[ContentRecord]) -> float:
    """Mean rating over rated titles only (rating > 0)."""
    ratings = [content.rating for content in contents if content.rating > 0]
    return sum(ratings) / len(ratings) if ratings else 0.0


def rating_distribution(contents: Iterable[ContentRecord]) -> List[RatingBucket]:
    """
    Count rated titles per star, rating rounded half up to 1-5.

    Stars without titles are omitted.
    """
    stars: Dict[int, int] = defaultdict(int)
    for content in contents:
        if content.rating <= 0:
            continue
        rounded = int(content.rating + 0.5)
        if 1 <= rounded <= 5:
            stars[rounded] += 1

    return [
        RatingBucket(stars=star, label=f"{star}★", count=stars[star])
        for star in range(1, 6)
        if stars[star] > 0
    ]


def kind_comparison(contents: Iterable[ContentRecord]) -> List[KindComparison]:
    """Average views, rating, watch time and completion per content kind."""
    grouped: Dict[ContentKind, List[ContentRecord]] = defaultdict(list)
    for content in contents:
        grouped[content.kind].append(content)

    comparison = []
    for kind in ContentKind:
        items = grouped.get(kind)
        if not items:
            continue
        count = len(items)
        comparison.append(
            KindComparison(
                kind=KIND_LABELS[kind],
                titles=count,
                avg_views=sum(item.views for item in items) / count,
                avg_rating=sum(item.rating for item in items) / count,
                avg_watch_time_hours=sum(item.watch_time_hours for item in items) / count,
                avg_completion=sum(completion_rate(item) for item in items) / count,
            )
        )
    return comparison


def top_content(contents: Iterable[ContentRecord], limit: int = 20) -> List[ContentRanking]:
    """Titles ranked by views, ties broken by title then id."""
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    ranked = sorted(contents, key=lambda content: (-content.views, content.title, content.id))
    logger.debug("Top content ranked", titles=len(ranked), limit=limit)
    return [
        ContentRanking(
            id=content.id,
            title=content.title,
            kind=KIND_LABELS[content.kind],
            genre=", ".join(content.genres),
            language=content.language,
            views=content.views,
            watch_time_hours=content.watch_time_hours,
            rating=content.rating,
            likes=content.likes,
            comments=content.comments,
            engagement_rate=engagement_rate(content.views, content.likes, content.comments),
            completion_rate=completion_rate(content),
        )
        for content in ranked[:limit]
    ]


def performance_series(
    contents: Iterable[ContentRecord],
    now: datetime,
    days: int = 30,
) -> List[PerformancePoint]:
    """
    Daily totals of titles released over the trailing ``days`` calendar days.

    Titles are bucketed by the UTC day of ``created_at``; titles without a
    creation time or created after ``now`` are skipped. Every day of the
    window yields a point, empty days with zeros. ``engagement`` is the mean
    engagement rate of the day's titles.
    """
    if days <= 0:
        raise ValueError(f"days must be positive, got {days}")

    now = ensure_utc(now)
    first_day = (now - timedelta(days=days - 1)).date()
    by_day: Dict[date, List[ContentRecord]] = defaultdict(list)
    for content in contents:
        if content.created_at is None or content.created_at > now:
            continue
        day = content.created_at.date()
        if day >= first_day:
            by_day[day].append(content)

    series = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        items = by_day.get(day, [])
        rates = [engagement_rate(item.views, item.likes, item.comments) for item in items]
        series.append(
            PerformancePoint(
                day=day,
                titles=len(items),
                views=sum(item.views for item in items),
                watch_time_hours=sum(item.watch_time_hours for item in items),
                engagement=sum(rates) / len(rates) if rates else 0.0,
            )
        )
    logger.debug("Performance series built", days=days, active_days=len(by_day))
    return series
