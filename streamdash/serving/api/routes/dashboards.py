"""
Dashboard API Endpoints

Serves the metrics facade's dashboards. Results are cached per dashboard,
range and instant; when a refresh fails the last successful result is served
and flagged ``stale``.
"""

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from redis.exceptions import RedisError
import structlog

from streamdash.config import get_settings
from streamdash.facade import MetricsFacade
from streamdash.loader import FileSnapshotLoader
from streamdash.records import DateRange, ResultModel, ensure_utc
from streamdash.serving.cache import dashboard_cache

router = APIRouter()
logger = structlog.get_logger(__name__)


class DashboardResponse(BaseModel):
    """Dashboard payload envelope"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    data: Any
    stale: bool
    range: Optional[str] = None
    generated_at: datetime


@lru_cache()
def get_facade() -> MetricsFacade:
    """Facade over the configured snapshot files"""
    return MetricsFacade(FileSnapshotLoader())


def _dump(result: Any) -> Any:
    if isinstance(result, ResultModel):
        return result.as_dict()
    if isinstance(result, (list, tuple)):
        return [_dump(item) for item in result]
    return result


def _instant(as_of: Optional[datetime]) -> datetime:
    return ensure_utc(as_of) if as_of else datetime.now(timezone.utc)


def _resolve(date_range: Optional[DateRange], as_of: Optional[datetime]):
    metrics = get_settings().metrics
    date_range = DateRange(date_range or metrics.default_range)
    now = _instant(as_of)
    if date_range == DateRange.ALL and now <= ensure_utc(metrics.all_time_start):
        raise HTTPException(
            status_code=422,
            detail=f"as_of must be after {metrics.all_time_start.isoformat()} for the all range",
        )
    return date_range, now


async def _serve(
    name: str,
    now: datetime,
    date_range: Optional[DateRange],
    compute: Callable[[], Awaitable[Any]],
    pin_instant: bool,
) -> DashboardResponse:
    # Requests without an explicit instant share one cache entry per range
    instant_key = now.isoformat() if pin_instant else "latest"
    range_key = date_range.value if date_range else "-"
    key = f"{name}:{range_key}:{instant_key}"

    async def factory() -> dict:
        result = await compute()
        return {"generatedAt": now.isoformat(), "data": _dump(result)}

    try:
        payload, stale = await dashboard_cache.get_or_stale(key, factory)
    except Exception as e:
        logger.error("Dashboard unavailable", dashboard=name, error=str(e))
        raise HTTPException(status_code=503, detail=f"{name} dashboard is unavailable")

    return DashboardResponse(
        data=payload["data"],
        stale=stale,
        range=date_range.value if date_range else None,
        generated_at=payload["generatedAt"],
    )


@router.get("/overview", response_model=DashboardResponse)
async def get_overview(
    date_range: Optional[DateRange] = Query(None, alias="range"),
    as_of: Optional[datetime] = None,
    facade: MetricsFacade = Depends(get_facade),
) -> DashboardResponse:
    """Overview KPI cards with period-over-period growth."""
    date_range, now = _resolve(date_range, as_of)
    logger.info("get_overview called", range=date_range.value, now=now.isoformat())
    return await _serve(
        "overview", now, date_range,
        lambda: facade.overview(now, date_range),
        pin_instant=as_of is not None,
    )


@router.get("/cards", response_model=DashboardResponse)
async def get_overview_cards(
    date_range: Optional[DateRange] = Query(None, alias="range"),
    as_of: Optional[datetime] = None,
    facade: MetricsFacade = Depends(get_facade),
) -> DashboardResponse:
    """Overview KPIs formatted for display."""
    date_range, now = _resolve(date_range, as_of)
    return await _serve(
        "cards", now, date_range,
        lambda: facade.overview_cards(now, date_range),
        pin_instant=as_of is not None,
    )


@router.get("/platforms", response_model=DashboardResponse)
async def get_platforms(
    as_of: Optional[datetime] = None,
    facade: MetricsFacade = Depends(get_facade),
) -> DashboardResponse:
    """Users per platform."""
    now = _instant(as_of)
    return await _serve(
        "platforms", now, None,
        lambda: facade.platform_split(now),
        pin_instant=as_of is not None,
    )


@router.get("/regions", response_model=DashboardResponse)
async def get_regions(
    as_of: Optional[datetime] = None,
    facade: MetricsFacade = Depends(get_facade),
) -> DashboardResponse:
    """Top regions by user count."""
    now = _instant(as_of)
    return await _serve(
        "regions", now, None,
        lambda: facade.region_split(now),
        pin_instant=as_of is not None,
    )


@router.get("/content", response_model=DashboardResponse)
async def get_content(
    as_of: Optional[datetime] = None,
    facade: MetricsFacade = Depends(get_facade),
) -> DashboardResponse:
    """Catalogue totals, genre and language splits, top titles and recent releases."""
    now = _instant(as_of)
    return await _serve(
        "content", now, None,
        lambda: facade.content(now),
        pin_instant=as_of is not None,
    )


@router.get("/retention", response_model=DashboardResponse)
async def get_retention(
    as_of: Optional[datetime] = None,
    facade: MetricsFacade = Depends(get_facade),
) -> DashboardResponse:
    """User retention curve."""
    now = _instant(as_of)
    return await _serve(
        "retention", now, None,
        lambda: facade.retention(now),
        pin_instant=as_of is not None,
    )


@router.get("/active-users", response_model=DashboardResponse)
async def get_active_users(
    date_range: Optional[DateRange] = Query(None, alias="range"),
    as_of: Optional[datetime] = None,
    facade: MetricsFacade = Depends(get_facade),
) -> DashboardResponse:
    """Active-user tiers, new and churned users."""
    date_range, now = _resolve(date_range, as_of)
    return await _serve(
        "active-users", now, date_range,
        lambda: facade.active_users(now, date_range),
        pin_instant=as_of is not None,
    )


@router.get("/all", response_model=DashboardResponse)
async def get_all_dashboards(
    date_range: Optional[DateRange] = Query(None, alias="range"),
    as_of: Optional[datetime] = None,
    facade: MetricsFacade = Depends(get_facade),
) -> DashboardResponse:
    """Every dashboard computed from one set of snapshot loads."""
    date_range, now = _resolve(date_range, as_of)
    return await _serve(
        "all", now, date_range,
        lambda: facade.all_dashboards(now, date_range),
        pin_instant=as_of is not None,
    )


@router.post("/refresh")
async def refresh_dashboards() -> dict:
    """
    Drop every fresh dashboard result so the next request recomputes.

    Previous results stay available as stale fallbacks.
    """
    try:
        invalidated = await dashboard_cache.invalidate_all()
    except (RedisError, RuntimeError) as e:
        logger.error("Dashboard cache refresh failed", error=str(e))
        raise HTTPException(status_code=503, detail="Dashboard cache is unavailable")

    logger.info("Dashboard cache refreshed", invalidated=invalidated)
    return {"invalidated": invalidated}
