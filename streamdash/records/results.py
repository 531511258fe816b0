"""
Calculator Results

Immutable values produced by the calculators. They serialize with the
camelCase field names the rendering layer consumes.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel


class ResultModel(BaseModel):
    """Frozen result object with camelCase aliases"""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def as_dict(self) -> dict:
        """JSON-ready dictionary using the rendering layer's field names."""
        return self.model_dump(mode="json", by_alias=True)


class GrowthResult(ResultModel):
    """A metric over a current and the preceding period"""
    current: float
    previous: float
    growth_percent: float


class DistributionBucket(ResultModel):
    """One category of a distribution breakdown"""
    key: str
    count: int
    measure: float
    percent_of_total: float


class CohortPoint(ResultModel):
    """Retention of the cohort created ``offset_days`` ago"""
    offset_days: int
    cohort_size: int
    retained_count: int
    retention_percent: int

    @computed_field
    @property
    def label(self) -> str:
        return f"Day {self.offset_days}"


class ActiveUserTier(ResultModel):
    """Users active within the trailing ``window_days``"""
    label: str
    window_days: int
    active_users: int
    percent_of_users: float


class RatingBucket(ResultModel):
    stars: int
    label: str
    count: int


class KindComparison(ResultModel):
    """Per content kind averages"""
    kind: str
    titles: int
    avg_views: float
    avg_rating: float
    avg_watch_time_hours: float
    avg_completion: float


class ContentRanking(ResultModel):
    """A title in the top content table"""
    id: str
    title: str
    kind: str
    genre: str
    language: str
    views: int
    watch_time_hours: float
    rating: float
    likes: int
    comments: int
    engagement_rate: float
    completion_rate: float


class PerformancePoint(ResultModel):
    """Titles released on one day of the trailing performance series"""
    day: date
    titles: int
    views: int
    watch_time_hours: float
    engagement: float

    @computed_field
    @property
    def label(self) -> str:
        return f"{self.day:%b} {self.day.day}"
