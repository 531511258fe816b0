"""
Record Schemas

Typed views over the raw documents pulled from the document store. All
defaulting rules for missing or malformed fields are applied here, once, so
the calculators never re-derive fallbacks:

- missing category keys become ``"Unknown"``
- a missing or unparseable timestamp becomes the Unix epoch (rollup dates
  become 1970-01-01, outside every window)
- missing or negative counters become 0
- unknown subscription statuses become ``inactive``
- ratings are clamped into 0-5
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import structlog
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

logger = structlog.get_logger(__name__)

UNKNOWN = "Unknown"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_DATETIME = TypeAdapter(datetime)
_DATE = TypeAdapter(date)


class EntityKind(str, Enum):
    """Entity collections served by the snapshot loader"""
    USERS = "users"
    CONTENT = "content"
    DAILY_ROLLUPS = "daily_rollups"


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle states"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"
    EXPIRED = "expired"

    @property
    def is_churned(self) -> bool:
        return self in (SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED)


class ContentKind(str, Enum):
    """Kinds of catalogue titles"""
    MOVIE = "movie"
    SERIES = "series"
    SHORT_FILM = "short_film"


# Collection and display names used by the document store for each kind
_CONTENT_KIND_ALIASES = {
    "movie": ContentKind.MOVIE,
    "movies": ContentKind.MOVIE,
    "series": ContentKind.SERIES,
    "webseries": ContentKind.SERIES,
    "web_series": ContentKind.SERIES,
    "short_film": ContentKind.SHORT_FILM,
    "shortfilm": ContentKind.SHORT_FILM,
    "shortfilms": ContentKind.SHORT_FILM,
    "short_films": ContentKind.SHORT_FILM,
}


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_label(value: Any, default: str) -> str:
    if _is_blank(value):
        return default
    return str(value).strip()


def _to_non_negative(value: Any, cast=float):
    if _is_blank(value) or isinstance(value, bool):
        return cast(0)
    try:
        number = cast(float(value))
    except (TypeError, ValueError, OverflowError):
        logger.debug("Unparseable numeric field defaulted to 0", value=value)
        return cast(0)
    return max(cast(0), number)


def _to_timestamp(value: Any, field: str) -> datetime:
    if _is_blank(value):
        return EPOCH
    try:
        return ensure_utc(_DATETIME.validate_python(value))
    except ValidationError:
        logger.warning("Unparseable timestamp defaulted to epoch", field=field, value=str(value))
        return EPOCH


def _to_day(value: Any) -> date:
    if _is_blank(value):
        logger.warning("Rollup without a date defaulted to epoch")
        return EPOCH.date()
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    if isinstance(value, str):
        value = value.strip()[:10]
    try:
        return _DATE.validate_python(value)
    except ValidationError:
        logger.warning("Unparseable rollup date defaulted to epoch", value=str(value))
        return EPOCH.date()


class _Record(BaseModel):
    """Base for document-backed records: frozen, camelCase or snake_case input"""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    @field_validator("id", mode="before", check_fields=False)
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        return "" if v is None else str(v)


class UserRecord(_Record):
    """A platform user as stored in the ``users`` collection"""

    id: str
    created_at: datetime = EPOCH
    last_active: datetime = Field(
        default=EPOCH,
        validation_alias=AliasChoices("last_active", "lastActive", "lastLogin"),
    )
    subscription_status: SubscriptionStatus = SubscriptionStatus.INACTIVE
    device_type: str = "web"
    location: str = UNKNOWN

    @model_validator(mode="before")
    @classmethod
    def _resolve_alternates(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if _is_blank(data.get("location")):
            data["location"] = data.get("city") or data.get("state")
        if data.get("subscriptionStatus") is None and data.get("subscription_status") is None:
            subscription = data.get("subscription")
            if isinstance(subscription, dict):
                data["subscriptionStatus"] = subscription.get("status")
        return data

    @field_validator("created_at", "last_active", mode="before")
    @classmethod
    def _default_timestamp(cls, v: Any, info: ValidationInfo) -> datetime:
        return _to_timestamp(v, info.field_name)

    @field_validator("subscription_status", mode="before")
    @classmethod
    def _normalize_status(cls, v: Any) -> SubscriptionStatus:
        if isinstance(v, SubscriptionStatus):
            return v
        try:
            return SubscriptionStatus(str(v).strip().lower())
        except ValueError:
            return SubscriptionStatus.INACTIVE

    @field_validator("device_type", mode="before")
    @classmethod
    def _default_device(cls, v: Any) -> str:
        return _clean_label(v, "web")

    @field_validator("location", mode="before")
    @classmethod
    def _default_location(cls, v: Any) -> str:
        return _clean_label(v, UNKNOWN)

    @property
    def timestamp(self) -> datetime:
        return self.created_at


class ContentRecord(_Record):
    """
    A catalogue title (movie, series or short film).

    ``genre`` holds the primary genre; ``genres`` keeps every genre tagged
    on the title so genre splits can credit multi-genre titles to each tag.
    """

    id: str
    kind: ContentKind = Field(
        default=ContentKind.MOVIE,
        validation_alias=AliasChoices("kind", "type", "contentType"),
    )
    title: str = ""
    views: int = 0
    watch_count: int = 0
    watch_time_minutes: float = Field(
        default=0.0,
        validation_alias=AliasChoices("watch_time_minutes", "watchTimeMinutes", "watchTime"),
    )
    likes: int = 0
    comments: int = Field(default=0, validation_alias=AliasChoices("comments", "commentsCount"))
    shares: int = 0
    rating: float = 0.0
    genre: str = UNKNOWN
    genres: Tuple[str, ...] = (UNKNOWN,)
    language: str = UNKNOWN
    is_premium: bool = False
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _resolve_genres(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw = data.get("genre")
        if _is_blank(raw) or raw == []:
            raw = data.get("genres")
        if isinstance(raw, (list, tuple)):
            names = [str(g).strip() for g in raw if not _is_blank(g)]
        else:
            names = [] if _is_blank(raw) else [str(raw).strip()]
        data["genres"] = tuple(names) or (UNKNOWN,)
        data["genre"] = data["genres"][0]
        return data

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, v: Any) -> ContentKind:
        if isinstance(v, ContentKind):
            return v
        key = str(v or "").strip().lower().replace(" ", "_").replace("-", "_")
        return _CONTENT_KIND_ALIASES.get(key, ContentKind.MOVIE)

    @field_validator("views", "watch_count", "likes", "comments", "shares", mode="before")
    @classmethod
    def _default_count(cls, v: Any) -> int:
        return _to_non_negative(v, int)

    @field_validator("watch_time_minutes", mode="before")
    @classmethod
    def _default_minutes(cls, v: Any) -> float:
        return _to_non_negative(v, float)

    @field_validator("rating", mode="before")
    @classmethod
    def _extract_rating(cls, v: Any) -> float:
        if isinstance(v, dict):
            v = v.get("average")
        return min(5.0, _to_non_negative(v, float))

    @field_validator("language", mode="before")
    @classmethod
    def _default_language(cls, v: Any) -> str:
        return _clean_label(v, UNKNOWN)

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, v: Any) -> str:
        return _clean_label(v, "")

    @field_validator("is_premium", mode="before")
    @classmethod
    def _default_premium(cls, v: Any) -> bool:
        return bool(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def _blank_created(cls, v: Any) -> Optional[datetime]:
        if _is_blank(v):
            return None
        created = _to_timestamp(v, "created_at")
        return None if created == EPOCH else created

    @property
    def timestamp(self) -> datetime:
        return self.created_at or EPOCH

    @property
    def watch_time_hours(self) -> float:
        return self.watch_time_minutes / 60


class DailyRollupRecord(_Record):
    """
    Precomputed per-day aggregate written by the external batch job.

    Peak fields are the day's maxima; revenue, views and watch time are the
    day's totals.
    """

    date: date
    revenue: float = 0.0
    peak_users: int = Field(default=0, validation_alias=AliasChoices("peak_users", "peakUsers", "users"))
    views: int = 0
    engagement_score: float = Field(
        default=0.0,
        validation_alias=AliasChoices("engagement_score", "engagementScore", "engagement"),
    )
    peak_premium_users: int = Field(
        default=0,
        validation_alias=AliasChoices("peak_premium_users", "peakPremiumUsers", "premiumUsers"),
    )
    watch_time_minutes: float = Field(
        default=0.0,
        validation_alias=AliasChoices("watch_time_minutes", "watchTimeMinutes", "watchTime"),
    )
    new_users: int = 0
    active_users: int = 0

    @model_validator(mode="before")
    @classmethod
    def _date_from_timestamp(cls, data: Any) -> Any:
        if isinstance(data, dict) and _is_blank(data.get("date")):
            data = dict(data)
            data["date"] = _to_day(data.get("timestamp"))
        return data

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, v: Any) -> date:
        return _to_day(v)

    @field_validator("revenue", "engagement_score", "watch_time_minutes", mode="before")
    @classmethod
    def _default_amount(cls, v: Any) -> float:
        return _to_non_negative(v, float)

    @field_validator("peak_users", "views", "peak_premium_users", "new_users", "active_users", mode="before")
    @classmethod
    def _default_count(cls, v: Any) -> int:
        return _to_non_negative(v, int)

    @property
    def timestamp(self) -> datetime:
        return datetime.combine(self.date, time.min, tzinfo=timezone.utc)


RECORD_MODELS = {
    EntityKind.USERS: UserRecord,
    EntityKind.CONTENT: ContentRecord,
    EntityKind.DAILY_ROLLUPS: DailyRollupRecord,
}


def parse_record(kind: EntityKind, document: Dict[str, Any]) -> _Record:
    """Validate a raw document into the record type of ``kind``."""
    return RECORD_MODELS[EntityKind(kind)].model_validate(document)
