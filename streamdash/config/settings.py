"""
Streaming Dashboard Metrics Engine
Centralized Configuration Management

Pydantic settings for the metrics engine, the snapshot loaders and the
serving layer. Every calculator parameter that the dashboards treat as
canonical (retention offsets, cohort tolerance, top-N sizes) lives here
rather than as a constant in the calculators.
"""

from datetime import datetime, timezone
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MetricsSettings(BaseSettings):
    """Metrics Engine Configuration"""

    model_config = SettingsConfigDict(env_prefix="METRICS_")

    retention_offsets: List[int] = Field(
        default=[1, 7, 14, 30, 60, 90, 180],
        description="Day offsets of the user retention curve",
    )
    cohort_tolerance_days: int = Field(default=2, description="Half-width of a cohort window in days")
    activity_window_days: int = Field(default=7, description="Trailing window that counts a user as retained")
    active_user_tiers: List[int] = Field(default=[1, 7, 30], description="DAU/WAU/MAU style tiers in days")

    region_top_n: int = Field(default=5, description="Regions shown on the overview")
    genre_top_n: int = Field(default=10, description="Genres shown on the content dashboard")
    language_top_n: int = Field(default=10, description="Languages shown on the content dashboard")
    top_content_limit: int = Field(default=20, description="Titles in the top content table")
    performance_days: int = Field(default=30, description="Days in the content performance series")

    all_time_start: datetime = Field(
        default=datetime(2020, 1, 1, tzinfo=timezone.utc),
        description="Start of the 'all' lookback range",
    )
    default_range: str = Field(default="30d", description="Lookback range used when none is requested")
    currency_symbol: str = Field(default="₹", description="Currency symbol for display formatting")

    @field_validator("retention_offsets")
    @classmethod
    def validate_days(cls, v: List[int]) -> List[int]:
        """Day offsets must be non-negative"""
        if any(day < 0 for day in v):
            raise ValueError("Day offsets must be non-negative")
        return v

    @field_validator("active_user_tiers")
    @classmethod
    def validate_tiers(cls, v: List[int]) -> List[int]:
        if any(day <= 0 for day in v):
            raise ValueError("Active user tiers must be positive")
        return v

    @field_validator("cohort_tolerance_days")
    @classmethod
    def validate_tolerance(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Cohort tolerance must be non-negative")
        return v

    @field_validator("activity_window_days", "performance_days")
    @classmethod
    def validate_activity_window(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Day windows must be positive")
        return v


class SnapshotSettings(BaseSettings):
    """Record Snapshot Storage Configuration"""

    model_config = SettingsConfigDict(env_prefix="SNAPSHOT_")

    path: str = Field(default="./data/snapshots", description="Directory holding one file per entity kind")
    file_format: str = Field(default="parquet", description="Snapshot file format")

    @field_validator("file_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        allowed = ["parquet", "json", "jsonl", "csv"]
        if v.lower() not in allowed:
            raise ValueError(f"Snapshot format must be one of: {allowed}")
        return v.lower()


class RedisSettings(BaseSettings):
    """Redis Cache Configuration"""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: Optional[SecretStr] = Field(default=None, description="Redis password")
    db: int = Field(default=0, description="Redis database number")
    max_connections: int = Field(default=50, description="Max connections")
    socket_timeout: int = Field(default=5, description="Socket timeout in seconds")
    decode_responses: bool = Field(default=True, description="Decode responses to strings")
    url: Optional[str] = Field(default=None, alias="REDIS_URL", description="Redis URL (overrides host/port)")
    dashboard_ttl_seconds: int = Field(default=600, description="TTL of cached dashboard results")

    def get_url(self) -> str:
        """Redis connection URL - uses REDIS_URL if set, otherwise builds from host/port"""
        if self.url:
            return self.url
        if self.password:
            return f"redis://:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="streaming-dashboard-metrics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")
    api_workers: int = Field(default=2, alias="API_WORKERS", description="API workers")

    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
    snapshot: SnapshotSettings = Field(default_factory=SnapshotSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
