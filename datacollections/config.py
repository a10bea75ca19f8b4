"""
Configuration Management Module

Responsibilities:
1. Read store and logging settings from environment variables (preferred)
2. Read performance and query settings from datacollections.json
3. Config validation and defaults

Environment Variables:
    DATACOLLECTIONS_DB_PATH               - SQLite file holding the records
    DATACOLLECTIONS_REPORTS_DIR           - Directory for the maintenance status file
    DATACOLLECTIONS_LOG_LEVEL             - Logging level (default: INFO)
    DATACOLLECTIONS_LOG_FILE              - Optional log file
    DATACOLLECTIONS_CORS_ALLOWED_ORIGINS  - Comma separated dashboard origins
"""

import json
from pathlib import Path
from typing import Optional

from limits import parse_many
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from datacollections.exceptions import ConfigError


class StoreConfig(BaseSettings):
    """Record store, logging and HTTP settings.

    Loaded in this priority order:
    1. Environment variables (DATACOLLECTIONS_*)
    2. .env file (if exists)
    3. Field defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="DATACOLLECTIONS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    db_path: Path = Field(default=Path("data/datacollections.db"), description="SQLite file")
    reports_dir: Path = Field(default=Path("reports"), description="Status file directory")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")
    cors_allowed_origins: str = Field(default="", description="Comma separated origins")

    @field_validator("log_level")
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


class PerformanceConfig(BaseSettings):
    """Performance Configuration"""

    batch_size: int = Field(1000, ge=1, le=10000, description="Batch insert size")


class QueryConfig(BaseSettings):
    """Dashboard query Configuration"""

    default_page_size: int = Field(100, ge=1, le=10000, description="Default page size")
    max_page_size: int = Field(1000, ge=1, le=10000, description="Maximum page size")


class RateLimitConfig(BaseSettings):
    """Per-endpoint request limits in slowapi notation, e.g. "5/minute".

    Overridable per endpoint via DATACOLLECTIONS_RATE_LIMIT_<NAME>.
    """

    model_config = SettingsConfigDict(env_prefix="DATACOLLECTIONS_RATE_LIMIT_")

    upload: str = Field("5/minute", description="POST /api/upload")
    read: str = Field("120/minute", description="GET /api/data and /api/totals")
    clear: str = Field("10/minute", description="DELETE /api/data")
    consolidate: str = Field("2/minute", description="POST /api/maintenance/consolidate")

    @field_validator("upload", "read", "clear", "consolidate")
    def validate_limit(cls, value: str) -> str:
        try:
            parse_many(value)
        except ValueError as exc:
            raise ValueError(f"Invalid rate limit {value!r}: {exc}") from exc
        return value


class AppSettings(BaseSettings):
    """Settings file sections (datacollections.json)."""

    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    rate_limits: RateLimitConfig = Field(default_factory=RateLimitConfig)

    @classmethod
    def load(cls, path: str = "datacollections.json") -> "AppSettings":
        """Load settings from JSON file."""
        config_path = Path(path)
        if config_path.exists():
            try:
                with config_path.open("r", encoding="utf-8") as handle:
                    data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"Invalid settings file {path}: {exc}") from exc
            return cls(**data)
        return cls()


class Config:
    """Main Config Class - Factory Pattern (NOT Singleton).

    The app lifespan and the CLI each load one and pass it down.
    """

    def __init__(self, store: StoreConfig, settings: AppSettings):
        self.store = store
        self.settings = settings

    @property
    def db_path(self) -> Path:
        return self.store.db_path

    @property
    def reports_dir(self) -> Path:
        return self.store.reports_dir

    @classmethod
    def load(cls, settings_path: str = "datacollections.json") -> "Config":
        """Factory method to load config.

        Store settings: Environment variables > .env
        Performance/query settings: datacollections.json
        """
        return cls(store=StoreConfig(), settings=AppSettings.load(settings_path))
