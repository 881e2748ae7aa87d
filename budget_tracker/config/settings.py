"""
Configuration Management for Budget Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Each concern gets its own settings group with its own env prefix, so
`DATABASE_URL` and `SESSION_COOKIE_NAME` never collide.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational datastore configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        default="sqlite:///./budget.db",
        description="SQLAlchemy database URL"
    )
    echo: bool = Field(
        default=False,
        description="Log every SQL statement (debugging only)"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Reject an empty URL early instead of at first query."""
        if not v.strip():
            raise ValueError("DATABASE_URL must not be empty")
        return v.strip()


class SessionSettings(BaseSettings):
    """Session cookie configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    cookie_name: str = Field(
        default="app_session",
        min_length=1,
        description="Name of the cookie carrying the session token"
    )
    max_age_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Session lifetime in days (not refreshed on use)"
    )

    @property
    def max_age(self) -> timedelta:
        """Session lifetime as a timedelta."""
        return timedelta(days=self.max_age_days)

    @property
    def max_age_seconds(self) -> int:
        """Session lifetime in seconds, for the cookie Max-Age attribute."""
        return int(self.max_age.total_seconds())


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for application logs"
    )

    # Local server
    host: str = Field(
        default="127.0.0.1",
        description="Interface the development server binds to"
    )
    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port the development server listens on"
    )

    # Credential policy
    password_min_length: int = Field(
        default=8,
        ge=1,
        description="Minimum password length accepted at signup"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.strip().upper()
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {sorted(allowed)}")
        return level

    @property
    def is_production(self) -> bool:
        """True when serving a production deployment."""
        return self.app_environment.strip().lower() == "production"


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access. Sub-settings can be
    passed explicitly, which is how tests pin an in-memory database.
    """

    # The prefix keeps stray APP/SESSION variables from being parsed as groups
    model_config = SettingsConfigDict(
        env_prefix="BUDGET_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    app: AppSettings = Field(default_factory=AppSettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    `<setting_name>_error` entries describing what failed.
    Useful for startup checks.
    """
    results = {}

    for name, settings_cls in (
        ("database", DatabaseSettings),
        ("session", SessionSettings),
        ("app", AppSettings),
    ):
        try:
            settings_cls()
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
