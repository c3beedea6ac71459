"""
Configuration Module for the Identity Directory

Settings are loaded from environment variables through pydantic-settings, with
defaults suitable for a single-device install: an embedded SQLite credential
store, no Redis (profile query requests disabled), no Sentry and no metrics.

Key configuration areas include:
- Credential store and cache connections
- Profile freshness
- Built-in record set location
- Monitoring and error reporting
"""

from typing import Optional

from pydantic import AliasChoices, Field, RedisDsn, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings for the identity directory.

    Environment variables map to fields by name, with aliases kept for the
    conventional names. For example, the database connection string can be set
    with either DATABASE_DSN or DATABASE_URL.
    """

    debug: bool = False
    """
    Enable debug mode for verbose logging.
    Set with DEBUG=true environment variable.
    """

    database_dsn: str = Field(
        "sqlite+aiosqlite:///sechat.db",
        validation_alias=AliasChoices("database_dsn", "database_url"),
    )
    """
    SQLAlchemy async connection string for the credential store.
    Set with DATABASE_DSN or DATABASE_URL environment variables.
    Default: sqlite+aiosqlite:///sechat.db
    """

    redis_dsn: Optional[RedisDsn] = Field(
        None,
        validation_alias=AliasChoices("redis_dsn", "redis_url"),
    )
    """
    Redis connection string for the profile query queue. Optional; no query
    requests are issued if not set.
    Set with REDIS_DSN or REDIS_URL environment variables.
    """

    profile_expires: int = 3600
    """
    Seconds a stored profile stays fresh after it is first read.
    Set with PROFILE_EXPIRES environment variable.
    Default: 3600 (1 hour)
    """

    profile_query_queue: str = "directory:profile:query"
    """
    Redis sorted set holding handles whose profiles should be fetched.
    Set with PROFILE_QUERY_QUEUE environment variable.
    """

    immortals_path: Optional[str] = None
    """
    Path to a JSON file replacing the bundled built-in record set.
    Set with IMMORTALS_PATH environment variable.
    """

    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with SENTRY_DSN environment variable.
    """

    metrics_backend: str = "none"
    """
    Metrics backend: 'telegraf' or 'none'.
    Set with METRICS_BACKEND environment variable.
    """

    statsd_host: str = Field(alias="TELEGRAF_HOST", default="telegraf")
    """
    StatsD/Telegraf host for metrics collection.
    Set with TELEGRAF_HOST environment variable.
    """

    statsd_port: int = Field(alias="TELEGRAF_PORT", default=8125)
    """
    StatsD/Telegraf port for metrics collection.
    Set with TELEGRAF_PORT environment variable.
    """

    statsd_prefix: str = "sechat"
    """
    Prefix for all StatsD metrics from this service.
    Set with STATSD_PREFIX environment variable.
    """

    @field_validator("profile_expires")
    @classmethod
    def validate_profile_expires(cls, v: int) -> int:
        """
        Reject non-positive profile lifetimes.

        Raises:
            ValueError: If the lifetime is zero or negative
        """
        if v <= 0:
            raise ValueError("profile_expires must be a positive number of seconds")
        return v
