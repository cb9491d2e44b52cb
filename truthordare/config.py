import logging
import os
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

Backend = Literal["sqlite", "postgres"]

DEFAULT_PORTS = {"postgres": 5432}


class DatabaseSettings(BaseSettings):
    """Configuration for the database connection pool."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="DATABASE_", extra="ignore"
    )

    backend: Backend = Field("sqlite", description="SQL backend: sqlite or postgres")
    path: str = Field("truthordare.db", description="Path to the SQLite database file")
    host: str = Field("localhost", description="Database server host")
    port: Optional[int] = Field(None, description="Database server port, backend default when unset")
    user: str = Field("", description="Database user")
    password: SecretStr = Field(SecretStr(""), description="Database password")
    name: str = Field("truthordare", description="Database name")
    pool_size: int = Field(10, ge=1, description="Maximum number of pooled connections")
    pool_timeout: float = Field(30.0, gt=0, description="Seconds to wait for a free connection")
    queue_limit: int = Field(0, ge=0, description="Maximum waiting callers, 0 for unlimited")
    wait_for_connections: bool = Field(True, description="Queue callers when the pool is saturated")
    default_schema: Optional[str] = Field(None, description="Schema used when an operation names none")
    primary_key: str = Field("id", description="Column reported as insert id on RETURNING backends")

    @property
    def resolved_port(self) -> Optional[int]:
        """Return the configured port or the backend's default one."""
        if self.port is not None:
            return self.port
        return DEFAULT_PORTS.get(self.backend)


class AppSettings(BaseSettings):
    """General application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = Field(False, description="Enable debug mode for development")
    log_level: str = Field("INFO", description="Logging level")

    db: DatabaseSettings = Field(default_factory=DatabaseSettings)

    @property
    def log_level_value(self) -> int:
        """Return the numeric value of the log level."""
        return logging.getLevelName(self.log_level.upper())


@lru_cache
def get_settings() -> AppSettings:
    """
    Get application settings.
    If the TEST_MODE environment variable is set, it returns an in-memory SQLite
    configuration suitable for testing, otherwise loads the configuration from the .env file.
    """
    if os.getenv("TEST_MODE"):
        return AppSettings(
            debug=True,
            log_level="DEBUG",
            db=DatabaseSettings(backend="sqlite", path=":memory:", pool_size=1),
        )
    return AppSettings()
