"""
GreenLog Backend — Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by main.py (app factory, server runner) and the Alembic env.
When:  Loaded once at module import time.

Database connection:
    The database is described by its parts (host, port, service name, user,
    password). DATABASE_URL, when set, overrides the parts entirely; tests
    use it to point at a SQLite file.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Deployments override the
    database credentials and CORS origins.
    """

    # ── Database ──────────────────────────────────────────────────────────
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_name: str = Field(default="greenlog", description="Database / service name")
    db_user: str = Field(default="greenlog")
    db_password: str = Field(default="greenlog_secret")
    db_driver: str = Field(default="postgresql+asyncpg")

    # Full SQLAlchemy URL; wins over the individual parts when set
    database_url: Optional[str] = Field(default=None)

    # ── Connection Pool ───────────────────────────────────────────────────
    # Pool grows from db_pool_min up to db_pool_max, one connection at a time.
    # Inconsistent values load; Database.initialize() logs and refuses them.
    db_pool_min: int = Field(default=1)
    db_pool_max: int = Field(default=3)
    db_pool_increment: int = Field(default=1)

    # Seconds an operation waits for a free connection before failing
    db_pool_timeout: int = Field(default=30, ge=1, le=600)

    # Passed to SQLAlchemy as pool_recycle: a pooled connection older than this
    # is replaced at its next checkout, whether or not it sat idle
    db_pool_idle_timeout: int = Field(
        default=60,
        ge=1,
        le=86400,
        description="Maximum age in seconds of a pooled connection (pool_recycle)",
    )

    db_pool_pre_ping: bool = Field(default=True)

    # Seconds shutdown waits for in-flight operations before closing the pool
    shutdown_grace_period: int = Field(default=10, ge=0, le=300)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def sqlalchemy_url(self) -> str:
        """
        What:  The URL handed to create_async_engine().
        How:   DATABASE_URL verbatim if set, otherwise assembled from the parts
               with URL.create() so special characters in the password are escaped.
        """
        if self.database_url:
            return self.database_url
        return URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        ).render_as_string(hide_password=False)


# Singleton instance, imported by the app factory and the Alembic env
settings = Settings()
