from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase

DEFAULT_SQLITE_URL = "sqlite+aiosqlite:///./crudkit.db"


class Settings(BaseSettings):
    """
    crudkit settings loaded from the environment (and an optional `.env` file).

    Every field has a default so the package can be imported and tested
    without any environment configured.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"
    SERVICE_NAME: str = "crudkit"

    # Database configuration
    DATABASE_URL: str | None = None
    POSTGRES_DRIVER: str = "asyncpg"
    POSTGRES_USERNAME: str | None = None
    POSTGRES_PASSWORD: str | None = None
    POSTGRES_HOST: str | None = None
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str | None = None

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # Logging
    LOG_LEVEL: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("logs/crudkit")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        """
        Resolve the async database URL.

        Order:
        - `DATABASE_URL` when set explicitly.
        - A Postgres URL when host, user and database name are all configured.
        - A local SQLite file (`sqlite+aiosqlite`), handy for development and tests.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if self.POSTGRES_HOST and self.POSTGRES_USERNAME and self.POSTGRES_DB:
            password = f":{self.POSTGRES_PASSWORD}" if self.POSTGRES_PASSWORD else ""
            return (
                f"postgresql+{self.POSTGRES_DRIVER}://"
                f"{self.POSTGRES_USERNAME}{password}@"
                f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
                f"{self.POSTGRES_DB}"
            )

        return DEFAULT_SQLITE_URL

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Uppercase LOG_LEVEL before the Literal check, so `trace` and `Debug` are accepted.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Settings come from the environment only, so one instance per process is enough.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
