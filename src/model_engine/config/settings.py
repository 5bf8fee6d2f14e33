from pathlib import Path
from typing import Literal
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Engine settings loaded from the environment (and an optional `.env` file).
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration. DATABASE_URL wins over the POSTGRES_* parts.
    DATABASE_URL: str | None = None
    POSTGRES_DRIVER: str = "psycopg"
    POSTGRES_USERNAME: str | None = None
    POSTGRES_PASSWORD: str | None = None
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str | None = None

    # Test database configuration
    TEST_POSTGRES_DB: str | None = None
    TESTING: bool = False

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False
    DB_POOL_PRE_PING: bool = True

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/model-engine")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Derived settings ---
    def get_database_url(self) -> str:
        """
        Return the database URL the engine should connect to.

        - DATABASE_URL, when set, is used as is.
        - Otherwise the URL is composed from the POSTGRES_* settings; with
          `TESTING=True` and `TEST_POSTGRES_DB` set, the test database is used
          instead of `POSTGRES_DB`.

        Raises:
            ConfigurationError: when neither DATABASE_URL nor a database name is configured.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        database = self.POSTGRES_DB
        if self.TESTING and self.TEST_POSTGRES_DB:
            database = self.TEST_POSTGRES_DB
        if not database:
            raise ConfigurationError("Set DATABASE_URL or POSTGRES_DB to configure the database connection.")

        credentials = ""
        if self.POSTGRES_USERNAME:
            credentials = self.POSTGRES_USERNAME
            if self.POSTGRES_PASSWORD:
                credentials += f":{self.POSTGRES_PASSWORD}"
            credentials += "@"

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{credentials}"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{database}"
        )

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str | None) -> str | None:
        """Logging level names are upper case ("debug" -> "DEBUG")."""
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("LOG_FORMAT", "ENV", mode="before")
    @classmethod
    def normalize_lowercase(cls, v: str | None) -> str | None:
        return v.strip().lower() if isinstance(v, str) else v


# Settings only depend on the environment, so one instance is enough.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
