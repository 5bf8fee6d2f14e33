"""
Core pytest configuration for the test suite.

Provides the logging setup and the per-test database engine. Table fixtures
live in tests/test_fixtures/ and are re-exported at the bottom of this module.

Database selection:
  1. TEST_DATABASE_URL (e.g. a disposable Postgres database in CI)
  2. otherwise a fresh SQLite file per test through aiosqlite
"""
from __future__ import annotations

import os
import logging
from typing import AsyncGenerator
from urllib.parse import urlparse

# -------------------------------
# Early logging tuning
# -------------------------------
# Quiet noisy third-party loggers before they are imported.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "aiosqlite",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from model_engine.config import get_settings
from model_engine.core.logging import setup_logging
from model_engine.database import enable_sqlite_savepoints

settings = get_settings()
logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Install the package logging configuration for the whole session."""
    setup_logging(settings)
    yield


def safe_log_db_url(db_url: str) -> str:
    """Database URL without credentials, for logging."""
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url(tmp_path) -> str:
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url
    return f"sqlite+aiosqlite:///{tmp_path / 'model_engine_test.db'}"


@pytest.fixture()
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    url = get_test_database_url(tmp_path)
    logger.debug("tests.engine", extra={"database_url": safe_log_db_url(url)})

    engine = enable_sqlite_savepoints(create_async_engine(url, echo=False))
    yield engine
    await engine.dispose()


# Table fixtures
from .test_fixtures.model_fixtures import (  # noqa: E402
    users,
    user_table,
    tags,
)
