import pytest

from model_engine.config import Settings, get_settings
from model_engine.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("DATABASE_URL", "POSTGRES_DB", "TEST_POSTGRES_DB", "TESTING", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_explicit_database_url_wins():
    settings = make_settings(DATABASE_URL="sqlite+aiosqlite:///x.db", POSTGRES_DB="ignored")
    assert settings.get_database_url() == "sqlite+aiosqlite:///x.db"


def test_database_url_from_postgres_parts():
    settings = make_settings(
        POSTGRES_USERNAME="u", POSTGRES_PASSWORD="p", POSTGRES_HOST="db", POSTGRES_PORT=5433, POSTGRES_DB="main"
    )
    assert settings.get_database_url() == "postgresql+psycopg://u:p@db:5433/main"


def test_testing_switches_to_test_database():
    settings = make_settings(POSTGRES_DB="main", TEST_POSTGRES_DB="main_test", TESTING=True)
    assert settings.get_database_url() == "postgresql+psycopg://localhost:5432/main_test"


def test_missing_database_configuration():
    with pytest.raises(ConfigurationError):
        make_settings().get_database_url()


def test_log_settings_are_normalized():
    settings = make_settings(LOG_LEVEL="debug", LOG_FORMAT="TEXT")
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_FORMAT == "text"


def test_environment_is_read(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    assert Settings(_env_file=None).LOG_LEVEL == "WARNING"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
