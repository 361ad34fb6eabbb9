"""
GreenLog Backend — Settings Tests
===================================

What:  Validation rules and URL assembly of greenlog.config.Settings.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from greenlog.config import Settings
from greenlog.database import Database


def test_url_assembled_from_parts():
    config = Settings(
        database_url=None,
        db_host="db.internal",
        db_port=5433,
        db_name="garden",
        db_user="gardener",
        db_password="p@ss/word",
    )

    url = config.sqlalchemy_url

    assert url.startswith("postgresql+asyncpg://gardener:")
    assert url.endswith("@db.internal:5433/garden")
    assert "p@ss/word" not in url  # special characters are escaped


def test_database_url_overrides_parts():
    config = Settings(database_url="sqlite+aiosqlite:///./x.db", db_host="ignored")
    assert config.sqlalchemy_url == "sqlite+aiosqlite:///./x.db"


def test_log_level_is_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_unknown_log_level_rejected():
    with pytest.raises(PydanticValidationError):
        Settings(log_level="chatty")


def test_cors_origins_list():
    config = Settings(cors_origins="http://localhost:3000, http://127.0.0.1:3000")
    assert config.cors_origins_list == ["http://localhost:3000", "http://127.0.0.1:3000"]


def test_inconsistent_pool_bounds_load_without_raising():
    config = Settings(db_pool_min=5, db_pool_max=2)
    assert (config.db_pool_min, config.db_pool_max) == (5, 2)


def test_inconsistent_pool_bounds_are_refused_by_the_pool():
    config = Settings(database_url="sqlite+aiosqlite://", db_pool_min=5, db_pool_max=2)
    assert Database.from_settings(config).initialize() is False


def test_pool_increment_is_passed_through_and_refused():
    config = Settings(database_url="sqlite+aiosqlite://", db_pool_increment=2)
    db = Database.from_settings(config)
    assert db.pool_increment == 2
    assert db.initialize() is False
    assert db.is_initialized is False


def test_pool_bounds_from_environment(monkeypatch):
    monkeypatch.setenv("DB_POOL_MIN", "3")
    monkeypatch.setenv("DB_POOL_MAX", "2")
    assert Settings().db_pool_min == 3


def test_idle_timeout_documents_its_pool_recycle_meaning():
    field = Settings.model_fields["db_pool_idle_timeout"]
    assert "pool_recycle" in field.description
