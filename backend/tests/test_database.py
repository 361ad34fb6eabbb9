"""
GreenLog Backend — Connection Pool & Managed Connection Tests
===============================================================

What:  Tests for Database (pool lifecycle, managed connections) and the
       SQLAlchemy → GreenLog error translation.
How:   Release and failure paths use a mocked engine so each failure can be
       injected exactly; the rest runs against a real SQLite file database.

What we test:
    ✅ The connection is released after success and after failure
    ✅ A failed release is logged and never replaces the original error
    ✅ SQLAlchemy errors are translated and chained; app errors pass through
    ✅ Uninitialized pool / acquire timeout → ConnectivityError
    ✅ initialize() is idempotent; a bad URL leaves the handle uninitialized
    ✅ shutdown() waits for in-flight work, reports dispose failures
    ✅ Uncommitted work is rolled back on release
"""

import asyncio
import logging

import pytest
from sqlalchemy import exc as sa_exc, text

from greenlog.database import Database, is_unique_violation, translate_error
from greenlog.exceptions import (
    ConnectivityError,
    ConstraintViolationError,
    DatabaseError,
    NotFoundError,
)


def _db_with(engine) -> Database:
    db = Database("sqlite+aiosqlite://")
    db._engine = engine
    return db


class _PgError(Exception):
    """Driver error carrying a SQLSTATE, the way asyncpg reports it."""

    def __init__(self, sqlstate: str):
        super().__init__(f"sqlstate {sqlstate}")
        self.sqlstate = sqlstate


# ══════════════════════════════════════════════════════════════════════════
# Managed connection: release on every path
# ══════════════════════════════════════════════════════════════════════════


class TestManagedConnection:

    @pytest.mark.asyncio
    async def test_releases_after_success(self, mock_engine):
        db = _db_with(mock_engine)

        async with db.connection() as conn:
            assert conn is mock_engine.conn
            assert db.in_flight == 1

        mock_engine.conn.close.assert_awaited_once()
        assert db.in_flight == 0

    @pytest.mark.asyncio
    async def test_releases_after_failure_and_translates(self, mock_engine):
        db = _db_with(mock_engine)
        original = sa_exc.OperationalError("SELECT 1", {}, Exception("server closed"))

        with pytest.raises(ConnectivityError) as exc_info:
            async with db.connection():
                raise original

        assert exc_info.value.__cause__ is original
        mock_engine.conn.close.assert_awaited_once()
        assert db.in_flight == 0

    @pytest.mark.asyncio
    async def test_release_failure_is_logged_not_raised(self, mock_engine, caplog):
        mock_engine.conn.close.side_effect = RuntimeError("socket gone")
        db = _db_with(mock_engine)

        with caplog.at_level(logging.ERROR, logger="greenlog.database"):
            async with db.connection():
                pass

        assert "Failed to release database connection" in caplog.text
        assert db.in_flight == 0

    @pytest.mark.asyncio
    async def test_release_failure_does_not_mask_original_error(self, mock_engine):
        mock_engine.conn.close.side_effect = RuntimeError("socket gone")
        db = _db_with(mock_engine)

        with pytest.raises(ConstraintViolationError):
            async with db.connection():
                raise sa_exc.IntegrityError(
                    "INSERT", {}, Exception("UNIQUE constraint failed: appuser.user_id")
                )

        mock_engine.conn.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_application_errors_pass_through(self, mock_engine):
        db = _db_with(mock_engine)

        with pytest.raises(NotFoundError):
            async with db.connection():
                raise NotFoundError(resource="user", resource_id="42")

        mock_engine.conn.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_acquire_timeout_is_connectivity_error(self, mock_engine):
        mock_engine.connect.side_effect = sa_exc.TimeoutError("QueuePool limit reached")
        db = _db_with(mock_engine)

        with pytest.raises(ConnectivityError):
            async with db.connection():
                pytest.fail("body must not run without a connection")

        assert db.in_flight == 0

    @pytest.mark.asyncio
    async def test_uninitialized_pool_is_connectivity_error(self):
        db = Database("sqlite+aiosqlite://")

        with pytest.raises(ConnectivityError):
            async with db.connection():
                pass

    @pytest.mark.asyncio
    async def test_uncommitted_work_is_rolled_back(self, database):
        async with database.connection() as conn:
            await conn.execute(
                text("INSERT INTO appuser (user_id, first_name, last_name) VALUES (1, 'Ada', 'Lovelace')")
            )

        async with database.connection() as conn:
            count = (await conn.execute(text("SELECT COUNT(*) FROM appuser"))).scalar_one()
        assert count == 0


# ══════════════════════════════════════════════════════════════════════════
# Error translation
# ══════════════════════════════════════════════════════════════════════════


class TestTranslateError:

    def test_integrity_error_unique_from_sqlite_message(self):
        error = sa_exc.IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: tasks.task_id"))
        translated = translate_error(error)
        assert isinstance(translated, ConstraintViolationError)
        assert translated.unique is True

    def test_integrity_error_foreign_key_is_not_unique(self):
        error = sa_exc.IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))
        translated = translate_error(error)
        assert isinstance(translated, ConstraintViolationError)
        assert translated.unique is False

    def test_unique_violation_detected_from_sqlstate(self):
        assert is_unique_violation(sa_exc.IntegrityError("INSERT", {}, _PgError("23505")))
        assert not is_unique_violation(sa_exc.IntegrityError("INSERT", {}, _PgError("23503")))

    def test_programming_error_is_generic_database_error(self):
        error = sa_exc.ProgrammingError("SELECT nope", {}, Exception("no such column"))
        translated = translate_error(error)
        assert type(translated) is DatabaseError
        # Driver text stays server-side.
        assert "no such column" not in translated.message
        assert "no such column" in translated.context["detail"]

    def test_interface_error_is_connectivity_error(self):
        error = sa_exc.InterfaceError("SELECT 1", {}, Exception("connection is closed"))
        assert isinstance(translate_error(error), ConnectivityError)


# ══════════════════════════════════════════════════════════════════════════
# Pool lifecycle
# ══════════════════════════════════════════════════════════════════════════


class TestPoolLifecycle:

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, tmp_path):
        db = Database(f"sqlite+aiosqlite:///{tmp_path / 'pool.db'}")
        assert db.initialize()
        engine = db._engine
        assert db.initialize()
        assert db._engine is engine
        assert await db.shutdown(grace_period=1)

    def test_bad_url_leaves_handle_uninitialized(self):
        db = Database("nosuchdialect://user@host/db")
        assert db.initialize() is False
        assert db.is_initialized is False
        assert db.pool_status() == "not initialized"

    @pytest.mark.parametrize(
        "bounds",
        [
            {"pool_min": 3, "pool_max": 2},
            {"pool_min": 0, "pool_max": 2},
            {"pool_min": 1, "pool_max": 3, "pool_increment": 2},
        ],
    )
    def test_unusable_pool_bounds_leave_handle_uninitialized(self, tmp_path, bounds, caplog):
        db = Database(f"sqlite+aiosqlite:///{tmp_path / 'pool.db'}", **bounds)

        with caplog.at_level(logging.ERROR, logger="greenlog.database"):
            assert db.initialize() is False

        assert db.is_initialized is False
        assert db._engine is None
        assert "Connection pool initialization failed" in caplog.text

    @pytest.mark.asyncio
    async def test_pool_overflow_is_bounded(self, tmp_path):
        db = Database(f"sqlite+aiosqlite:///{tmp_path / 'pool.db'}", pool_min=2, pool_max=5)
        assert db.initialize()
        assert db._engine.pool.size() == 2
        assert db._engine.pool._max_overflow == 3
        assert await db.shutdown(grace_period=1)

    @pytest.mark.asyncio
    async def test_ping(self, database):
        assert await database.ping() is True

    @pytest.mark.asyncio
    async def test_ping_without_pool_is_false(self):
        assert await Database("sqlite+aiosqlite://").ping() is False

    @pytest.mark.asyncio
    async def test_shutdown_disposes_engine(self, mock_engine):
        db = _db_with(mock_engine)

        assert await db.shutdown(grace_period=1) is True

        mock_engine.dispose.assert_awaited_once()
        assert db.is_initialized is False

    @pytest.mark.asyncio
    async def test_shutdown_reports_dispose_failure(self, mock_engine):
        mock_engine.dispose.side_effect = RuntimeError("cannot close")
        db = _db_with(mock_engine)

        assert await db.shutdown(grace_period=1) is False

    @pytest.mark.asyncio
    async def test_shutdown_without_pool_is_clean(self):
        assert await Database("sqlite+aiosqlite://").shutdown() is True

    @pytest.mark.asyncio
    async def test_shutdown_waits_for_in_flight_work(self, mock_engine):
        db = _db_with(mock_engine)
        release = asyncio.Event()

        async def slow_operation():
            async with db.connection():
                await release.wait()

        task = asyncio.create_task(slow_operation())
        await asyncio.sleep(0)
        assert db.in_flight == 1

        shutdown = asyncio.create_task(db.shutdown(grace_period=5))
        await asyncio.sleep(0.05)
        mock_engine.dispose.assert_not_awaited()

        release.set()
        await task
        assert await shutdown is True
        mock_engine.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_gives_up_waiting_after_grace_period(self, mock_engine, caplog):
        db = _db_with(mock_engine)
        release = asyncio.Event()

        async def stuck_operation():
            async with db.connection():
                await release.wait()

        task = asyncio.create_task(stuck_operation())
        await asyncio.sleep(0)

        with caplog.at_level(logging.WARNING, logger="greenlog.database"):
            assert await db.shutdown(grace_period=0.05) is True

        assert "still running" in caplog.text
        mock_engine.dispose.assert_awaited_once()
        release.set()
        await task
