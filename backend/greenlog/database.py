"""
GreenLog Backend — Connection Pool & Managed Connections
==========================================================

What:  The process's database handle: one async SQLAlchemy engine (and so one
       bounded connection pool), a scoped-acquisition wrapper every operation
       runs through, and graceful pool teardown.
Why:   Every route is a thin pass-through to a few SQL statements; the only
       shared, stateful piece is the pool, so all of its lifecycle rules live here.
How:   `Database` is constructed explicitly by the app factory and handed to
       routes through FastAPI's dependency injection (`get_database`).
Who:   Services receive it as their first argument; tests build their own.

Connection Pooling Strategy:
    pool_size = db_pool_min:            connections kept open
    max_overflow = max - min:           extra connections opened under load
    pool_timeout = db_pool_timeout:     wait for a free connection, then fail
    pool_recycle = db_pool_idle_timeout: replace connections older than this (max age)
    pool_pre_ping:                      validate a connection before handing it out

Managed connection contract (`Database.connection()`):
    1. Acquire exactly one connection.
    2. Yield it to the caller's unit of work.
    3. Release it on every exit path. A failed release is logged, never raised,
       and never replaces the error the unit of work raised.
    4. SQLAlchemy errors leave as the typed GreenLog errors (see exceptions.py),
       chained to the original.
    5. Anything not committed by the unit of work is rolled back on release.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import event, exc as sa_exc, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

from greenlog.config import Settings
from greenlog.exceptions import (
    ConnectivityError,
    ConstraintViolationError,
    DatabaseError,
    GreenLogError,
)

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation (PostgreSQL) and the SQLite message prefix
_UNIQUE_SQLSTATE = "23505"
_SQLITE_UNIQUE_MARKER = "UNIQUE constraint failed"


def is_unique_violation(error: sa_exc.IntegrityError) -> bool:
    """
    Tell a duplicate-key failure apart from other integrity failures (FK, CHECK).

    asyncpg reports the SQLSTATE on the adapted error (or on its cause);
    SQLite only reports it in the message text.
    """
    orig = error.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return code == _UNIQUE_SQLSTATE
    return _SQLITE_UNIQUE_MARKER in str(orig)


def translate_error(error: sa_exc.SQLAlchemyError) -> DatabaseError:
    """Map a SQLAlchemy exception onto the GreenLog error hierarchy."""
    if isinstance(error, sa_exc.IntegrityError):
        return ConstraintViolationError(
            unique=is_unique_violation(error),
            context={"detail": str(error.orig)},
        )
    if isinstance(error, sa_exc.TimeoutError):
        return ConnectivityError(
            message="No database connection became available in time. Please try again later.",
            context={"detail": str(error)},
        )
    if isinstance(error, (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.DisconnectionError)):
        return ConnectivityError(context={"detail": str(error)})
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return ConnectivityError(context={"detail": str(error)})
    return DatabaseError(context={"detail": str(error)})


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ignores REFERENCES clauses unless asked per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Handle owning one bounded connection pool.

    Lifecycle:
        Database(...)   → nothing opened yet
        initialize()    → engine + pool created (once; later calls are no-ops)
        connection()    → scoped acquire/use/release, any number of times
        shutdown(grace) → wait for in-flight work, close the pool
    """

    def __init__(
        self,
        url: str,
        *,
        pool_min: int = 1,
        pool_max: int = 3,
        pool_increment: int = 1,
        pool_timeout: int = 30,
        idle_timeout: int = 60,
        pre_ping: bool = True,
        echo: bool = False,
    ):
        self.url = url
        self.pool_min = pool_min
        self.pool_max = pool_max
        self.pool_increment = pool_increment
        self.pool_timeout = pool_timeout
        self.idle_timeout = idle_timeout
        self.pre_ping = pre_ping
        self.echo = echo

        self._engine: Optional[AsyncEngine] = None
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.sqlalchemy_url,
            pool_min=settings.db_pool_min,
            pool_max=settings.db_pool_max,
            pool_increment=settings.db_pool_increment,
            pool_timeout=settings.db_pool_timeout,
            idle_timeout=settings.db_pool_idle_timeout,
            pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    # ── Lifecycle ─────────────────────────────────────────────────────────

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    @property
    def in_flight(self) -> int:
        """Number of connections currently checked out through connection()."""
        return self._in_flight

    def initialize(self) -> bool:
        """
        Create the engine and its pool.

        Returns True when the pool exists afterwards. Pool bounds that cannot
        be honoured, a bad URL or a missing driver are logged and leave the
        handle uninitialized: the server keeps answering, and every operation
        fails with ConnectivityError.
        """
        if self._engine is not None:
            return True
        problem = self._pool_bounds_problem()
        if problem:
            logger.error("Connection pool initialization failed: %s", problem)
            return False
        try:
            engine = create_async_engine(
                self.url,
                poolclass=AsyncAdaptedQueuePool,
                pool_size=self.pool_min,
                max_overflow=self.pool_max - self.pool_min,
                pool_timeout=self.pool_timeout,
                pool_recycle=self.idle_timeout,
                pool_pre_ping=self.pre_ping,
                echo=self.echo,
            )
        except (sa_exc.ArgumentError, sa_exc.NoSuchModuleError, ImportError, ValueError) as exc:
            logger.error("Connection pool initialization failed: %s", exc)
            return False

        if engine.dialect.name == "sqlite":
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self._engine = engine
        logger.info(
            "Connection pool started (%s, min=%d, max=%d)",
            engine.dialect.name,
            self.pool_min,
            self.pool_max,
        )
        return True

    def _pool_bounds_problem(self) -> Optional[str]:
        # pool_size=0 or a negative max_overflow would leave the pool unbounded
        if self.pool_min < 1:
            return f"pool minimum must be at least 1 (got {self.pool_min})"
        if self.pool_max < self.pool_min:
            return f"pool maximum ({self.pool_max}) is below the minimum ({self.pool_min})"
        if self.pool_increment != 1:
            return (
                f"pool increment {self.pool_increment} is not supported; "
                "the pool grows one connection at a time"
            )
        return None

    async def shutdown(self, grace_period: float = 10) -> bool:
        """
        Drain and close the pool.

        Waits up to `grace_period` seconds for checked-out connections to come
        back, then disposes the engine either way. Returns False only when
        closing the pool itself failed.
        """
        if self._engine is None:
            return True

        logger.info("Closing connection pool (grace period %ss)...", grace_period)
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=grace_period)
        except asyncio.TimeoutError:
            logger.warning(
                "%d operation(s) still running after %ss; closing pool anyway",
                self._in_flight,
                grace_period,
            )

        engine, self._engine = self._engine, None
        try:
            await engine.dispose()
        except Exception as exc:
            logger.error("Failed to close connection pool: %s", exc)
            return False
        logger.info("Connection pool closed")
        return True

    # ── Managed Connections ───────────────────────────────────────────────

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[AsyncConnection]:
        """
        Scoped acquisition of one pooled connection.

        Example:
            async with db.connection() as conn:
                result = await conn.execute(text("SELECT * FROM appuser"))
                rows = result.all()

        Raises:
            ConnectivityError: pool missing, exhausted past its timeout, or unreachable
            ConstraintViolationError / DatabaseError: the statements failed
        """
        if self._engine is None:
            raise ConnectivityError(
                message="The database connection pool is not available.",
                context={"reason": "pool not initialized"},
            )

        try:
            conn = await self._engine.connect()
        except sa_exc.SQLAlchemyError as exc:
            logger.error("Could not acquire a database connection: %s", exc)
            raise translate_error(exc) from exc
        except OSError as exc:
            logger.error("Could not acquire a database connection: %s", exc)
            raise ConnectivityError(context={"detail": str(exc)}) from exc

        self._in_flight += 1
        self._idle.clear()
        try:
            yield conn
        except GreenLogError:
            raise
        except sa_exc.SQLAlchemyError as exc:
            logger.error("Database operation failed: %s", exc)
            raise translate_error(exc) from exc
        finally:
            try:
                await conn.close()
            except Exception as exc:
                logger.error("Failed to release database connection: %s", exc)
            self._in_flight -= 1
            if self._in_flight == 0:
                self._idle.set()

    async def ping(self) -> bool:
        """Run SELECT 1 through a pooled connection."""
        try:
            async with self.connection() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except DatabaseError as exc:
            logger.warning("Database ping failed: %s", exc.message)
            return False

    def pool_status(self) -> str:
        if self._engine is None:
            return "not initialized"
        return self._engine.pool.status()


# ── FastAPI Dependency ────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """
    FastAPI dependency returning the Database the app was built with.

    Example usage in a route:
        @router.get("/appusers")
        async def list_users(db: Database = Depends(get_database)):
            ...
    """
    return request.app.state.database
