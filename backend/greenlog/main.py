"""
GreenLog Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance, and runs it.
Why:   Centralizes middleware, exception handlers, routers and the database
       handle's lifecycle in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn imports `greenlog.main:app`; the `greenlog` console script
       calls run(); tests call create_app(database=...) with their own handle.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                        FastAPI App                       │
    │                                                          │
    │  Middleware:  Request ID → Access Log → GZip → CORS      │
    │                                                          │
    │  Routers:     users · tasks · plants · garden · schema   │
    │               health                                     │
    │                                                          │
    │  Exception Handlers:                                     │
    │   Validation→400 │ NotFound→404 │ Constraint→409         │
    │   Database→500   │ Connectivity→503                      │
    └──────────────────────────────────────────────────────────┘
               │ app.state.database (Depends(get_database))
               ▼
           Database (one bounded connection pool per process)

Lifecycle:
    Startup:   configure logging, create the connection pool. A pool that
               can't be created is logged; the server still starts and
               database endpoints answer 503.
    Shutdown:  wait up to SHUTDOWN_GRACE_PERIOD for in-flight queries, close
               the pool, record whether that worked so run() can pick the
               process exit status.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from greenlog import __version__
from greenlog.config import Settings, settings as default_settings
from greenlog.database import Database
from greenlog.exceptions import (
    ConnectivityError,
    ConstraintViolationError,
    DatabaseError,
    GreenLogError,
    NotFoundError,
    ValidationError,
)
from greenlog.middleware.logging import RequestLoggingMiddleware
from greenlog.middleware.request_id import RequestIDMiddleware, request_id_var
from greenlog.routes import garden, health, plants, schema, tasks, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] greenlog.access: GET /appusers 200 3.1ms [a1b2c3d4] ...

    Called once from the lifespan, before the pool is created, so the pool's
    own startup messages already use this format.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Quiet third-party loggers that report every request or statement.
    # The access middleware already logs each request once.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Create the connection pool on startup and close it on shutdown.

    uvicorn turns SIGINT/SIGTERM into the lifespan shutdown event, so the
    code after `yield` is the graceful-shutdown path.
    """
    config: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("GreenLog Backend starting up...")

    if not database.initialize():
        logger.error("Starting without a connection pool; database endpoints will answer 503")

    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("GreenLog Backend shutting down...")
    app.state.shutdown_clean = await database.shutdown(config.shutdown_grace_period)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def _error_body(request: Request, error: str, message: str, details=None) -> dict:
    body = {
        "success": False,
        "error": error,
        "message": message,
        "request_id": _request_id(request),
    }
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the typed errors to HTTP responses.

    Handler hierarchy (most specific wins):
        RequestValidationError   → 400 (body/query failed Pydantic validation)
        ValidationError          → 400 (bad identifier, non-numeric filter, ...)
        NotFoundError            → 404 (mutation matched nothing, unknown table)
        ConstraintViolationError → 409 (duplicate key, unknown referenced row)
        ConnectivityError        → 503 (no pool, pool exhausted, network down)
        DatabaseError            → 500
        GreenLogError (base)     → 500
        Exception (fallback)     → 500

    Database error bodies carry a generic message; the driver's text (which
    may include SQL) is only logged.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Invalid request: %s", _request_id(request), details)
        return JSONResponse(
            status_code=400,
            content=_error_body(request, "validation_error", "Invalid request parameters", details),
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", _request_id(request), exc.message)
        details = {"field": exc.field} if exc.field else None
        return JSONResponse(
            status_code=400,
            content=_error_body(request, exc.error_code, exc.message, details),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body(request, exc.error_code, exc.message),
        )

    @app.exception_handler(ConstraintViolationError)
    async def handle_constraint_violation(request: Request, exc: ConstraintViolationError):
        logger.warning("[%s] Constraint violation: %s", _request_id(request), exc.message)
        return JSONResponse(
            status_code=409,
            content=_error_body(request, exc.error_code, exc.message),
        )

    @app.exception_handler(ConnectivityError)
    async def handle_connectivity_error(request: Request, exc: ConnectivityError):
        logger.error("[%s] Database unavailable: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return JSONResponse(
            status_code=503,
            content=_error_body(request, exc.error_code, exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request, exc.error_code, "A database error occurred. Please try again later."
            ),
        )

    @app.exception_handler(GreenLogError)
    async def handle_greenlog_error(request: Request, exc: GreenLogError):
        logger.error("[%s] %s: %s", _request_id(request), type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body(request, exc.error_code, exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace goes to the log only; the client gets a request ID."""
        logger.error("[%s] Unexpected error: %s", _request_id(request), exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request,
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None, database: Optional[Database] = None
) -> FastAPI:
    """
    Assemble the application.

    Args:
        settings: defaults to the process-wide settings loaded from the environment
        database: defaults to a Database built from `settings`; tests pass
                  their own (already initialized) handle

    The pool is not opened here. The lifespan opens it, so importing this
    module never touches the network.
    """
    config = settings or default_settings

    app = FastAPI(
        title="GreenLog API",
        description=(
            "Garden tracking backend: app users and their tasks, plants with "
            "growth logs, soils and garden logs, plus simple reports."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.database = database or Database.from_settings(config)
    app.state.shutdown_clean = True

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS → routes.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(tasks.router)
    app.include_router(plants.router)
    app.include_router(garden.router)
    app.include_router(schema.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `greenlog.main:app` to be importable
app = create_app()


def run() -> None:
    """
    Console entry point: serve until SIGINT/SIGTERM, then exit.

    Exit status is 0 when the pool closed cleanly and 1 when it did not.
    """
    import uvicorn

    config = app.state.settings
    server = uvicorn.Server(
        uvicorn.Config(app, host=config.backend_host, port=config.backend_port, log_config=None)
    )
    server.run()
    sys.exit(0 if app.state.shutdown_clean else 1)


if __name__ == "__main__":
    run()
