"""
GreenLog Backend — Health Check Routes
========================================

What:  Connectivity probes for the browser client and for monitoring.
How:   Both endpoints acquire one pooled connection and run SELECT 1
       (Database.ping); neither raises, a failed probe is reported in the body.
Who:   /check-db-connection: the client's status banner on page load.
       /health: Docker health checks and load balancers.

Status levels (/health):
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable or pool not initialized (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from greenlog import __version__
from greenlog.database import Database, get_database
from greenlog.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level: set once when the module loads, for uptime reporting
_start_time = time.time()


@router.get(
    "/check-db-connection",
    response_class=PlainTextResponse,
    summary="Database connectivity as plain text",
    description='Responds "connected" or "unable to connect".',
)
async def check_db_connection(db: Database = Depends(get_database)) -> PlainTextResponse:
    if await db.ping():
        return PlainTextResponse("connected")
    return PlainTextResponse("unable to connect")


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(db: Database = Depends(get_database)):
    """
    Probe the database and report pool state and uptime.

    Why 503 when the database is down:
        Every endpoint but this one needs the database, so an instance that
        can't reach it should be taken out of rotation.
    """
    connected = await db.ping()
    if not connected:
        logger.warning("Health check: database unreachable")

    health = HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        pool=db.pool_status(),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if connected:
        return health
    return JSONResponse(status_code=503, content=health.model_dump())
