"""
CafeStaff Backend — Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the two things every write needs (database, logo storage)
       and returns the aggregate status.

Status levels:
    healthy:   Database reachable and storage writable (HTTP 200)
    unhealthy: Either one is down (HTTP 503, stop routing traffic)
"""

import logging
import os
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cafestaff import __version__
from cafestaff.database import Database, get_database
from cafestaff.dependencies import get_asset_store
from cafestaff.schemas.common import HealthResponse
from cafestaff.services.asset_store import AssetStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "A dependency is down", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    database: Database = Depends(get_database),
    asset_store: AssetStore = Depends(get_asset_store),
):
    """
    Probe the database (SELECT 1) and the storage root (write access).

    Returns:
        HealthResponse, with HTTP 503 when any dependency is down.
    """
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        await database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Logo Storage ────────────────────────────────────────────────
    if not os.access(asset_store.storage_root, os.W_OK):
        storage_status = "unavailable"
        overall = "unhealthy"
        logger.warning("Health check: storage root not writable: %s", asset_store.storage_root)

    health = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=health.model_dump())
    return health
