"""API v1 router with core endpoints.

This module provides version 1 of the API: account, trade entry,
reinvest, wealth wheel, price refresh and position routers plus system information.
"""

import logging

from fastapi import APIRouter, status

from wheeltracker.server.api.v1 import (
    accounts,
    positions,
    prices,
    reinvest,
    trades,
    wealth_wheel,
)
from wheeltracker.server.config import settings
from wheeltracker.server.database.session import check_database_connection
from wheeltracker.server.models.common import InfoResponse
from wheeltracker.utils.date_utils import utcnow

logger = logging.getLogger(__name__)

# Create v1 router
router = APIRouter(
    prefix="/api/v1",
    tags=["v1"],
)

# Include sub-routers
router.include_router(accounts.router)
router.include_router(trades.router)
router.include_router(reinvest.router)
router.include_router(wealth_wheel.router)
router.include_router(prices.router)
router.include_router(positions.router)


@router.get(
    "/info",
    response_model=InfoResponse,
    status_code=status.HTTP_200_OK,
    summary="Get system information",
    description="Returns system information including version and database status",
)
async def get_info() -> InfoResponse:
    """Get system information endpoint.

    Example:
        >>> GET /api/v1/info
        >>> {
        >>>     "app_name": "Wheel Tracker API",
        >>>     "version": "1.0.0",
        >>>     "status": "running",
        >>>     "database_connected": true,
        >>>     "timestamp": "2026-01-31T10:00:00"
        >>> }
    """
    db_connected = check_database_connection()

    return InfoResponse(
        app_name=settings.app_name,
        version=settings.version,
        status="running",
        database_connected=db_connected,
        timestamp=utcnow(),
    )
