"""API endpoints for position and statement reporting.

Read-only views of an account's holdings. Valuation uses the last
refreshed prices; symbols without a price are valued at cost.
"""

import logging

from fastapi import APIRouter, Depends

from wheeltracker.server.api.deps import get_uow
from wheeltracker.server.models.position import (
    PortfolioPositionsResponse,
    StatementResponse,
)
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.positions import PositionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts/{account_id}", tags=["positions"])


def get_position_service(uow: UnitOfWork = Depends(get_uow)) -> PositionService:
    """Dependency for the position service.

    Args:
        uow: Unit of work bound to the request

    Returns:
        PositionService instance
    """
    return PositionService(uow)


@router.get(
    "/positions",
    response_model=PortfolioPositionsResponse,
    summary="Get held positions",
    description="Held symbols with cost basis, market value and unrealized P&L",
)
def get_positions(
    account_id: str,
    service: PositionService = Depends(get_position_service),
) -> PortfolioPositionsResponse:
    """Get the account's held positions, largest cost basis first.

    Returns per-symbol metrics including:
    - Shares, lot count and average cost
    - Cost basis before and after premium reductions
    - Market value and unrealized P&L

    Raises:
        NotFoundError: 404 if the account does not exist
    """
    return service.get_positions(account_id)


@router.get(
    "/statement",
    response_model=StatementResponse,
    summary="Get per-symbol statement",
    description="Lifetime realized and unrealized P&L for every symbol the account has traded",
)
def get_statement(
    account_id: str,
    service: PositionService = Depends(get_position_service),
) -> StatementResponse:
    return service.get_statement(account_id)
