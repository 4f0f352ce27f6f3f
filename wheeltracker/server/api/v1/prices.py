"""Price refresh API endpoint."""

import logging

from fastapi import APIRouter, Depends

from wheeltracker.market_data.provider import QuoteProvider
from wheeltracker.server.api.deps import get_quote_provider, get_uow
from wheeltracker.server.models.prices import PriceRefreshResponse, SymbolRefreshResponse
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.price_refresh import PriceRefreshService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts/{account_id}/prices", tags=["prices"])


@router.post(
    "/refresh",
    response_model=PriceRefreshResponse,
    summary="Refresh prices of held symbols",
    description="Best effort: failures are reported per symbol and never abort the batch",
)
def refresh_prices(
    account_id: str,
    uow: UnitOfWork = Depends(get_uow),
    provider: QuoteProvider = Depends(get_quote_provider),
) -> PriceRefreshResponse:
    report = PriceRefreshService(uow, provider).refresh_prices(account_id)
    return PriceRefreshResponse(
        account_id=report.account_id,
        updated=report.updated,
        failed=report.failed,
        results=[
            SymbolRefreshResponse(
                symbol=r.symbol, success=r.success, price=r.price, error=r.error
            )
            for r in report.results
        ],
    )
