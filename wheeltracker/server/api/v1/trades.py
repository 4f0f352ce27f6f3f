"""Trade entry API endpoints.

This module exposes the inbound operation shapes: stock trades, option
events, deposits and withdrawals. Each request is one atomic operation.
"""

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, status

from wheeltracker.server.api.deps import get_uow
from wheeltracker.server.models.account import (
    LedgerEntryResponse,
    LotResponse,
    OptionLegResponse,
)
from wheeltracker.server.models.trade import (
    DepositRequest,
    OptionEntry,
    OptionEntryResponse,
    StockEntry,
    StockEntryResponse,
    WithdrawalRequest,
)
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.trade_entry import TradeEntryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts/{account_id}", tags=["trades"])


@router.post(
    "/deposits",
    response_model=LedgerEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Deposit cash",
)
def deposit(
    account_id: str,
    request: DepositRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> LedgerEntryResponse:
    """Record a cash deposit.

    Example:
        >>> POST /api/v1/accounts/{account_id}/deposits
        >>> {"amount": "1000.00"}
    """
    entry = TradeEntryService(uow).deposit(account_id, request)
    return LedgerEntryResponse.model_validate(entry)


@router.post(
    "/withdrawals",
    response_model=LedgerEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Withdraw cash",
    description="Rejected with 400 when the withdrawal exceeds the cash balance",
)
def withdraw(
    account_id: str,
    request: WithdrawalRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> LedgerEntryResponse:
    entry = TradeEntryService(uow).withdraw(account_id, request)
    return LedgerEntryResponse.model_validate(entry)


@router.post(
    "/trades/stock",
    response_model=StockEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a stock trade",
)
def record_stock_trade(
    account_id: str,
    entry: StockEntry,
    uow: UnitOfWork = Depends(get_uow),
) -> StockEntryResponse:
    """Record a stock BUY or SELL.

    Example:
        >>> POST /api/v1/accounts/{account_id}/trades/stock
        >>> {"symbol": "XYZ", "action": "BUY", "quantity": "100", "price": "50.00"}
    """
    result = TradeEntryService(uow).record_stock_entry(account_id, entry)
    cycle_event = result.cycle_event
    return StockEntryResponse(
        symbol=result.underlying.symbol,
        underlying_id=result.underlying.id,
        entry=LedgerEntryResponse.model_validate(result.entry),
        lot=LotResponse.model_validate(result.lot) if result.lot else None,
        realized_gain=result.consumption.realized_gain if result.consumption else None,
        instance_id=cycle_event.instance.id if cycle_event else None,
        cycle_finalized=bool(cycle_event and cycle_event.finalized),
        signal_id=cycle_event.signal.id if cycle_event and cycle_event.signal else None,
        cash_balance=result.cash_balance,
    )


@router.post(
    "/trades/option",
    response_model=OptionEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record an option event",
    description="Sell to open, buy to close, expiration or assignment",
)
def record_option_trade(
    account_id: str,
    entry: OptionEntry,
    uow: UnitOfWork = Depends(get_uow),
) -> OptionEntryResponse:
    """Record an option event and advance the wheel cycle.

    Example:
        >>> POST /api/v1/accounts/{account_id}/trades/option
        >>> {
        >>>     "symbol": "XYZ", "action": "STO", "call_put": "PUT",
        >>>     "strike": "50", "expiration": "2026-12-18",
        >>>     "quantity": 1, "price": "2.00", "fees": "0.65"
        >>> }
    """
    result = TradeEntryService(uow).record_option_entry(account_id, entry)
    event = result.event
    return OptionEntryResponse(
        symbol=result.underlying.symbol,
        underlying_id=result.underlying.id,
        instance_id=event.instance.id,
        cycle_status=event.instance.status,
        cycle_finalized=event.finalized,
        leg=OptionLegResponse.model_validate(event.leg) if event.leg else None,
        legs=[
            OptionLegResponse.model_validate(leg)
            for leg in (event.legs or ([event.leg] if event.leg else []))
        ],
        entries=[LedgerEntryResponse.model_validate(e) for e in event.entries],
        lot=LotResponse.model_validate(event.lot) if event.lot else None,
        realized_gain=event.consumption.realized_gain if event.consumption else None,
        signal_id=event.signal.id if event.signal else None,
        cash_balance=Decimal(result.cash_balance),
    )
