"""Reinvest signal API endpoints."""

import logging
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends

from wheeltracker.server.api.deps import get_uow
from wheeltracker.server.models.reinvest import (
    ReinvestActionRequest,
    ReinvestReadyResponse,
    ReinvestResultResponse,
    ReinvestSignalResponse,
)
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.reinvest import ReinvestSignalEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts/{account_id}", tags=["reinvest"])


@router.get(
    "/signals",
    response_model=List[ReinvestSignalResponse],
    summary="List pending reinvest signals",
    description="Returns PENDING signals ordered by creation time",
)
def list_pending_signals(
    account_id: str, uow: UnitOfWork = Depends(get_uow)
) -> List[ReinvestSignalResponse]:
    signals = ReinvestSignalEngine(uow).get_pending_signals(account_id)
    return [ReinvestSignalResponse.model_validate(s) for s in signals]


@router.get(
    "/reinvest-ready",
    response_model=ReinvestReadyResponse,
    summary="Cash available for reinvestment",
)
def reinvest_ready(
    account_id: str, uow: UnitOfWork = Depends(get_uow)
) -> ReinvestReadyResponse:
    engine = ReinvestSignalEngine(uow)
    ready = engine.get_reinvest_ready_amount(account_id)
    with uow.read(account_id) as account:
        return ReinvestReadyResponse(
            account_id=account_id,
            cash_balance=Decimal(account.cash_balance),
            cashflow_reserve=Decimal(account.cashflow_reserve),
            ready_amount=ready,
        )


@router.post(
    "/signals/{signal_id}/action",
    response_model=ReinvestResultResponse,
    summary="Resolve a reinvest signal",
    description="APPROVE, REJECT or PARTIAL; resolved signals return 409",
)
def process_reinvest_action(
    account_id: str,
    signal_id: int,
    request: ReinvestActionRequest,
    uow: UnitOfWork = Depends(get_uow),
) -> ReinvestResultResponse:
    """Resolve a PENDING signal.

    Example:
        >>> POST /api/v1/accounts/{account_id}/signals/1/action
        >>> {"action": "PARTIAL", "partial_amount": "300.00"}
    """
    result = ReinvestSignalEngine(uow).process_reinvest_action(
        account_id,
        signal_id,
        request.action,
        partial_amount=request.partial_amount,
        notes=request.notes,
    )
    with uow.read(account_id) as account:
        return ReinvestResultResponse(
            signal=ReinvestSignalResponse.model_validate(result.signal),
            committed_amount=result.committed_amount,
            ledger_entry_id=result.ledger_entry_id,
            cash_balance=Decimal(account.cash_balance),
        )
