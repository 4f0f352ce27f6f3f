"""Account API endpoints.

This module provides REST API endpoints for account CRUD operations and
read access to an account's ledger, underlyings, lots and wheel cycles.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from wheeltracker.server.api.deps import get_uow
from wheeltracker.server.models.account import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    CycleResponse,
    LedgerEntryResponse,
    LotResponse,
    ReconcileResponse,
    UnderlyingResponse,
    UnderlyingUpdate,
)
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.accounts import AccountService
from wheeltracker.wheel.overrides import from_optional
from wheeltracker.wheel.state import CycleStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new account",
)
def create_account(
    account: AccountCreate,
    uow: UnitOfWork = Depends(get_uow),
) -> AccountResponse:
    """Create a new account.

    Example:
        >>> POST /api/v1/accounts
        >>> {"name": "Roth IRA", "cashflow_reserve": "2000.00"}
    """
    created = AccountService(uow).create_account(account)
    return AccountResponse.model_validate(created)


@router.get("", response_model=List[AccountResponse], summary="List accounts")
def list_accounts(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    uow: UnitOfWork = Depends(get_uow),
) -> List[AccountResponse]:
    accounts = AccountService(uow).list_accounts(skip=skip, limit=limit)
    return [AccountResponse.model_validate(a) for a in accounts]


@router.get("/{account_id}", response_model=AccountResponse, summary="Get account by ID")
def get_account(account_id: str, uow: UnitOfWork = Depends(get_uow)) -> AccountResponse:
    return AccountResponse.model_validate(AccountService(uow).get_account(account_id))


@router.patch("/{account_id}", response_model=AccountResponse, summary="Update account")
def update_account(
    account_id: str,
    update: AccountUpdate,
    uow: UnitOfWork = Depends(get_uow),
) -> AccountResponse:
    """Update name, cashflow reserve, default premium policy or notes."""
    updated = AccountService(uow).update_account(account_id, update)
    return AccountResponse.model_validate(updated)


@router.delete(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete account",
    description="Deletes an account and everything it owns",
)
def delete_account(account_id: str, uow: UnitOfWork = Depends(get_uow)) -> Response:
    AccountService(uow).delete_account(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{account_id}/ledger",
    response_model=List[LedgerEntryResponse],
    summary="List ledger entries",
)
def list_ledger_entries(
    account_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    uow: UnitOfWork = Depends(get_uow),
) -> List[LedgerEntryResponse]:
    entries = AccountService(uow).list_ledger_entries(account_id, skip=skip, limit=limit)
    return [LedgerEntryResponse.model_validate(e) for e in entries]


@router.get(
    "/{account_id}/reconcile",
    response_model=ReconcileResponse,
    summary="Reconcile cash balance against the ledger",
)
def reconcile(account_id: str, uow: UnitOfWork = Depends(get_uow)) -> ReconcileResponse:
    return ReconcileResponse(**AccountService(uow).reconcile(account_id))


@router.get(
    "/{account_id}/underlyings",
    response_model=List[UnderlyingResponse],
    summary="List underlyings",
)
def list_underlyings(
    account_id: str, uow: UnitOfWork = Depends(get_uow)
) -> List[UnderlyingResponse]:
    underlyings = AccountService(uow).list_underlyings(account_id)
    return [UnderlyingResponse.model_validate(u) for u in underlyings]


@router.patch(
    "/{account_id}/underlyings/{underlying_id}",
    response_model=UnderlyingResponse,
    summary="Set an underlying's premium policy",
)
def update_underlying(
    account_id: str,
    underlying_id: int,
    update: UnderlyingUpdate,
    uow: UnitOfWork = Depends(get_uow),
) -> UnderlyingResponse:
    underlying = AccountService(uow).set_underlying_policy(
        account_id, underlying_id, from_optional(update.premium_policy)
    )
    return UnderlyingResponse.model_validate(underlying)


@router.get("/{account_id}/lots", response_model=List[LotResponse], summary="List lots")
def list_lots(
    account_id: str,
    open_only: bool = Query(True, description="Only return lots with shares remaining"),
    uow: UnitOfWork = Depends(get_uow),
) -> List[LotResponse]:
    lots = AccountService(uow).list_lots(account_id, open_only=open_only)
    return [LotResponse.model_validate(lot) for lot in lots]


@router.get(
    "/{account_id}/cycles",
    response_model=List[CycleResponse],
    summary="List wheel cycles",
)
def list_cycles(
    account_id: str,
    cycle_status: Optional[CycleStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    uow: UnitOfWork = Depends(get_uow),
) -> List[CycleResponse]:
    cycles = AccountService(uow).list_cycles(account_id, cycle_status, skip, limit)
    return [CycleResponse.model_validate(c) for c in cycles]


@router.get(
    "/{account_id}/cycles/{instance_id}",
    response_model=CycleResponse,
    summary="Get wheel cycle by ID",
)
def get_cycle(
    account_id: str, instance_id: int, uow: UnitOfWork = Depends(get_uow)
) -> CycleResponse:
    return CycleResponse.model_validate(AccountService(uow).get_cycle(account_id, instance_id))
