"""Wealth wheel API endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends

from wheeltracker.server.api.deps import get_uow
from wheeltracker.server.models.wheel import (
    WheelCalculationResponse,
    WheelClassificationResponse,
    WheelClassificationUpsert,
    WheelTargetResponse,
    WheelTargetsUpsert,
)
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.rebalancer import WealthWheelRebalancer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts/{account_id}/wheel", tags=["wealth-wheel"])


@router.get(
    "",
    response_model=WheelCalculationResponse,
    summary="Calculate wealth wheel allocation",
    description="Current vs. target percentage per category, formatted to 2 decimals",
)
def calculate_wheel(
    account_id: str, uow: UnitOfWork = Depends(get_uow)
) -> WheelCalculationResponse:
    calculation = WealthWheelRebalancer(uow).calculate_wheel(account_id)
    return WheelCalculationResponse.from_calculation(calculation)


@router.get("/targets", response_model=List[WheelTargetResponse], summary="List targets")
def list_targets(
    account_id: str, uow: UnitOfWork = Depends(get_uow)
) -> List[WheelTargetResponse]:
    targets = WealthWheelRebalancer(uow).list_targets(account_id)
    return [WheelTargetResponse.model_validate(t) for t in targets]


@router.put(
    "/targets",
    response_model=List[WheelTargetResponse],
    summary="Upsert target percentages",
    description="Categories must be unique and sum to 100",
)
def upsert_targets(
    account_id: str,
    request: WheelTargetsUpsert,
    uow: UnitOfWork = Depends(get_uow),
) -> List[WheelTargetResponse]:
    """Insert or update targets.

    Example:
        >>> PUT /api/v1/accounts/{account_id}/wheel/targets
        >>> {"targets": [{"category": "CORE", "target_pct": 60},
        >>>              {"category": "FREE_CAPITAL", "target_pct": 40}]}
    """
    targets = WealthWheelRebalancer(uow).upsert_targets(
        account_id, [(t.category, t.target_pct) for t in request.targets]
    )
    return [WheelTargetResponse.model_validate(t) for t in targets]


@router.get(
    "/classifications",
    response_model=List[WheelClassificationResponse],
    summary="List classifications",
)
def list_classifications(
    account_id: str, uow: UnitOfWork = Depends(get_uow)
) -> List[WheelClassificationResponse]:
    classifications = WealthWheelRebalancer(uow).list_classifications(account_id)
    return [WheelClassificationResponse.model_validate(c) for c in classifications]


@router.put(
    "/classifications",
    response_model=WheelClassificationResponse,
    summary="Classify an underlying",
)
def upsert_classification(
    account_id: str,
    request: WheelClassificationUpsert,
    uow: UnitOfWork = Depends(get_uow),
) -> WheelClassificationResponse:
    classification = WealthWheelRebalancer(uow).upsert_classification(
        account_id, request.underlying_id, request.category
    )
    return WheelClassificationResponse.model_validate(classification)
