"""Pydantic request and response models."""

from wheeltracker.server.models.account import (
    AccountCreate,
    AccountResponse,
    AccountUpdate,
    CycleResponse,
    LedgerEntryResponse,
    LotResponse,
    OptionLegResponse,
    ReconcileResponse,
    UnderlyingResponse,
    UnderlyingUpdate,
)
from wheeltracker.server.models.common import ErrorResponse, HealthResponse, InfoResponse
from wheeltracker.server.models.position import (
    PortfolioPositionsResponse,
    PositionResponse,
    PositionSummary,
    StatementLineResponse,
    StatementResponse,
    StatementTotals,
)
from wheeltracker.server.models.prices import PriceRefreshResponse, SymbolRefreshResponse
from wheeltracker.server.models.reinvest import (
    ReinvestActionRequest,
    ReinvestReadyResponse,
    ReinvestResultResponse,
    ReinvestSignalResponse,
)
from wheeltracker.server.models.trade import (
    DepositRequest,
    OptionEntry,
    OptionEntryResponse,
    StockEntry,
    StockEntryResponse,
    WithdrawalRequest,
)
from wheeltracker.server.models.wheel import (
    WheelCalculationResponse,
    WheelClassificationResponse,
    WheelClassificationUpsert,
    WheelSliceResponse,
    WheelTargetInput,
    WheelTargetResponse,
    WheelTargetsUpsert,
)

__all__ = [
    # Common models
    "HealthResponse",
    "InfoResponse",
    "ErrorResponse",
    # Account models
    "AccountCreate",
    "AccountUpdate",
    "AccountResponse",
    "ReconcileResponse",
    "UnderlyingUpdate",
    "UnderlyingResponse",
    "LotResponse",
    "LedgerEntryResponse",
    "OptionLegResponse",
    "CycleResponse",
    # Trade entry models
    "StockEntry",
    "OptionEntry",
    "DepositRequest",
    "WithdrawalRequest",
    "StockEntryResponse",
    "OptionEntryResponse",
    # Reinvest models
    "ReinvestActionRequest",
    "ReinvestSignalResponse",
    "ReinvestResultResponse",
    "ReinvestReadyResponse",
    # Wealth wheel models
    "WheelTargetInput",
    "WheelTargetsUpsert",
    "WheelClassificationUpsert",
    "WheelTargetResponse",
    "WheelClassificationResponse",
    "WheelSliceResponse",
    "WheelCalculationResponse",
    # Price refresh models
    "PriceRefreshResponse",
    "SymbolRefreshResponse",
    # Position models
    "PositionResponse",
    "PositionSummary",
    "PortfolioPositionsResponse",
    "StatementLineResponse",
    "StatementTotals",
    "StatementResponse",
]
