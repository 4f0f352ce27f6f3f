"""Pydantic models for trade entry API requests and responses.

These are the inbound operation shapes: stock entries, option entries,
cash deposits and withdrawals.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from wheeltracker.server.models.account import (
    LedgerEntryResponse,
    LotResponse,
    OptionLegResponse,
)
from wheeltracker.wheel.state import (
    CallPut,
    CycleStatus,
    OptionAction,
    PremiumPolicy,
    StockAction,
    WheelCategory,
)

SYMBOL_PATTERN = re.compile(r"^[A-Z][A-Z0-9.\-]{0,9}$")


def _normalize_symbol(v: str) -> str:
    v = v.upper().strip()
    if not SYMBOL_PATTERN.match(v):
        raise ValueError(f"Invalid symbol: {v!r}")
    return v


class StockEntry(BaseModel):
    """Request schema for a stock trade.

    Attributes:
        symbol: Ticker symbol
        action: BUY or SELL
        quantity: Shares traded
        price: Price per share
        fees: Commissions and fees for the trade
        occurred_at: Execution time (defaults to now)
        wheel_category: Wealth wheel category to assign to the symbol
        notes: Optional notes

    Example:
        >>> StockEntry(symbol="XYZ", action="BUY", quantity=100, price=50)
    """

    symbol: str = Field(..., description="Ticker symbol")
    action: StockAction = Field(..., description="BUY or SELL")
    quantity: Decimal = Field(..., gt=0, decimal_places=4, description="Shares traded")
    price: Decimal = Field(..., ge=0, decimal_places=6, description="Price per share")
    fees: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    occurred_at: Optional[datetime] = Field(None, description="Execution time")
    wheel_category: Optional[WheelCategory] = None
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        return _normalize_symbol(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "symbol": "XYZ",
                "action": "BUY",
                "quantity": "100",
                "price": "50.00",
                "fees": "0.00",
                "wheel_category": "CORE",
            }
        }
    }


class OptionEntry(BaseModel):
    """Request schema for an option event.

    Attributes:
        symbol: Underlying ticker symbol
        action: STO, BTC, EXPIRE or ASSIGN
        call_put: CALL or PUT
        strike: Strike price
        expiration: Expiration date
        quantity: Number of contracts (100 shares each)
        price: Premium per share; required for STO and BTC
        fees: Commissions and fees
        occurred_at: Event time (defaults to now)
        premium_policy_override: Policy for the cycle this entry opens
        wheel_category_override: Wealth wheel category to assign to the symbol
        notes: Optional notes
    """

    symbol: str
    action: OptionAction
    call_put: CallPut
    strike: Decimal = Field(..., gt=0, decimal_places=6)
    expiration: date
    quantity: int = Field(..., gt=0, description="Number of contracts")
    price: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=6)
    fees: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    occurred_at: Optional[datetime] = None
    premium_policy_override: Optional[PremiumPolicy] = None
    wheel_category_override: Optional[WheelCategory] = None
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        return _normalize_symbol(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "symbol": "XYZ",
                "action": "STO",
                "call_put": "PUT",
                "strike": "50",
                "expiration": "2026-12-18",
                "quantity": 1,
                "price": "2.00",
                "fees": "0.65",
            }
        }
    }


class DepositRequest(BaseModel):
    """Request schema for a cash deposit."""

    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Amount deposited")
    occurred_at: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=1000)


class WithdrawalRequest(BaseModel):
    """Request schema for a cash withdrawal."""

    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Amount withdrawn")
    occurred_at: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=1000)


class StockEntryResponse(BaseModel):
    """Result of a stock entry."""

    symbol: str
    underlying_id: int
    entry: LedgerEntryResponse
    lot: Optional[LotResponse] = None
    realized_gain: Optional[Decimal] = None
    instance_id: Optional[int] = None
    cycle_finalized: bool = False
    signal_id: Optional[int] = None
    cash_balance: Decimal


class OptionEntryResponse(BaseModel):
    """Result of an option entry."""

    symbol: str
    underlying_id: int
    instance_id: int
    cycle_status: CycleStatus
    cycle_finalized: bool = False
    leg: Optional[OptionLegResponse] = None
    legs: List[OptionLegResponse] = Field(default_factory=list)
    entries: List[LedgerEntryResponse] = Field(default_factory=list)
    lot: Optional[LotResponse] = None
    realized_gain: Optional[Decimal] = None
    signal_id: Optional[int] = None
    cash_balance: Decimal
