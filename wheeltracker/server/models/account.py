"""Pydantic models for account, ledger, lot and cycle API payloads."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from wheeltracker.constants import DEFAULT_PREMIUM_POLICY
from wheeltracker.wheel.state import (
    CallPut,
    CycleStatus,
    FinalizationReason,
    LedgerType,
    LegStatus,
    PremiumPolicy,
)


class AccountCreate(BaseModel):
    """Request schema for creating an account.

    Attributes:
        name: Account name (1-100 characters)
        cashflow_reserve: Minimum cash kept uninvested
        default_policy: Premium policy applied when no override exists
        notes: Optional notes

    Example:
        >>> AccountCreate(name="Roth IRA", cashflow_reserve=Decimal("2000"))
    """

    name: str = Field(..., min_length=1, max_length=100, description="Account name")
    cashflow_reserve: Decimal = Field(
        default=Decimal("0"), ge=0, decimal_places=2, description="Minimum cash kept uninvested"
    )
    default_policy: PremiumPolicy = Field(
        default=DEFAULT_PREMIUM_POLICY, description="Default premium policy"
    )
    notes: Optional[str] = Field(None, max_length=1000, description="Optional notes")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject names that are only whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty or whitespace")
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Roth IRA",
                "cashflow_reserve": "2000.00",
                "default_policy": "REINVEST_ON_CLOSE",
            }
        }
    }


class AccountUpdate(BaseModel):
    """Request schema for updating an account. Only provided fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    cashflow_reserve: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    default_policy: Optional[PremiumPolicy] = None
    notes: Optional[str] = Field(None, max_length=1000)


class AccountResponse(BaseModel):
    """Response schema for account data."""

    id: str
    name: str
    cash_balance: Decimal
    cashflow_reserve: Decimal
    default_policy: PremiumPolicy
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReconcileResponse(BaseModel):
    """Result of checking cash balance against the ledger."""

    account_id: str
    cash_balance: Decimal
    ledger_total: Decimal
    reconciled: bool


class UnderlyingUpdate(BaseModel):
    """Request schema for setting an underlying's premium policy.

    A null premium_policy clears it so the account default applies.
    """

    premium_policy: Optional[PremiumPolicy] = None


class UnderlyingResponse(BaseModel):
    id: int
    symbol: str
    current_price: Optional[Decimal] = None
    price_updated_at: Optional[datetime] = None
    premium_policy: Optional[PremiumPolicy] = None

    model_config = {"from_attributes": True}


class LotResponse(BaseModel):
    id: int
    underlying_id: int
    instance_id: Optional[int] = None
    open_quantity: Decimal
    remaining: Decimal
    cost_basis: Decimal
    original_cost_basis: Optional[Decimal] = None
    realized_gain: Decimal = Decimal("0")
    opened_at: datetime
    closed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LedgerEntryResponse(BaseModel):
    """Response schema for a ledger entry."""

    id: int
    type: LedgerType
    amount: Decimal
    occurred_at: datetime
    description: Optional[str] = None
    instance_id: Optional[int] = None

    model_config = {"from_attributes": True}


class OptionLegResponse(BaseModel):
    id: int
    call_put: CallPut
    strike: Decimal
    expiration: date
    contracts: int
    open_contracts: int
    premium_per_share: Decimal
    status: LegStatus
    opened_at: datetime
    closed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CycleResponse(BaseModel):
    """Response schema for a wheel cycle and its legs."""

    id: int
    underlying_id: int
    status: CycleStatus
    premium_policy_override: Optional[PremiumPolicy] = None
    realized_pnl: Optional[Decimal] = None
    finalization_reason: Optional[FinalizationReason] = None
    opened_at: datetime
    finalized_at: Optional[datetime] = None
    legs: List[OptionLegResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}
