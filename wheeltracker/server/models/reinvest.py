"""Pydantic models for reinvest signal API payloads."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from wheeltracker.wheel.state import ReinvestAction, ReinvestStatus


class ReinvestActionRequest(BaseModel):
    """Request schema for resolving a reinvest signal.

    Attributes:
        action: APPROVE, REJECT or PARTIAL
        partial_amount: Amount to commit; required for PARTIAL only
        notes: Operator notes

    Example:
        >>> ReinvestActionRequest(action="PARTIAL", partial_amount=Decimal("300.00"))
    """

    action: ReinvestAction
    partial_amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def validate_partial_amount(self) -> "ReinvestActionRequest":
        if self.action == ReinvestAction.PARTIAL and self.partial_amount is None:
            raise ValueError("partial_amount is required for PARTIAL")
        if self.action != ReinvestAction.PARTIAL and self.partial_amount is not None:
            raise ValueError("partial_amount is only allowed for PARTIAL")
        return self


class ReinvestSignalResponse(BaseModel):
    """Response schema for a reinvest signal."""

    id: int
    instance_id: Optional[int] = None
    underlying_id: Optional[int] = None
    amount: Decimal
    status: ReinvestStatus
    partial_amount: Optional[Decimal] = None
    notes: Optional[str] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReinvestResultResponse(BaseModel):
    signal: ReinvestSignalResponse
    committed_amount: Decimal
    ledger_entry_id: Optional[int] = None
    cash_balance: Decimal


class ReinvestReadyResponse(BaseModel):
    """Cash available above the account's reserve."""

    account_id: str
    cash_balance: Decimal
    cashflow_reserve: Decimal
    ready_amount: Decimal
