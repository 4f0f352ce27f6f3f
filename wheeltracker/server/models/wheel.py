"""Pydantic models for wealth wheel API payloads.

Calculation results are computed at full Decimal precision and only
rounded here, when formatted to two-decimal strings for the response.
"""

from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field, field_validator

from wheeltracker.constants import TARGET_SUM_TOLERANCE
from wheeltracker.wheel.money import format_money
from wheeltracker.wheel.state import WheelCategory


class WheelTargetInput(BaseModel):
    category: WheelCategory
    target_pct: Decimal = Field(..., ge=0, le=100, decimal_places=2)


class WheelTargetsUpsert(BaseModel):
    """Request schema for replacing target percentages.

    Categories must be unique and the percentages must sum to 100.

    Example:
        >>> WheelTargetsUpsert(targets=[
        >>>     {"category": "CORE", "target_pct": 60},
        >>>     {"category": "FREE_CAPITAL", "target_pct": 40},
        >>> ])
    """

    targets: List[WheelTargetInput] = Field(..., min_length=1)

    @field_validator("targets")
    @classmethod
    def validate_targets(cls, v: List[WheelTargetInput]) -> List[WheelTargetInput]:
        categories = [t.category for t in v]
        if len(categories) != len(set(categories)):
            raise ValueError("Each category may appear only once")
        total = sum((t.target_pct for t in v), Decimal("0"))
        if abs(total - Decimal("100")) > TARGET_SUM_TOLERANCE:
            raise ValueError(f"Target percentages must sum to 100, got {total}")
        return v


class WheelClassificationUpsert(BaseModel):
    underlying_id: int = Field(..., gt=0)
    category: WheelCategory


class WheelTargetResponse(BaseModel):
    category: WheelCategory
    target_pct: Decimal

    model_config = {"from_attributes": True}


class WheelClassificationResponse(BaseModel):
    underlying_id: int
    category: WheelCategory

    model_config = {"from_attributes": True}


class WheelSliceResponse(BaseModel):
    """One category's allocation, formatted to 2 decimals."""

    category: WheelCategory
    current_value: str
    target_pct: str
    actual_pct: str
    delta: str


class WheelCalculationResponse(BaseModel):
    """Wealth wheel calculation formatted for presentation."""

    slices: List[WheelSliceResponse]
    total_value: str
    cash_balance: str
    cashflow_reserve: str

    @classmethod
    def from_calculation(cls, calculation) -> "WheelCalculationResponse":
        """Format a WheelCalculation, rounding every figure half up to cents."""
        return cls(
            slices=[
                WheelSliceResponse(
                    category=s.category,
                    current_value=format_money(s.current_value),
                    target_pct=format_money(s.target_pct),
                    actual_pct=format_money(s.actual_pct),
                    delta=format_money(s.delta),
                )
                for s in calculation.slices
            ],
            total_value=format_money(calculation.total_value),
            cash_balance=format_money(calculation.cash_balance),
            cashflow_reserve=format_money(calculation.cashflow_reserve),
        )
