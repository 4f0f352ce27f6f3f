"""Pydantic models for price refresh API payloads."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class SymbolRefreshResponse(BaseModel):
    symbol: str
    success: bool
    price: Optional[Decimal] = None
    error: Optional[str] = None


class PriceRefreshResponse(BaseModel):
    """Per-symbol outcome of a price refresh."""

    account_id: str
    updated: int
    failed: int
    results: List[SymbolRefreshResponse]
