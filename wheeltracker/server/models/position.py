"""Pydantic models for position and statement API responses.

Money fields are rounded to cents. Percentages are rounded to two places
and are None when the cost basis they divide by is zero.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class PositionResponse(BaseModel):
    """One held symbol.

    Attributes:
        underlying_id: Underlying identifier
        symbol: Ticker symbol
        shares: Shares held across open lots
        lot_count: Number of open lots
        average_cost: Cost basis per share after premium reductions
        cost_basis: Total cost basis after premium reductions
        original_cost_basis: Total cost basis at acquisition
        premium_reduction: original_cost_basis minus cost_basis
        current_price: Last fetched price, None until one is fetched
        price_updated_at: When current_price was fetched
        market_value: Shares at current price, or at cost without a price
        unrealized_pnl: market_value minus cost_basis
        unrealized_pnl_pct: unrealized_pnl as a percentage of cost_basis
        original_pnl: market_value minus original_cost_basis
        original_pnl_pct: original_pnl as a percentage of original_cost_basis
        open_cycle_id: The symbol's OPEN wheel cycle, if any
        open_contracts: Open option contracts in that cycle
    """

    underlying_id: int
    symbol: str
    shares: Decimal
    lot_count: int
    average_cost: Decimal
    cost_basis: Decimal
    original_cost_basis: Decimal
    premium_reduction: Decimal
    current_price: Optional[Decimal] = None
    price_updated_at: Optional[datetime] = None
    market_value: Decimal
    unrealized_pnl: Decimal
    unrealized_pnl_pct: Optional[Decimal] = None
    original_pnl: Decimal
    original_pnl_pct: Optional[Decimal] = None
    open_cycle_id: Optional[int] = None
    open_contracts: int = 0


class PositionSummary(BaseModel):
    position_count: int
    total_cost_basis: Decimal
    total_original_cost_basis: Decimal
    total_market_value: Decimal
    total_unrealized_pnl: Decimal
    total_unrealized_pnl_pct: Optional[Decimal] = None
    cash_balance: Decimal
    cashflow_reserve: Decimal


class PortfolioPositionsResponse(BaseModel):
    """Held symbols of an account, largest cost basis first."""

    account_id: str
    positions: List[PositionResponse] = Field(default_factory=list)
    summary: PositionSummary


class StatementLineResponse(BaseModel):
    """Lifetime results for one symbol, held or not.

    Attributes:
        underlying_id: Underlying identifier
        symbol: Ticker symbol
        shares_held: Shares still held
        total_shares_bought: Shares acquired across every lot
        original_cost: Acquisition cost of every lot
        cost_basis: Cost basis of the shares still held
        market_value: Value of the shares still held
        unrealized_pnl: market_value minus cost_basis
        realized_cycle_pnl: Realized P&L of the symbol's finalized cycles
        cycles_finalized: Number of finalized cycles
        realized_stock_pnl: Gain on shares bought outright and since sold,
            against their acquisition cost and before sale fees
        total_realized_pnl: realized_cycle_pnl plus realized_stock_pnl
        total_pnl: total_realized_pnl plus unrealized_pnl
        open_cycle_id: The symbol's OPEN wheel cycle, if any
        open_contracts: Open option contracts in that cycle
        open_cycle_cash: Net cash booked so far to the OPEN cycle
    """

    underlying_id: int
    symbol: str
    shares_held: Decimal
    total_shares_bought: Decimal
    original_cost: Decimal
    cost_basis: Decimal
    market_value: Decimal
    unrealized_pnl: Decimal
    realized_cycle_pnl: Decimal
    cycles_finalized: int
    realized_stock_pnl: Decimal
    total_realized_pnl: Decimal
    total_pnl: Decimal
    open_cycle_id: Optional[int] = None
    open_contracts: int = 0
    open_cycle_cash: Decimal = Decimal("0")


class StatementTotals(BaseModel):
    cost_basis: Decimal
    market_value: Decimal
    unrealized_pnl: Decimal
    realized_cycle_pnl: Decimal
    realized_stock_pnl: Decimal
    total_realized_pnl: Decimal
    total_pnl: Decimal
    cash_balance: Decimal
    cashflow_reserve: Decimal


class StatementResponse(BaseModel):
    """Per-symbol statement of an account, ordered by symbol."""

    account_id: str
    lines: List[StatementLineResponse] = Field(default_factory=list)
    totals: StatementTotals
