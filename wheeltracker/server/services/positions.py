"""Service layer for position and statement reporting.

This module aggregates lots, cycles and prices per symbol into the
read-only views served by the positions API. Nothing here writes.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from wheeltracker.server.database.models.stock_lot import StockLot
from wheeltracker.server.database.models.strategy_instance import StrategyInstance
from wheeltracker.server.database.models.underlying import Underlying
from wheeltracker.server.models.position import (
    PortfolioPositionsResponse,
    PositionResponse,
    PositionSummary,
    StatementLineResponse,
    StatementResponse,
    StatementTotals,
)
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.lot_tracker import LotTracker
from wheeltracker.wheel.money import ZERO, round_money
from wheeltracker.wheel.state import CycleStatus

logger = logging.getLogger(__name__)


def _pct(value: Decimal, base: Decimal) -> Optional[Decimal]:
    if base == 0:
        return None
    return round_money(value / base * 100)


def _open_cycle(underlying: Underlying) -> Optional[StrategyInstance]:
    for instance in underlying.instances:
        if instance.status == CycleStatus.OPEN:
            return instance
    return None


def _open_contracts(instance: Optional[StrategyInstance]) -> int:
    if instance is None:
        return 0
    return sum(leg.open_contracts for leg in instance.legs)


class PositionService:
    """Builds position and statement views of an account.

    Attributes:
        uow: Unit of work supplying the session and repositories
        lots: Lot tracker used for valuation
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.lots = LotTracker(uow)

    def get_positions(self, account_id: str) -> PortfolioPositionsResponse:
        """Current holdings of an account, largest cost basis first.

        Args:
            account_id: Account identifier

        Returns:
            PortfolioPositionsResponse with one entry per held symbol

        Raises:
            NotFoundError: If the account does not exist
        """
        with self.uow.read(account_id) as account:
            positions = [
                self._build_position(underlying)
                for underlying in self.uow.underlyings.list_with_open_lots(account_id)
            ]
            positions.sort(key=lambda p: (-p.cost_basis, p.symbol))

            total_cost = sum((p.cost_basis for p in positions), ZERO)
            total_value = sum((p.market_value for p in positions), ZERO)
            summary = PositionSummary(
                position_count=len(positions),
                total_cost_basis=total_cost,
                total_original_cost_basis=sum(
                    (p.original_cost_basis for p in positions), ZERO
                ),
                total_market_value=total_value,
                total_unrealized_pnl=total_value - total_cost,
                total_unrealized_pnl_pct=_pct(total_value - total_cost, total_cost),
                cash_balance=round_money(Decimal(account.cash_balance)),
                cashflow_reserve=round_money(Decimal(account.cashflow_reserve)),
            )

        logger.debug(f"Built {len(positions)} position(s) for account {account_id}")
        return PortfolioPositionsResponse(
            account_id=account_id, positions=positions, summary=summary
        )

    def _build_position(self, underlying: Underlying) -> PositionResponse:
        open_lots: List[StockLot] = self.lots.open_lots(underlying.id)
        shares = sum((Decimal(lot.remaining) for lot in open_lots), ZERO)
        cost_basis = sum(
            (Decimal(lot.remaining) * Decimal(lot.cost_basis) for lot in open_lots), ZERO
        )
        original = sum(
            (Decimal(lot.remaining) * lot.acquisition_basis for lot in open_lots), ZERO
        )
        market_value = self.lots.current_value(underlying)
        instance = _open_cycle(underlying)

        return PositionResponse(
            underlying_id=underlying.id,
            symbol=underlying.symbol,
            shares=shares,
            lot_count=len(open_lots),
            average_cost=round_money(cost_basis / shares) if shares else ZERO,
            cost_basis=round_money(cost_basis),
            original_cost_basis=round_money(original),
            premium_reduction=round_money(original - cost_basis),
            current_price=underlying.current_price,
            price_updated_at=underlying.price_updated_at,
            market_value=round_money(market_value),
            unrealized_pnl=round_money(market_value - cost_basis),
            unrealized_pnl_pct=_pct(market_value - cost_basis, cost_basis),
            original_pnl=round_money(market_value - original),
            original_pnl_pct=_pct(market_value - original, original),
            open_cycle_id=instance.id if instance else None,
            open_contracts=_open_contracts(instance),
        )

    def get_statement(self, account_id: str) -> StatementResponse:
        """Lifetime per-symbol results, including symbols no longer held.

        Realized P&L comes from two places that never overlap: finalized
        cycles (premiums, assignments and the sale of assigned shares) and
        lots bought outright.

        Raises:
            NotFoundError: If the account does not exist
        """
        with self.uow.read(account_id) as account:
            lines = [
                self._build_statement_line(underlying)
                for underlying in self.uow.underlyings.list_for_account(account_id)
            ]

            def total(field: str) -> Decimal:
                return sum((getattr(line, field) for line in lines), ZERO)

            totals = StatementTotals(
                cost_basis=total("cost_basis"),
                market_value=total("market_value"),
                unrealized_pnl=total("unrealized_pnl"),
                realized_cycle_pnl=total("realized_cycle_pnl"),
                realized_stock_pnl=total("realized_stock_pnl"),
                total_realized_pnl=total("total_realized_pnl"),
                total_pnl=total("total_pnl"),
                cash_balance=round_money(Decimal(account.cash_balance)),
                cashflow_reserve=round_money(Decimal(account.cashflow_reserve)),
            )

        return StatementResponse(account_id=account_id, lines=lines, totals=totals)

    def _build_statement_line(self, underlying: Underlying) -> StatementLineResponse:
        lots: List[StockLot] = list(underlying.lots)
        open_lots = [lot for lot in lots if lot.is_open]
        shares_held = sum((Decimal(lot.remaining) for lot in open_lots), ZERO)
        cost_basis = sum(
            (Decimal(lot.remaining) * Decimal(lot.cost_basis) for lot in open_lots), ZERO
        )
        market_value = self.lots.current_value(underlying)

        finalized = [i for i in underlying.instances if i.status == CycleStatus.FINALIZED]
        realized_cycle = sum((Decimal(i.realized_pnl or 0) for i in finalized), ZERO)
        # Assigned lots are settled inside their cycle's ledger entries
        realized_stock = sum(
            (Decimal(lot.realized_gain or 0) for lot in lots if lot.instance_id is None),
            ZERO,
        )
        unrealized = round_money(market_value - cost_basis)
        total_realized = round_money(realized_cycle + realized_stock)

        instance = _open_cycle(underlying)
        open_cash = self.uow.ledger.sum_for_instance(instance.id) if instance else ZERO

        return StatementLineResponse(
            underlying_id=underlying.id,
            symbol=underlying.symbol,
            shares_held=shares_held,
            total_shares_bought=sum((Decimal(lot.open_quantity) for lot in lots), ZERO),
            original_cost=round_money(
                sum(
                    (Decimal(lot.open_quantity) * lot.acquisition_basis for lot in lots),
                    ZERO,
                )
            ),
            cost_basis=round_money(cost_basis),
            market_value=round_money(market_value),
            unrealized_pnl=unrealized,
            realized_cycle_pnl=round_money(realized_cycle),
            cycles_finalized=len(finalized),
            realized_stock_pnl=round_money(realized_stock),
            total_realized_pnl=total_realized,
            total_pnl=total_realized + unrealized,
            open_cycle_id=instance.id if instance else None,
            open_contracts=_open_contracts(instance),
            open_cycle_cash=round_money(open_cash),
        )
