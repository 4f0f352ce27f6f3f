"""Lot Tracker: open share lots, FIFO consumption and valuation."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from wheeltracker.server.database.models.stock_lot import StockLot
from wheeltracker.server.database.models.underlying import Underlying
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.utils.date_utils import to_utc_naive
from wheeltracker.wheel.exceptions import InsufficientLotError, NotFoundError
from wheeltracker.wheel.money import (
    ZERO,
    Number,
    require_non_negative,
    require_positive,
    round_money,
    round_price,
    to_decimal,
)

logger = logging.getLogger(__name__)


@dataclass
class ConsumedLot:
    """Shares taken from one lot by a consume() call."""

    lot_id: int
    instance_id: Optional[int]
    quantity: Decimal
    cost_basis: Decimal
    realized_gain: Decimal


@dataclass
class LotConsumption:
    """Result of consuming shares FIFO across an underlying's lots."""

    underlying_id: int
    quantity: Decimal
    sale_price: Decimal
    lots: List[ConsumedLot] = field(default_factory=list)

    @property
    def realized_gain(self) -> Decimal:
        return sum((c.realized_gain for c in self.lots), ZERO)

    @property
    def cost_basis_total(self) -> Decimal:
        return sum((c.cost_basis * c.quantity for c in self.lots), ZERO)

    def touched_instance(self, instance_id: int) -> bool:
        """True if any consumed lot was created by the given cycle."""
        return any(c.instance_id == instance_id for c in self.lots)


class LotTracker:
    """Maintains open stock positions as acquisition lots.

    Mutating methods expect an open UnitOfWork transaction.

    Attributes:
        uow: Unit of work supplying the session and repositories
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _get_underlying(self, underlying_id: int) -> Underlying:
        underlying = self.uow.underlyings.get_by_id(underlying_id)
        if underlying is None:
            raise NotFoundError(f"Underlying not found: {underlying_id}")
        return underlying

    def open_lot(
        self,
        underlying_id: int,
        quantity: Number,
        cost_basis_per_share: Number,
        opened_at: Optional[datetime] = None,
        instance_id: Optional[int] = None,
    ) -> StockLot:
        """Open a new lot.

        Args:
            underlying_id: Underlying the shares belong to
            quantity: Shares acquired (> 0)
            cost_basis_per_share: Cost per share (>= 0)
            opened_at: Acquisition time, the FIFO key (defaults to now)
            instance_id: Wheel cycle whose put assignment created the lot

        Returns:
            The flushed StockLot

        Raises:
            ValidationError: If quantity or cost basis is out of range
            NotFoundError: If the underlying does not exist
        """
        quantity = require_positive(quantity, "quantity")
        cost_basis = round_price(require_non_negative(cost_basis_per_share, "cost_basis"))
        underlying = self._get_underlying(underlying_id)

        lot = StockLot(
            account_id=underlying.account_id,
            underlying_id=underlying.id,
            instance_id=instance_id,
            open_quantity=quantity,
            remaining=quantity,
            cost_basis=cost_basis,
            original_cost_basis=cost_basis,
            opened_at=to_utc_naive(opened_at),
        )
        self.uow.lots.add(lot)
        logger.info(
            f"Opened lot {lot.id}: {quantity} {underlying.symbol} @ {cost_basis}"
        )
        return lot

    def consume(
        self,
        underlying_id: int,
        quantity: Number,
        sale_price: Number,
        as_of: Optional[datetime] = None,
    ) -> LotConsumption:
        """Consume shares from the oldest open lots first.

        The total remainder is checked before any lot is touched, so a
        failed call leaves every lot unchanged.

        Args:
            underlying_id: Underlying to consume from
            quantity: Shares to consume (> 0)
            sale_price: Price per share realized on the consumed shares
            as_of: When the consumption happened (defaults to now)

        Returns:
            LotConsumption listing each lot touched and the realized gain

        Raises:
            ValidationError: If quantity or sale_price is out of range
            NotFoundError: If the underlying does not exist
            InsufficientLotError: If quantity exceeds the shares held
        """
        quantity = require_positive(quantity, "quantity")
        sale_price = require_non_negative(sale_price, "sale_price")
        underlying = self._get_underlying(underlying_id)

        lots = self.uow.lots.open_lots(underlying_id)
        available = sum((Decimal(lot.remaining) for lot in lots), ZERO)
        if quantity > available:
            raise InsufficientLotError(
                f"Cannot consume {quantity} shares of {underlying.symbol}: "
                f"only {available} held",
                requested=quantity,
                available=available,
            )

        as_of = to_utc_naive(as_of)
        consumption = LotConsumption(
            underlying_id=underlying_id, quantity=quantity, sale_price=sale_price
        )
        outstanding = quantity
        for lot in lots:
            if outstanding <= 0:
                break
            take = min(Decimal(lot.remaining), outstanding)
            lot.remaining = Decimal(lot.remaining) - take
            if lot.remaining == 0:
                lot.closed_at = as_of
            outstanding -= take
            cost_basis = Decimal(lot.cost_basis)
            lot.realized_gain = round_money(
                Decimal(lot.realized_gain or 0) + (sale_price - lot.acquisition_basis) * take
            )
            consumption.lots.append(
                ConsumedLot(
                    lot_id=lot.id,
                    instance_id=lot.instance_id,
                    quantity=take,
                    cost_basis=cost_basis,
                    realized_gain=(sale_price - cost_basis) * take,
                )
            )
        self.uow.db.flush()

        logger.info(
            f"Consumed {quantity} {underlying.symbol} across {len(consumption.lots)} "
            f"lot(s) @ {sale_price}, realized gain {consumption.realized_gain}"
        )
        return consumption

    def open_lots(self, underlying_id: int) -> List[StockLot]:
        return self.uow.lots.open_lots(underlying_id)

    def shares_held(self, underlying_id: int) -> Decimal:
        return self.uow.lots.total_remaining(underlying_id)

    def cycle_shares(self, instance_id: int) -> Decimal:
        """Shares still held from lots created by a wheel cycle."""
        return sum(
            (Decimal(lot.remaining) for lot in self.uow.lots.lots_for_instance(instance_id)),
            ZERO,
        )

    def current_value(self, underlying: Underlying) -> Decimal:
        """Market value of an underlying's open lots at full precision.

        Until a price has been fetched, each lot is valued at its cost basis.
        """
        lots = self.uow.lots.open_lots(underlying.id)
        if underlying.current_price is None:
            return sum(
                (Decimal(lot.remaining) * Decimal(lot.cost_basis) for lot in lots), ZERO
            )
        price = Decimal(underlying.current_price)
        return sum((Decimal(lot.remaining) for lot in lots), ZERO) * price

    def apply_basis_reduction(self, underlying_id: int, amount: Number) -> List[StockLot]:
        """Spread an amount across open lots' cost basis, pro rata by shares.

        Cost basis never drops below zero. A call with no open lots is a no-op.

        Returns:
            The lots whose basis changed
        """
        amount = require_non_negative(amount, "amount")
        lots = self.uow.lots.open_lots(underlying_id)
        total_shares = sum((Decimal(lot.remaining) for lot in lots), ZERO)
        if amount == 0 or total_shares == 0:
            return []

        per_share = amount / total_shares
        for lot in lots:
            lot.cost_basis = max(ZERO, round_price(Decimal(lot.cost_basis) - per_share))
        self.uow.db.flush()
        logger.info(
            f"Reduced cost basis of {len(lots)} lot(s) on underlying {underlying_id} "
            f"by {round_price(per_share)}/share"
        )
        return lots
