"""Trade entry: turns inbound operation shapes into component calls.

Each public method is one atomic operation: it takes the account lock,
drives the Ledger, Lot Tracker and Strategy Cycle Engine, and commits
once at the end. Any error rolls back everything the call wrote.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from wheeltracker.server.database.models.ledger_entry import LedgerEntry
from wheeltracker.server.database.models.stock_lot import StockLot
from wheeltracker.server.database.models.underlying import Underlying
from wheeltracker.server.models.trade import (
    DepositRequest,
    OptionEntry,
    StockEntry,
    WithdrawalRequest,
)
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.cycle_engine import CycleEvent, StrategyCycleEngine
from wheeltracker.server.services.ledger import Ledger
from wheeltracker.server.services.lot_tracker import LotConsumption, LotTracker
from wheeltracker.server.services.rebalancer import WealthWheelRebalancer
from wheeltracker.server.services.reinvest import ReinvestSignalEngine
from wheeltracker.utils.date_utils import to_utc_naive
from wheeltracker.wheel.exceptions import ValidationError
from wheeltracker.wheel.money import require_money, require_positive, round_money, round_price
from wheeltracker.wheel.overrides import Override, from_optional
from wheeltracker.wheel.state import (
    LedgerType,
    OptionAction,
    PremiumPolicy,
    StockAction,
    WheelCategory,
)

logger = logging.getLogger(__name__)


@dataclass
class StockEntryResult:
    """Everything a stock entry changed."""

    underlying: Underlying
    entry: LedgerEntry
    cash_balance: Decimal
    lot: Optional[StockLot] = None
    consumption: Optional[LotConsumption] = None
    cycle_event: Optional[CycleEvent] = None


@dataclass
class OptionEntryResult:
    underlying: Underlying
    event: CycleEvent
    cash_balance: Decimal


class TradeEntryService:
    """Records stock trades, option events, deposits and withdrawals.

    Attributes:
        uow: Unit of work supplying the session and repositories
        ledger: Cash bookkeeping
        lots: Share lot bookkeeping
        cycles: Wheel cycle state machine
        rebalancer: Used to apply wheel category overrides
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.ledger = Ledger(uow)
        self.lots = LotTracker(uow)
        self.reinvest = ReinvestSignalEngine(uow, self.ledger)
        self.cycles = StrategyCycleEngine(uow, self.ledger, self.lots, self.reinvest)
        self.rebalancer = WealthWheelRebalancer(uow, self.lots)

    def _apply_category(
        self, account_id: str, underlying: Underlying, category: Override[WheelCategory]
    ) -> None:
        if category.is_set:
            self.rebalancer.upsert_classification(
                account_id, underlying.id, category.resolve(None)
            )

    def record_stock_entry(self, account_id: str, entry: StockEntry) -> StockEntryResult:
        """Record a stock BUY or SELL.

        BUY opens a lot whose per-share cost includes the fees and posts a
        STOCK_PURCHASE. SELL consumes lots FIFO, posts a STOCK_SALE, and
        lets the cycle engine attach the sale to the cycle whose assigned
        shares it sold.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If quantities or prices are out of range
            InsufficientLotError: If a SELL exceeds the shares held
        """
        quantity = require_positive(entry.quantity, "quantity")
        price = Decimal(entry.price)
        fees = require_money(entry.fees, "fees")
        occurred_at = to_utc_naive(entry.occurred_at)
        gross = price * quantity

        with self.uow.transaction(account_id) as account:
            underlying = self.uow.underlyings.get_or_create(account_id, entry.symbol)
            self._apply_category(account_id, underlying, from_optional(entry.wheel_category))

            if entry.action == StockAction.BUY:
                total_cost = gross + fees
                ledger_entry = self.ledger.post(
                    account_id,
                    LedgerType.STOCK_PURCHASE,
                    -round_money(total_cost),
                    occurred_at,
                    entry.notes or f"BUY {quantity} {underlying.symbol} @ {price}",
                )
                lot = self.lots.open_lot(
                    underlying.id, quantity, round_price(total_cost / quantity), occurred_at
                )
                return StockEntryResult(
                    underlying=underlying,
                    entry=ledger_entry,
                    cash_balance=Decimal(account.cash_balance),
                    lot=lot,
                )

            consumption = self.lots.consume(underlying.id, quantity, price, occurred_at)
            ledger_entry = self.ledger.post(
                account_id,
                LedgerType.STOCK_SALE,
                round_money(gross - fees),
                occurred_at,
                entry.notes or f"SELL {quantity} {underlying.symbol} @ {price}",
            )
            cycle_event = self.cycles.on_stock_sale(
                account_id, underlying.id, consumption, ledger_entry, occurred_at
            )
            return StockEntryResult(
                underlying=underlying,
                entry=ledger_entry,
                cash_balance=Decimal(account.cash_balance),
                consumption=consumption,
                cycle_event=cycle_event,
            )

    def record_option_entry(self, account_id: str, entry: OptionEntry) -> OptionEntryResult:
        """Record an option event and drive the wheel cycle.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If strike, price, quantity or fees are invalid
            InvariantViolation: If the event does not match an open leg
            InsufficientLotError: If a call assignment exceeds the shares held
        """
        policy: Override[PremiumPolicy] = from_optional(entry.premium_policy_override)
        category: Override[WheelCategory] = from_optional(entry.wheel_category_override)
        common = dict(
            call_put=entry.call_put,
            strike=entry.strike,
            expiration=entry.expiration,
            contracts=entry.quantity,
            fees=entry.fees,
            occurred_at=entry.occurred_at,
            description=entry.notes,
        )

        with self.uow.transaction(account_id) as account:
            underlying = self.uow.underlyings.get_or_create(account_id, entry.symbol)
            self._apply_category(account_id, underlying, category)

            if entry.action == OptionAction.STO:
                event = self.cycles.open_short_option(
                    account_id,
                    underlying.id,
                    price=entry.price,
                    premium_policy=policy,
                    **common,
                )
            elif entry.action == OptionAction.BTC:
                event = self.cycles.close_option(
                    account_id, underlying.id, price=entry.price, **common
                )
            elif entry.action == OptionAction.EXPIRE:
                event = self.cycles.expire_option(account_id, underlying.id, **common)
            elif entry.action == OptionAction.ASSIGN:
                event = self.cycles.assign_option(account_id, underlying.id, **common)
            else:
                raise ValidationError(f"Unsupported option action: {entry.action}")

            logger.info(
                f"Option entry {entry.action.value} {underlying.symbol} recorded "
                f"(cycle {event.instance.id}, finalized={event.finalized})"
            )
            return OptionEntryResult(
                underlying=underlying,
                event=event,
                cash_balance=Decimal(account.cash_balance),
            )

    def deposit(self, account_id: str, request: DepositRequest) -> LedgerEntry:
        """Record a cash deposit.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the amount is not positive
        """
        amount = require_positive(require_money(request.amount, "amount"), "amount")
        with self.uow.transaction(account_id):
            entry = self.ledger.post(
                account_id,
                LedgerType.CASH_DEPOSIT,
                amount,
                request.occurred_at,
                request.notes or "Cash deposit",
            )
            logger.info(f"Deposited {amount} into account {account_id}")
            return entry

    def withdraw(self, account_id: str, request: WithdrawalRequest) -> LedgerEntry:
        """Record a cash withdrawal.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the amount is not positive or exceeds cash
        """
        amount = require_positive(require_money(request.amount, "amount"), "amount")
        with self.uow.transaction(account_id) as account:
            balance = Decimal(account.cash_balance)
            if amount > balance:
                raise ValidationError(
                    f"Withdrawal of {amount} exceeds cash balance {balance}"
                )
            entry = self.ledger.post(
                account_id,
                LedgerType.CASH_WITHDRAWAL,
                -amount,
                request.occurred_at,
                request.notes or "Cash withdrawal",
            )
            logger.info(f"Withdrew {amount} from account {account_id}")
            return entry
