"""Tests for the trade entry service.

Each entry is one atomic operation: on failure nothing it wrote survives.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from wheeltracker.server.database.models.strategy_instance import StrategyInstance
from wheeltracker.server.models.trade import (
    DepositRequest,
    OptionEntry,
    StockEntry,
    WithdrawalRequest,
)
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.ledger import Ledger
from wheeltracker.server.services.trade_entry import TradeEntryService
from wheeltracker.wheel.exceptions import (
    InsufficientLotError,
    InvariantViolation,
    NotFoundError,
    ValidationError,
)
from wheeltracker.wheel.state import (
    CallPut,
    CycleStatus,
    FinalizationReason,
    LedgerType,
    OptionAction,
    PremiumPolicy,
    StockAction,
    WheelCategory,
)

EXPIRATION = date(2026, 11, 20)


def option(action: OptionAction, **kwargs) -> OptionEntry:
    params = dict(
        symbol="XYZ",
        action=action,
        call_put=CallPut.PUT,
        strike=Decimal("50"),
        expiration=EXPIRATION,
        quantity=1,
    )
    params.update(kwargs)
    return OptionEntry(**params)


def stock(action: StockAction, quantity: str, price: str, **kwargs) -> StockEntry:
    return StockEntry(
        symbol="XYZ",
        action=action,
        quantity=Decimal(quantity),
        price=Decimal(price),
        **kwargs,
    )


class TestCashMovements:
    """Tests for deposits and withdrawals."""

    def test_deposit(
        self, uow: UnitOfWork, trades: TradeEntryService, account_id: str
    ) -> None:
        """Depositing $1000.00 into an empty account."""
        entry = trades.deposit(account_id, DepositRequest(amount=Decimal("1000.00")))

        assert entry.type == LedgerType.CASH_DEPOSIT
        assert entry.amount == Decimal("1000.00")
        with uow.read(account_id) as account:
            assert account.cash_balance == Decimal("1000.00")
            assert uow.ledger.count_for_account(account_id) == 1

    def test_withdraw(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        entry = trades.withdraw(
            funded_account_id, WithdrawalRequest(amount=Decimal("2500.00"), notes="Rent")
        )
        assert entry.amount == Decimal("-2500.00")
        assert entry.description == "Rent"
        assert Ledger(uow).reconcile(funded_account_id) == Decimal("7500.00")

    def test_withdraw_more_than_cash(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        with pytest.raises(ValidationError, match="exceeds cash balance"):
            trades.withdraw(funded_account_id, WithdrawalRequest(amount=Decimal("10000.01")))
        assert uow.ledger.count_for_account(funded_account_id) == 1

    def test_unknown_account(self, trades: TradeEntryService) -> None:
        with pytest.raises(NotFoundError):
            trades.deposit("missing", DepositRequest(amount=Decimal("1.00")))


class TestStockEntry:
    """Tests for stock BUY and SELL."""

    def test_buy_opens_lot_with_fees_in_basis(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        result = trades.record_stock_entry(
            funded_account_id, stock(StockAction.BUY, "100", "50", fees=Decimal("1.00"))
        )

        assert result.underlying.symbol == "XYZ"
        assert result.entry.type == LedgerType.STOCK_PURCHASE
        assert result.entry.amount == Decimal("-5001.00")
        assert result.lot.remaining == Decimal("100")
        assert result.lot.cost_basis == Decimal("50.01")
        assert result.cash_balance == Decimal("4999.00")

    def test_symbol_is_normalized(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        """Lowercase symbols map to the same underlying."""
        first = trades.record_stock_entry(
            funded_account_id,
            StockEntry(
                symbol="xyz", action=StockAction.BUY, quantity=Decimal("1"), price=Decimal("1")
            ),
        )
        second = trades.record_stock_entry(funded_account_id, stock(StockAction.BUY, "1", "1"))
        assert first.underlying.id == second.underlying.id

    def test_sell_realizes_gain(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        trades.record_stock_entry(funded_account_id, stock(StockAction.BUY, "100", "50"))
        result = trades.record_stock_entry(
            funded_account_id, stock(StockAction.SELL, "40", "55", fees=Decimal("0.50"))
        )

        assert result.entry.type == LedgerType.STOCK_SALE
        assert result.entry.amount == Decimal("2199.50")
        assert result.consumption.realized_gain == Decimal("200")
        assert result.cycle_event is None
        assert result.cash_balance == Decimal("7199.50")

    def test_oversell_rolls_back(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        """A failed sell writes no ledger entry and leaves the lot intact."""
        trades.record_stock_entry(funded_account_id, stock(StockAction.BUY, "10", "50"))

        with pytest.raises(InsufficientLotError):
            trades.record_stock_entry(funded_account_id, stock(StockAction.SELL, "11", "55"))

        assert uow.ledger.count_for_account(funded_account_id) == 2
        with uow.read(funded_account_id):
            underlying = uow.underlyings.get_by_symbol(funded_account_id, "XYZ")
            assert uow.lots.total_remaining(underlying.id) == Decimal("10")

    def test_wheel_category_assigned(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        result = trades.record_stock_entry(
            funded_account_id,
            stock(StockAction.BUY, "1", "10", wheel_category=WheelCategory.MAD_MONEY),
        )
        with uow.read(funded_account_id):
            classification = uow.wheel.get_classification(
                funded_account_id, result.underlying.id
            )
            assert classification.category == WheelCategory.MAD_MONEY


class TestOptionEntry:
    """Tests for option entries driving the cycle engine."""

    def test_sell_put(
        self, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        result = trades.record_option_entry(
            funded_account_id,
            option(OptionAction.STO, price=Decimal("2.00"), fees=Decimal("0.65")),
        )
        assert result.event.instance.status == CycleStatus.OPEN
        assert result.event.entries[0].amount == Decimal("199.35")
        assert result.cash_balance == Decimal("10199.35")

    def test_aware_timestamps_stored_as_utc(
        self, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        eastern = timezone(timedelta(hours=-5))
        result = trades.record_option_entry(
            funded_account_id,
            option(
                OptionAction.STO,
                price=Decimal("2.00"),
                occurred_at=datetime(2026, 10, 1, 10, 0, tzinfo=eastern),
            ),
        )
        assert result.event.leg.opened_at == datetime(2026, 10, 1, 15, 0)

    def test_premium_policy_override_stored(
        self, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        result = trades.record_option_entry(
            funded_account_id,
            option(
                OptionAction.STO,
                price=Decimal("2.00"),
                premium_policy_override=PremiumPolicy.CASHFLOW,
                wheel_category_override=WheelCategory.CORE,
            ),
        )
        assert result.event.instance.premium_policy_override == PremiumPolicy.CASHFLOW

    def test_unmatched_expire_rolls_back(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        """The underlying created by a failed entry does not survive."""
        with pytest.raises(InvariantViolation):
            trades.record_option_entry(funded_account_id, option(OptionAction.EXPIRE))

        with uow.read(funded_account_id):
            assert uow.underlyings.get_by_symbol(funded_account_id, "XYZ") is None

    def test_sell_put_requires_price(
        self, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        with pytest.raises(ValidationError):
            trades.record_option_entry(funded_account_id, option(OptionAction.STO))


class TestStockSaleAndCycles:
    """Outright sales of assigned shares."""

    def _assign_put(self, trades: TradeEntryService, account_id: str) -> int:
        opened = trades.record_option_entry(
            account_id,
            option(OptionAction.STO, price=Decimal("2.00"), fees=Decimal("0.65")),
        )
        trades.record_option_entry(account_id, option(OptionAction.ASSIGN))
        return opened.event.instance.id

    def test_selling_assigned_shares_finalizes(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        instance_id = self._assign_put(trades, funded_account_id)

        result = trades.record_stock_entry(
            funded_account_id, stock(StockAction.SELL, "100", "52")
        )

        assert result.cycle_event is not None
        assert result.cycle_event.finalized is True
        assert result.entry.instance_id == instance_id

        instance = uow.db.get(StrategyInstance, instance_id)
        assert instance.status == CycleStatus.FINALIZED
        assert instance.finalization_reason == FinalizationReason.STOCK_SOLD
        # 199.35 - 5000.00 + 5200.00
        assert instance.realized_pnl == Decimal("399.35")
        assert result.cycle_event.signal.amount == Decimal("399.35")

    def test_partial_sale_keeps_cycle_open(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        instance_id = self._assign_put(trades, funded_account_id)

        result = trades.record_stock_entry(
            funded_account_id, stock(StockAction.SELL, "50", "52")
        )

        assert result.cycle_event.finalized is False
        assert uow.db.get(StrategyInstance, instance_id).status == CycleStatus.OPEN

    def test_sale_of_older_shares_is_not_attached(
        self, uow: UnitOfWork, trades: TradeEntryService, funded_account_id: str
    ) -> None:
        """FIFO sells shares bought before the assignment first."""
        trades.record_stock_entry(
            funded_account_id,
            stock(StockAction.BUY, "100", "40", occurred_at=datetime(2026, 1, 2)),
        )
        instance_id = self._assign_put(trades, funded_account_id)

        result = trades.record_stock_entry(
            funded_account_id, stock(StockAction.SELL, "100", "52")
        )

        assert result.cycle_event is None
        assert result.entry.instance_id is None
        assert uow.db.get(StrategyInstance, instance_id).status == CycleStatus.OPEN
