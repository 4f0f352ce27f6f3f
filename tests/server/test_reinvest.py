"""Tests for the Reinvestment Signal Engine."""

from datetime import date
from decimal import Decimal

import pytest

from wheeltracker.server.database.models.reinvest_signal import ReinvestSignal
from wheeltracker.server.models.account import AccountCreate
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.accounts import AccountService
from wheeltracker.server.services.cycle_engine import StrategyCycleEngine
from wheeltracker.server.services.reinvest import ReinvestSignalEngine
from wheeltracker.wheel.exceptions import (
    InvariantViolation,
    NotFoundError,
    StaleSignalError,
    ValidationError,
)
from wheeltracker.wheel.state import (
    CallPut,
    LedgerType,
    ReinvestAction,
    ReinvestStatus,
)

PUT_EXP = date(2026, 11, 20)
CALL_EXP = date(2026, 12, 18)


@pytest.fixture
def reinvest(uow: UnitOfWork) -> ReinvestSignalEngine:
    return ReinvestSignalEngine(uow)


def run_wheel(uow: UnitOfWork, account_id: str, symbol: str) -> int:
    """Sell a put, take assignment, get called away; return the signal ID."""
    engine = StrategyCycleEngine(uow)
    with uow.transaction(account_id):
        underlying_id = uow.underlyings.get_or_create(account_id, symbol).id
        engine.open_short_option(
            account_id, underlying_id, CallPut.PUT, "50", PUT_EXP, 1, "2.00", "0.65"
        )
    with uow.transaction(account_id):
        engine.assign_option(account_id, underlying_id, CallPut.PUT, "50", PUT_EXP, 1)
    with uow.transaction(account_id):
        engine.open_short_option(
            account_id, underlying_id, CallPut.CALL, "55", CALL_EXP, 1, "1.00", "0.65"
        )
    with uow.transaction(account_id):
        event = engine.assign_option(
            account_id, underlying_id, CallPut.CALL, "55", CALL_EXP, 1
        )
        return event.signal.id


@pytest.fixture
def signal_id(uow: UnitOfWork, funded_account_id: str) -> int:
    """PENDING signal for $798.70 from one completed wheel on XYZ."""
    return run_wheel(uow, funded_account_id, "XYZ")


def cash(uow: UnitOfWork, account_id: str) -> Decimal:
    with uow.read(account_id) as account:
        return Decimal(account.cash_balance)


class TestPendingSignals:
    """Tests for get_pending_signals()."""

    def test_pending_signal_listed(
        self, reinvest: ReinvestSignalEngine, funded_account_id: str, signal_id: int
    ) -> None:
        pending = reinvest.get_pending_signals(funded_account_id)
        assert [s.id for s in pending] == [signal_id]
        assert pending[0].amount == Decimal("798.70")
        assert pending[0].status == ReinvestStatus.PENDING

    def test_ordered_by_creation(
        self, uow: UnitOfWork, reinvest: ReinvestSignalEngine, funded_account_id: str
    ) -> None:
        first = run_wheel(uow, funded_account_id, "XYZ")
        second = run_wheel(uow, funded_account_id, "ABC")
        pending = reinvest.get_pending_signals(funded_account_id)
        assert [s.id for s in pending] == [first, second]

    def test_resolved_signals_not_listed(
        self, reinvest: ReinvestSignalEngine, funded_account_id: str, signal_id: int
    ) -> None:
        reinvest.process_reinvest_action(funded_account_id, signal_id, ReinvestAction.REJECT)
        assert reinvest.get_pending_signals(funded_account_id) == []

    def test_unknown_account(self, reinvest: ReinvestSignalEngine) -> None:
        with pytest.raises(NotFoundError):
            reinvest.get_pending_signals("missing")


class TestProcessAction:
    """Tests for process_reinvest_action()."""

    def test_partial_commits_exact_amount(
        self,
        uow: UnitOfWork,
        reinvest: ReinvestSignalEngine,
        funded_account_id: str,
        signal_id: int,
    ) -> None:
        """PARTIAL 300.00 lowers cash by exactly 300.00; the rest is not re-queued."""
        before = cash(uow, funded_account_id)

        result = reinvest.process_reinvest_action(
            funded_account_id, signal_id, ReinvestAction.PARTIAL, partial_amount="300.00"
        )

        assert result.signal.status == ReinvestStatus.PARTIAL
        assert result.signal.partial_amount == Decimal("300.00")
        assert result.signal.resolved_at is not None
        assert result.committed_amount == Decimal("300.00")
        assert cash(uow, funded_account_id) == before - Decimal("300.00")
        assert reinvest.get_pending_signals(funded_account_id) == []
        assert uow.db.query(ReinvestSignal).count() == 1

        entries = uow.ledger.list_for_account(
            funded_account_id, entry_type=LedgerType.REINVESTMENT
        )
        assert [e.amount for e in entries] == [Decimal("-300.00")]
        assert entries[0].id == result.ledger_entry_id

    def test_approve_commits_full_amount(
        self,
        uow: UnitOfWork,
        reinvest: ReinvestSignalEngine,
        funded_account_id: str,
        signal_id: int,
    ) -> None:
        before = cash(uow, funded_account_id)
        result = reinvest.process_reinvest_action(
            funded_account_id, signal_id, ReinvestAction.APPROVE, notes="Bought VTI"
        )
        assert result.signal.status == ReinvestStatus.APPROVED
        assert result.signal.notes == "Bought VTI"
        assert cash(uow, funded_account_id) == before - Decimal("798.70")

    def test_reject_moves_no_cash(
        self,
        uow: UnitOfWork,
        reinvest: ReinvestSignalEngine,
        funded_account_id: str,
        signal_id: int,
    ) -> None:
        before = cash(uow, funded_account_id)
        result = reinvest.process_reinvest_action(
            funded_account_id, signal_id, ReinvestAction.REJECT
        )
        assert result.signal.status == ReinvestStatus.REJECTED
        assert result.committed_amount == Decimal("0")
        assert result.ledger_entry_id is None
        assert cash(uow, funded_account_id) == before

    @pytest.mark.parametrize(
        "first,partial_amount,resolved",
        [
            (ReinvestAction.APPROVE, None, ReinvestStatus.APPROVED),
            (ReinvestAction.REJECT, None, ReinvestStatus.REJECTED),
            (ReinvestAction.PARTIAL, "300.00", ReinvestStatus.PARTIAL),
        ],
    )
    @pytest.mark.parametrize(
        "second,second_amount",
        [
            (ReinvestAction.APPROVE, None),
            (ReinvestAction.REJECT, None),
            (ReinvestAction.PARTIAL, "100.00"),
        ],
    )
    def test_resolved_signal_is_stale(
        self,
        uow: UnitOfWork,
        reinvest: ReinvestSignalEngine,
        funded_account_id: str,
        signal_id: int,
        first,
        partial_amount,
        resolved,
        second,
        second_amount,
    ) -> None:
        """Any action on a resolved signal fails and leaves cash untouched."""
        reinvest.process_reinvest_action(
            funded_account_id, signal_id, first, partial_amount=partial_amount
        )
        before = cash(uow, funded_account_id)
        entries_before = uow.ledger.count_for_account(funded_account_id)

        with pytest.raises(StaleSignalError):
            reinvest.process_reinvest_action(
                funded_account_id, signal_id, second, partial_amount=second_amount
            )

        assert cash(uow, funded_account_id) == before
        assert uow.ledger.count_for_account(funded_account_id) == entries_before
        signal = uow.signals.get(funded_account_id, signal_id)
        assert signal.status == resolved

    @pytest.mark.parametrize("amount", [None, "0", "798.70", "900.00", "10.001"])
    def test_partial_amount_out_of_range(
        self,
        uow: UnitOfWork,
        reinvest: ReinvestSignalEngine,
        funded_account_id: str,
        signal_id: int,
        amount,
    ) -> None:
        """PARTIAL needs 0 < amount < signal amount."""
        with pytest.raises(ValidationError):
            reinvest.process_reinvest_action(
                funded_account_id, signal_id, ReinvestAction.PARTIAL, partial_amount=amount
            )
        assert uow.signals.get(funded_account_id, signal_id).status == ReinvestStatus.PENDING

    def test_unknown_action(
        self, reinvest: ReinvestSignalEngine, funded_account_id: str, signal_id: int
    ) -> None:
        with pytest.raises(ValidationError):
            reinvest.process_reinvest_action(funded_account_id, signal_id, "DEFER")

    def test_signal_of_other_account(
        self,
        uow: UnitOfWork,
        reinvest: ReinvestSignalEngine,
        signal_id: int,
    ) -> None:
        """Signals are only visible to their own account."""
        other = AccountService(uow).create_account(AccountCreate(name="Other"))
        with pytest.raises(NotFoundError):
            reinvest.process_reinvest_action(other.id, signal_id, ReinvestAction.APPROVE)


class TestCreateSignal:
    """Tests for create_signal()."""

    def test_one_signal_per_cycle(
        self,
        uow: UnitOfWork,
        reinvest: ReinvestSignalEngine,
        funded_account_id: str,
        signal_id: int,
    ) -> None:
        signal = uow.signals.get(funded_account_id, signal_id)
        with pytest.raises(InvariantViolation, match="already has"):
            with uow.transaction(funded_account_id):
                reinvest.create_signal(signal.instance, "10.00")


class TestReadyAmount:
    """Tests for get_reinvest_ready_amount()."""

    def test_cash_above_reserve(
        self, uow: UnitOfWork, reinvest: ReinvestSignalEngine, funded_account_id: str
    ) -> None:
        with uow.transaction(funded_account_id) as account:
            account.cashflow_reserve = Decimal("2500.00")
        assert reinvest.get_reinvest_ready_amount(funded_account_id) == Decimal("7500.00")

    def test_never_negative(
        self, uow: UnitOfWork, reinvest: ReinvestSignalEngine, account_id: str
    ) -> None:
        with uow.transaction(account_id) as account:
            account.cashflow_reserve = Decimal("100.00")
        assert reinvest.get_reinvest_ready_amount(account_id) == Decimal("0")
