"""Tests for the Ledger service."""

from decimal import Decimal

import pytest

from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.ledger import Ledger
from wheeltracker.wheel.exceptions import (
    InvariantViolation,
    NotFoundError,
    ValidationError,
)
from wheeltracker.wheel.state import LedgerType


@pytest.fixture
def ledger(uow: UnitOfWork) -> Ledger:
    return Ledger(uow)


class TestPost:
    """Tests for Ledger.post()."""

    def test_deposit_updates_balance_and_appends_entry(
        self, uow: UnitOfWork, ledger: Ledger, account_id: str
    ) -> None:
        """A $1000.00 deposit into an empty account yields one entry and cash 1000.00."""
        with uow.transaction(account_id):
            ledger.post(account_id, LedgerType.CASH_DEPOSIT, Decimal("1000.00"))

        with uow.read(account_id) as account:
            assert account.cash_balance == Decimal("1000.00")
            entries = uow.ledger.list_for_account(account_id)
            assert len(entries) == 1
            assert entries[0].type == LedgerType.CASH_DEPOSIT
            assert entries[0].amount == Decimal("1000.00")

    def test_negative_balance_is_allowed(
        self, uow: UnitOfWork, ledger: Ledger, account_id: str
    ) -> None:
        """The ledger itself does not forbid negative cash."""
        with uow.transaction(account_id):
            ledger.post(account_id, LedgerType.STOCK_PURCHASE, Decimal("-250.00"))

        with uow.read(account_id) as account:
            assert account.cash_balance == Decimal("-250.00")

    def test_entry_links_instance(
        self, uow: UnitOfWork, ledger: Ledger, account_id: str
    ) -> None:
        with uow.transaction(account_id):
            entry = ledger.post(
                account_id, LedgerType.FEE, "-0.65", description="Fee", instance_id=None
            )
            assert entry.id is not None
            assert entry.description == "Fee"
            assert entry.occurred_at is not None

    def test_sub_cent_amount_rejected_without_writes(
        self, uow: UnitOfWork, ledger: Ledger, account_id: str
    ) -> None:
        """An invalid amount leaves no entry and no balance change."""
        with pytest.raises(ValidationError):
            with uow.transaction(account_id):
                ledger.post(account_id, LedgerType.CASH_DEPOSIT, "10.001")

        with uow.read(account_id) as account:
            assert account.cash_balance == Decimal("0")
            assert uow.ledger.count_for_account(account_id) == 0

    def test_unknown_account(self, uow: UnitOfWork, ledger: Ledger) -> None:
        with pytest.raises(NotFoundError):
            with uow.transaction("missing"):
                ledger.post("missing", LedgerType.CASH_DEPOSIT, "1.00")

    def test_failure_rolls_back_earlier_posts(
        self, uow: UnitOfWork, ledger: Ledger, account_id: str
    ) -> None:
        """Every post in a failed transaction is discarded."""
        with pytest.raises(ValidationError):
            with uow.transaction(account_id):
                ledger.post(account_id, LedgerType.CASH_DEPOSIT, "500.00")
                ledger.post(account_id, LedgerType.FEE, "abc")

        with uow.read(account_id) as account:
            assert account.cash_balance == Decimal("0")
            assert uow.ledger.count_for_account(account_id) == 0


class TestReconcile:
    """Tests for Ledger.reconcile()."""

    def test_reconciles_after_posts(
        self, uow: UnitOfWork, ledger: Ledger, account_id: str
    ) -> None:
        with uow.transaction(account_id):
            ledger.post(account_id, LedgerType.CASH_DEPOSIT, "1000.00")
            ledger.post(account_id, LedgerType.PREMIUM_COLLECTED, "199.35")
            ledger.post(account_id, LedgerType.FEE, "-0.65")

        assert ledger.reconcile(account_id) == Decimal("1198.70")

    def test_mismatch_raises_invariant_violation(
        self, uow: UnitOfWork, ledger: Ledger, account_id: str
    ) -> None:
        """An entry recorded without a balance adjustment is detected."""
        with uow.transaction(account_id):
            ledger.record_entry(account_id, LedgerType.CASH_DEPOSIT, "10.00")

        with pytest.raises(InvariantViolation, match="does not match"):
            ledger.reconcile(account_id)

    def test_balance_from_entries(
        self, uow: UnitOfWork, ledger: Ledger, account_id: str
    ) -> None:
        with uow.transaction(account_id):
            ledger.post(account_id, LedgerType.CASH_DEPOSIT, "0.10")
            ledger.post(account_id, LedgerType.CASH_DEPOSIT, "0.20")
            assert ledger.balance_from_entries(account_id) == Decimal("0.30")
