"""Ledger: append-only cash events and the per-account cash counter.

Every cash-affecting event is recorded as an immutable LedgerEntry and
applied to Account.cash_balance inside the same transaction, so the sum
of an account's entries equals its balance at every commit.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from wheeltracker.server.database.models.account import Account
from wheeltracker.server.database.models.ledger_entry import LedgerEntry
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.utils.date_utils import to_utc_naive
from wheeltracker.wheel.exceptions import InvariantViolation, NotFoundError
from wheeltracker.wheel.money import Number, require_money, to_decimal
from wheeltracker.wheel.state import LedgerType

logger = logging.getLogger(__name__)


class Ledger:
    """Cash bookkeeping for accounts.

    Methods other than reconcile() expect to run inside an open
    UnitOfWork transaction that holds the account lock.

    Attributes:
        uow: Unit of work supplying the session and repositories
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _get_account(self, account_id: str) -> Account:
        account = self.uow.accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"Account not found: {account_id}")
        return account

    def record_entry(
        self,
        account_id: str,
        entry_type: LedgerType,
        amount: Number,
        occurred_at: Optional[datetime] = None,
        description: Optional[str] = None,
        instance_id: Optional[int] = None,
    ) -> LedgerEntry:
        """Append an entry without touching the cash balance.

        Args:
            account_id: Owning account
            entry_type: Kind of cash event
            amount: Signed amount, finite with at most 2 decimal places
            occurred_at: When the event happened (defaults to now)
            description: Human-readable description
            instance_id: Wheel cycle the entry contributes to

        Returns:
            The flushed LedgerEntry

        Raises:
            ValidationError: If amount is not a valid cash amount
            NotFoundError: If the account does not exist
        """
        amount = require_money(amount, "amount")
        self._get_account(account_id)

        entry = LedgerEntry(
            account_id=account_id,
            instance_id=instance_id,
            type=entry_type,
            amount=amount,
            occurred_at=to_utc_naive(occurred_at),
            description=description,
        )
        self.uow.ledger.add(entry)
        logger.info(
            f"Ledger entry {entry.id}: {entry_type.value} {amount} "
            f"(account {account_id}, instance {instance_id})"
        )
        return entry

    def adjust_cash_balance(self, account_id: str, delta: Number) -> Decimal:
        """Add delta to the account's cash balance.

        A negative resulting balance is allowed; business rules that forbid
        it belong to the caller.

        Returns:
            The new cash balance
        """
        delta = to_decimal(delta, "delta")
        account = self._get_account(account_id)
        account.cash_balance = Decimal(account.cash_balance) + delta
        self.uow.db.flush()
        logger.debug(f"Cash balance for {account_id} adjusted by {delta}")
        return account.cash_balance

    def post(
        self,
        account_id: str,
        entry_type: LedgerType,
        amount: Number,
        occurred_at: Optional[datetime] = None,
        description: Optional[str] = None,
        instance_id: Optional[int] = None,
    ) -> LedgerEntry:
        """Record an entry and apply it to the cash balance."""
        entry = self.record_entry(
            account_id, entry_type, amount, occurred_at, description, instance_id
        )
        self.adjust_cash_balance(account_id, entry.amount)
        return entry

    def balance_from_entries(self, account_id: str) -> Decimal:
        """Sum of every ledger entry of the account."""
        return self.uow.ledger.sum_for_account(account_id)

    def reconcile(self, account_id: str) -> Decimal:
        """Check that the stored cash balance equals the ledger sum.

        Returns:
            The reconciled balance

        Raises:
            NotFoundError: If the account does not exist
            InvariantViolation: If balance and ledger disagree
        """
        with self.uow.read(account_id) as account:
            expected = self.balance_from_entries(account_id)
            actual = Decimal(account.cash_balance)
            if expected != actual:
                logger.critical(
                    f"Ledger mismatch for account {account_id}: "
                    f"balance {actual} != entries {expected}"
                )
                raise InvariantViolation(
                    f"Cash balance {actual} does not match ledger total {expected}"
                )
            return actual
