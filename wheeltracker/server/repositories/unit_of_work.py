"""Transaction scope shared by every service.

A UnitOfWork wraps one SQLAlchemy session and the repositories bound to
it. Services receive it explicitly instead of reaching for a global
session, and every mutating operation runs inside exactly one
``transaction()`` block: it commits when the block exits normally and
rolls back every partial change when it raises.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from wheeltracker.server.database.models.account import Account
from wheeltracker.server.repositories.account import AccountRepository
from wheeltracker.server.repositories.cycle import CycleRepository
from wheeltracker.server.repositories.ledger import LedgerRepository
from wheeltracker.server.repositories.lot import LotRepository
from wheeltracker.server.repositories.signal import SignalRepository
from wheeltracker.server.repositories.underlying import UnderlyingRepository
from wheeltracker.server.repositories.wealth_wheel import WealthWheelRepository
from wheeltracker.wheel.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Repositories plus the transaction boundary for one session.

    Attributes:
        db: SQLAlchemy database session
        accounts: Account repository
        underlyings: Underlying repository
        lots: Stock lot repository
        ledger: Ledger entry repository
        cycles: Strategy instance and option leg repository
        signals: Reinvest signal repository
        wheel: Wealth wheel target/classification repository
    """

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountRepository(db)
        self.underlyings = UnderlyingRepository(db)
        self.lots = LotRepository(db)
        self.ledger = LedgerRepository(db)
        self.cycles = CycleRepository(db)
        self.signals = SignalRepository(db)
        self.wheel = WealthWheelRepository(db)
        self._depth = 0

    @property
    def active(self) -> bool:
        """True while a transaction() or read() block is open."""
        return self._depth > 0

    def _end_implicit_transaction(self) -> None:
        # A session autobegins on first use; discard that read-only
        # transaction so the next one starts with a fresh snapshot.
        if self.db.in_transaction():
            self.db.rollback()

    @contextmanager
    def transaction(self, account_id: Optional[str] = None) -> Iterator[Optional[Account]]:
        """Run a mutating operation atomically.

        When account_id is given, the account row is locked for the rest of
        the transaction and yielded; a missing account raises NotFoundError
        before anything is written. Nested calls join the outer transaction.

        Args:
            account_id: Account to lock, or None for account creation

        Yields:
            The locked Account, or None when no account_id was given

        Raises:
            NotFoundError: If account_id does not exist
        """
        if self.active:
            account = self._require_account(account_id, lock=False) if account_id else None
            self._depth += 1
            try:
                yield account
            finally:
                self._depth -= 1
            return

        self._end_implicit_transaction()
        self._depth += 1
        try:
            with self.db.begin():
                account = self._require_account(account_id, lock=True) if account_id else None
                yield account
        except Exception:
            logger.debug("Transaction rolled back", exc_info=True)
            raise
        finally:
            self._depth -= 1

    @contextmanager
    def read(self, account_id: Optional[str] = None) -> Iterator[Optional[Account]]:
        """Run a read-only operation without taking the account write lock.

        Args:
            account_id: Account to load, or None

        Yields:
            The Account, or None when no account_id was given

        Raises:
            NotFoundError: If account_id does not exist
        """
        if self.active:
            self._depth += 1
            try:
                yield self._require_account(account_id, lock=False) if account_id else None
            finally:
                self._depth -= 1
            return

        self._end_implicit_transaction()
        self._depth += 1
        try:
            yield self._require_account(account_id, lock=False) if account_id else None
        finally:
            self._depth -= 1
            self._end_implicit_transaction()

    def _require_account(self, account_id: str, lock: bool) -> Account:
        if lock:
            account = self.accounts.get_for_update(account_id)
        else:
            account = self.accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"Account not found: {account_id}")
        return account
