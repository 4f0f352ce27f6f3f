"""Account management service."""

import logging
from decimal import Decimal
from typing import List, Optional

from wheeltracker.server.database.models.account import Account
from wheeltracker.server.database.models.ledger_entry import LedgerEntry
from wheeltracker.server.database.models.stock_lot import StockLot
from wheeltracker.server.database.models.strategy_instance import StrategyInstance
from wheeltracker.server.database.models.underlying import Underlying
from wheeltracker.server.models.account import AccountCreate, AccountUpdate
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.ledger import Ledger
from wheeltracker.wheel.exceptions import InvariantViolation, NotFoundError
from wheeltracker.wheel.overrides import Override, to_optional
from wheeltracker.wheel.state import CycleStatus, PremiumPolicy

logger = logging.getLogger(__name__)


class AccountService:
    """Create, inspect and configure accounts.

    Attributes:
        uow: Unit of work supplying the session and repositories
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.ledger = Ledger(uow)

    def create_account(self, data: AccountCreate) -> Account:
        """Create an account with zero cash."""
        with self.uow.transaction():
            account = self.uow.accounts.add(
                Account(
                    name=data.name,
                    cash_balance=Decimal("0"),
                    cashflow_reserve=data.cashflow_reserve,
                    default_policy=data.default_policy,
                    notes=data.notes,
                )
            )
            return account

    def get_account(self, account_id: str) -> Account:
        """Get an account.

        Raises:
            NotFoundError: If the account does not exist
        """
        with self.uow.read(account_id) as account:
            return account

    def list_accounts(self, skip: int = 0, limit: int = 100) -> List[Account]:
        with self.uow.read():
            return self.uow.accounts.list(skip=skip, limit=limit)

    def update_account(self, account_id: str, data: AccountUpdate) -> Account:
        """Apply the fields set on the update request."""
        with self.uow.transaction(account_id) as account:
            for key, value in data.model_dump(exclude_unset=True).items():
                if value is None and key in ("name", "cashflow_reserve", "default_policy"):
                    continue
                setattr(account, key, value)
            self.uow.db.flush()
            logger.info(f"Updated account {account_id}")
            return account

    def delete_account(self, account_id: str) -> None:
        """Delete an account and everything it owns."""
        with self.uow.transaction(account_id) as account:
            self.uow.accounts.delete(account)

    def list_underlyings(self, account_id: str) -> List[Underlying]:
        with self.uow.read(account_id):
            return self.uow.underlyings.list_for_account(account_id)

    def set_underlying_policy(
        self, account_id: str, underlying_id: int, policy: Override[PremiumPolicy]
    ) -> Underlying:
        """Set or clear the premium policy of one underlying.

        Raises:
            NotFoundError: If the account or underlying does not exist
        """
        with self.uow.transaction(account_id):
            underlying = self.uow.underlyings.get(account_id, underlying_id)
            if underlying is None:
                raise NotFoundError(f"Underlying not found: {underlying_id}")
            underlying.premium_policy = to_optional(policy)
            self.uow.db.flush()
            logger.info(
                f"Underlying {underlying.symbol} premium policy set to "
                f"{underlying.premium_policy}"
            )
            return underlying

    def list_lots(self, account_id: str, open_only: bool = True) -> List[StockLot]:
        with self.uow.read(account_id):
            return self.uow.lots.list_for_account(account_id, open_only=open_only)

    def list_cycles(
        self,
        account_id: str,
        status: Optional[CycleStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[StrategyInstance]:
        with self.uow.read(account_id):
            return self.uow.cycles.list_for_account(account_id, status, skip, limit)

    def get_cycle(self, account_id: str, instance_id: int) -> StrategyInstance:
        with self.uow.read(account_id):
            instance = self.uow.cycles.get(account_id, instance_id)
            if instance is None:
                raise NotFoundError(f"Strategy instance not found: {instance_id}")
            return instance

    def list_ledger_entries(
        self, account_id: str, skip: int = 0, limit: int = 100
    ) -> List[LedgerEntry]:
        with self.uow.read(account_id):
            return self.uow.ledger.list_for_account(account_id, skip=skip, limit=limit)

    def reconcile(self, account_id: str) -> dict:
        """Compare the cash balance with the ledger total.

        Unlike Ledger.reconcile(), a mismatch is reported rather than raised.
        """
        try:
            balance = self.ledger.reconcile(account_id)
            return {
                "account_id": account_id,
                "cash_balance": balance,
                "ledger_total": balance,
                "reconciled": True,
            }
        except InvariantViolation:
            with self.uow.read(account_id) as account:
                return {
                    "account_id": account_id,
                    "cash_balance": Decimal(account.cash_balance),
                    "ledger_total": self.ledger.balance_from_entries(account_id),
                    "reconciled": False,
                }
