"""Repository for account data access operations."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from wheeltracker.server.database.models.account import Account

logger = logging.getLogger(__name__)


class AccountRepository:
    """Repository for account data access.

    Repositories never commit. The enclosing UnitOfWork owns the
    transaction boundary.

    Attributes:
        db: SQLAlchemy database session
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, account: Account) -> Account:
        """Add a new account and flush to assign its id."""
        self.db.add(account)
        self.db.flush()
        logger.info(f"Created account: {account.id} - {account.name}")
        return account

    def get(self, account_id: str) -> Optional[Account]:
        """Get account by ID.

        Args:
            account_id: Account identifier

        Returns:
            Account instance if found, None otherwise
        """
        return self.db.get(Account, account_id)

    def get_for_update(self, account_id: str) -> Optional[Account]:
        """Get account by ID and take its row write lock.

        The lock serializes every mutation of the account's cash balance,
        lots, cycles and signals until the transaction ends. SQLite has no
        row locks; there the engine begins every transaction IMMEDIATE.

        Args:
            account_id: Account identifier

        Returns:
            Locked Account instance if found, None otherwise
        """
        return self.db.get(Account, account_id, with_for_update=True, populate_existing=True)

    def list(self, skip: int = 0, limit: int = 100) -> List[Account]:
        """List accounts ordered by creation time."""
        return (
            self.db.query(Account)
            .order_by(Account.created_at, Account.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def delete(self, account: Account) -> None:
        """Delete an account; every child entity cascades."""
        self.db.delete(account)
        self.db.flush()
        logger.info(f"Deleted account: {account.id}")
