"""Repository for underlying symbol data access operations."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from wheeltracker.server.database.models.stock_lot import StockLot
from wheeltracker.server.database.models.underlying import Underlying

logger = logging.getLogger(__name__)


class UnderlyingRepository:
    """Repository for underlying data access.

    Attributes:
        db: SQLAlchemy database session
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, account_id: str, underlying_id: int) -> Optional[Underlying]:
        """Get an underlying owned by the account.

        Returns:
            Underlying if it exists and belongs to the account, None otherwise
        """
        return (
            self.db.query(Underlying)
            .filter(
                Underlying.id == underlying_id,
                Underlying.account_id == account_id,
            )
            .first()
        )

    def get_by_id(self, underlying_id: int) -> Optional[Underlying]:
        return self.db.get(Underlying, underlying_id)

    def get_by_symbol(self, account_id: str, symbol: str) -> Optional[Underlying]:
        return (
            self.db.query(Underlying)
            .filter(
                Underlying.account_id == account_id,
                Underlying.symbol == symbol.upper(),
            )
            .first()
        )

    def get_or_create(self, account_id: str, symbol: str) -> Underlying:
        """Find the account's underlying for a symbol, creating it if absent.

        Args:
            account_id: Owning account
            symbol: Ticker symbol (case-insensitive)

        Returns:
            Existing or newly created Underlying
        """
        symbol = symbol.upper().strip()
        underlying = self.get_by_symbol(account_id, symbol)
        if underlying is not None:
            return underlying

        underlying = Underlying(account_id=account_id, symbol=symbol)
        self.db.add(underlying)
        self.db.flush()
        logger.info(f"Created underlying {symbol} in account {account_id}")
        return underlying

    def list_for_account(self, account_id: str) -> List[Underlying]:
        return (
            self.db.query(Underlying)
            .filter(Underlying.account_id == account_id)
            .order_by(Underlying.symbol)
            .all()
        )

    def list_with_open_lots(self, account_id: str) -> List[Underlying]:
        """Underlyings of the account holding at least one open lot."""
        return (
            self.db.query(Underlying)
            .join(StockLot, StockLot.underlying_id == Underlying.id)
            .filter(Underlying.account_id == account_id, StockLot.remaining != 0)
            .distinct()
            .order_by(Underlying.symbol)
            .all()
        )
