"""Repository for stock lot data access operations."""

import logging
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from wheeltracker.server.database.models.stock_lot import StockLot

logger = logging.getLogger(__name__)


class LotRepository:
    """Repository for stock lot data access.

    Attributes:
        db: SQLAlchemy database session
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, lot: StockLot) -> StockLot:
        self.db.add(lot)
        self.db.flush()
        return lot

    def open_lots(self, underlying_id: int) -> List[StockLot]:
        """Lots of an underlying with remaining shares, oldest first.

        Ordered by opened_at, then id, so lots opened in the same instant
        are still consumed in insertion order.
        """
        return (
            self.db.query(StockLot)
            .filter(StockLot.underlying_id == underlying_id, StockLot.remaining != 0)
            .order_by(StockLot.opened_at, StockLot.id)
            .all()
        )

    def lots_for_instance(self, instance_id: int) -> List[StockLot]:
        """All lots created by a wheel cycle, open or closed."""
        return (
            self.db.query(StockLot)
            .filter(StockLot.instance_id == instance_id)
            .order_by(StockLot.opened_at, StockLot.id)
            .all()
        )

    def list_for_account(self, account_id: str, open_only: bool = False) -> List[StockLot]:
        query = self.db.query(StockLot).filter(StockLot.account_id == account_id)
        if open_only:
            query = query.filter(StockLot.remaining != 0)
        return query.order_by(StockLot.underlying_id, StockLot.opened_at, StockLot.id).all()

    def total_remaining(self, underlying_id: int) -> Decimal:
        return sum((lot.remaining for lot in self.open_lots(underlying_id)), Decimal("0"))
