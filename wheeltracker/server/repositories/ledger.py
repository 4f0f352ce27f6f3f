"""Repository for ledger entry data access operations.

Ledger entries are append-only: this repository exposes no update or
delete. Sums are computed in Python over the stored Decimal amounts so
they stay exact on backends that keep Numeric as floating point.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from wheeltracker.server.database.models.ledger_entry import LedgerEntry
from wheeltracker.wheel.state import LedgerType

logger = logging.getLogger(__name__)


class LedgerRepository:
    """Repository for ledger entry data access.

    Attributes:
        db: SQLAlchemy database session
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, entry: LedgerEntry) -> LedgerEntry:
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_for_account(
        self,
        account_id: str,
        skip: int = 0,
        limit: int = 100,
        entry_type: Optional[LedgerType] = None,
    ) -> List[LedgerEntry]:
        """List an account's entries in recording order."""
        query = self.db.query(LedgerEntry).filter(LedgerEntry.account_id == account_id)
        if entry_type is not None:
            query = query.filter(LedgerEntry.type == entry_type)
        return query.order_by(LedgerEntry.id).offset(skip).limit(limit).all()

    def list_for_instance(self, instance_id: int) -> List[LedgerEntry]:
        return (
            self.db.query(LedgerEntry)
            .filter(LedgerEntry.instance_id == instance_id)
            .order_by(LedgerEntry.id)
            .all()
        )

    def sum_for_account(self, account_id: str) -> Decimal:
        rows = (
            self.db.query(LedgerEntry.amount)
            .filter(LedgerEntry.account_id == account_id)
            .all()
        )
        return sum((row.amount for row in rows), Decimal("0"))

    def sum_for_instance(self, instance_id: int) -> Decimal:
        rows = (
            self.db.query(LedgerEntry.amount)
            .filter(LedgerEntry.instance_id == instance_id)
            .all()
        )
        return sum((row.amount for row in rows), Decimal("0"))

    def count_for_account(self, account_id: str) -> int:
        return (
            self.db.query(LedgerEntry)
            .filter(LedgerEntry.account_id == account_id)
            .count()
        )
