"""Repository for wealth wheel targets and classifications.

Upserts are an explicit read-then-insert-or-update executed inside the
caller's account-locked transaction. The unique constraints on
(account_id, category) and (account_id, underlying_id) still guard
against duplicates at the store level.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from wheeltracker.server.database.models.wealth_wheel import (
    WealthWheelClassification,
    WealthWheelTarget,
)
from wheeltracker.wheel.state import WheelCategory

logger = logging.getLogger(__name__)


class WealthWheelRepository:
    """Repository for wealth wheel settings.

    Attributes:
        db: SQLAlchemy database session
    """

    def __init__(self, db: Session):
        self.db = db

    def get_target(
        self, account_id: str, category: WheelCategory
    ) -> Optional[WealthWheelTarget]:
        return (
            self.db.query(WealthWheelTarget)
            .filter(
                WealthWheelTarget.account_id == account_id,
                WealthWheelTarget.category == category,
            )
            .first()
        )

    def list_targets(self, account_id: str) -> List[WealthWheelTarget]:
        targets = (
            self.db.query(WealthWheelTarget)
            .filter(WealthWheelTarget.account_id == account_id)
            .all()
        )
        order = list(WheelCategory)
        return sorted(targets, key=lambda t: order.index(t.category))

    def upsert_target(
        self, account_id: str, category: WheelCategory, target_pct: Decimal
    ) -> WealthWheelTarget:
        """Insert or update the target for (account_id, category)."""
        target = self.get_target(account_id, category)
        if target is None:
            target = WealthWheelTarget(
                account_id=account_id, category=category, target_pct=target_pct
            )
            self.db.add(target)
        else:
            target.target_pct = target_pct
        self.db.flush()
        return target

    def get_classification(
        self, account_id: str, underlying_id: int
    ) -> Optional[WealthWheelClassification]:
        return (
            self.db.query(WealthWheelClassification)
            .filter(
                WealthWheelClassification.account_id == account_id,
                WealthWheelClassification.underlying_id == underlying_id,
            )
            .first()
        )

    def list_classifications(self, account_id: str) -> List[WealthWheelClassification]:
        return (
            self.db.query(WealthWheelClassification)
            .filter(WealthWheelClassification.account_id == account_id)
            .order_by(WealthWheelClassification.underlying_id)
            .all()
        )

    def upsert_classification(
        self, account_id: str, underlying_id: int, category: WheelCategory
    ) -> WealthWheelClassification:
        """Insert or update the classification for (account_id, underlying_id)."""
        classification = self.get_classification(account_id, underlying_id)
        if classification is None:
            classification = WealthWheelClassification(
                account_id=account_id, underlying_id=underlying_id, category=category
            )
            self.db.add(classification)
        else:
            classification.category = category
        self.db.flush()
        return classification
