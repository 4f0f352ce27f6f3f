"""Repository for reinvest signal data access operations."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from wheeltracker.server.database.models.reinvest_signal import ReinvestSignal
from wheeltracker.wheel.state import ReinvestStatus

logger = logging.getLogger(__name__)


class SignalRepository:
    """Repository for reinvest signal data access.

    Attributes:
        db: SQLAlchemy database session
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, signal: ReinvestSignal) -> ReinvestSignal:
        self.db.add(signal)
        self.db.flush()
        return signal

    def get(self, account_id: str, signal_id: int) -> Optional[ReinvestSignal]:
        return (
            self.db.query(ReinvestSignal)
            .filter(
                ReinvestSignal.id == signal_id,
                ReinvestSignal.account_id == account_id,
            )
            .first()
        )

    def get_by_instance(self, instance_id: int) -> Optional[ReinvestSignal]:
        return (
            self.db.query(ReinvestSignal)
            .filter(ReinvestSignal.instance_id == instance_id)
            .first()
        )

    def list_pending(self, account_id: str) -> List[ReinvestSignal]:
        """PENDING signals of an account, oldest first."""
        return (
            self.db.query(ReinvestSignal)
            .filter(
                ReinvestSignal.account_id == account_id,
                ReinvestSignal.status == ReinvestStatus.PENDING,
            )
            .order_by(ReinvestSignal.created_at, ReinvestSignal.id)
            .all()
        )

    def list_for_account(self, account_id: str) -> List[ReinvestSignal]:
        return (
            self.db.query(ReinvestSignal)
            .filter(ReinvestSignal.account_id == account_id)
            .order_by(ReinvestSignal.created_at, ReinvestSignal.id)
            .all()
        )
