"""Repository for wheel cycle and option leg data access operations."""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from wheeltracker.server.database.models.option_leg import OptionLeg
from wheeltracker.server.database.models.strategy_instance import StrategyInstance
from wheeltracker.wheel.state import CallPut, CycleStatus

logger = logging.getLogger(__name__)


class CycleRepository:
    """Repository for strategy instances and their option legs.

    Attributes:
        db: SQLAlchemy database session
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, instance: StrategyInstance) -> StrategyInstance:
        self.db.add(instance)
        self.db.flush()
        return instance

    def add_leg(self, leg: OptionLeg) -> OptionLeg:
        self.db.add(leg)
        self.db.flush()
        return leg

    def get(self, account_id: str, instance_id: int) -> Optional[StrategyInstance]:
        return (
            self.db.query(StrategyInstance)
            .filter(
                StrategyInstance.id == instance_id,
                StrategyInstance.account_id == account_id,
            )
            .first()
        )

    def get_open_for_underlying(self, underlying_id: int) -> Optional[StrategyInstance]:
        """The underlying's OPEN cycle, if any (at most one exists)."""
        return (
            self.db.query(StrategyInstance)
            .filter(
                StrategyInstance.underlying_id == underlying_id,
                StrategyInstance.status == CycleStatus.OPEN,
            )
            .first()
        )

    def list_for_account(
        self,
        account_id: str,
        status: Optional[CycleStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[StrategyInstance]:
        query = self.db.query(StrategyInstance).filter(
            StrategyInstance.account_id == account_id
        )
        if status is not None:
            query = query.filter(StrategyInstance.status == status)
        return (
            query.order_by(StrategyInstance.opened_at, StrategyInstance.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def find_open_legs(
        self,
        instance_id: int,
        call_put: CallPut,
        strike: Decimal,
        expiration: date,
    ) -> List[OptionLeg]:
        """Open legs of a cycle matching the contract terms, oldest first."""
        return (
            self.db.query(OptionLeg)
            .filter(
                OptionLeg.instance_id == instance_id,
                OptionLeg.call_put == call_put,
                OptionLeg.strike == strike,
                OptionLeg.expiration == expiration,
                OptionLeg.open_contracts > 0,
            )
            .order_by(OptionLeg.opened_at, OptionLeg.id)
            .all()
        )

    def count_open_legs(self, instance_id: int) -> int:
        return (
            self.db.query(OptionLeg)
            .filter(OptionLeg.instance_id == instance_id, OptionLeg.open_contracts > 0)
            .count()
        )
