"""Reinvest signal database model."""

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from wheeltracker.constants import MONEY_PRECISION
from wheeltracker.server.database.session import Base
from wheeltracker.utils.date_utils import utcnow
from wheeltracker.wheel.state import ReinvestStatus


class ReinvestSignal(Base):
    """Proposed redeployment of cash freed by a finalized cycle.

    Created at most once per cycle (instance_id is unique). Once resolved
    (APPROVED, REJECTED or PARTIAL) a signal never changes again.

    Attributes:
        id: Unique identifier (auto-incrementing integer)
        account_id: Owning account
        underlying_id: Symbol of the cycle that produced the signal
        instance_id: Finalized cycle that produced the signal
        amount: Proposed amount
        status: PENDING until resolved
        partial_amount: Amount committed by a PARTIAL resolution
        notes: Operator notes
        created_at: Creation time, the ordering key for pending signals
        resolved_at: When the operator acted on the signal
    """

    __tablename__ = "reinvest_signals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    underlying_id = Column(
        Integer, ForeignKey("underlyings.id", ondelete="CASCADE"), nullable=True
    )
    instance_id = Column(
        Integer,
        ForeignKey("strategy_instances.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    amount = Column(Numeric(*MONEY_PRECISION), nullable=False)
    status = Column(
        Enum(ReinvestStatus, native_enum=False, length=16),
        nullable=False,
        default=ReinvestStatus.PENDING,
        index=True,
    )
    partial_amount = Column(Numeric(*MONEY_PRECISION), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    resolved_at = Column(DateTime, nullable=True)

    # Relationships
    account = relationship("Account", back_populates="signals", lazy="select")
    underlying = relationship("Underlying", lazy="select")
    instance = relationship("StrategyInstance", back_populates="signal", lazy="select")

    @property
    def is_pending(self) -> bool:
        return self.status == ReinvestStatus.PENDING

    def __repr__(self) -> str:
        return (
            f"<ReinvestSignal(id={self.id}, amount={self.amount}, "
            f"status={self.status.value})>"
        )
