"""Ledger entry database model.

Entries are append-only. The signed sum of an account's entries equals
its cash balance at every commit.
"""

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from wheeltracker.constants import MONEY_PRECISION
from wheeltracker.server.database.session import Base
from wheeltracker.utils.date_utils import utcnow
from wheeltracker.wheel.state import LedgerType


class LedgerEntry(Base):
    """Immutable cash-affecting event.

    Attributes:
        id: Unique identifier (auto-incrementing integer)
        account_id: Owning account
        instance_id: Wheel cycle the entry contributes to, if any
        type: LedgerType of the event
        amount: Signed cash delta (positive = credit)
        occurred_at: When the event happened
        description: Human-readable description
        created_at: When the entry was recorded
    """

    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    instance_id = Column(
        Integer,
        ForeignKey("strategy_instances.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    type = Column(Enum(LedgerType, native_enum=False, length=32), nullable=False)
    amount = Column(Numeric(*MONEY_PRECISION), nullable=False)
    occurred_at = Column(DateTime, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="ledger_entries", lazy="select")
    instance = relationship(
        "StrategyInstance", back_populates="ledger_entries", lazy="select"
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry(id={self.id}, type={self.type.value}, "
            f"amount={self.amount}, instance_id={self.instance_id})>"
        )
