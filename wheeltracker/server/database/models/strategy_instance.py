"""Wheel cycle (strategy instance) database model.

A cycle binds the option legs, assigned lots and ledger entries for one
underlying from the first short option until the position fully unwinds.
"""

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import relationship

from wheeltracker.constants import MONEY_PRECISION
from wheeltracker.server.database.session import Base
from wheeltracker.utils.date_utils import utcnow
from wheeltracker.wheel.overrides import Override, from_optional
from wheeltracker.wheel.state import CycleStatus, FinalizationReason, PremiumPolicy


class StrategyInstance(Base):
    """Wheel cycle model.

    Attributes:
        id: Unique identifier (auto-incrementing integer)
        account_id: Owning account
        underlying_id: Symbol the cycle trades
        status: OPEN or FINALIZED (terminal)
        premium_policy_override: Policy stored from the opening entry, if any
        realized_pnl: Sum of attached ledger entries, set at finalization
        finalization_reason: Why the cycle finalized
        opened_at: Time of the first option leg
        finalized_at: Time of the event that finalized the cycle
        legs: Option legs attached to this cycle
        ledger_entries: Ledger entries contributing to this cycle
        lots: Lots created by put assignment within this cycle
        signal: Reinvest signal emitted at finalization, if any
    """

    __tablename__ = "strategy_instances"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    underlying_id = Column(
        Integer, ForeignKey("underlyings.id", ondelete="CASCADE"), nullable=False
    )
    status = Column(
        Enum(CycleStatus, native_enum=False, length=16),
        nullable=False,
        default=CycleStatus.OPEN,
    )
    premium_policy_override = Column(
        Enum(PremiumPolicy, native_enum=False, length=32), nullable=True
    )
    realized_pnl = Column(Numeric(*MONEY_PRECISION), nullable=True)
    finalization_reason = Column(
        Enum(FinalizationReason, native_enum=False, length=32), nullable=True
    )
    opened_at = Column(DateTime, nullable=False)
    finalized_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="instances", lazy="select")
    underlying = relationship("Underlying", back_populates="instances", lazy="select")
    legs = relationship(
        "OptionLeg",
        back_populates="instance",
        cascade="all, delete-orphan",
        lazy="select",
        order_by="OptionLeg.id",
    )
    ledger_entries = relationship(
        "LedgerEntry",
        back_populates="instance",
        lazy="select",
        order_by="LedgerEntry.id",
    )
    lots = relationship("StockLot", back_populates="instance", lazy="select")
    signal = relationship(
        "ReinvestSignal", back_populates="instance", uselist=False, lazy="select"
    )

    __table_args__ = (
        # Only one OPEN cycle per underlying
        Index(
            "uq_open_cycle_per_underlying",
            "underlying_id",
            unique=True,
            sqlite_where=text("status = 'OPEN'"),
            postgresql_where=text("status = 'OPEN'"),
        ),
    )

    @property
    def premium_policy(self) -> Override[PremiumPolicy]:
        """Stored override as a tagged value."""
        return from_optional(self.premium_policy_override)

    @property
    def is_open(self) -> bool:
        return self.status == CycleStatus.OPEN

    @property
    def open_legs(self) -> list:
        return [leg for leg in self.legs if leg.is_open]

    def __repr__(self) -> str:
        return (
            f"<StrategyInstance(id={self.id}, underlying_id={self.underlying_id}, "
            f"status={self.status.value}, realized_pnl={self.realized_pnl})>"
        )
