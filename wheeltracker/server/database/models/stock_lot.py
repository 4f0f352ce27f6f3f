"""Stock lot database model.

A lot is one acquisition of shares. Lots are consumed oldest first (FIFO
by opened_at) on sells and call assignments; a lot with remaining = 0 is
closed and excluded from valuation.
"""

from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from wheeltracker.constants import MONEY_PRECISION, PRICE_PRECISION, QUANTITY_PRECISION
from wheeltracker.server.database.session import Base
from wheeltracker.utils.date_utils import utcnow


class StockLot(Base):
    """Share lot model.

    Attributes:
        id: Unique identifier (auto-incrementing integer)
        account_id: Owning account
        underlying_id: Symbol the shares belong to
        instance_id: Wheel cycle whose put assignment created the lot, if any
        open_quantity: Shares acquired
        remaining: Shares not yet consumed (0 <= remaining <= open_quantity)
        cost_basis: Cost per share
        original_cost_basis: Cost per share at acquisition, before premium reductions
        realized_gain: Gain realized on consumed shares, measured against the
            original cost basis
        opened_at: Acquisition time, the FIFO key
        closed_at: When remaining reached zero
    """

    __tablename__ = "stock_lots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    underlying_id = Column(
        Integer, ForeignKey("underlyings.id", ondelete="CASCADE"), nullable=False
    )
    instance_id = Column(
        Integer,
        ForeignKey("strategy_instances.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    open_quantity = Column(Numeric(*QUANTITY_PRECISION), nullable=False)
    remaining = Column(Numeric(*QUANTITY_PRECISION), nullable=False)
    cost_basis = Column(Numeric(*PRICE_PRECISION), nullable=False)
    original_cost_basis = Column(Numeric(*PRICE_PRECISION), nullable=True)
    realized_gain = Column(Numeric(*MONEY_PRECISION), default=Decimal("0"), nullable=False)
    opened_at = Column(DateTime, nullable=False)
    closed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="lots", lazy="select")
    underlying = relationship("Underlying", back_populates="lots", lazy="select")
    instance = relationship("StrategyInstance", back_populates="lots", lazy="select")

    __table_args__ = (
        CheckConstraint("open_quantity > 0", name="ck_lot_open_quantity_positive"),
        CheckConstraint("remaining >= 0", name="ck_lot_remaining_non_negative"),
        CheckConstraint("remaining <= open_quantity", name="ck_lot_remaining_bounded"),
        Index("idx_lots_underlying_opened", "underlying_id", "opened_at"),
    )

    @property
    def is_open(self) -> bool:
        """True while shares remain in the lot."""
        return self.remaining > 0

    @property
    def acquisition_basis(self) -> Decimal:
        """Per-share cost before any premium reduction."""
        if self.original_cost_basis is None:
            return Decimal(self.cost_basis)
        return Decimal(self.original_cost_basis)

    def __repr__(self) -> str:
        return (
            f"<StockLot(id={self.id}, underlying_id={self.underlying_id}, "
            f"remaining={self.remaining}/{self.open_quantity}, basis={self.cost_basis})>"
        )
