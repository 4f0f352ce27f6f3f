"""Underlying symbol database model."""

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from wheeltracker.constants import PRICE_PRECISION
from wheeltracker.server.database.session import Base
from wheeltracker.utils.date_utils import utcnow
from wheeltracker.wheel.state import PremiumPolicy


class Underlying(Base):
    """A stock symbol traded within one account.

    Attributes:
        id: Unique identifier (auto-incrementing integer)
        account_id: Owning account
        symbol: Uppercase ticker (unique per account)
        current_price: Last quoted price; None until the first refresh
        price_updated_at: When current_price was last written
        premium_policy: Optional policy for cycles on this symbol
    """

    __tablename__ = "underlyings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    symbol = Column(String, nullable=False, index=True)
    current_price = Column(Numeric(*PRICE_PRECISION), nullable=True)
    price_updated_at = Column(DateTime, nullable=True)
    premium_policy = Column(
        Enum(PremiumPolicy, native_enum=False, length=32), nullable=True
    )
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="underlyings", lazy="select")
    lots = relationship(
        "StockLot",
        back_populates="underlying",
        cascade="all, delete-orphan",
        lazy="select",
        order_by="StockLot.opened_at",
    )
    instances = relationship(
        "StrategyInstance",
        back_populates="underlying",
        cascade="all, delete-orphan",
        lazy="select",
    )
    classification = relationship(
        "WealthWheelClassification",
        back_populates="underlying",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="select",
    )

    __table_args__ = (
        UniqueConstraint("account_id", "symbol", name="uq_account_symbol"),
    )

    def __repr__(self) -> str:
        return (
            f"<Underlying(id={self.id}, account_id={self.account_id}, "
            f"symbol={self.symbol}, price={self.current_price})>"
        )
