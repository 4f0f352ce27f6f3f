"""Wealth wheel target and classification database models."""

from sqlalchemy import (
    CheckConstraint,
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

from wheeltracker.server.database.session import Base
from wheeltracker.utils.date_utils import utcnow
from wheeltracker.wheel.state import WheelCategory


class WealthWheelTarget(Base):
    """Target allocation percentage for one category of an account.

    Attributes:
        id: Unique identifier
        account_id: Owning account
        category: Wealth wheel category (unique per account)
        target_pct: Target share of total portfolio value, 0-100
    """

    __tablename__ = "wealth_wheel_targets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category = Column(Enum(WheelCategory, native_enum=False, length=32), nullable=False)
    target_pct = Column(Numeric(5, 2), nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    account = relationship("Account", back_populates="wheel_targets", lazy="select")

    __table_args__ = (
        UniqueConstraint("account_id", "category", name="uq_account_category"),
        CheckConstraint(
            "target_pct >= 0 AND target_pct <= 100", name="ck_target_pct_range"
        ),
    )

    def __repr__(self) -> str:
        return f"<WealthWheelTarget({self.category.value}={self.target_pct}%)>"


class WealthWheelClassification(Base):
    """Assigns one wealth wheel category to one underlying.

    Attributes:
        id: Unique identifier
        account_id: Owning account
        underlying_id: Classified underlying (unique per account)
        category: Wealth wheel category
    """

    __tablename__ = "wealth_wheel_classifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        String, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    underlying_id = Column(
        Integer, ForeignKey("underlyings.id", ondelete="CASCADE"), nullable=False
    )
    category = Column(Enum(WheelCategory, native_enum=False, length=32), nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    account = relationship(
        "Account", back_populates="wheel_classifications", lazy="select"
    )
    underlying = relationship(
        "Underlying", back_populates="classification", lazy="select"
    )

    __table_args__ = (
        UniqueConstraint(
            "account_id", "underlying_id", name="uq_account_underlying_classification"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<WealthWheelClassification(underlying_id={self.underlying_id}, "
            f"category={self.category.value})>"
        )
