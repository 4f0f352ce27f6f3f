"""Account database model.

An account owns every other entity: underlyings, lots, ledger entries,
wheel cycles, reinvest signals and wealth wheel settings. Deleting an
account cascades to all of them.
"""

import uuid
from decimal import Decimal

from sqlalchemy import Column, DateTime, Enum, Numeric, String, Text
from sqlalchemy.orm import relationship

from wheeltracker.constants import DEFAULT_PREMIUM_POLICY, MONEY_PRECISION
from wheeltracker.server.database.session import Base
from wheeltracker.utils.date_utils import utcnow
from wheeltracker.wheel.state import PremiumPolicy



class Account(Base):
    """Brokerage account model.

    Attributes:
        id: Unique identifier (UUID as string)
        name: Human-readable account name
        cash_balance: Mutable cash counter; always equals the ledger sum
        cashflow_reserve: Minimum cash kept uninvested
        default_policy: Premium policy used when neither the cycle nor
            the underlying overrides it
        notes: Free-form notes
        created_at: Timestamp when account was created
        updated_at: Timestamp when account was last modified
    """

    __tablename__ = "accounts"

    # Columns
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    cash_balance = Column(Numeric(*MONEY_PRECISION), nullable=False, default=Decimal("0"))
    cashflow_reserve = Column(
        Numeric(*MONEY_PRECISION), nullable=False, default=Decimal("0")
    )
    default_policy = Column(
        Enum(PremiumPolicy, native_enum=False, length=32),
        nullable=False,
        default=DEFAULT_PREMIUM_POLICY,
    )
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    underlyings = relationship(
        "Underlying",
        back_populates="account",
        cascade="all, delete-orphan",
        lazy="select",
        order_by="Underlying.symbol",
    )
    lots = relationship(
        "StockLot", back_populates="account", cascade="all, delete-orphan", lazy="select"
    )
    ledger_entries = relationship(
        "LedgerEntry",
        back_populates="account",
        cascade="all, delete-orphan",
        lazy="select",
        order_by="LedgerEntry.id",
    )
    instances = relationship(
        "StrategyInstance",
        back_populates="account",
        cascade="all, delete-orphan",
        lazy="select",
    )
    signals = relationship(
        "ReinvestSignal",
        back_populates="account",
        cascade="all, delete-orphan",
        lazy="select",
    )
    wheel_targets = relationship(
        "WealthWheelTarget",
        back_populates="account",
        cascade="all, delete-orphan",
        lazy="select",
    )
    wheel_classifications = relationship(
        "WealthWheelClassification",
        back_populates="account",
        cascade="all, delete-orphan",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, name={self.name}, cash={self.cash_balance})>"
