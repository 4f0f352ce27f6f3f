"""Option leg database model.

Records one short option position attached to a wheel cycle, from
sell-to-open through expiration, assignment or buy-to-close.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
)
from sqlalchemy.orm import relationship

from wheeltracker.constants import CONTRACT_MULTIPLIER, PRICE_PRECISION
from wheeltracker.server.database.session import Base
from wheeltracker.wheel.state import CallPut, LegStatus


class OptionLeg(Base):
    """Option leg model.

    Attributes:
        id: Unique identifier (auto-incrementing integer)
        instance_id: Wheel cycle the leg belongs to
        call_put: CALL or PUT
        strike: Strike price
        expiration: Expiration date
        contracts: Contracts sold to open
        open_contracts: Contracts not yet expired, assigned or closed
        premium_per_share: Premium received per share at open
        status: OPEN until open_contracts reaches zero, then the outcome
            of the event that closed the final contracts
        opened_at: When the leg was sold
        closed_at: When the final contracts were resolved
    """

    __tablename__ = "option_legs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    instance_id = Column(
        Integer,
        ForeignKey("strategy_instances.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    call_put = Column(Enum(CallPut, native_enum=False, length=8), nullable=False)
    strike = Column(Numeric(*PRICE_PRECISION), nullable=False)
    expiration = Column(Date, nullable=False)
    contracts = Column(Integer, nullable=False)
    open_contracts = Column(Integer, nullable=False)
    premium_per_share = Column(Numeric(*PRICE_PRECISION), nullable=False)
    status = Column(
        Enum(LegStatus, native_enum=False, length=16),
        nullable=False,
        default=LegStatus.OPEN,
    )
    opened_at = Column(DateTime, nullable=False)
    closed_at = Column(DateTime, nullable=True)

    # Relationships
    instance = relationship("StrategyInstance", back_populates="legs", lazy="select")

    __table_args__ = (
        CheckConstraint("contracts > 0", name="ck_leg_contracts_positive"),
        CheckConstraint(
            "open_contracts >= 0 AND open_contracts <= contracts",
            name="ck_leg_open_contracts_bounded",
        ),
    )

    @property
    def is_open(self) -> bool:
        return self.open_contracts > 0

    @property
    def shares_equivalent(self) -> int:
        """Shares represented by the open contracts."""
        return int(self.open_contracts * CONTRACT_MULTIPLIER)

    def __repr__(self) -> str:
        return (
            f"<OptionLeg(id={self.id}, {self.call_put.value} {self.strike} "
            f"exp={self.expiration}, open={self.open_contracts}/{self.contracts}, "
            f"status={self.status.value})>"
        )
