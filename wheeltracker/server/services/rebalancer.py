"""Wealth Wheel Rebalancer.

Classifies underlyings into allocation categories and compares each
category's share of the portfolio with its target percentage. All math
stays in full Decimal precision; rounding happens only when a
WheelCalculation is formatted for presentation.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from wheeltracker.server.database.models.wealth_wheel import (
    WealthWheelClassification,
    WealthWheelTarget,
)
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.lot_tracker import LotTracker
from wheeltracker.wheel.exceptions import NotFoundError, ValidationError
from wheeltracker.wheel.money import ZERO, Number, to_decimal
from wheeltracker.wheel.state import WheelCategory

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")

TargetInput = Union[Mapping[WheelCategory, Number], Iterable[Tuple[WheelCategory, Number]]]


@dataclass
class WheelSlice:
    """One category's allocation at full precision."""

    category: WheelCategory
    current_value: Decimal
    target_pct: Decimal
    actual_pct: Decimal

    @property
    def delta(self) -> Decimal:
        """Positive when the category is under-allocated."""
        return self.target_pct - self.actual_pct


@dataclass
class WheelCalculation:
    slices: List[WheelSlice] = field(default_factory=list)
    total_value: Decimal = ZERO
    cash_balance: Decimal = ZERO
    cashflow_reserve: Decimal = ZERO


class WealthWheelRebalancer:
    """Maintains wealth wheel settings and computes allocation.

    Attributes:
        uow: Unit of work supplying the session and repositories
        lots: Lot tracker used for valuation
    """

    def __init__(self, uow: UnitOfWork, lots: Optional[LotTracker] = None):
        self.uow = uow
        self.lots = lots or LotTracker(uow)

    def upsert_targets(self, account_id: str, targets: TargetInput) -> List[WealthWheelTarget]:
        """Insert or update target percentages for the given categories.

        Categories not mentioned keep their current target. Whether the
        full set sums to 100 is checked by the request schema, not here.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If a percentage is outside 0-100
        """
        items = list(targets.items()) if isinstance(targets, Mapping) else list(targets)
        parsed = []
        for category, pct in items:
            category = WheelCategory(category)
            pct = to_decimal(pct, f"target_pct[{category.value}]")
            if not ZERO <= pct <= HUNDRED:
                raise ValidationError(
                    f"target_pct for {category.value} must be between 0 and 100, got {pct}"
                )
            parsed.append((category, pct))

        with self.uow.transaction(account_id):
            for category, pct in parsed:
                self.uow.wheel.upsert_target(account_id, category, pct)
            logger.info(f"Upserted {len(parsed)} wheel target(s) for account {account_id}")
            return self.uow.wheel.list_targets(account_id)

    def upsert_classification(
        self, account_id: str, underlying_id: int, category: WheelCategory
    ) -> WealthWheelClassification:
        """Assign a category to one of the account's underlyings.

        Raises:
            NotFoundError: If the account or underlying does not exist
        """
        category = WheelCategory(category)
        with self.uow.transaction(account_id):
            if self.uow.underlyings.get(account_id, underlying_id) is None:
                raise NotFoundError(f"Underlying not found: {underlying_id}")
            classification = self.uow.wheel.upsert_classification(
                account_id, underlying_id, category
            )
            logger.info(
                f"Classified underlying {underlying_id} as {category.value} "
                f"in account {account_id}"
            )
            return classification

    def list_targets(self, account_id: str) -> List[WealthWheelTarget]:
        with self.uow.read(account_id):
            return self.uow.wheel.list_targets(account_id)

    def list_classifications(self, account_id: str) -> List[WealthWheelClassification]:
        with self.uow.read(account_id):
            return self.uow.wheel.list_classifications(account_id)

    def calculate_wheel(self, account_id: str) -> WheelCalculation:
        """Current vs. target allocation per configured category.

        total_value is cash plus the market value of every underlying with
        open lots. Unclassified underlyings count toward the total but not
        toward any category. Negative cash counts as zero toward the total.

        Raises:
            NotFoundError: If the account does not exist
        """
        with self.uow.read(account_id) as account:
            cash = Decimal(account.cash_balance)
            reserve = Decimal(account.cashflow_reserve)

            category_values: Dict[WheelCategory, Decimal] = {c: ZERO for c in WheelCategory}
            holdings_value = ZERO
            for underlying in self.uow.underlyings.list_with_open_lots(account_id):
                value = self.lots.current_value(underlying)
                holdings_value += value
                classification = underlying.classification
                if classification is not None:
                    category_values[classification.category] += value

            total_value = max(cash, ZERO) + holdings_value

            slices = []
            for target in self.uow.wheel.list_targets(account_id):
                current_value = category_values[target.category]
                actual_pct = current_value / total_value * HUNDRED if total_value else ZERO
                slices.append(
                    WheelSlice(
                        category=target.category,
                        current_value=current_value,
                        target_pct=Decimal(target.target_pct),
                        actual_pct=actual_pct,
                    )
                )

            logger.debug(
                f"Wheel for {account_id}: total {total_value}, {len(slices)} slice(s)"
            )
            return WheelCalculation(
                slices=slices,
                total_value=total_value,
                cash_balance=cash,
                cashflow_reserve=reserve,
            )
