"""Reinvestment Signal Engine.

Signals propose redeploying the cash a finalized wheel cycle freed up.
Each signal resolves exactly once: APPROVE commits the full amount,
PARTIAL commits part of it and drops the rest, REJECT moves no cash.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from wheeltracker.server.database.models.reinvest_signal import ReinvestSignal
from wheeltracker.server.database.models.strategy_instance import StrategyInstance
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.ledger import Ledger
from wheeltracker.utils.date_utils import utcnow
from wheeltracker.wheel.exceptions import (
    InvariantViolation,
    NotFoundError,
    StaleSignalError,
    ValidationError,
)
from wheeltracker.wheel.money import ZERO, Number, require_money, require_positive
from wheeltracker.wheel.state import (
    LedgerType,
    ReinvestAction,
    ReinvestStatus,
    get_signal_outcome,
)

logger = logging.getLogger(__name__)


@dataclass
class ReinvestResult:
    """Outcome of resolving a signal."""

    signal: ReinvestSignal
    committed_amount: Decimal
    ledger_entry_id: Optional[int] = None


class ReinvestSignalEngine:
    """Creates and resolves reinvest signals.

    Attributes:
        uow: Unit of work supplying the session and repositories
        ledger: Ledger used to commit approved capital
    """

    def __init__(self, uow: UnitOfWork, ledger: Optional[Ledger] = None):
        self.uow = uow
        self.ledger = ledger or Ledger(uow)

    def create_signal(self, instance: StrategyInstance, amount: Number) -> ReinvestSignal:
        """Create the PENDING signal for a finalized cycle.

        Runs inside the finalizing transaction.

        Raises:
            ValidationError: If amount is not a positive cash amount
            InvariantViolation: If the cycle already produced a signal
        """
        amount = require_positive(require_money(amount, "amount"), "amount")
        if self.uow.signals.get_by_instance(instance.id) is not None:
            raise InvariantViolation(
                f"Strategy instance {instance.id} already has a reinvest signal"
            )

        signal = ReinvestSignal(
            account_id=instance.account_id,
            underlying_id=instance.underlying_id,
            instance_id=instance.id,
            amount=amount,
            status=ReinvestStatus.PENDING,
            created_at=utcnow(),
        )
        self.uow.signals.add(signal)
        logger.info(
            f"Created reinvest signal {signal.id} for instance {instance.id}: {amount}"
        )
        return signal

    def get_pending_signals(self, account_id: str) -> List[ReinvestSignal]:
        """PENDING signals of an account ordered by creation time.

        Raises:
            NotFoundError: If the account does not exist
        """
        with self.uow.read(account_id):
            signals = self.uow.signals.list_pending(account_id)
            logger.debug(f"{len(signals)} pending signal(s) for account {account_id}")
            return signals

    def get_reinvest_ready_amount(self, account_id: str) -> Decimal:
        """Cash above the account's reserve, never negative."""
        with self.uow.read(account_id) as account:
            ready = Decimal(account.cash_balance) - Decimal(account.cashflow_reserve)
            return max(ZERO, ready)

    def process_reinvest_action(
        self,
        account_id: str,
        signal_id: int,
        action: ReinvestAction,
        partial_amount: Optional[Number] = None,
        notes: Optional[str] = None,
    ) -> ReinvestResult:
        """Resolve a PENDING signal.

        Args:
            account_id: Account owning the signal
            signal_id: Signal to resolve
            action: APPROVE, REJECT or PARTIAL
            partial_amount: Amount to commit for PARTIAL (0 < x < signal.amount)
            notes: Operator notes stored on the signal

        Returns:
            ReinvestResult with the resolved signal and committed amount

        Raises:
            NotFoundError: If the account or signal does not exist
            StaleSignalError: If the signal is already resolved
            ValidationError: If partial_amount is missing or out of range
        """
        try:
            action = ReinvestAction(action)
        except ValueError as e:
            raise ValidationError(f"Unknown reinvest action: {action}") from e

        with self.uow.transaction(account_id):
            signal = self.uow.signals.get(account_id, signal_id)
            if signal is None:
                raise NotFoundError(f"Reinvest signal not found: {signal_id}")

            outcome = get_signal_outcome(signal.status, action)
            if outcome is None:
                raise StaleSignalError(
                    f"Reinvest signal {signal_id} is already {signal.status.value}"
                )

            amount = Decimal(signal.amount)
            if action == ReinvestAction.PARTIAL:
                if partial_amount is None:
                    raise ValidationError("partial_amount is required for PARTIAL")
                committed = require_money(partial_amount, "partial_amount")
                if not ZERO < committed < amount:
                    raise ValidationError(
                        f"partial_amount must be between 0 and {amount} (exclusive), "
                        f"got {committed}"
                    )
                signal.partial_amount = committed
            elif action == ReinvestAction.APPROVE:
                committed = amount
            else:
                committed = ZERO

            entry = None
            if committed > 0:
                entry = self.ledger.post(
                    account_id,
                    LedgerType.REINVESTMENT,
                    -committed,
                    description=f"Reinvest signal {signal.id} {outcome.value.lower()}",
                )

            signal.status = outcome
            signal.resolved_at = utcnow()
            if notes is not None:
                signal.notes = notes
            self.uow.db.flush()

            logger.info(
                f"Reinvest signal {signal.id} -> {outcome.value}, committed {committed}"
            )
            return ReinvestResult(
                signal=signal,
                committed_amount=committed,
                ledger_entry_id=entry.id if entry else None,
            )
