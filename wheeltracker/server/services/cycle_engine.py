"""Strategy Cycle Engine.

Binds the option and stock events for one underlying into a wheel
cycle: sell a cash-secured put, take assignment, sell covered calls, get
called away. Each event method runs inside the caller's transaction and
combines the ledger, lot and cycle mutations for that event, so a
failure anywhere rolls the whole event back.

Cycle transitions follow CYCLE_TRANSITIONS in wheeltracker.wheel.state:

    OPEN --attach_leg--> OPEN
    OPEN --assign_put--> OPEN
    OPEN --finalize----> FINALIZED (terminal)
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from wheeltracker.constants import CONTRACT_MULTIPLIER
from wheeltracker.server.database.models.ledger_entry import LedgerEntry
from wheeltracker.server.database.models.option_leg import OptionLeg
from wheeltracker.server.database.models.reinvest_signal import ReinvestSignal
from wheeltracker.server.database.models.stock_lot import StockLot
from wheeltracker.server.database.models.strategy_instance import StrategyInstance
from wheeltracker.server.database.models.underlying import Underlying
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.ledger import Ledger
from wheeltracker.server.services.lot_tracker import LotConsumption, LotTracker
from wheeltracker.server.services.reinvest import ReinvestSignalEngine
from wheeltracker.utils.date_utils import to_utc_naive
from wheeltracker.wheel.exceptions import (
    InvariantViolation,
    NotFoundError,
    ValidationError,
)
from wheeltracker.wheel.money import (
    Number,
    require_money,
    require_non_negative,
    require_positive,
    round_money,
)
from wheeltracker.wheel.overrides import USE_DEFAULT, Override, from_optional, to_optional
from wheeltracker.wheel.state import (
    CallPut,
    FinalizationReason,
    LedgerType,
    LegStatus,
    PremiumPolicy,
    get_next_state,
)

logger = logging.getLogger(__name__)


@dataclass
class CycleEvent:
    """Everything one event changed."""

    instance: StrategyInstance
    entries: List[LedgerEntry] = field(default_factory=list)
    leg: Optional[OptionLeg] = None
    legs: List[OptionLeg] = field(default_factory=list)
    lot: Optional[StockLot] = None
    consumption: Optional[LotConsumption] = None
    finalized: bool = False
    signal: Optional[ReinvestSignal] = None


def _require_contracts(value: Number) -> int:
    number = require_positive(value, "contracts")
    if number != number.to_integral_value():
        raise ValidationError(f"contracts must be a whole number, got {number}")
    return int(number)


def _require_fees(value: Number) -> Decimal:
    return require_non_negative(require_money(value, "fees"), "fees")


class StrategyCycleEngine:
    """State machine for wheel cycles.

    Attributes:
        uow: Unit of work supplying the session and repositories
        ledger: Cash bookkeeping
        lots: Share lot bookkeeping
        reinvest: Signal engine notified when a cycle finalizes
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ledger: Optional[Ledger] = None,
        lots: Optional[LotTracker] = None,
        reinvest: Optional[ReinvestSignalEngine] = None,
    ):
        self.uow = uow
        self.ledger = ledger or Ledger(uow)
        self.lots = lots or LotTracker(uow)
        self.reinvest = reinvest or ReinvestSignalEngine(uow, self.ledger)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_underlying(self, account_id: str, underlying_id: int) -> Underlying:
        underlying = self.uow.underlyings.get(account_id, underlying_id)
        if underlying is None:
            raise NotFoundError(f"Underlying not found: {underlying_id}")
        return underlying

    def _require_open_legs(
        self,
        underlying: Underlying,
        call_put: CallPut,
        strike: Decimal,
        expiration: date,
        contracts: int,
    ) -> List[OptionLeg]:
        """Open legs with these terms, oldest first, holding at least `contracts`.

        Every sale opens its own leg, so one close, expiration or
        assignment may span several legs with the same terms.
        """
        instance = self.uow.cycles.get_open_for_underlying(underlying.id)
        if instance is None:
            raise InvariantViolation(f"No open wheel cycle for {underlying.symbol}")

        legs = self.uow.cycles.find_open_legs(instance.id, call_put, strike, expiration)
        if not legs:
            raise InvariantViolation(
                f"No open {call_put.value} {strike} exp {expiration} on {underlying.symbol}"
            )
        open_contracts = sum(leg.open_contracts for leg in legs)
        if contracts > open_contracts:
            raise InvariantViolation(
                f"Cannot resolve {contracts} {underlying.symbol} {strike} "
                f"{call_put.value} contract(s): only {open_contracts} open"
            )
        return legs

    def _reduce_legs(
        self,
        legs: List[OptionLeg],
        contracts: int,
        status: LegStatus,
        occurred_at: datetime,
    ) -> List[OptionLeg]:
        """Take contracts off the legs oldest first and return the legs touched."""
        touched = []
        remaining = contracts
        for leg in legs:
            if remaining == 0:
                break
            taken = min(remaining, leg.open_contracts)
            leg.open_contracts = leg.open_contracts - taken
            if leg.open_contracts == 0:
                leg.status = status
                leg.closed_at = occurred_at
            remaining -= taken
            touched.append(leg)
        self.uow.db.flush()
        return touched

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def open_short_option(
        self,
        account_id: str,
        underlying_id: int,
        call_put: CallPut,
        strike: Number,
        expiration: date,
        contracts: Number,
        price: Number,
        fees: Number = 0,
        occurred_at: Optional[datetime] = None,
        premium_policy: Override[PremiumPolicy] = USE_DEFAULT,
        description: Optional[str] = None,
    ) -> CycleEvent:
        """Sell to open a put or call.

        Attaches the leg to the underlying's OPEN cycle, creating the cycle
        when none exists, and collects the premium net of fees. A premium
        policy override is stored only on a cycle this call creates.

        Raises:
            ValidationError: If strike, price, contracts or fees are invalid
            NotFoundError: If the underlying does not exist
        """
        call_put = CallPut(call_put)
        strike = require_positive(strike, "strike")
        price = require_positive(price, "price")
        contracts = _require_contracts(contracts)
        fees = _require_fees(fees)
        underlying = self._get_underlying(account_id, underlying_id)
        occurred_at = to_utc_naive(occurred_at)

        instance = self.uow.cycles.get_open_for_underlying(underlying.id)
        if instance is None:
            instance = self.uow.cycles.add(
                StrategyInstance(
                    account_id=account_id,
                    underlying_id=underlying.id,
                    premium_policy_override=to_optional(premium_policy),
                    opened_at=occurred_at,
                )
            )
            logger.info(f"Opened wheel cycle {instance.id} on {underlying.symbol}")
        else:
            instance.status = get_next_state(instance.status, "attach_leg")

        leg = self.uow.cycles.add_leg(
            OptionLeg(
                instance_id=instance.id,
                call_put=call_put,
                strike=strike,
                expiration=expiration,
                contracts=contracts,
                open_contracts=contracts,
                premium_per_share=price,
                status=LegStatus.OPEN,
                opened_at=occurred_at,
            )
        )

        amount = round_money(price * contracts * CONTRACT_MULTIPLIER - fees)
        entry = self.ledger.post(
            account_id,
            LedgerType.PREMIUM_COLLECTED,
            amount,
            occurred_at,
            description
            or f"STO {contracts} {underlying.symbol} {strike} {call_put.value} @ {price}",
            instance.id,
        )
        return CycleEvent(instance=instance, entries=[entry], leg=leg)

    def expire_option(
        self,
        account_id: str,
        underlying_id: int,
        call_put: CallPut,
        strike: Number,
        expiration: date,
        contracts: Number,
        fees: Number = 0,
        occurred_at: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> CycleEvent:
        """Record contracts expiring worthless.

        Moves no cash unless fees were charged. Finalizes the cycle when
        nothing remains open.

        Raises:
            ValidationError: If strike, contracts or fees are invalid
            NotFoundError: If the underlying does not exist
            InvariantViolation: If the matching legs hold fewer open contracts
        """
        call_put = CallPut(call_put)
        strike = require_positive(strike, "strike")
        contracts = _require_contracts(contracts)
        fees = _require_fees(fees)
        underlying = self._get_underlying(account_id, underlying_id)
        occurred_at = to_utc_naive(occurred_at)

        legs = self._require_open_legs(underlying, call_put, strike, expiration, contracts)
        instance = legs[0].instance
        legs = self._reduce_legs(legs, contracts, LegStatus.EXPIRED, occurred_at)

        event = CycleEvent(instance=instance, leg=legs[0], legs=legs)
        if fees > 0:
            event.entries.append(
                self.ledger.post(
                    account_id,
                    LedgerType.FEE,
                    -fees,
                    occurred_at,
                    description or f"Expiration fees {underlying.symbol} {strike} {call_put.value}",
                    instance.id,
                )
            )
        logger.info(f"Expired {contracts} contract(s) on leg(s) {[leg.id for leg in legs]}")
        return self._maybe_finalize(event, FinalizationReason.EXPIRED, occurred_at)

    def assign_option(
        self,
        account_id: str,
        underlying_id: int,
        call_put: CallPut,
        strike: Number,
        expiration: date,
        contracts: Number,
        fees: Number = 0,
        occurred_at: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> CycleEvent:
        """Record assignment of short contracts.

        A put assignment buys contracts x 100 shares at the strike into a
        lot tied to the cycle, which stays OPEN. A call assignment delivers
        shares FIFO at the strike and finalizes the cycle when nothing
        remains open.

        Raises:
            ValidationError: If strike, contracts or fees are invalid
            NotFoundError: If the underlying does not exist
            InvariantViolation: If the matching legs hold fewer open contracts
            InsufficientLotError: If a call assignment exceeds the shares held
        """
        call_put = CallPut(call_put)
        strike = require_positive(strike, "strike")
        contracts = _require_contracts(contracts)
        fees = _require_fees(fees)
        underlying = self._get_underlying(account_id, underlying_id)
        occurred_at = to_utc_naive(occurred_at)

        legs = self._require_open_legs(underlying, call_put, strike, expiration, contracts)
        instance = legs[0].instance
        shares = Decimal(contracts) * CONTRACT_MULTIPLIER
        notional = strike * shares

        if call_put == CallPut.PUT:
            instance.status = get_next_state(instance.status, "assign_put")
            legs = self._reduce_legs(legs, contracts, LegStatus.ASSIGNED, occurred_at)
            lot = self.lots.open_lot(
                underlying.id, shares, strike, occurred_at, instance_id=instance.id
            )
            entry = self.ledger.post(
                account_id,
                LedgerType.ASSIGNMENT,
                -round_money(notional + fees),
                occurred_at,
                description or f"Put assigned: bought {shares} {underlying.symbol} @ {strike}",
                instance.id,
            )
            logger.info(f"Put leg(s) {[leg.id for leg in legs]} assigned into lot {lot.id}")
            return CycleEvent(
                instance=instance, entries=[entry], leg=legs[0], legs=legs, lot=lot
            )

        consumption = self.lots.consume(underlying.id, shares, strike, occurred_at)
        legs = self._reduce_legs(legs, contracts, LegStatus.ASSIGNED, occurred_at)
        entry = self.ledger.post(
            account_id,
            LedgerType.ASSIGNMENT,
            round_money(notional - fees),
            occurred_at,
            description or f"Call assigned: delivered {shares} {underlying.symbol} @ {strike}",
            instance.id,
        )
        logger.info(
            f"Call leg(s) {[leg.id for leg in legs]} assigned, {shares} shares called away"
        )
        event = CycleEvent(
            instance=instance,
            entries=[entry],
            leg=legs[0],
            legs=legs,
            consumption=consumption,
        )
        return self._maybe_finalize(event, FinalizationReason.CALLED_AWAY, occurred_at)

    def close_option(
        self,
        account_id: str,
        underlying_id: int,
        call_put: CallPut,
        strike: Number,
        expiration: date,
        contracts: Number,
        price: Number,
        fees: Number = 0,
        occurred_at: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> CycleEvent:
        """Buy to close open contracts.

        Raises:
            ValidationError: If strike, price, contracts or fees are invalid
            NotFoundError: If the underlying does not exist
            InvariantViolation: If the matching legs hold fewer open contracts
        """
        call_put = CallPut(call_put)
        strike = require_positive(strike, "strike")
        price = require_positive(price, "price")
        contracts = _require_contracts(contracts)
        fees = _require_fees(fees)
        underlying = self._get_underlying(account_id, underlying_id)
        occurred_at = to_utc_naive(occurred_at)

        legs = self._require_open_legs(underlying, call_put, strike, expiration, contracts)
        instance = legs[0].instance
        legs = self._reduce_legs(legs, contracts, LegStatus.CLOSED, occurred_at)

        entry = self.ledger.post(
            account_id,
            LedgerType.PREMIUM_PAID,
            -round_money(price * contracts * CONTRACT_MULTIPLIER + fees),
            occurred_at,
            description
            or f"BTC {contracts} {underlying.symbol} {strike} {call_put.value} @ {price}",
            instance.id,
        )
        event = CycleEvent(instance=instance, entries=[entry], leg=legs[0], legs=legs)
        return self._maybe_finalize(event, FinalizationReason.CLOSED, occurred_at)

    def on_stock_sale(
        self,
        account_id: str,
        underlying_id: int,
        consumption: LotConsumption,
        entry: LedgerEntry,
        occurred_at: Optional[datetime] = None,
    ) -> Optional[CycleEvent]:
        """Attach an outright stock sale to the cycle whose shares it sold.

        A sale that consumed none of the OPEN cycle's assigned shares is
        not part of the cycle and returns None.
        """
        underlying = self._get_underlying(account_id, underlying_id)
        instance = self.uow.cycles.get_open_for_underlying(underlying.id)
        if instance is None or not consumption.touched_instance(instance.id):
            return None

        entry.instance_id = instance.id
        self.uow.db.flush()
        logger.info(f"Stock sale entry {entry.id} attached to cycle {instance.id}")

        event = CycleEvent(instance=instance, entries=[entry], consumption=consumption)
        return self._maybe_finalize(
            event, FinalizationReason.STOCK_SOLD, to_utc_naive(occurred_at)
        )

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def has_open_positions(self, instance: StrategyInstance) -> bool:
        """True while any leg has open contracts or any cycle lot has shares."""
        if self.uow.cycles.count_open_legs(instance.id) > 0:
            return True
        return self.lots.cycle_shares(instance.id) > 0

    def resolve_policy(self, instance: StrategyInstance) -> PremiumPolicy:
        """Cycle override, then underlying policy, then account default."""
        account_default = instance.account.default_policy
        underlying_policy = from_optional(instance.underlying.premium_policy)
        return instance.premium_policy.resolve(underlying_policy.resolve(account_default))

    def _maybe_finalize(
        self, event: CycleEvent, reason: FinalizationReason, occurred_at: datetime
    ) -> CycleEvent:
        if self.has_open_positions(event.instance):
            return event
        event.signal = self.finalize(event.instance, reason, occurred_at)
        event.finalized = True
        return event

    def finalize(
        self,
        instance: StrategyInstance,
        reason: FinalizationReason,
        occurred_at: Optional[datetime] = None,
    ) -> Optional[ReinvestSignal]:
        """Move a cycle to FINALIZED and apply its premium policy.

        Returns:
            The reinvest signal created, if the policy produced one

        Raises:
            InvariantViolation: If the cycle is not OPEN
        """
        try:
            next_status = get_next_state(instance.status, "finalize")
        except ValueError as e:
            raise InvariantViolation(
                f"Strategy instance {instance.id} cannot finalize: {e}"
            ) from e

        realized_pnl = self.uow.ledger.sum_for_instance(instance.id)
        instance.status = next_status
        instance.realized_pnl = realized_pnl
        instance.finalization_reason = reason
        instance.finalized_at = to_utc_naive(occurred_at)
        self.uow.db.flush()
        logger.info(
            f"Finalized cycle {instance.id} ({reason.value}), realized P&L {realized_pnl}"
        )

        policy = self.resolve_policy(instance)
        if realized_pnl <= 0:
            return None
        if policy == PremiumPolicy.REINVEST_ON_CLOSE:
            return self.reinvest.create_signal(instance, realized_pnl)
        if policy == PremiumPolicy.BASIS_REDUCTION:
            self.lots.apply_basis_reduction(instance.underlying_id, realized_pnl)
        return None
