"""State machine enums for wheel cycles, option legs and reinvest signals."""

from enum import Enum


class CycleStatus(str, Enum):
    """
    Lifecycle of a wheel cycle (StrategyInstance).

    A cycle opens with its first option leg and finalizes once the
    position has fully unwound. FINALIZED is terminal.
    """

    OPEN = "OPEN"
    FINALIZED = "FINALIZED"


class FinalizationReason(str, Enum):
    """Why a cycle finalized."""

    EXPIRED = "EXPIRED"  # Last open leg expired worthless
    CALLED_AWAY = "CALLED_AWAY"  # Covered call assigned, shares delivered
    CLOSED = "CLOSED"  # Bought back the last open leg
    STOCK_SOLD = "STOCK_SOLD"  # Assigned shares sold outright


class CallPut(str, Enum):
    CALL = "CALL"
    PUT = "PUT"


class OptionAction(str, Enum):
    """Option trade actions accepted on an option entry."""

    STO = "STO"  # Sell to open
    BTC = "BTC"  # Buy to close
    EXPIRE = "EXPIRE"  # Expired worthless
    ASSIGN = "ASSIGN"  # Assigned (put: buy shares, call: deliver shares)


class StockAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class LegStatus(str, Enum):
    """Outcome of a single option leg."""

    OPEN = "OPEN"
    EXPIRED = "EXPIRED"
    ASSIGNED = "ASSIGNED"
    CLOSED = "CLOSED"


class LedgerType(str, Enum):
    """Cash-affecting event types recorded in the ledger."""

    CASH_DEPOSIT = "CASH_DEPOSIT"
    CASH_WITHDRAWAL = "CASH_WITHDRAWAL"
    PREMIUM_COLLECTED = "PREMIUM_COLLECTED"
    PREMIUM_PAID = "PREMIUM_PAID"
    ASSIGNMENT = "ASSIGNMENT"
    STOCK_PURCHASE = "STOCK_PURCHASE"
    STOCK_SALE = "STOCK_SALE"
    FEE = "FEE"
    REINVESTMENT = "REINVESTMENT"


class ReinvestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PARTIAL = "PARTIAL"


class ReinvestAction(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    PARTIAL = "PARTIAL"


class PremiumPolicy(str, Enum):
    """What happens to a cycle's realized P&L when it finalizes."""

    CASHFLOW = "CASHFLOW"  # Stays in cash, nothing else happens
    BASIS_REDUCTION = "BASIS_REDUCTION"  # Lowers cost basis of remaining lots
    REINVEST_ON_CLOSE = "REINVEST_ON_CLOSE"  # Proposes a reinvestment signal


class WheelCategory(str, Enum):
    """Wealth wheel allocation categories."""

    CORE = "CORE"
    MAD_MONEY = "MAD_MONEY"
    FREE_CAPITAL = "FREE_CAPITAL"
    RISK_MGMT = "RISK_MGMT"


# Valid state transitions for the wheel cycle state machine
CYCLE_TRANSITIONS: dict[CycleStatus, dict[str, CycleStatus]] = {
    CycleStatus.OPEN: {
        "attach_leg": CycleStatus.OPEN,
        "assign_put": CycleStatus.OPEN,
        "finalize": CycleStatus.FINALIZED,
    },
    CycleStatus.FINALIZED: {},
}

# Reinvest signals resolve exactly once
SIGNAL_TRANSITIONS: dict[ReinvestStatus, dict[ReinvestAction, ReinvestStatus]] = {
    ReinvestStatus.PENDING: {
        ReinvestAction.APPROVE: ReinvestStatus.APPROVED,
        ReinvestAction.REJECT: ReinvestStatus.REJECTED,
        ReinvestAction.PARTIAL: ReinvestStatus.PARTIAL,
    },
    ReinvestStatus.APPROVED: {},
    ReinvestStatus.REJECTED: {},
    ReinvestStatus.PARTIAL: {},
}


def get_valid_actions(status: CycleStatus) -> list[str]:
    """Get list of valid actions from a given cycle status."""
    return list(CYCLE_TRANSITIONS.get(status, {}).keys())


def can_transition(from_status: CycleStatus, action: str) -> bool:
    """Check if a transition is valid from the current cycle status."""
    return action in CYCLE_TRANSITIONS.get(from_status, {})


def get_next_state(from_status: CycleStatus, action: str) -> CycleStatus:
    """
    Get the next cycle status after an action.

    Raises:
        ValueError: If the transition is not valid.
    """
    transitions = CYCLE_TRANSITIONS.get(from_status, {})
    if action not in transitions:
        valid = get_valid_actions(from_status)
        raise ValueError(
            f"Invalid action '{action}' from status '{from_status.value}'. "
            f"Valid actions: {valid}"
        )
    return transitions[action]


def get_signal_outcome(
    from_status: ReinvestStatus, action: ReinvestAction
) -> ReinvestStatus | None:
    """Resolved status for a signal action, or None if the signal is terminal."""
    return SIGNAL_TRANSITIONS.get(from_status, {}).get(action)
