"""
Wheel domain primitives.

Public API:
    CycleStatus, OptionAction, LedgerType, ...: State machine enums
    WheelTrackerError and subclasses: Error taxonomy
    Some, USE_DEFAULT: Tagged override values
"""

from .exceptions import (
    ExternalProviderError,
    InsufficientLotError,
    InvariantViolation,
    NotFoundError,
    StaleSignalError,
    ValidationError,
    WheelTrackerError,
)
from .overrides import USE_DEFAULT, Override, Some, from_optional, to_optional
from .state import (
    CYCLE_TRANSITIONS,
    SIGNAL_TRANSITIONS,
    CallPut,
    CycleStatus,
    FinalizationReason,
    LedgerType,
    LegStatus,
    OptionAction,
    PremiumPolicy,
    ReinvestAction,
    ReinvestStatus,
    StockAction,
    WheelCategory,
    can_transition,
    get_next_state,
    get_signal_outcome,
    get_valid_actions,
)

__all__ = [
    # State machine
    "CycleStatus",
    "FinalizationReason",
    "CallPut",
    "OptionAction",
    "StockAction",
    "LegStatus",
    "LedgerType",
    "ReinvestStatus",
    "ReinvestAction",
    "PremiumPolicy",
    "WheelCategory",
    "CYCLE_TRANSITIONS",
    "SIGNAL_TRANSITIONS",
    "can_transition",
    "get_next_state",
    "get_signal_outcome",
    "get_valid_actions",
    # Overrides
    "Some",
    "USE_DEFAULT",
    "Override",
    "from_optional",
    "to_optional",
    # Exceptions
    "WheelTrackerError",
    "NotFoundError",
    "ValidationError",
    "InsufficientLotError",
    "StaleSignalError",
    "InvariantViolation",
    "ExternalProviderError",
]
