"""Custom exceptions for wheel tracking operations."""


class WheelTrackerError(Exception):
    """Base exception for wheel tracking operations."""

    code = "wheeltracker_error"


class NotFoundError(WheelTrackerError):
    """Account, underlying, signal or other entity absent or not owned by caller."""

    code = "not_found"


class ValidationError(WheelTrackerError, ValueError):
    """Malformed or out-of-range input, rejected before any mutation."""

    code = "validation_error"


class InsufficientLotError(WheelTrackerError):
    """Sell or assignment quantity exceeds the open lot remainder."""

    code = "insufficient_lots"

    def __init__(self, message: str, requested=None, available=None):
        super().__init__(message)
        self.requested = requested
        self.available = available


class StaleSignalError(WheelTrackerError):
    """Reinvest signal is already resolved."""

    code = "stale_signal"


class InvariantViolation(WheelTrackerError):
    """
    Internal consistency check failed.

    Indicates events were sequenced incorrectly (e.g. assigning more
    contracts than are open). Fatal for the operation, never clamped.
    """

    code = "invariant_violation"


class ExternalProviderError(WheelTrackerError):
    """Market data fetch failed for a symbol."""

    code = "external_provider_error"

    def __init__(self, message: str, symbol: str | None = None):
        super().__init__(message)
        self.symbol = symbol
