"""
Shared constants for wheel tracking.

This module centralizes values used across the ledger, lot tracker and
cycle engine so they stay consistent.
"""

from decimal import Decimal

from wheeltracker.wheel.state import PremiumPolicy

# =============================================================================
# Contracts
# =============================================================================

CONTRACT_MULTIPLIER = Decimal("100")
"""Shares represented by one equity option contract."""


# =============================================================================
# Persistence precision
# =============================================================================

MONEY_PRECISION = (18, 2)
"""Numeric(precision, scale) for cash amounts."""

PRICE_PRECISION = (18, 6)
"""Numeric(precision, scale) for per-share prices and cost basis."""

QUANTITY_PRECISION = (18, 4)
"""Numeric(precision, scale) for share and contract quantities."""


# =============================================================================
# Policies
# =============================================================================

DEFAULT_PREMIUM_POLICY = PremiumPolicy.REINVEST_ON_CLOSE
"""Account default when none is configured."""

TARGET_SUM_TOLERANCE = Decimal("0.01")
"""Allowed drift when wealth wheel targets are checked against 100%."""
