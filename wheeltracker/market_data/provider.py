"""
Quote provider capability.

The core only needs one thing from market data: the latest quote for a
symbol. Any failure to obtain one is reported as ExternalProviderError so
callers can treat it as "price unavailable" for that symbol.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Quote:
    """
    Latest quote for a symbol.

    Attributes:
        symbol: Ticker symbol
        last: Last traded price
        bid: Best bid (0 when the provider does not report one)
        ask: Best ask (0 when the provider does not report one)
        volume: Volume, if reported
        timestamp: Quote time (naive UTC)
    """

    symbol: str
    last: Decimal
    bid: Decimal = Decimal("0")
    ask: Decimal = Decimal("0")
    volume: Optional[int] = None
    timestamp: Optional[datetime] = None


class QuoteProvider(ABC):
    """Source of quotes for price refresh."""

    @abstractmethod
    def get_quote(self, symbol: str) -> Quote:
        """
        Fetch the latest quote.

        Raises:
            ExternalProviderError: If the quote cannot be obtained
        """

    def close(self) -> None:
        """Release any resources held by the provider."""
