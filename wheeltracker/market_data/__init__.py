"""
Market data package.

Provides the QuoteProvider capability used by price refresh and its
Finnhub implementation.
"""

from wheeltracker.market_data.config import FinnhubConfig
from wheeltracker.market_data.finnhub_client import FinnhubQuoteProvider
from wheeltracker.market_data.provider import Quote, QuoteProvider

__all__ = [
    "FinnhubConfig",
    "FinnhubQuoteProvider",
    "Quote",
    "QuoteProvider",
]
