"""
Finnhub quote provider.

This module provides the Finnhub adapter for the QuoteProvider
capability, handling all HTTP communication with the Finnhub API.

API Documentation: https://finnhub.io/docs/api

Endpoints used:
- /quote: Real-time quote (free tier). Returns c (current price),
  d, dp, h, l, o, pc and t (unix timestamp).
"""

import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

import requests

from wheeltracker.market_data.config import FinnhubConfig
from wheeltracker.market_data.provider import Quote, QuoteProvider
from wheeltracker.wheel.exceptions import ExternalProviderError
from wheeltracker.wheel.money import to_decimal

logger = logging.getLogger(__name__)


class FinnhubQuoteProvider(QuoteProvider):
    """
    Quote provider backed by the Finnhub REST API.

    This client handles:
    - HTTP requests with token authentication
    - Retry logic with exponential backoff on timeouts and connection errors
    - Mapping every failure to ExternalProviderError
    - Connection pooling via requests.Session
    """

    def __init__(self, config: FinnhubConfig):
        """
        Initialize client with configuration.

        Args:
            config: FinnhubConfig instance with API credentials and settings
        """
        self.config = config
        self.session = requests.Session()
        self.session.headers.update(
            {"Accept": "application/json", "User-Agent": "WheelTracker/1.0"}
        )
        logger.info("Finnhub quote provider initialized")

    def get_quote(self, symbol: str) -> Quote:
        """
        Retrieve the latest quote for a symbol.

        Args:
            symbol: Stock ticker symbol (e.g., "F", "AAPL")

        Returns:
            Quote with the current price as last

        Raises:
            ExternalProviderError: If the request fails or the response is unusable
        """
        if not symbol or not isinstance(symbol, str):
            raise ExternalProviderError(f"Invalid symbol: {symbol!r}", symbol=symbol)

        symbol = symbol.upper().strip()
        url = f"{self.config.base_url}/quote"
        params = {"symbol": symbol, "token": self.config.api_key}

        logger.debug(f"Fetching quote for {symbol}")

        try:
            response = self._make_request_with_retry(url, params)

            if response.status_code == 401:
                raise ExternalProviderError(
                    "Authentication failed. Check your Finnhub API key.", symbol=symbol
                )
            elif response.status_code == 429:
                raise ExternalProviderError(
                    "Rate limit exceeded. Finnhub free tier allows 60 calls/minute.",
                    symbol=symbol,
                )
            elif response.status_code >= 500:
                raise ExternalProviderError(
                    f"Finnhub server error (HTTP {response.status_code}).", symbol=symbol
                )

            response.raise_for_status()
            data = response.json()

        except requests.exceptions.Timeout as e:
            raise ExternalProviderError(
                f"Request timeout after {self.config.timeout}s for symbol {symbol}",
                symbol=symbol,
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise ExternalProviderError(
                "Connection error. Check your internet connection.", symbol=symbol
            ) from e
        except requests.exceptions.RequestException as e:
            raise ExternalProviderError(f"API request failed: {e}", symbol=symbol) from e
        except ValueError as e:
            raise ExternalProviderError(
                f"Invalid JSON response from API: {e}", symbol=symbol
            ) from e

        return self._parse_quote(symbol, data)

    def _parse_quote(self, symbol: str, data: Dict[str, Any]) -> Quote:
        """
        Parse a Finnhub /quote response.

        Finnhub answers unknown symbols with HTTP 200 and all-zero fields,
        so a zero timestamp is treated as "no data".
        """
        if not isinstance(data, dict) or "c" not in data:
            raise ExternalProviderError(f"Malformed quote response for {symbol}", symbol=symbol)

        if not data.get("t"):
            raise ExternalProviderError(f"No quote data for {symbol}", symbol=symbol)

        try:
            last = to_decimal(data["c"], "c")
        except ValueError as e:
            raise ExternalProviderError(
                f"Invalid price in quote for {symbol}: {data['c']!r}", symbol=symbol
            ) from e

        timestamp = datetime.fromtimestamp(int(data["t"]), tz=timezone.utc).replace(
            tzinfo=None
        )
        logger.debug(f"Quote for {symbol}: {last}")
        return Quote(
            symbol=symbol,
            last=last,
            bid=Decimal(str(data.get("b") or 0)),
            ask=Decimal(str(data.get("a") or 0)),
            volume=data.get("v"),
            timestamp=timestamp,
        )

    def _make_request_with_retry(
        self, url: str, params: Dict[str, str], attempt: int = 1
    ) -> requests.Response:
        """
        Make HTTP request with exponential backoff retry.

        Args:
            url: Request URL
            params: Query parameters
            attempt: Current attempt number (used for recursion)

        Returns:
            HTTP response object

        Raises:
            requests.exceptions.Timeout: If every attempt timed out
            requests.exceptions.ConnectionError: If every attempt failed to connect
        """
        try:
            return self.session.get(url, params=params, timeout=self.config.timeout)

        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            if attempt >= self.config.max_retries:
                logger.error(f"All {self.config.max_retries} retry attempts failed")
                raise

            delay = self.config.retry_delay * (2 ** (attempt - 1))

            logger.warning(
                f"Request failed (attempt {attempt}/{self.config.max_retries}). "
                f"Retrying in {delay:.1f}s... Error: {str(e)}"
            )

            time.sleep(delay)
            return self._make_request_with_retry(url, params, attempt + 1)

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
        logger.info("Finnhub quote provider closed")
