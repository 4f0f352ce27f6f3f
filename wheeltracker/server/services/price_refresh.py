"""Best-effort price refresh for an account's held symbols.

Quotes are fetched with no transaction open. Each successful price is
written in its own short transaction, so one symbol's failure never
rolls back or blocks another's update.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from wheeltracker.market_data.provider import QuoteProvider
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.utils.date_utils import utcnow
from wheeltracker.wheel.exceptions import (
    ExternalProviderError,
    InvariantViolation,
    NotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass
class SymbolRefreshResult:
    symbol: str
    success: bool
    price: Optional[Decimal] = None
    error: Optional[str] = None


@dataclass
class PriceRefreshReport:
    """Per-symbol outcome of one refresh run."""

    account_id: str
    results: List[SymbolRefreshResult] = field(default_factory=list)

    @property
    def updated(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)


class PriceRefreshService:
    """Updates Underlying.current_price from a quote provider.

    Attributes:
        uow: Unit of work supplying the session and repositories
        provider: Source of quotes
    """

    def __init__(self, uow: UnitOfWork, provider: QuoteProvider):
        self.uow = uow
        self.provider = provider

    def refresh_prices(self, account_id: str) -> PriceRefreshReport:
        """Refresh the price of every underlying with open lots.

        Any failure other than an InvariantViolation is recorded against its
        symbol and the batch moves on.

        Args:
            account_id: Account whose holdings are refreshed

        Returns:
            PriceRefreshReport with one result per symbol

        Raises:
            NotFoundError: If the account does not exist
        """
        with self.uow.read(account_id):
            targets = [
                (u.id, u.symbol) for u in self.uow.underlyings.list_with_open_lots(account_id)
            ]

        report = PriceRefreshReport(account_id=account_id)
        for underlying_id, symbol in targets:
            try:
                result = self._refresh_symbol(account_id, underlying_id, symbol)
            except InvariantViolation:
                raise
            except Exception as e:
                logger.warning(f"Price refresh failed for {symbol}: {e}", exc_info=True)
                result = SymbolRefreshResult(symbol=symbol, success=False, error=str(e))
            report.results.append(result)

        logger.info(
            f"Price refresh for {account_id}: {report.updated} updated, "
            f"{report.failed} failed"
        )
        return report

    def _refresh_symbol(
        self, account_id: str, underlying_id: int, symbol: str
    ) -> SymbolRefreshResult:
        try:
            quote = self.provider.get_quote(symbol)
        except ExternalProviderError as e:
            logger.warning(f"Quote unavailable for {symbol}: {e}")
            return SymbolRefreshResult(symbol=symbol, success=False, error=str(e))

        if quote.last <= 0:
            logger.warning(f"Ignoring non-positive price for {symbol}: {quote.last}")
            return SymbolRefreshResult(
                symbol=symbol, success=False, error=f"Non-positive price {quote.last}"
            )

        with self.uow.transaction(account_id):
            underlying = self.uow.underlyings.get(account_id, underlying_id)
            if underlying is None:
                raise NotFoundError(f"Underlying not found: {underlying_id}")
            underlying.current_price = quote.last
            underlying.price_updated_at = quote.timestamp or utcnow()
            self.uow.db.flush()

        logger.debug(f"Updated {symbol} price to {quote.last}")
        return SymbolRefreshResult(symbol=symbol, success=True, price=quote.last)
