"""Tests for the price refresh service."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict

import pytest
from sqlalchemy.exc import OperationalError

from wheeltracker.market_data.provider import Quote, QuoteProvider
from wheeltracker.server.models.trade import StockEntry
from wheeltracker.server.repositories.unit_of_work import UnitOfWork
from wheeltracker.server.services.price_refresh import PriceRefreshService
from wheeltracker.server.services.trade_entry import TradeEntryService
from wheeltracker.wheel.exceptions import (
    ExternalProviderError,
    InvariantViolation,
    NotFoundError,
)
from wheeltracker.wheel.state import StockAction


class FakeQuoteProvider(QuoteProvider):
    """Serves canned prices; symbols without one fail."""

    def __init__(self, prices: Dict[str, str]):
        self.prices = prices
        self.requested = []

    def get_quote(self, symbol: str) -> Quote:
        self.requested.append(symbol)
        if symbol not in self.prices:
            raise ExternalProviderError(f"No quote data for {symbol}", symbol=symbol)
        return Quote(
            symbol=symbol,
            last=Decimal(self.prices[symbol]),
            timestamp=datetime(2026, 10, 16, 20, 0),
        )


@pytest.fixture
def holdings(trades: TradeEntryService, funded_account_id: str) -> str:
    """Open lots in XYZ, ABC and QQQ; a closed position in OLD."""
    for symbol in ("XYZ", "ABC", "QQQ", "OLD"):
        trades.record_stock_entry(
            funded_account_id,
            StockEntry(
                symbol=symbol, action=StockAction.BUY, quantity=Decimal("10"), price=Decimal("10")
            ),
        )
    trades.record_stock_entry(
        funded_account_id,
        StockEntry(
            symbol="OLD", action=StockAction.SELL, quantity=Decimal("10"), price=Decimal("11")
        ),
    )
    return funded_account_id


def price_of(uow: UnitOfWork, account_id: str, symbol: str):
    with uow.read(account_id):
        return uow.underlyings.get_by_symbol(account_id, symbol).current_price


class TestRefreshPrices:
    """Tests for PriceRefreshService.refresh_prices()."""

    def test_updates_held_symbols(self, uow: UnitOfWork, holdings: str) -> None:
        provider = FakeQuoteProvider({"XYZ": "52.25", "ABC": "101.5", "QQQ": "400"})

        report = PriceRefreshService(uow, provider).refresh_prices(holdings)

        assert report.updated == 3
        assert report.failed == 0
        assert sorted(provider.requested) == ["ABC", "QQQ", "XYZ"]
        assert price_of(uow, holdings, "XYZ") == Decimal("52.25")
        with uow.read(holdings):
            xyz = uow.underlyings.get_by_symbol(holdings, "XYZ")
            assert xyz.price_updated_at == datetime(2026, 10, 16, 20, 0)

    def test_failures_are_isolated(self, uow: UnitOfWork, holdings: str) -> None:
        """One symbol failing does not block the others."""
        provider = FakeQuoteProvider({"XYZ": "52.25", "QQQ": "0"})

        report = PriceRefreshService(uow, provider).refresh_prices(holdings)

        assert report.updated == 1
        assert report.failed == 2
        failed = {r.symbol: r.error for r in report.results if not r.success}
        assert "No quote data" in failed["ABC"]
        assert "Non-positive" in failed["QQQ"]
        assert price_of(uow, holdings, "XYZ") == Decimal("52.25")
        assert price_of(uow, holdings, "ABC") is None
        assert price_of(uow, holdings, "QQQ") is None

    def test_nothing_held(self, uow: UnitOfWork, account_id: str) -> None:
        provider = FakeQuoteProvider({})
        report = PriceRefreshService(uow, provider).refresh_prices(account_id)
        assert report.results == []
        assert provider.requested == []

    def test_unknown_account(self, uow: UnitOfWork) -> None:
        with pytest.raises(NotFoundError):
            PriceRefreshService(uow, FakeQuoteProvider({})).refresh_prices("missing")

    def test_unexpected_provider_error_is_isolated(
        self, uow: UnitOfWork, holdings: str, caplog
    ) -> None:
        """A non-provider exception fails only its own symbol."""

        class FlakyProvider(FakeQuoteProvider):
            def get_quote(self, symbol: str) -> Quote:
                if symbol == "ABC":
                    raise RuntimeError("connection reset")
                return super().get_quote(symbol)

        provider = FlakyProvider({"XYZ": "52.25", "QQQ": "400"})

        with caplog.at_level(logging.WARNING):
            report = PriceRefreshService(uow, provider).refresh_prices(holdings)

        assert report.updated == 2
        failed = {r.symbol: r.error for r in report.results if not r.success}
        assert failed == {"ABC": "connection reset"}
        assert price_of(uow, holdings, "QQQ") == Decimal("400")
        assert "Price refresh failed for ABC" in caplog.text

    def test_write_failure_is_isolated(
        self, uow: UnitOfWork, holdings: str, monkeypatch
    ) -> None:
        """A database error while saving one price leaves the others saved."""
        with uow.read(holdings):
            abc_id = uow.underlyings.get_by_symbol(holdings, "ABC").id
        original_get = uow.underlyings.get

        def get(account_id, underlying_id):
            if underlying_id == abc_id:
                raise OperationalError("UPDATE underlyings", {}, Exception("disk I/O error"))
            return original_get(account_id, underlying_id)

        monkeypatch.setattr(uow.underlyings, "get", get)
        provider = FakeQuoteProvider({"XYZ": "52.25", "ABC": "101.5", "QQQ": "400"})

        report = PriceRefreshService(uow, provider).refresh_prices(holdings)

        assert report.updated == 2
        assert [r.symbol for r in report.results if not r.success] == ["ABC"]
        assert price_of(uow, holdings, "XYZ") == Decimal("52.25")
        assert price_of(uow, holdings, "QQQ") == Decimal("400")
        assert price_of(uow, holdings, "ABC") is None

    def test_invariant_violation_propagates(self, uow: UnitOfWork, holdings: str) -> None:
        class BrokenProvider(FakeQuoteProvider):
            def get_quote(self, symbol: str) -> Quote:
                raise InvariantViolation("ledger out of balance")

        with pytest.raises(InvariantViolation):
            PriceRefreshService(uow, BrokenProvider({})).refresh_prices(holdings)
