"""Stock registry tests."""
import itertools

import pytest
from auction.exceptions import ExchangeError, UnknownSymbol
from auction.market import Market


class TestMarket:

    def setup_method(self):
        ticks = itertools.count(1000)
        self.market = Market("NASDAQ", clock=lambda: float(next(ticks)))
        self.market.list_stock("SBUX", "Starbucks Corp.", 92.86)

    def test_listing(self):
        assert self.market.is_listed("SBUX")
        assert not self.market.is_listed("AAPL")
        assert self.market.current_price("SBUX") == 92.86
        assert self.market.get_stock("SBUX").company == "Starbucks Corp."

    def test_duplicate_listing_fails(self):
        with pytest.raises(ValueError):
            self.market.list_stock("SBUX", "Again", 10.0)

    def test_non_positive_listing_price_fails(self):
        with pytest.raises(ValueError):
            self.market.list_stock("ZERO", "Zero Corp.", 0.0)

    def test_set_price_appends_history(self):
        self.market.set_price("SBUX", 99.0)
        self.market.set_price("SBUX", 98.5)

        assert self.market.current_price("SBUX") == 98.5
        assert self.market.history("SBUX") == [(92.86, 1000.0), (99.0, 1001.0), (98.5, 1002.0)]

    def test_history_per_symbol(self):
        self.market.list_stock("TWTR", "Twitter Inc.", 47.88)
        self.market.set_price("TWTR", 50.0)

        assert [p for p, _ in self.market.history("SBUX")] == [92.86]
        assert [p for p, _ in self.market.history("TWTR")] == [47.88, 50.0]
        assert len(self.market.price_changes()) == 3

    def test_unknown_symbol(self):
        with pytest.raises(UnknownSymbol):
            self.market.set_price("AAPL", 1.0)
        with pytest.raises(UnknownSymbol):
            self.market.current_price("AAPL")
        with pytest.raises(UnknownSymbol):
            self.market.history("AAPL")

    def test_unknown_symbol_is_key_error(self):
        with pytest.raises(KeyError):
            self.market.current_price("AAPL")
        assert issubclass(UnknownSymbol, ExchangeError)
        assert str(UnknownSymbol("AAPL is not listed")) == "AAPL is not listed"

    def test_stocks_sorted(self):
        self.market.list_stock("AAPL", "Apple", 150.0)
        assert [s.symbol for s in self.market.stocks()] == ["AAPL", "SBUX"]
