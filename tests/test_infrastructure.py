"""Config presets, logging setup and text reports."""
import logging

import pytest
from auction.orders import OrderSide
from auction.trader import Trader
from application.reporting import format_history, format_stocks, format_trade_report, format_trader
from infrastructure.config import ExchangeConfig, Listing
from infrastructure.logger import LoggingConfig, build_dict_config, configure_logging


class TestExchangeConfig:

    def test_presets(self):
        nasdaq = ExchangeConfig.NASDAQ()
        assert nasdaq.symbols == ("SBUX", "TWTR", "VSLR", "GILD")
        assert ExchangeConfig.NIKKEI().symbols == ("BABA", "BDU")
        assert nasdaq.default_cash == 100_000.0

    def test_duplicate_symbol_rejected(self):
        with pytest.raises(ValueError):
            ExchangeConfig("X", (Listing("A", "a", 1.0), Listing("A", "b", 2.0)))

    def test_frozen(self):
        with pytest.raises(AttributeError):
            ExchangeConfig.NASDAQ().name = "other"


class TestLogging:

    def test_console_only(self):
        cfg = build_dict_config(LoggingConfig(level="DEBUG"))
        assert set(cfg["handlers"]) == {"console"}
        assert cfg["loggers"]["auction"]["level"] == "DEBUG"

    def test_file_handler(self, tmp_path):
        cfg = build_dict_config(LoggingConfig(log_file=str(tmp_path / "x.log")))
        assert cfg["handlers"]["file"]["class"] == "logging.handlers.RotatingFileHandler"
        assert "file" in cfg["loggers"]["application"]["handlers"]

    def test_package_override(self):
        cfg = build_dict_config(LoggingConfig(level="WARNING", package_levels={"auction": "DEBUG"}))
        assert cfg["loggers"]["auction"]["level"] == "DEBUG"
        assert cfg["loggers"]["application"]["level"] == "WARNING"

    def test_configure_creates_log_dir(self, tmp_path):
        log_file = tmp_path / "runs" / "sim.log"
        configure_logging(LoggingConfig(level="INFO", log_file=str(log_file)))
        try:
            logging.getLogger("auction.test").info("hello")
            assert log_file.parent.is_dir()
        finally:
            for name in ("auction", "application", "call_auction"):
                lg = logging.getLogger(name)
                for h in list(lg.handlers):
                    lg.removeHandler(h)
                    h.close()
                lg.propagate = True
            for h in list(logging.getLogger().handlers):
                logging.getLogger().removeHandler(h)


class TestReporting:

    def test_trader_report(self, exchange):
        t = Trader("neda", 10_000.0)
        t.buy_from_bank(exchange, "SBUX", 10)
        t.place_limit_order(exchange, "SBUX", 5, 101.0, OrderSide.SELL)
        t.place_market_order(exchange, "TWTR", 2, OrderSide.BUY)

        text = format_trader(t)
        assert "Trader Name: neda" in text
        assert "Cash: 9000.00" in text
        assert "SBUX: 10" in text
        assert "SELL SBUX 5 @ 101.00" in text
        assert "BUY TWTR 2 @ MKT" in text

    def test_empty_trader_report(self):
        assert format_trader(Trader("nobody")).count("(none)") == 2

    def test_stocks_and_history(self, exchange):
        exchange.market.set_price("SBUX", 101.5)
        assert "Starbucks Corp." in format_stocks(exchange.market)
        history = format_history(exchange.market, "SBUX")
        assert "100.00" in history and "101.50" in history

    def test_trade_report(self, exchange):
        a, b = Trader("a", 100_000.0), Trader("b", 100_000.0)
        a.buy_from_bank(exchange, "SBUX", 10)
        a.place_limit_order(exchange, "SBUX", 10, 101.0, OrderSide.SELL)
        b.place_limit_order(exchange, "SBUX", 10, 102.0, OrderSide.BUY)

        text = format_trade_report(exchange.trigger_trade())
        assert "SBUX: cleared @ 101.00 bought=10 sold=10 fills=2" in text

    def test_no_trades(self, exchange):
        assert format_trade_report(exchange.trigger_trade()) == "No trades."
