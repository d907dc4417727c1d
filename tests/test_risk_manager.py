"""
Risk manager tests.

Critical tests:
- Checks raise the right error in the right order
- Rejections are recorded for audit
- Checks never mutate the trader
"""
import pytest
from auction.exceptions import DuplicateOrder, InsufficientFunds, InsufficientPosition, NoPosition
from auction.orders import OrderSide
from auction.risk_manager import RiskManager, RiskViolation
from auction.trader import Trader


class TestPreTradeChecks:

    def setup_method(self):
        self.risk = RiskManager()
        self.trader = Trader("t1", 1_000.0, risk_manager=self.risk)

    def test_buy_within_funds(self):
        self.risk.check_order(self.trader, OrderSide.BUY, "SBUX", 10, 100.0)
        assert self.risk.get_stats()["total_blocks"] == 0

    def test_buy_over_funds(self):
        with pytest.raises(InsufficientFunds):
            self.risk.check_order(self.trader, OrderSide.BUY, "SBUX", 11, 100.0)

    def test_sell_no_position(self):
        with pytest.raises(NoPosition):
            self.risk.check_order(self.trader, OrderSide.SELL, "SBUX", 1, 100.0)

    def test_sell_insufficient_position(self, exchange):
        self.trader.buy_from_bank(exchange, "TWTR", 5)
        with pytest.raises(InsufficientPosition):
            self.risk.check_order(self.trader, OrderSide.SELL, "TWTR", 6, 50.0)

    def test_duplicate(self, exchange):
        self.trader.place_limit_order(exchange, "SBUX", 1, 90.0, OrderSide.BUY)
        with pytest.raises(DuplicateOrder):
            self.risk.check_order(self.trader, OrderSide.BUY, "SBUX", 1, 90.0)

    def test_sell_skips_funds_check(self, exchange):
        self.trader.buy_from_bank(exchange, "SBUX", 10)  # cash now 0
        self.risk.check_order(self.trader, OrderSide.SELL, "SBUX", 10, 1_000_000.0)


class TestAuditLog:

    def setup_method(self):
        self.risk = RiskManager()
        self.trader = Trader("t1", 100.0, risk_manager=self.risk)

    def test_rejection_recorded(self):
        with pytest.raises(NoPosition):
            self.risk.check_order(self.trader, OrderSide.SELL, "SBUX", 1, 100.0)

        events = self.risk.get_recent_events()
        assert len(events) == 1
        assert events[0].violation_type == RiskViolation.NO_POSITION
        assert events[0].trader_name == "t1"
        assert events[0].symbol == "SBUX"
        assert "SBUX" in events[0].details

    def test_only_first_failure_recorded(self):
        """A buy that is both unaffordable and duplicate reports funds only."""
        with pytest.raises(InsufficientFunds):
            self.risk.check_order(self.trader, OrderSide.BUY, "SBUX", 100, 100.0)
        assert [e.violation_type for e in self.risk.risk_events] == [RiskViolation.INSUFFICIENT_FUNDS]

    def test_stats(self):
        self.risk.check_order(self.trader, OrderSide.BUY, "SBUX", 1, 100.0)
        with pytest.raises(InsufficientFunds):
            self.risk.check_order(self.trader, OrderSide.BUY, "SBUX", 2, 100.0)

        stats = self.risk.get_stats()
        assert stats["total_checks"] == 2
        assert stats["total_blocks"] == 1
        assert stats["total_events"] == 1

    def test_bank_purchase_rejection_recorded(self, exchange):
        with pytest.raises(InsufficientFunds):
            self.trader.buy_from_bank(exchange, "SBUX", 2)
        assert self.risk.risk_events[-1].violation_type == RiskViolation.INSUFFICIENT_FUNDS

    def test_recent_events_limit(self):
        for _ in range(5):
            with pytest.raises(NoPosition):
                self.risk.check_order(self.trader, OrderSide.SELL, "SBUX", 1, 1.0)
        assert len(self.risk.get_recent_events(max_events=3)) == 3
