from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Callable, Dict, List
import time

from auction.market import Market, Stock
from auction.matching_engine import Fill
from auction.order_book import OrderBook
from auction.orders import Order, OrderSide
from infrastructure.config import ExchangeConfig
from infrastructure.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DispatchError:
    """A fill the owning trader refused. The order has already left the book."""
    fill: Fill
    error: Exception

    def __str__(self) -> str:
        return f"{self.fill.order!r} @ {self.fill.price:.2f}: {self.error}"


@dataclass
class TradeReport:
    """Outcome of one or more clearing passes."""
    fills: List[Fill] = field(default_factory=list)
    errors: List[DispatchError] = field(default_factory=list)
    clearing_prices: Dict[str, float] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def volume(self, side: OrderSide) -> int:
        return sum(f.size for f in self.fills if f.side is side)

    def merge(self, other: "TradeReport") -> None:
        self.fills.extend(other.fills)
        self.errors.extend(other.errors)
        self.clearing_prices.update(other.clearing_prices)


class Exchange:
    """
    One market: a stock registry plus the order book that trades it.

    - Traders place orders through it (it is the venue they are handed)
    - trigger_trade() clears every symbol, one at a time
    - Fill dispatch happens under the symbol's lock, so nobody submits for a
      symbol halfway through its pass
    """

    def __init__(self, name: str, clock: Callable[[], float] = time.time):
        self.name = name
        self.market = Market(name, clock=clock)
        self.order_book = OrderBook(self.market)
        self._lock = RLock()  # serializes trigger_trade passes

    @classmethod
    def from_config(cls, config: ExchangeConfig, clock: Callable[[], float] = time.time) -> "Exchange":
        exchange = cls(config.name, clock=clock)
        for listing in config.listings:
            exchange.list_stock(listing.symbol, listing.company, listing.price)
        return exchange

    # ---------- venue API used by traders ----------

    def list_stock(self, symbol: str, company: str, price: float) -> Stock:
        return self.market.list_stock(symbol, company, price)

    def current_price(self, symbol: str) -> float:
        return self.market.current_price(symbol)

    def symbol_lock(self, symbol: str) -> RLock:
        return self.order_book.symbol_lock(symbol)

    def submit(self, order: Order) -> None:
        self.order_book.submit(order)

    # ---------- clearing ----------

    def match(self, symbol: str) -> TradeReport:
        """
        Clear one symbol and notify each filled order's owner exactly once.

        A trader that rejects its fill is logged and recorded in the report;
        the remaining fills are still delivered.
        """
        report = TradeReport()
        with self.order_book.symbol_lock(symbol):
            fills = self.order_book.match(symbol)
            if not fills:
                return report

            report.clearing_prices[symbol] = fills[0].price
            for fill in fills:
                report.fills.append(fill)
                try:
                    fill.owner.trade_performed(fill.order, fill.price)
                except Exception as e:
                    logger.error("%s: fill dispatch failed for %r: %s", self.name, fill.order, e)
                    report.errors.append(DispatchError(fill, e))
        return report

    def trigger_trade(self) -> TradeReport:
        """Clear every symbol with resting orders, in symbol order."""
        report = TradeReport()
        with self._lock:
            for symbol in self.order_book.symbols():
                report.merge(self.match(symbol))
        logger.info(
            "%s trade complete: %d fills across %d symbols, %d dispatch errors",
            self.name, len(report.fills), len(report.clearing_prices), len(report.errors),
        )
        return report

    def __repr__(self) -> str:
        return f"Exchange(name={self.name}, stocks={len(self.market.stocks())})"
