"""
Stock registry: current price per symbol plus an append-only price history.

set_price updates the current price and appends to the history in one step,
under the registry lock, so every price a symbol ever had is in its history.
"""
from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import Callable, Dict, List, Tuple
import logging
import time

from .exceptions import UnknownSymbol

logger = logging.getLogger(__name__)


@dataclass
class Stock:
    symbol: str
    company: str
    price: float


@dataclass(frozen=True)
class PriceChange:
    symbol: str
    price: float
    timestamp: float


class Market:
    """Listed stocks of one exchange and their price history."""

    def __init__(self, name: str, clock: Callable[[], float] = time.time):
        if not name:
            raise ValueError("market name cannot be empty")
        self.name = name
        self._clock = clock
        self._lock = RLock()
        self._stocks: Dict[str, Stock] = {}
        self._history: List[PriceChange] = []

    def list_stock(self, symbol: str, company: str, price: float) -> Stock:
        """
        List a new stock (IPO). The listing price opens its history.

        Raises:
            ValueError: If the symbol is already listed or price is not positive
        """
        if price <= 0:
            raise ValueError(f"listing price must be > 0, got {price}")
        with self._lock:
            if symbol in self._stocks:
                raise ValueError(f"{symbol} is already listed on {self.name}")
            stock = Stock(symbol=symbol, company=company, price=float(price))
            self._stocks[symbol] = stock
            self._history.append(PriceChange(symbol, stock.price, self._clock()))
        logger.info("%s listed %s (%s) at %.2f", self.name, symbol, company, price)
        return stock

    def is_listed(self, symbol: str) -> bool:
        with self._lock:
            return symbol in self._stocks

    def get_stock(self, symbol: str) -> Stock:
        with self._lock:
            stock = self._stocks.get(symbol)
            if stock is None:
                raise UnknownSymbol(f"{symbol} is not listed on {self.name}")
            return stock

    def current_price(self, symbol: str) -> float:
        return self.get_stock(symbol).price

    def set_price(self, symbol: str, new_price: float) -> None:
        with self._lock:
            stock = self.get_stock(symbol)
            old_price = stock.price
            stock.price = float(new_price)
            self._history.append(PriceChange(symbol, stock.price, self._clock()))
        logger.info("%s %s price %.2f -> %.2f", self.name, symbol, old_price, new_price)

    def history(self, symbol: str) -> List[Tuple[float, float]]:
        """(price, timestamp) pairs for `symbol`, oldest first."""
        with self._lock:
            if symbol not in self._stocks:
                raise UnknownSymbol(f"{symbol} is not listed on {self.name}")
            return [(c.price, c.timestamp) for c in self._history if c.symbol == symbol]

    def price_changes(self) -> List[PriceChange]:
        with self._lock:
            return list(self._history)

    def stocks(self) -> List[Stock]:
        with self._lock:
            return [self._stocks[s] for s in sorted(self._stocks)]

    def __repr__(self) -> str:
        return f"Market(name={self.name}, stocks={len(self._stocks)})"
