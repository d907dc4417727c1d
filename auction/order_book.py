from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Dict, List, Optional, Tuple
import logging

from .exceptions import UnknownSymbol
from .market import Market
from .matching_engine import ClearingResult, Fill, run_call_auction
from .orders import Order, OrderSide

logger = logging.getLogger(__name__)


@dataclass
class _SymbolBook:
    """Resting orders for one symbol. Owns its lock; never shared across symbols."""
    symbol: str
    lock: RLock = field(default_factory=RLock)
    buys: List[Order] = field(default_factory=list)
    sells: List[Order] = field(default_factory=list)

    def side(self, side: OrderSide) -> List[Order]:
        return self.buys if side is OrderSide.BUY else self.sells

    def contains(self, order: Order) -> bool:
        return any(o is order for o in self.side(order.side))


class OrderBook:
    """
    Call-auction book storage with:
    - per-symbol BUY/SELL lists, each symbol under its own RLock
    - match(symbol) clears one symbol at a single price and removes fills
    - registry price update before fills are reported

    Submission and matching for the same symbol take the same lock, so a
    submission lands strictly before or strictly after a clearing pass.
    Orders are stored in submission order; matching derives price order itself.
    """

    def __init__(self, market: Market):
        self.market = market

        self._lock = RLock()  # guards _books itself, not the per-symbol lists
        self._books: Dict[str, _SymbolBook] = {}

        # Stats
        self._total_orders_added = 0
        self._total_orders_filled = 0
        self._total_matches = 0
        self._last_results: Dict[str, ClearingResult] = {}

    # ---------- internal helpers ----------

    def _book(self, symbol: str) -> _SymbolBook:
        with self._lock:
            book = self._books.get(symbol)
            if book is None:
                book = _SymbolBook(symbol)
                self._books[symbol] = book
            return book

    def _require_listed(self, symbol: str) -> None:
        if not self.market.is_listed(symbol):
            raise UnknownSymbol(f"{symbol} is not listed on {self.market.name}")

    # ---------- public API ----------

    def symbol_lock(self, symbol: str) -> RLock:
        """Exclusive lock for one symbol's book. Re-entrant."""
        self._require_listed(symbol)
        return self._book(symbol).lock

    def submit(self, order: Order) -> None:
        """
        Rest an order on its side of its symbol's book.

        Raises:
            UnknownSymbol: If the symbol is not listed
            ValueError: If this exact order is already resting
        """
        self._require_listed(order.symbol)
        book = self._book(order.symbol)
        with book.lock:
            if book.contains(order):
                raise ValueError(f"{order!r} is already resting in the book")
            book.side(order.side).append(order)
            with self._lock:
                self._total_orders_added += 1
        logger.debug("%s resting %r", self.market.name, order)

    def match(self, symbol: str) -> List[Fill]:
        """
        Clear `symbol` at a single price.

        Updates the registry price when it moves, removes every filled order
        from the book and returns the fills in dispatch order. Returns an
        empty list when the book cannot cross; calling it again with no new
        submissions is a no-op.
        """
        self._require_listed(symbol)
        book = self._book(symbol)
        with book.lock:
            result = run_call_auction(
                symbol, list(book.buys), list(book.sells), self.market.current_price(symbol)
            )
            if not result.crossed:
                return []

            if result.price_changed:
                self.market.set_price(symbol, result.price)

            filled = {id(f.order) for f in result.fills}
            book.buys = [o for o in book.buys if id(o) not in filled]
            book.sells = [o for o in book.sells if id(o) not in filled]

            with self._lock:
                self._total_matches += 1
                self._total_orders_filled += len(result.fills)
                self._last_results[symbol] = result

        logger.info(
            "%s %s cleared at %.2f: %d fills (bought %d, sold %d)",
            self.market.name, symbol, result.price, len(result.fills),
            result.filled_volume(OrderSide.BUY), result.filled_volume(OrderSide.SELL),
        )
        return list(result.fills)

    def last_result(self, symbol: str) -> Optional[ClearingResult]:
        """Most recent crossing clearing for `symbol`, with its ladder and curves."""
        with self._lock:
            return self._last_results.get(symbol)

    def symbols(self) -> List[str]:
        """Symbols that have had orders submitted, sorted."""
        with self._lock:
            return sorted(self._books)

    def resting_orders(self, symbol: str, side: Optional[OrderSide] = None) -> List[Order]:
        with self._lock:
            book = self._books.get(symbol)
        if book is None:
            return []
        with book.lock:
            if side is None:
                return list(book.buys) + list(book.sells)
            return list(book.side(side))

    def get_depth(self, symbol: str) -> Tuple[List[Tuple[float, int]], List[Tuple[float, int]]]:
        """
        Aggregated size per price, (bids descending, asks ascending).

        Market orders are reported at price 0.0.
        """
        bids: Dict[float, int] = {}
        asks: Dict[float, int] = {}
        for o in self.resting_orders(symbol):
            levels = bids if o.side is OrderSide.BUY else asks
            levels[o.limit_price] = levels.get(o.limit_price, 0) + o.size
        return (
            sorted(bids.items(), reverse=True),
            sorted(asks.items()),
        )

    def get_total_quantity(self, symbol: str, side: OrderSide) -> int:
        return sum(o.size for o in self.resting_orders(symbol, side))

    def get_stats(self) -> dict:
        with self._lock:
            symbols = sorted(self._books)
            stats = {
                "total_orders_added": self._total_orders_added,
                "total_orders_filled": self._total_orders_filled,
                "total_matches": self._total_matches,
                "active_symbols": len(symbols),
            }
        stats["resting_orders"] = sum(len(self.resting_orders(s)) for s in symbols)
        return stats
