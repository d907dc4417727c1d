"""
Trader account: cash, owned shares and orders waiting in the book.

Design:
1. State changes only through two doors:
   - buy_from_bank: immediate purchase at the listed price, bypasses the book
   - trade_performed: fill notification after a clearing pass
2. Placing an order changes nothing but the pending set. Cash and position
   move when the order fills, at the clearing price.
3. Validation is delegated to RiskManager and happens before the order
   reaches the book. A rejected order leaves no trace in the book or in the
   pending set.

Thread safety:
    Each trader guards its own state with an RLock. Placement takes the
    symbol's book lock first and the trader lock second, the same order the
    exchange uses when it dispatches fills.
"""
from threading import RLock
from typing import Dict, List, Mapping, Optional
import logging

from .exceptions import InsufficientPosition, UnknownOrder
from .matching_engine import Fill
from .orders import Order, OrderSide
from .risk_manager import RiskManager

logger = logging.getLogger(__name__)


class Trader:
    """
    Trader with cash, position and pending-order tracking.

    The `exchange` argument of the placement methods is any venue exposing
    current_price(symbol), submit(order) and symbol_lock(symbol), normally
    an application.exchange.Exchange.

    Invariants maintained:
        - at most one pending order per symbol
        - position quantities are positive (empty holdings are dropped)
        - every pending order is resting in exactly one book
    """

    def __init__(self, name: str, cash: float = 0.0, risk_manager: Optional[RiskManager] = None):
        if not name:
            raise ValueError("trader name cannot be empty")
        if cash < 0:
            raise ValueError(f"cash must be >= 0, got {cash}")

        self.name = name
        self.risk_manager = risk_manager if risk_manager is not None else RiskManager()

        self._lock = RLock()
        self._cash = float(cash)
        self._position: Dict[str, int] = {}
        self._pending: List[Order] = []
        self._fills: List[Fill] = []

    # ==================== Read-only properties ====================

    @property
    def cash(self) -> float:
        with self._lock:
            return self._cash

    @property
    def position(self) -> Dict[str, int]:
        """Owned quantity per symbol (copy)."""
        with self._lock:
            return dict(self._position)

    @property
    def pending_orders(self) -> List[Order]:
        """Orders resting in a book, oldest first (copy)."""
        with self._lock:
            return list(self._pending)

    @property
    def fills(self) -> List[Fill]:
        with self._lock:
            return list(self._fills)

    @property
    def num_fills(self) -> int:
        return len(self._fills)

    def owned_quantity(self, symbol: str) -> int:
        with self._lock:
            return self._position.get(symbol, 0)

    def has_pending_order(self, symbol: str) -> bool:
        with self._lock:
            return any(o.symbol == symbol for o in self._pending)

    def mark_to_market(self, prices: Mapping[str, float]) -> float:
        """
        Cash plus the value of every holding at `prices`.

        Raises:
            KeyError: If a held symbol has no price in `prices`
        """
        with self._lock:
            return self._cash + sum(qty * prices[sym] for sym, qty in self._position.items())

    # ==================== Bank purchases ====================

    def buy_from_bank(self, exchange, symbol: str, volume: int) -> None:
        """
        Buy straight from the bank at the current listed price.

        The shares go into the position at once; no order is created and the
        book is not involved.

        Raises:
            UnknownSymbol: If the symbol is not listed
            InsufficientFunds: If price x volume exceeds cash
        """
        if isinstance(volume, bool) or not isinstance(volume, int) or volume <= 0:
            raise ValueError(f"volume must be a positive int, got {volume!r}")

        price = exchange.current_price(symbol)
        with self._lock:
            self.risk_manager.check_funds(self, symbol, volume, price)
            self._position[symbol] = self._position.get(symbol, 0) + volume
            self._cash -= price * volume
        logger.debug("%s bought %d %s from bank at %.2f", self.name, volume, symbol, price)

    # ==================== Order placement ====================

    def place_limit_order(self, exchange, symbol: str, volume: int, price: float, side: OrderSide) -> Order:
        """
        Rest a limit order in the exchange's book.

        A price of 0.0 makes it a market order.

        Returns:
            Order: The order now pending

        Raises:
            ValueError: If the price is not a finite number >= 0
            InsufficientFunds, DuplicateOrder, NoPosition, InsufficientPosition,
            UnknownSymbol
        """
        order = Order(symbol=symbol, side=side, size=volume, limit_price=price, owner=self)
        return self._place(exchange, order)

    def place_market_order(self, exchange, symbol: str, volume: int, side: OrderSide) -> Order:
        """Rest a market order. The funds check uses the current listed price."""
        order = Order.market(symbol, side, volume, owner=self)
        return self._place(exchange, order)

    def _place(self, exchange, order: Order) -> Order:
        with exchange.symbol_lock(order.symbol):
            check_price = exchange.current_price(order.symbol) if order.is_market else order.limit_price
            with self._lock:
                self.risk_manager.check_order(self, order.side, order.symbol, order.size, check_price)
                exchange.submit(order)
                self._pending.append(order)
        logger.debug("%s placed %r", self.name, order)
        return order

    # ==================== Fill notifications ====================

    def trade_performed(self, order: Order, price: float) -> None:
        """
        Apply a fill reported by the order book.

        Buy: cash down by price x size, position up by size.
        Sell: cash up by price x size, position down by size.
        The order leaves the pending set either way.

        Raises:
            UnknownOrder: If the order is not pending for this trader (for
                example a second notification for the same order)
            InsufficientPosition: If a sell fill exceeds the owned quantity
        """
        with self._lock:
            if not any(o is order for o in self._pending):
                raise UnknownOrder(f"{order!r} is not pending for trader {self.name}")

            notional = price * order.size
            if order.side is OrderSide.SELL:
                owned = self._position.get(order.symbol, 0)
                if order.size > owned:
                    raise InsufficientPosition(
                        f"Fill of {order!r} exceeds {owned} owned. Trader: {self.name}"
                    )
                self._cash += notional
                if owned == order.size:
                    del self._position[order.symbol]
                else:
                    self._position[order.symbol] = owned - order.size
            else:
                self._cash -= notional
                self._position[order.symbol] = self._position.get(order.symbol, 0) + order.size

            self._pending = [o for o in self._pending if o is not order]
            self._fills.append(Fill(order, price))

        logger.debug("%s filled %r at %.2f", self.name, order, price)

    # ==================== Analytics ====================

    def get_summary(self) -> dict:
        with self._lock:
            return {
                'name': self.name,
                'cash': self._cash,
                'position': dict(self._position),
                'pending_orders': len(self._pending),
                'num_fills': len(self._fills),
            }

    def __repr__(self):
        return (f"Trader(name={self.name}, cash=${self._cash:.2f}, "
                f"holdings={len(self._position)}, pending={len(self._pending)})")
