from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import itertools
import math
import time


_order_id_counter = itertools.count(1)

MARKET_PRICE = 0.0


class OrderSide(Enum):
    """Side of the order: buy or sell."""
    BUY = "BUY"
    SELL = "SELL"

    @property
    def opposite(self) -> "OrderSide":
        return OrderSide.SELL if self is OrderSide.BUY else OrderSide.BUY


@dataclass(frozen=True, eq=False)
class Order:
    """
    Immutable intent to buy or sell `size` shares of `symbol`.

    A limit price of 0.0 marks a market order: it has no resting limit and
    executes at whatever clearing price the auction produces.

    Orders compare and hash by identity, so two orders with identical fields
    are still two distinct orders in the book and in a trader's pending set.
    """
    symbol: str
    side: OrderSide
    size: int
    limit_price: float
    owner: Any = field(default=None, repr=False)
    timestamp: float = field(default_factory=time.time, repr=False)
    order_id: int = field(default_factory=lambda: next(_order_id_counter))

    def __post_init__(self) -> None:
        if not self.symbol:
            raise ValueError("symbol cannot be empty")
        if not isinstance(self.side, OrderSide):
            raise ValueError(f"side must be an OrderSide, got {self.side!r}")
        if isinstance(self.size, bool) or not isinstance(self.size, int):
            raise ValueError("size must be int")
        if self.size <= 0:
            raise ValueError(f"size must be > 0, got {self.size}")
        if isinstance(self.limit_price, (str, bytes, bool)):
            raise ValueError(f"limit_price must be a number, got {self.limit_price!r}")
        try:
            price = float(self.limit_price)
        except (TypeError, ValueError):
            raise ValueError(f"limit_price must be a number, got {self.limit_price!r}") from None
        if not math.isfinite(price) or price < 0:
            raise ValueError(f"limit_price must be finite and >= 0, got {self.limit_price}")
        object.__setattr__(self, "limit_price", price)

    @classmethod
    def market(cls, symbol: str, side: OrderSide, size: int, owner: Any = None) -> "Order":
        return cls(symbol=symbol, side=side, size=size, limit_price=MARKET_PRICE, owner=owner)

    @property
    def is_market(self) -> bool:
        return self.limit_price == MARKET_PRICE

    @property
    def is_buy(self) -> bool:
        return self.side is OrderSide.BUY

    def __repr__(self) -> str:
        px = "MKT" if self.is_market else f"{self.limit_price:.2f}"
        return f"Order(id={self.order_id}, {self.side.value} {self.symbol} {self.size}@{px})"
