"""
Single-price call auction.

All resting orders for one symbol are cleared in one batch at a single
uniform price:

1. Market orders (limit 0.0) are pulled out of the book. Their volume seeds
   the running buy and sell totals, so they always take part in the match.
2. Remaining limit orders form a price ladder (price -> orders at that price,
   both sides merged), sorted ascending.
3. Cumulative supply: sell volume at or below each rung (ascending prefix sum).
   Cumulative demand: buy volume at or above each rung (descending prefix sum).
4. Imbalance per rung = demand - supply. The clearing rung is the one with the
   smallest non-negative imbalance, lowest price first on ties. When no rung
   qualifies the current market price is kept.
5. Every market order fills; limit buys fill at limit >= clearing price; limit
   sells fill at limit <= clearing price.

Known approximation: the imbalance rule does not maximize executed volume in
every configuration, and on a lopsided book the filled buy and sell volumes
can differ. The rule is kept as-is for compatibility with existing price
histories.

The crossing guard in can_cross is stricter than a plain ladder scan: a book
whose best bid is below its best ask never clears, even when the ladder would
fill a lone buy at a rung. Without it a second pass over an unchanged book
could trade again.

Everything here is pure: no book mutation, no registry update, no trader
callbacks. OrderBook.match applies the result.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .orders import Order, OrderSide


@dataclass(frozen=True)
class Fill:
    """
    Execution record: `order` filled in full at `price`.

    Returned by the book after a match and handed to the order's owner.
    """
    order: Order
    price: float

    def __post_init__(self):
        assert self.price >= 0, "Fill price cannot be negative"

    @property
    def symbol(self) -> str:
        return self.order.symbol

    @property
    def side(self) -> OrderSide:
        return self.order.side

    @property
    def size(self) -> int:
        return self.order.size

    @property
    def owner(self) -> Any:
        return self.order.owner

    def notional_value(self) -> float:
        """Cash exchanged for this fill (price x size)."""
        return self.price * self.order.size


@dataclass(frozen=True)
class PriceLevel:
    """One rung of the price ladder: every limit order resting at `price`."""
    price: float
    orders: Tuple[Order, ...]

    @property
    def buy_volume(self) -> int:
        return sum(o.size for o in self.orders if o.side is OrderSide.BUY)

    @property
    def sell_volume(self) -> int:
        return sum(o.size for o in self.orders if o.side is OrderSide.SELL)


@dataclass(frozen=True)
class ClearingResult:
    symbol: str
    price: float
    previous_price: float
    fills: Tuple[Fill, ...] = ()
    crossed: bool = False
    ladder: Tuple[PriceLevel, ...] = ()
    cumulative_buys: Tuple[int, ...] = ()
    cumulative_sells: Tuple[int, ...] = ()

    @property
    def price_changed(self) -> bool:
        return self.crossed and self.price != self.previous_price

    def filled_volume(self, side: OrderSide) -> int:
        return sum(f.size for f in self.fills if f.side is side)

    @property
    def imbalances(self) -> Tuple[int, ...]:
        return tuple(b - s for b, s in zip(self.cumulative_buys, self.cumulative_sells))


def split_market_orders(orders: Iterable[Order]) -> Tuple[List[Order], List[Order]]:
    """Split into (market orders, limit orders), preserving input order."""
    market: List[Order] = []
    limit: List[Order] = []
    for o in orders:
        (market if o.is_market else limit).append(o)
    return market, limit


def build_price_ladder(orders: Iterable[Order]) -> List[PriceLevel]:
    """
    Group limit orders by price, ascending.

    Within a rung, orders keep the order they were passed in. Market orders
    are skipped; they never rest on the ladder.
    """
    levels: Dict[float, List[Order]] = {}
    for o in orders:
        if o.is_market:
            continue
        levels.setdefault(o.limit_price, []).append(o)
    return [PriceLevel(price, tuple(levels[price])) for price in sorted(levels)]


def cumulative_curves(
    ladder: Sequence[PriceLevel],
    market_buy_volume: int = 0,
    market_sell_volume: int = 0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Cumulative demand and supply per rung.

    Returns:
        (buys, sells) where buys[k] is buy volume willing to trade at
        ladder[k].price or better (at or above), and sells[k] is sell volume
        at or below it. Both include the market volume.
    """
    buy_sizes = np.array([lvl.buy_volume for lvl in ladder], dtype=np.int64)
    sell_sizes = np.array([lvl.sell_volume for lvl in ladder], dtype=np.int64)

    sells = market_sell_volume + np.cumsum(sell_sizes)
    buys = market_buy_volume + np.cumsum(buy_sizes[::-1])[::-1]
    return buys, sells


def find_clearing_index(cumulative_buys: np.ndarray, cumulative_sells: np.ndarray) -> Optional[int]:
    """
    Rung with the least non-negative imbalance, lowest rung on ties.

    Returns None when every rung has more supply than demand.
    """
    imbalance = np.asarray(cumulative_buys) - np.asarray(cumulative_sells)
    candidates = np.flatnonzero(imbalance >= 0)
    if candidates.size == 0:
        return None
    # argmin returns the first occurrence, i.e. the lowest price
    return int(candidates[np.argmin(imbalance[candidates])])


def can_cross(buys: Sequence[Order], sells: Sequence[Order]) -> bool:
    """True when at least one buy is willing to meet at least one sell."""
    if not buys or not sells:
        return False
    if any(o.is_market for o in buys) or any(o.is_market for o in sells):
        return True
    best_bid = max(o.limit_price for o in buys)
    best_ask = min(o.limit_price for o in sells)
    return best_bid >= best_ask


def _fills_order(order: Order, clearing_price: float) -> bool:
    if order.is_market:
        return True
    if order.side is OrderSide.BUY:
        return order.limit_price >= clearing_price
    return order.limit_price <= clearing_price


def run_call_auction(
    symbol: str,
    buys: Sequence[Order],
    sells: Sequence[Order],
    current_price: float,
) -> ClearingResult:
    """
    Clear one symbol's book.

    Args:
        symbol: Symbol being cleared
        buys: Resting buy orders, in submission order
        sells: Resting sell orders, in submission order
        current_price: Registry price, used as the fallback clearing price

    Returns:
        ClearingResult. `crossed` is False when the book cannot trade, in
        which case there are no fills and the price is unchanged.
    """
    if not can_cross(buys, sells):
        return ClearingResult(symbol=symbol, price=current_price, previous_price=current_price)

    # buys first, then sells: this fixes fill order within a rung
    market_orders, limit_orders = split_market_orders(list(buys) + list(sells))
    market_buy = sum(o.size for o in market_orders if o.side is OrderSide.BUY)
    market_sell = sum(o.size for o in market_orders if o.side is OrderSide.SELL)

    ladder = build_price_ladder(limit_orders)
    cum_buys, cum_sells = cumulative_curves(ladder, market_buy, market_sell)

    index = find_clearing_index(cum_buys, cum_sells)
    clearing_price = current_price if index is None else float(ladder[index].price)

    fills: List[Fill] = [Fill(o, clearing_price) for o in market_orders]
    for level in ladder:
        fills.extend(Fill(o, clearing_price) for o in level.orders if _fills_order(o, clearing_price))

    return ClearingResult(
        symbol=symbol,
        price=clearing_price,
        previous_price=current_price,
        fills=tuple(fills),
        crossed=True,
        ladder=tuple(ladder),
        cumulative_buys=tuple(int(v) for v in cum_buys),
        cumulative_sells=tuple(int(v) for v in cum_sells),
    )
