"""Plain-text reports for the demo driver. Functions return strings; callers print."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from auction.market import Market
from auction.trader import Trader

from .exchange import TradeReport


def _fmt(x: Optional[float], fmt: str = "{:.2f}") -> str:
    return "-" if x is None else fmt.format(x)


def _fmt_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


def format_trader(trader: Trader) -> str:
    lines = [
        f"Trader Name: {trader.name}",
        "=====================",
        f"Cash: {trader.cash:.2f}",
        "Stocks Owned:",
    ]
    position = trader.position
    if position:
        lines.extend(f"  {sym}: {qty}" for sym, qty in sorted(position.items()))
    else:
        lines.append("  (none)")

    lines.append("Stocks Desired:")
    pending = trader.pending_orders
    if pending:
        for o in pending:
            px = "MKT" if o.is_market else _fmt(o.limit_price)
            lines.append(f"  {o.side.value} {o.symbol} {o.size} @ {px}")
    else:
        lines.append("  (none)")
    return "\n".join(lines)


def format_traders(traders: Iterable[Trader]) -> str:
    return "\n+++++++++++++++++++++\n".join(format_trader(t) for t in traders)


def format_stocks(market: Market) -> str:
    lines = [f"{market.name} listings", "-" * 40]
    for s in market.stocks():
        lines.append(f"{s.symbol:<6} {s.company:<24} {s.price:>8.2f}")
    return "\n".join(lines)


def format_history(market: Market, symbol: str) -> str:
    lines = [f"Price history for {symbol} on {market.name}"]
    for price, ts in market.history(symbol):
        lines.append(f"  {_fmt_ts(ts)}  {price:.2f}")
    return "\n".join(lines)


def format_trade_report(report: TradeReport) -> str:
    if not report.fills and not report.errors:
        return "No trades."
    lines = []
    for symbol, price in sorted(report.clearing_prices.items()):
        fills = [f for f in report.fills if f.symbol == symbol]
        bought = sum(f.size for f in fills if f.order.is_buy)
        sold = sum(f.size for f in fills if not f.order.is_buy)
        lines.append(f"{symbol}: cleared @ {price:.2f} bought={bought} sold={sold} fills={len(fills)}")
    for err in report.errors:
        lines.append(f"Dispatch error: {err}")
    return "\n".join(lines)
