# main.py
from __future__ import annotations

import argparse
from typing import Callable, Dict, List, Tuple

from auction.exceptions import ExchangeError
from auction.orders import OrderSide
from auction.trader import Trader
from application.exchange import Exchange, TradeReport
from application.reporting import format_history, format_stocks, format_trade_report, format_traders
from infrastructure.config import ExchangeConfig
from infrastructure.logger import LoggingConfig, configure_logging, get_logger

logger = get_logger("call_auction.main")

# (name, cash)
TRADERS: List[Tuple[str, float]] = [
    ("Neda", 200_000.0), ("Scott", 100_000.0), ("Luke", 100_000.0), ("Thomas", 100_000.0),
    ("Sritika", 100_000.0), ("Meg", 100_000.0), ("Jen", 100_000.0), ("Emory", 100_000.0),
    ("Justin", 100_000.0), ("Zach", 100_000.0), ("Matt", 100_000.0), ("Angela", 100_000.0),
    ("Hamza", 100_000.0), ("Ethan", 100_000.0), ("T1", 300_000.0), ("T2", 300_000.0),
]

# Emory's purchase is rejected: 5000 SBUX costs more than 100k
BANK_PURCHASES = [
    ("Neda", 1600), ("Scott", 300), ("Luke", 300), ("Thomas", 300),
    ("Sritika", 600), ("Meg", 700), ("Jen", 500), ("T1", 1500), ("Emory", 5000),
]

# (trader, volume, limit price or None for market)
SELL_ORDERS = [
    ("Neda", 100, 97.0), ("Scott", 300, 97.5), ("Luke", 300, 98.0), ("Thomas", 300, 98.5),
    ("Sritika", 500, 99.0), ("Meg", 700, 99.5), ("Jen", 500, 100.0), ("T1", 1500, None),
]
BUY_ORDERS = [
    ("Emory", 200, 101.0), ("Justin", 300, 100.5), ("Zach", 400, 100.0), ("Matt", 500, 99.5),
    ("Angela", 900, 99.0), ("Hamza", 1000, 98.5), ("Ethan", 900, 98.0), ("T2", 700, None),
]


def _attempt(action: Callable[[], object], description: str) -> bool:
    """Run a trader action; a rejection is logged and the run continues."""
    try:
        action()
        return True
    except ExchangeError as e:
        logger.warning("rejected %s: %s", description, e)
        return False


def place_orders(exchange: Exchange, traders: Dict[str, Trader], symbol: str, orders, side: OrderSide) -> int:
    placed = 0
    for name, volume, price in orders:
        trader = traders[name]
        if price is None:
            ok = _attempt(lambda: trader.place_market_order(exchange, symbol, volume, side),
                          f"{name} {side.value} {volume} {symbol} @ MKT")
        else:
            ok = _attempt(lambda: trader.place_limit_order(exchange, symbol, volume, price, side),
                          f"{name} {side.value} {volume} {symbol} @ {price:.2f}")
        placed += ok
    return placed


def run_demo(symbol: str = "SBUX", verbose: bool = True) -> Tuple[Exchange, Dict[str, Trader], TradeReport]:
    nasdaq = Exchange.from_config(ExchangeConfig.NASDAQ())
    nikkei = Exchange.from_config(ExchangeConfig.NIKKEI())
    if verbose:
        print(format_stocks(nasdaq.market))
        print(format_stocks(nikkei.market))

    traders = {name: Trader(name, cash) for name, cash in TRADERS}

    for name, volume in BANK_PURCHASES:
        _attempt(lambda: traders[name].buy_from_bank(nasdaq, symbol, volume),
                 f"{name} bank purchase of {volume} {symbol}")

    place_orders(nasdaq, traders, symbol, SELL_ORDERS, OrderSide.SELL)
    place_orders(nasdaq, traders, symbol, BUY_ORDERS, OrderSide.BUY)

    if verbose:
        print("\nBefore trading")
        print(format_traders(traders.values()))

    report = nasdaq.trigger_trade()
    for err in report.errors:
        logger.error("dispatch error: %s", err)

    if verbose:
        print("\n" + format_trade_report(report))
        print("\nAfter trading")
        print(format_traders(traders.values()))
        print("\n" + format_history(nasdaq.market, symbol))
    return nasdaq, traders, report


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay a call-auction trading day")
    parser.add_argument("--symbol", default="SBUX")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", default=None)
    args = parser.parse_args()

    configure_logging(LoggingConfig(level=args.log_level, log_file=args.log_file))
    run_demo(symbol=args.symbol)


if __name__ == "__main__":
    main()
