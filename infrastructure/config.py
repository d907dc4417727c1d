from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Listing:
    symbol: str
    company: str
    price: float


@dataclass(frozen=True)
class ExchangeConfig:
    """
    ExchangeConfig describes one market and the stocks it lists at startup.

    Note:
    - default_cash is the opening balance the demo driver gives each trader
      unless a trader seed overrides it.
    """
    name: str
    listings: Tuple[Listing, ...]
    default_cash: float = 100_000.0

    def __post_init__(self) -> None:
        symbols = [l.symbol for l in self.listings]
        if len(symbols) != len(set(symbols)):
            raise ValueError(f"duplicate symbol in {self.name} listings")

    @property
    def symbols(self) -> Tuple[str, ...]:
        return tuple(l.symbol for l in self.listings)

    @staticmethod
    def NASDAQ() -> "ExchangeConfig":
        return ExchangeConfig(
            name="NASDAQ",
            listings=(
                Listing("SBUX", "Starbucks Corp.", 92.86),
                Listing("TWTR", "Twitter Inc.", 47.88),
                Listing("VSLR", "Vivint Solar", 16.44),
                Listing("GILD", "Gilead Sciences", 93.33),
            ),
        )

    @staticmethod
    def NIKKEI() -> "ExchangeConfig":
        return ExchangeConfig(
            name="Nikkei",
            listings=(
                Listing("BABA", "Alibaba", 84.88),
                Listing("BDU", "Baidu", 253.66),
            ),
        )
