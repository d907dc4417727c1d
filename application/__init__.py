"""
Application layer - exchange driver and reports.
"""
from .exchange import Exchange, TradeReport, DispatchError

__all__ = [
    "Exchange",
    "TradeReport",
    "DispatchError",
]
