"""
Domain layer - call-auction order book and traders.
Pure in-memory logic, no dependency on application/infrastructure.
"""
from .exceptions import (
    ExchangeError,
    InsufficientFunds,
    DuplicateOrder,
    NoPosition,
    InsufficientPosition,
    UnknownOrder,
    UnknownSymbol,
)
from .orders import Order, OrderSide
from .market import Market, Stock, PriceChange
from .matching_engine import ClearingResult, Fill, PriceLevel, run_call_auction
from .order_book import OrderBook
from .risk_manager import RiskManager, RiskEvent, RiskViolation
from .trader import Trader

__all__ = [
    'ExchangeError',
    'InsufficientFunds',
    'DuplicateOrder',
    'NoPosition',
    'InsufficientPosition',
    'UnknownOrder',
    'UnknownSymbol',
    'Order',
    'OrderSide',
    'Market',
    'Stock',
    'PriceChange',
    'ClearingResult',
    'Fill',
    'PriceLevel',
    'run_call_auction',
    'OrderBook',
    'RiskManager',
    'RiskEvent',
    'RiskViolation',
    'Trader',
]
