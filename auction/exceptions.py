"""
Exchange error hierarchy.

Every error here is a caller-recoverable validation failure. Submissions that
raise one of these leave the book and the trader untouched.
"""
from __future__ import annotations


class ExchangeError(Exception):
    """Base class for all exchange validation failures."""


class InsufficientFunds(ExchangeError):
    """Cash on hand does not cover price x volume."""


class DuplicateOrder(ExchangeError):
    """Trader already has a pending order for the symbol."""


class NoPosition(ExchangeError):
    """Sell order for a symbol the trader does not own."""


class InsufficientPosition(ExchangeError):
    """Sell volume exceeds the owned quantity."""


class UnknownOrder(ExchangeError):
    """Fill reported for an order that is not pending for this trader."""


class UnknownSymbol(ExchangeError, KeyError):
    """Symbol is not listed on the market."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return Exception.__str__(self)
