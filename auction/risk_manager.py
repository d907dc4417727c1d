"""
Pre-trade validation for trader submissions.

Checks run in a fixed order and stop at the first failure:
1. Buy orders: cash must cover price x volume
2. At most one pending order per symbol
3. Sell orders: the trader must own the symbol, and enough of it

Each rejection raises the matching ExchangeError and is appended to an audit
log of RiskEvents. Checks only read trader state; they never mutate it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List
import logging
import time

from .exceptions import (
    DuplicateOrder,
    ExchangeError,
    InsufficientFunds,
    InsufficientPosition,
    NoPosition,
)
from .orders import OrderSide

logger = logging.getLogger(__name__)


class RiskViolation(Enum):
    """Types of pre-trade rejections."""
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_ORDER = "duplicate_order"
    NO_POSITION = "no_position"
    INSUFFICIENT_POSITION = "insufficient_position"


@dataclass(frozen=True)
class RiskEvent:
    """
    Immutable rejection record.

    Logged for audit trail.
    """
    timestamp: float
    trader_name: str
    symbol: str
    violation_type: RiskViolation
    details: str


class RiskManager:
    """
    Centralized pre-trade checks.

    Usage:
        risk = RiskManager()
        risk.check_order(trader, OrderSide.SELL, "SBUX", 100, 97.0)  # raises on failure
    """

    def __init__(self):
        # Event log (for audit)
        self.risk_events: List[RiskEvent] = []
        self._total_checks = 0
        self._total_blocks = 0

    # ==================== Pre-trade checks ====================

    def check_funds(self, trader, symbol: str, volume: int, price: float) -> None:
        """
        Raises:
            InsufficientFunds: If price x volume exceeds the trader's cash
        """
        cost = price * volume
        if cost > trader.cash:
            self._reject(
                trader, symbol, RiskViolation.INSUFFICIENT_FUNDS,
                InsufficientFunds(
                    f"Cannot buy {volume} {symbol} for {cost:.2f}: "
                    f"only {trader.cash:.2f} available. Trader: {trader.name}"
                ),
            )

    def check_order(self, trader, side: OrderSide, symbol: str, volume: int, price: float) -> None:
        """
        Comprehensive pre-trade validation.

        Args:
            trader: Trader placing the order
            side: BUY or SELL
            symbol: Stock symbol
            volume: Order size
            price: Price used for the funds check (limit, or current price
                for market orders)

        Raises:
            InsufficientFunds, DuplicateOrder, NoPosition, InsufficientPosition
        """
        self._total_checks += 1

        if side is OrderSide.BUY:
            self.check_funds(trader, symbol, volume, price)

        if trader.has_pending_order(symbol):
            self._reject(
                trader, symbol, RiskViolation.DUPLICATE_ORDER,
                DuplicateOrder(
                    f"Cannot place order for {symbol}: one is already pending. "
                    f"Trader: {trader.name}"
                ),
            )

        if side is OrderSide.SELL:
            owned = trader.owned_quantity(symbol)
            if owned <= 0:
                self._reject(
                    trader, symbol, RiskViolation.NO_POSITION,
                    NoPosition(f"Cannot sell {symbol}: none owned. Trader: {trader.name}"),
                )
            if volume > owned:
                self._reject(
                    trader, symbol, RiskViolation.INSUFFICIENT_POSITION,
                    InsufficientPosition(
                        f"Cannot sell {volume} {symbol}: only {owned} owned. "
                        f"Trader: {trader.name}"
                    ),
                )

    # ==================== Internal methods ====================

    def _reject(self, trader, symbol: str, violation: RiskViolation, error: ExchangeError) -> None:
        self._total_blocks += 1
        self.risk_events.append(RiskEvent(
            timestamp=time.time(),
            trader_name=trader.name,
            symbol=symbol,
            violation_type=violation,
            details=str(error),
        ))
        logger.info("rejected: %s", error)
        raise error

    # ==================== Analytics ====================

    def get_stats(self) -> dict:
        """Get risk manager statistics."""
        return {
            'total_checks': self._total_checks,
            'total_blocks': self._total_blocks,
            'total_events': len(self.risk_events),
        }

    def get_recent_events(self, max_events: int = 10) -> List[RiskEvent]:
        """Get recent risk events."""
        return self.risk_events[-max_events:]
