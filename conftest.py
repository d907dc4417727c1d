import itertools

import pytest

from application.exchange import Exchange


@pytest.fixture
def clock():
    """Deterministic clock: 1000.0, 1001.0, ..."""
    ticks = itertools.count(1000)
    return lambda: float(next(ticks))


@pytest.fixture
def exchange(clock):
    """NASDAQ-like exchange with SBUX listed at 100.0 and TWTR at 50.0."""
    ex = Exchange("TEST", clock=clock)
    ex.list_stock("SBUX", "Starbucks Corp.", 100.0)
    ex.list_stock("TWTR", "Twitter Inc.", 50.0)
    return ex
