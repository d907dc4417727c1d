from .config import ExchangeConfig, Listing
from .logger import LoggingConfig, configure_logging, get_logger

__all__ = [
    "ExchangeConfig",
    "Listing",
    "LoggingConfig",
    "configure_logging",
    "get_logger",
]
