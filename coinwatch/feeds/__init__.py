"""Market data feeds for coinwatch."""

from coinwatch.feeds.base import PriceFeed, normalize_symbols
from coinwatch.feeds.binance import BinanceFeed

__all__ = [
    "BinanceFeed",
    "PriceFeed",
    "normalize_symbols",
]
