"""Alert and portfolio storage backends."""

from coinwatch.db.base import AlertStore, PortfolioStore
from coinwatch.db.memory import MemoryStore
from coinwatch.db.store import DataStore

__all__ = [
    "AlertStore",
    "DataStore",
    "MemoryStore",
    "PortfolioStore",
]
