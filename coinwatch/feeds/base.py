"""Base price feed interface for coinwatch."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from coinwatch.models import PriceSnapshot


def normalize_symbols(symbols: Iterable[str]) -> list[str]:
    """Uppercase, strip and deduplicate ticker symbols.

    Args:
        symbols: Symbols in any case, possibly repeated or blank.

    Returns:
        Sorted list of distinct uppercase symbols.
    """
    return sorted({s.strip().upper() for s in symbols if s and s.strip()})


class PriceFeed(ABC):
    """Abstract source of current market data.

    Implementations must tolerate per-symbol failures: symbols that cannot
    be resolved are left out of the result instead of failing the lookup.
    """

    @abstractmethod
    def get_prices(self, symbols: Iterable[str]) -> dict[str, PriceSnapshot]:
        """Get snapshots for several symbols in one batched lookup.

        Args:
            symbols: Tickers to look up; case and duplicates are ignored.

        Returns:
            Mapping of uppercase ticker to snapshot. Unresolvable symbols
            are absent.

        Raises:
            PriceFeedUnavailable: Only if the transport failed for every
                requested symbol.
        """
        pass

    def get_price(self, symbol: str) -> Optional[PriceSnapshot]:
        """Get the snapshot for one symbol.

        Returns:
            Snapshot, or None if the symbol could not be resolved.
        """
        return self.get_prices([symbol]).get(symbol.strip().upper())

    def get_top_movers(self, limit: int = 10, losers: bool = False) -> list[PriceSnapshot]:
        """Get the biggest 24h gainers (or losers).

        Feeds without a market-wide listing return an empty list.
        """
        return []
