"""Binance REST price feed.

Looks up 24h ticker statistics for ``<SYMBOL><QUOTE>`` pairs (USDT by
default). Each symbol is fetched on its own request so that one unknown
ticker cannot fail the whole batch; requests run concurrently on a small
thread pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Optional

import requests

from coinwatch.exceptions import PriceFeedError, PriceFeedUnavailable
from coinwatch.feeds.base import PriceFeed, normalize_symbols
from coinwatch.models import PriceSnapshot

logger = logging.getLogger(__name__)


class BinanceFeed(PriceFeed):
    """Price feed backed by the public Binance spot API."""

    DEFAULT_BASE_URL = "https://api.binance.com/api/v3"
    DEFAULT_QUOTE_ASSET = "USDT"
    DEFAULT_TIMEOUT = 10.0
    DEFAULT_MAX_WORKERS = 8

    # Binance answers unknown pairs with 400 {"code": -1121, "msg": "Invalid symbol."}
    _UNKNOWN_SYMBOL_STATUSES = (400, 404)

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        quote_asset: str = DEFAULT_QUOTE_ASSET,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the feed.

        Args:
            base_url: REST API root.
            quote_asset: Quote currency appended to every ticker.
            timeout: Per-request timeout in seconds.
            max_workers: Upper bound on concurrent requests per batch.
            session: Optional pre-configured HTTP session.
        """
        self.base_url = base_url.rstrip("/")
        self.quote_asset = quote_asset.upper()
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self._session = session or requests.Session()

    def _pair(self, symbol: str) -> str:
        return f"{symbol}{self.quote_asset}"

    def _get(self, path: str, params: Optional[dict] = None):
        """Issue a GET request and decode the JSON body.

        Raises:
            PriceFeedUnavailable: On connection errors, timeouts and
                server-side failures.
            PriceFeedError: When the request was rejected for this symbol.
        """
        url = f"{self.base_url}{path}"
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise PriceFeedUnavailable(f"Request to {url} failed: {e}") from e

        if response.status_code in self._UNKNOWN_SYMBOL_STATUSES:
            raise PriceFeedError(f"{url} rejected {params}: {response.text[:200]}")
        if response.status_code != 200:
            raise PriceFeedUnavailable(
                f"{url} returned status {response.status_code}: {response.text[:200]}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise PriceFeedUnavailable(f"{url} returned invalid JSON") from e

    @staticmethod
    def _parse_ticker(symbol: str, ticker: dict) -> PriceSnapshot:
        try:
            return PriceSnapshot(
                symbol=symbol,
                price=float(ticker["lastPrice"]),
                change_24h=float(ticker["priceChange"]),
                change_percent_24h=float(ticker["priceChangePercent"]),
                volume_24h=float(ticker["volume"]),
                high_24h=float(ticker["highPrice"]),
                low_24h=float(ticker["lowPrice"]),
                quote_volume_24h=float(ticker.get("quoteVolume", 0.0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PriceFeedError(f"Malformed ticker for {symbol}: {e}") from e

    def fetch_snapshot(self, symbol: str) -> PriceSnapshot:
        """Fetch one symbol's 24h ticker.

        Args:
            symbol: Uppercase ticker without the quote asset (e.g. ``BTC``).

        Returns:
            Fresh snapshot.

        Raises:
            PriceFeedError: If the symbol is unknown or the payload is bad.
            PriceFeedUnavailable: If the transport failed.
        """
        ticker = self._get("/ticker/24hr", params={"symbol": self._pair(symbol)})
        return self._parse_ticker(symbol, ticker)

    def get_prices(self, symbols: Iterable[str]) -> dict[str, PriceSnapshot]:
        """Fetch snapshots for many symbols, omitting the ones that fail.

        Raises:
            PriceFeedUnavailable: If every requested symbol failed at the
                transport level.
        """
        wanted = normalize_symbols(symbols)
        if not wanted:
            return {}

        prices: dict[str, PriceSnapshot] = {}
        transport_failures = 0

        workers = min(self.max_workers, len(wanted))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self.fetch_snapshot, symbol): symbol for symbol in wanted}
            for future in as_completed(futures):
                symbol = futures[future]
                try:
                    prices[symbol] = future.result()
                except PriceFeedUnavailable as e:
                    transport_failures += 1
                    logger.warning(f"Price feed unavailable for {symbol}: {e}")
                except PriceFeedError as e:
                    logger.warning(f"Could not resolve price for {symbol}: {e}")

        if transport_failures == len(wanted):
            raise PriceFeedUnavailable(
                f"Price feed unreachable for all {len(wanted)} requested symbol(s)"
            )

        logger.debug(f"Resolved {len(prices)}/{len(wanted)} symbols")
        return prices

    def get_top_movers(self, limit: int = 10, losers: bool = False) -> list[PriceSnapshot]:
        """Get the biggest 24h movers among ``*<QUOTE>`` pairs.

        Args:
            limit: Number of coins to return.
            losers: Return the biggest losers instead of gainers.

        Returns:
            Snapshots sorted by 24h percent change.

        Raises:
            PriceFeedUnavailable: If the market-wide ticker cannot be fetched.
        """
        tickers = self._get("/ticker/24hr")
        movers = []
        for ticker in tickers:
            pair = ticker.get("symbol", "")
            if not pair.endswith(self.quote_asset) or pair == self.quote_asset:
                continue
            try:
                snapshot = self._parse_ticker(pair[: -len(self.quote_asset)], ticker)
            except PriceFeedError:
                continue
            change = snapshot.change_percent_24h
            if (losers and change < 0) or (not losers and change > 0):
                movers.append(snapshot)

        movers.sort(key=lambda s: s.change_percent_24h, reverse=not losers)
        return movers[:limit]
