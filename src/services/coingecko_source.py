from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable

import requests

from .price_sources import BasePriceSource, JsonHttpClient, PriceSourceError
from .price_types import PriceResult

logger = logging.getLogger(__name__)

# API docs: https://docs.coingecko.com/reference/introduction
COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"
# /coins/markets pages default to 100 rows and cap at 250.
MARKETS_PAGE_SIZE = 250


@dataclass(frozen=True)
class CoinDirectoryEntry:
    coin_id: str
    symbol: str
    name: str


class CoinGeckoDirectory:
    """Symbol to CoinGecko id lookup backed by ``/coins/list``.

    The list is fetched lazily on first use and kept for the lifetime of the
    instance. A failed fetch leaves the directory empty and is not retried
    until :meth:`reset` is called, so every lookup misses in the meantime.
    """

    def __init__(self, client: JsonHttpClient) -> None:
        self.client = client
        self._lock = threading.Lock()
        self._entries: list[CoinDirectoryEntry] | None = None
        self._by_symbol: dict[str, str] = {}

    def entries(self) -> list[CoinDirectoryEntry]:
        if self._entries is None:
            with self._lock:
                if self._entries is None:
                    self._populate()
        return self._entries or []

    def resolve(self, symbols: Iterable[str]) -> dict[str, str]:
        self.entries()
        resolved: dict[str, str] = {}
        for symbol in symbols:
            coin_id = self._by_symbol.get(symbol.lower())
            if coin_id is not None:
                resolved[symbol] = coin_id
        return resolved

    def reset(self) -> None:
        with self._lock:
            self._entries = None
            self._by_symbol = {}

    def _populate(self) -> None:
        try:
            payload = self.client.get_json("/coins/list")
            entries = self._parse_entries(payload)
        except PriceSourceError as exc:
            logger.error("Failed to fetch CoinGecko coin list: %s", exc)
            entries = []

        by_symbol: dict[str, str] = {}
        for entry in entries:
            # /coins/list has many tokens sharing a ticker; the first listed wins.
            by_symbol.setdefault(entry.symbol, entry.coin_id)
        self._by_symbol = by_symbol
        self._entries = entries
        logger.info("Loaded %d CoinGecko directory entries", len(entries))

    @staticmethod
    def _parse_entries(payload: Any) -> list[CoinDirectoryEntry]:
        if not isinstance(payload, list):
            raise PriceSourceError("CoinGecko coin list has unexpected payload type", payload=payload)

        entries: list[CoinDirectoryEntry] = []
        for raw in payload:
            if not isinstance(raw, dict):
                continue
            coin_id = raw.get("id")
            symbol = raw.get("symbol")
            if not isinstance(coin_id, str) or not isinstance(symbol, str) or not coin_id:
                continue
            entries.append(CoinDirectoryEntry(coin_id=coin_id, symbol=symbol.lower(), name=str(raw.get("name", ""))))
        return entries


class CoinGeckoSource(BasePriceSource):
    name = "coingecko"

    def __init__(
        self,
        *,
        directory: CoinGeckoDirectory | None = None,
        client: JsonHttpClient | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.client = client or JsonHttpClient(
            base_url=COINGECKO_BASE_URL, label="CoinGecko", timeout=timeout, session=session
        )
        self.directory = directory or CoinGeckoDirectory(self.client)

    def _fetch_prices(self, symbols: list[str]) -> PriceResult:
        ids_by_symbol = self.directory.resolve(symbols)
        if not ids_by_symbol:
            return {}

        symbols_by_id: dict[str, list[str]] = {}
        for symbol, coin_id in ids_by_symbol.items():
            symbols_by_id.setdefault(coin_id, []).append(symbol)

        coin_ids = list(symbols_by_id)
        markets: list[Any] = []
        for start in range(0, len(coin_ids), MARKETS_PAGE_SIZE):
            batch = coin_ids[start : start + MARKETS_PAGE_SIZE]
            payload = self.client.get_json(
                "/coins/markets",
                params={
                    "vs_currency": "usd",
                    "ids": ",".join(batch),
                    "per_page": len(batch),
                    "price_change_percentage": "7d",
                },
            )
            if not isinstance(payload, list):
                raise PriceSourceError("CoinGecko markets returned unexpected payload type", payload=payload)
            markets.extend(payload)

        prices: PriceResult = {}
        for market in markets:
            if not isinstance(market, dict):
                continue
            quote = self._quote(market.get("current_price"), market.get("price_change_percentage_7d_in_currency"))
            if quote is None:
                continue
            for symbol in symbols_by_id.get(market.get("id"), []):
                prices[symbol] = quote
        return prices


__all__ = ["CoinDirectoryEntry", "CoinGeckoDirectory", "CoinGeckoSource"]
