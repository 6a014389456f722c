from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any
from urllib.parse import quote

import requests

from .price_sources import BasePriceSource, JsonHttpClient, PriceSourceError
from .price_types import PriceQuote, PriceResult

logger = logging.getLogger(__name__)

# API docs: https://docs.kaiko.com/#direct-exchange-rate
KAIKO_BASE_URL = "https://us.market-api.kaiko.io"


class KaikoSource(BasePriceSource):
    """Direct exchange rate lookups, one request per asset.

    Sub-requests run on a small thread pool. A single failing asset is only
    dropped; the call as a whole fails when every sub-request failed.
    """

    name = "kaiko"

    def __init__(
        self,
        *,
        api_key: str | None,
        client: JsonHttpClient | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
        max_workers: int = 4,
    ) -> None:
        if max_workers <= 0:
            msg = "max_workers must be > 0"
            raise ValueError(msg)

        self.api_key = api_key
        self.max_workers = max_workers
        self.client = client or JsonHttpClient(base_url=KAIKO_BASE_URL, label="Kaiko", timeout=timeout, session=session)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _fetch_prices(self, symbols: list[str]) -> PriceResult:
        assets = list(dict.fromkeys(symbol.lower() for symbol in symbols))
        workers = min(self.max_workers, len(assets))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="kaiko") as pool:
            results = list(pool.map(self._fetch_asset, assets))

        quotes: dict[str, PriceQuote] = {}
        errors: list[PriceSourceError] = []
        for asset, result in zip(assets, results):
            if isinstance(result, PriceSourceError):
                errors.append(result)
            elif result is not None:
                quotes[asset] = result

        if errors and len(errors) == len(assets):
            raise errors[0]

        return {symbol: quotes[symbol.lower()] for symbol in symbols if symbol.lower() in quotes}

    def _fetch_asset(self, asset: str) -> PriceQuote | PriceSourceError | None:
        try:
            payload = self.client.get_json(
                f"/v2/data/trades.v1/spot_direct_exchange_rate/{quote(asset, safe='')}/usd",
                headers={"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"},
            )
        except PriceSourceError as exc:
            logger.debug("Kaiko lookup for %s failed: %s", asset, exc)
            return exc
        # No 7 day change on this endpoint.
        return self._quote(self._latest_price(payload))

    @staticmethod
    def _latest_price(payload: Any) -> Any:
        if not isinstance(payload, dict):
            return None
        data = payload.get("data")
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None
        return data[0].get("price")


__all__ = ["KaikoSource"]
