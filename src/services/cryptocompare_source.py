from __future__ import annotations

import requests

from .price_sources import BasePriceSource, JsonHttpClient, PriceSourceError
from .price_types import PriceResult

# API docs: https://min-api.cryptocompare.com/documentation?key=Price&cat=multipleSymbolsFullPriceEndpoint
CRYPTOCOMPARE_BASE_URL = "https://min-api.cryptocompare.com"


class CryptoCompareSource(BasePriceSource):
    """Keyless by default; an API key only raises the rate limit."""

    name = "cryptocompare"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        client: JsonHttpClient | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.client = client or JsonHttpClient(
            base_url=CRYPTOCOMPARE_BASE_URL, label="CryptoCompare", timeout=timeout, session=session
        )

    def _fetch_prices(self, symbols: list[str]) -> PriceResult:
        tickers = list(dict.fromkeys(symbol.upper() for symbol in symbols))
        headers = {"authorization": f"Apikey {self.api_key}"} if self.api_key else None
        payload = self.client.get_json(
            "/data/pricemultifull",
            params={"fsyms": ",".join(tickers), "tsyms": "USD"},
            headers=headers,
        )
        if not isinstance(payload, dict):
            raise PriceSourceError("CryptoCompare returned unexpected payload type", payload=payload)

        # Unknown symbols come back as {"Response": "Error", ...} without RAW.
        raw = payload.get("RAW")
        if not isinstance(raw, dict):
            return {}

        prices: PriceResult = {}
        for symbol in symbols:
            by_currency = raw.get(symbol.upper())
            usd = by_currency.get("USD") if isinstance(by_currency, dict) else None
            if not isinstance(usd, dict):
                continue
            # pricemultifull has no 7 day change.
            quote = self._quote(usd.get("PRICE"))
            if quote is not None:
                prices[symbol] = quote
        return prices


__all__ = ["CryptoCompareSource"]
