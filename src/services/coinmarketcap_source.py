from __future__ import annotations

from typing import Any

import requests

from .price_sources import BasePriceSource, JsonHttpClient, PriceSourceError
from .price_types import PriceResult

# API docs: https://coinmarketcap.com/api/documentation/v1/#operation/getV2CryptocurrencyQuotesLatest
COINMARKETCAP_BASE_URL = "https://pro-api.coinmarketcap.com"


class CoinMarketCapSource(BasePriceSource):
    name = "coinmarketcap"

    def __init__(
        self,
        *,
        api_key: str | None,
        client: JsonHttpClient | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.client = client or JsonHttpClient(
            base_url=COINMARKETCAP_BASE_URL, label="CoinMarketCap", timeout=timeout, session=session
        )

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _fetch_prices(self, symbols: list[str]) -> PriceResult:
        tickers = list(dict.fromkeys(symbol.upper() for symbol in symbols))
        payload = self.client.get_json(
            "/v2/cryptocurrency/quotes/latest",
            params={"symbol": ",".join(tickers), "convert": "USD"},
            headers={"X-CMC_PRO_API_KEY": self.api_key or "", "Accept": "application/json"},
        )
        if not isinstance(payload, dict):
            raise PriceSourceError("CoinMarketCap returned unexpected payload type", payload=payload)

        data = payload.get("data")
        if not isinstance(data, dict):
            return {}

        prices: PriceResult = {}
        for symbol in symbols:
            usd_quote = self._usd_quote(data.get(symbol.upper()))
            if usd_quote is None:
                continue
            quote = self._quote(usd_quote.get("price"), usd_quote.get("percent_change_7d"))
            if quote is not None:
                prices[symbol] = quote
        return prices

    @staticmethod
    def _usd_quote(entry: Any) -> dict[str, Any] | None:
        # v2 keys each symbol to a list of matching coins; the first is the highest ranked.
        if isinstance(entry, list):
            entry = entry[0] if entry else None
        if not isinstance(entry, dict):
            return None
        quote = entry.get("quote")
        if not isinstance(quote, dict):
            return None
        usd = quote.get("USD")
        return usd if isinstance(usd, dict) else None


__all__ = ["CoinMarketCapSource"]
