from __future__ import annotations

import logging
import time
from functools import cache
from typing import Callable, Iterable, Sequence

from config import AppSettings, config
from domain.pricing import PriceProvider

from .coingecko_source import COINGECKO_BASE_URL, CoinGeckoDirectory, CoinGeckoSource
from .coinmarketcap_source import CoinMarketCapSource
from .cryptocompare_source import CryptoCompareSource
from .kaiko_source import KaikoSource
from .price_sources import JsonHttpClient, PriceSource
from .price_types import PLACEHOLDER_QUOTE, OutcomeStatus, PriceResult, SourceOutcome

logger = logging.getLogger(__name__)


class FallbackPriceService(PriceProvider):
    """Resolves USD quotes by walking an ordered chain of price sources.

    Each source only sees the symbols that earlier sources left unresolved,
    and a symbol keeps the first quote it received. Whatever is still missing
    after the last source is filled with a zero placeholder quote.
    """

    def __init__(
        self,
        sources: Sequence[PriceSource],
        *,
        deadline_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if deadline_seconds is not None and deadline_seconds <= 0:
            msg = "deadline_seconds must be > 0"
            raise ValueError(msg)

        self.sources = list(sources)
        self.deadline_seconds = deadline_seconds
        self._clock = clock

    def resolve(self, symbols: Iterable[str]) -> PriceResult:
        remaining = self._dedup(symbols)
        prices: PriceResult = {}
        started = self._clock()

        for source in self.sources:
            if not remaining:
                break
            if self._deadline_exceeded(started):
                logger.warning(
                    "Price resolution deadline of %.1fs exceeded; not querying %s",
                    self.deadline_seconds,
                    source.name,
                )
                break

            try:
                outcome = source.fetch(list(remaining))
            except Exception as exc:
                logger.exception("%s raised while fetching prices", source.name)
                outcome = SourceOutcome.failed(source.name, f"unexpected error: {exc!r}")
            if outcome.status is OutcomeStatus.FAILED:
                logger.info("%s contributed no prices: %s", outcome.source, outcome.reason)
            for symbol, quote in outcome.prices.items():
                if symbol in remaining and symbol not in prices:
                    prices[symbol] = quote
            remaining = [symbol for symbol in remaining if symbol not in prices]

        if remaining:
            logger.error("Could not fetch price from any provider for %s", remaining)
            for symbol in remaining:
                prices[symbol] = PLACEHOLDER_QUOTE

        return prices

    def resolve_usd(self, symbols: Iterable[str]) -> dict[str, dict[str, float]]:
        return {symbol: quote.to_dict() for symbol, quote in self.resolve(symbols).items()}

    def _deadline_exceeded(self, started: float) -> bool:
        if self.deadline_seconds is None:
            return False
        return self._clock() - started >= self.deadline_seconds

    @staticmethod
    def _dedup(symbols: Iterable[str]) -> list[str]:
        if isinstance(symbols, str):
            msg = "symbols must be a collection of strings, not a single string"
            raise TypeError(msg)
        unique = list(dict.fromkeys(symbols))
        for symbol in unique:
            if not isinstance(symbol, str):
                msg = f"symbol must be str, got {type(symbol).__name__}"
                raise TypeError(msg)
        return unique


@cache
def default_coingecko_directory(timeout: float = 10.0) -> CoinGeckoDirectory:
    client = JsonHttpClient(base_url=COINGECKO_BASE_URL, label="CoinGecko", timeout=timeout)
    return CoinGeckoDirectory(client)


def build_default_sources(settings: AppSettings) -> list[PriceSource]:
    timeout = settings.request_timeout_seconds
    directory = default_coingecko_directory(timeout)
    return [
        CoinGeckoSource(directory=directory, client=directory.client),
        CoinMarketCapSource(api_key=settings.coinmarketcap_api_key, timeout=timeout),
        CryptoCompareSource(api_key=settings.cryptocompare_api_key, timeout=timeout),
        KaikoSource(api_key=settings.kaiko_api_key, timeout=timeout, max_workers=settings.kaiko_max_workers),
    ]


def build_default_service(settings: AppSettings | None = None) -> FallbackPriceService:
    resolved = settings or config()
    return FallbackPriceService(
        build_default_sources(resolved),
        deadline_seconds=resolved.resolve_deadline_seconds,
    )


__all__ = [
    "FallbackPriceService",
    "build_default_service",
    "build_default_sources",
    "default_coingecko_directory",
]
