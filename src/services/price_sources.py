from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Protocol

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

from .price_types import PriceQuote, PriceResult, SourceOutcome

logger = logging.getLogger(__name__)


class PriceSourceError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class PriceSource(Protocol):
    name: str

    def fetch(self, symbols: Iterable[str]) -> SourceOutcome: ...


class JsonHttpClient:
    """GET-only JSON client shared by the provider adapters."""

    def __init__(
        self,
        *,
        base_url: str,
        label: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
        retry_attempts: int = 1,
        retry_backoff_seconds: float = 0.5,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.label = label
        self.timeout = timeout
        self._session = session or requests.Session()

        # 429 stays out of the forcelist: a rate-limited provider is skipped, not waited on.
        retry = Retry(
            total=retry_attempts,
            backoff_factor=retry_backoff_seconds,
            status_forcelist={502, 503, 504},
            allowed_methods={"GET"},
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

    def get_json(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(
                "GET",
                url,
                params=dict(params) if params is not None else None,
                headers=dict(headers) if headers is not None else None,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            status_code = getattr(resp, "status_code", None)
            raise PriceSourceError(
                f"{self.label} request failed with status {status_code}",
                status_code=status_code,
                payload=self._error_payload(resp),
            ) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise PriceSourceError(f"{self.label} request failed: {exc}", status_code=status_code) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise PriceSourceError(f"{self.label} returned invalid JSON", payload=response.text) from exc

    @staticmethod
    def _error_payload(response: Response | None) -> Any | None:
        if response is None:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text


class BasePriceSource(PriceSource):
    """Turns provider errors into a :class:`SourceOutcome` instead of raising."""

    name = "base"

    def is_configured(self) -> bool:
        return True

    def fetch(self, symbols: Iterable[str]) -> SourceOutcome:
        requested = list(dict.fromkeys(symbols))
        if not requested:
            return SourceOutcome.ok(self.name, {})
        if not self.is_configured():
            logger.warning("%s credentials are missing; skipping provider", self.name)
            return SourceOutcome.skipped(self.name, "credentials missing")

        logger.info("Fetching prices from %s for %s", self.name, requested)
        try:
            prices = self._fetch_prices(requested)
        except PriceSourceError as exc:
            logger.error("%s failed: %s", self.name, exc)
            return SourceOutcome.failed(self.name, str(exc))
        except (ValueError, TypeError, LookupError) as exc:
            logger.error("%s returned a malformed payload: %r", self.name, exc)
            return SourceOutcome.failed(self.name, f"malformed payload: {exc!r}")

        logger.info("%s found prices for %s", self.name, list(prices))
        return SourceOutcome.ok(self.name, prices)

    def _fetch_prices(self, symbols: list[str]) -> PriceResult:
        raise NotImplementedError

    def _quote(self, price: Any, change: Any = None) -> PriceQuote | None:
        usd = positive_price(price)
        if usd is None:
            return None
        return PriceQuote(usd=usd, usd_7d_change=change_or_zero(change), source=self.name)


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def positive_price(value: Any) -> float | None:
    number = _to_float(value)
    if number is None or number <= 0:
        return None
    return number


def change_or_zero(value: Any) -> float:
    number = _to_float(value)
    return 0.0 if number is None else number


__all__ = [
    "BasePriceSource",
    "JsonHttpClient",
    "PriceSource",
    "PriceSourceError",
    "change_or_zero",
    "positive_price",
]
