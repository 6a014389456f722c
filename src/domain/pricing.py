from __future__ import annotations

from typing import Iterable, Protocol


class PriceProvider(Protocol):
    """Lookup interface for symbol -> USD quote, as consumed by the dashboard."""

    def resolve_usd(self, symbols: Iterable[str]) -> dict[str, dict[str, float]]: ...
