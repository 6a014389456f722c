from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class PriceQuote:
    """USD spot price with trailing 7 day change in percent.

    ``source`` names the provider that produced the quote. It is ``None`` only
    for the placeholder written when every provider failed, which lets callers
    tell a failed lookup apart from a genuinely tiny price.
    """

    usd: float
    usd_7d_change: float = 0.0
    source: str | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.source is None

    def to_dict(self) -> dict[str, float]:
        return {"usd": self.usd, "usd_7d_change": self.usd_7d_change}


PLACEHOLDER_QUOTE = PriceQuote(usd=0.0, usd_7d_change=0.0, source=None)

PriceResult = dict[str, PriceQuote]


class OutcomeStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class SourceOutcome:
    source: str
    status: OutcomeStatus
    prices: PriceResult = field(default_factory=dict)
    reason: str | None = None

    @classmethod
    def ok(cls, source: str, prices: PriceResult) -> SourceOutcome:
        return cls(source=source, status=OutcomeStatus.OK, prices=prices)

    @classmethod
    def skipped(cls, source: str, reason: str) -> SourceOutcome:
        return cls(source=source, status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, source: str, reason: str) -> SourceOutcome:
        return cls(source=source, status=OutcomeStatus.FAILED, reason=reason)


__all__ = ["OutcomeStatus", "PLACEHOLDER_QUOTE", "PriceQuote", "PriceResult", "SourceOutcome"]
