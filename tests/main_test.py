from __future__ import annotations

import json

import pytest

import main
from services.price_service import FallbackPriceService
from services.price_types import PriceQuote, SourceOutcome


class _FixedSource:
    name = "fixed"

    def fetch(self, symbols: list[str]) -> SourceOutcome:
        prices = {s: PriceQuote(usd=2.5, usd_7d_change=1.0, source=self.name) for s in symbols if s == "BTC"}
        return SourceOutcome.ok(self.name, prices)


def test_main_prints_resolved_prices(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(main, "build_default_service", lambda: FallbackPriceService([_FixedSource()]))

    main.main(["BTC", "NOPE", "--show-source"])

    output = json.loads(capsys.readouterr().out)
    assert output == {
        "BTC": {"usd": 2.5, "usd_7d_change": 1.0, "source": "fixed"},
        "NOPE": {"usd": 0.0, "usd_7d_change": 0.0, "source": None},
    }
