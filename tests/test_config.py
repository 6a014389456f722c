from __future__ import annotations

import pytest

from config import AppSettings


def test_credentials_default_to_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("COINMARKETCAP_API_KEY", "KAIKO_API_KEY", "CRYPTOCOMPARE_API_KEY"):
        monkeypatch.delenv(name, raising=False)

    settings = AppSettings(_env_file=None)

    assert settings.coinmarketcap_api_key is None
    assert settings.kaiko_api_key is None
    assert settings.cryptocompare_api_key is None
    assert settings.request_timeout_seconds == 10.0


def test_reads_credentials_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COINMARKETCAP_API_KEY", "cmc-key")
    monkeypatch.setenv("KAIKO_API_KEY", "kaiko-token")
    monkeypatch.setenv("KAIKO_MAX_WORKERS", "8")

    settings = AppSettings(_env_file=None)

    assert settings.coinmarketcap_api_key == "cmc-key"
    assert settings.kaiko_api_key == "kaiko-token"
    assert settings.kaiko_max_workers == 8


def test_blank_credentials_count_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COINMARKETCAP_API_KEY", "  ")

    settings = AppSettings(_env_file=None)

    assert settings.coinmarketcap_api_key is None
