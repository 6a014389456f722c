from __future__ import annotations

from unittest.mock import Mock

import requests

from services.cryptocompare_source import CryptoCompareSource
from services.price_types import OutcomeStatus, PriceQuote
from tests.helpers.http_stubs import mock_response


def test_parses_raw_prices_without_change_data() -> None:
    session = Mock()
    payload = {
        "RAW": {
            "ZZZ": {"USD": {"PRICE": 0.01, "CHANGEPCT24HOUR": 12.0}},
            "BAD": {"USD": {"PRICE": -1}},
        },
        "DISPLAY": {},
    }
    session.request.return_value = mock_response(payload)
    source = CryptoCompareSource(session=session)

    outcome = source.fetch(["zzz", "BAD", "MISSING"])

    assert outcome.prices == {"zzz": PriceQuote(usd=0.01, usd_7d_change=0.0, source="cryptocompare")}
    kwargs = session.request.call_args.kwargs
    assert kwargs["params"] == {"fsyms": "ZZZ,BAD,MISSING", "tsyms": "USD"}
    assert kwargs["headers"] is None


def test_sends_api_key_when_configured() -> None:
    session = Mock()
    session.request.return_value = mock_response({"RAW": {}})
    source = CryptoCompareSource(api_key="cc-key", session=session)

    source.fetch(["BTC"])

    assert session.request.call_args.kwargs["headers"] == {"authorization": "Apikey cc-key"}


def test_error_response_without_raw_is_empty_not_failed() -> None:
    session = Mock()
    payload = {"Response": "Error", "Message": "cccagg_or_exchange market does not exist"}
    session.request.return_value = mock_response(payload)
    source = CryptoCompareSource(session=session)

    outcome = source.fetch(["ZZZ"])

    assert outcome.status is OutcomeStatus.OK
    assert outcome.prices == {}


def test_network_error_yields_failed_outcome() -> None:
    session = Mock()
    session.request.side_effect = requests.ConnectionError("unreachable")
    source = CryptoCompareSource(session=session)

    outcome = source.fetch(["BTC"])

    assert outcome.status is OutcomeStatus.FAILED
