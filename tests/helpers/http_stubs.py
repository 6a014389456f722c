from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import requests


def mock_response(payload: Any, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = "payload"
    response.raise_for_status.return_value = None
    return response


def http_error_response(status_code: int, payload: Any | None = None) -> Mock:
    response = mock_response(payload if payload is not None else {}, status_code=status_code)
    response.raise_for_status.side_effect = requests.HTTPError(response=response)
    return response


def routed_session(routes: dict[str, Mock | Exception]) -> Mock:
    """Session whose responses are picked by the first route that is a substring of the URL."""

    session = Mock()

    def _request(method: str, url: str, **kwargs: Any) -> Mock:
        for fragment, result in routes.items():
            if fragment in url:
                if isinstance(result, Exception):
                    raise result
                return result
        raise requests.ConnectionError(f"no route for {url}")

    session.request.side_effect = _request
    return session


def requested_urls(session: Mock) -> list[str]:
    return [call.args[1] for call in session.request.call_args_list]
