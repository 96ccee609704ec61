"""Tests for the single-request API client."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from curl_cffi.requests import RequestsError

from teamboard.client import ApiClient, wrap_relay
from teamboard.exceptions import AuthError, ParseError, TransientTransportError

URL = "https://api.test/v4/games"
HEADERS = {"Authorization": "Bearer t"}


def _client(response=None, side_effect=None) -> tuple[ApiClient, MagicMock]:
    session = MagicMock()
    session.get = AsyncMock(return_value=response, side_effect=side_effect)
    return ApiClient(timeout=5.0, session=session), session


def _response(status: int, body=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.text = text
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


def test_success_returns_decoded_body() -> None:
    client, session = _client(_response(200, [{"id": "g1"}]))

    body = asyncio.run(client.get_json(URL, HEADERS))

    assert body == [{"id": "g1"}]
    session.get.assert_awaited_once_with(URL, headers=HEADERS, timeout=5.0)


@pytest.mark.parametrize("status", [401, 403])
def test_auth_statuses_raise_auth_error(status: int) -> None:
    client, _ = _client(_response(status))

    with pytest.raises(AuthError) as exc_info:
        asyncio.run(client.get_json(URL, HEADERS))

    assert exc_info.value.status_code == status


@pytest.mark.parametrize("status", [404, 429, 500, 503])
def test_other_statuses_are_transient(status: int) -> None:
    client, _ = _client(_response(status))

    with pytest.raises(TransientTransportError) as exc_info:
        asyncio.run(client.get_json(URL, HEADERS))

    assert exc_info.value.status_code == status


def test_non_json_body_raises_parse_error() -> None:
    client, _ = _client(_response(200, ValueError("Expecting value"), "<html>blocked</html>"))

    with pytest.raises(ParseError) as exc_info:
        asyncio.run(client.get_json(URL, HEADERS))

    assert exc_info.value.snippet == "<html>blocked</html>"


def test_timeout_is_transient() -> None:
    client, _ = _client(side_effect=TimeoutError())

    with pytest.raises(TransientTransportError, match="timed out"):
        asyncio.run(client.get_json(URL, HEADERS))


def test_network_error_is_transient() -> None:
    client, _ = _client(side_effect=RequestsError("Connection refused"))

    with pytest.raises(TransientTransportError):
        asyncio.run(client.get_json(URL, HEADERS))


def test_shared_session_is_not_closed() -> None:
    client, session = _client(_response(200, []))
    session.close = AsyncMock()

    asyncio.run(client.aclose())

    session.close.assert_not_awaited()


def test_wrap_relay_encodes_target() -> None:
    wrapped = wrap_relay("https://relay.test/?", "https://api.test/v4/tasks?gameId=g&limit=5")

    assert wrapped == "https://relay.test/?https%3A%2F%2Fapi.test%2Fv4%2Ftasks%3FgameId%3Dg%26limit%3D5"
    assert wrap_relay("", URL) == URL
