"""Tests for endpoint fallback sequencing."""

import asyncio
from dataclasses import replace
from urllib.parse import quote

import pytest

from teamboard.config import Settings
from teamboard.endpoints import Candidate, Operation
from teamboard.exceptions import (
    AuthError,
    ParseError,
    ResultsUnavailableError,
    TransientTransportError,
)
from teamboard.sequencer import EndpointSequencer
from teamboard.transport import Dialect
from tests.fakes import LEGACY_ROOT, MODERN_ROOT, FakeClient

ROOT = MODERN_ROOT
LEGACY = LEGACY_ROOT
CANDIDATES = {
    op: (
        Candidate(Dialect.MODERN, "/c1"),
        Candidate(Dialect.MODERN, "/c2"),
        Candidate(Dialect.MODERN, "/c3"),
    )
    for op in Operation
}
TOKEN = "abcdef0123456789"


def _status(code: int) -> TransientTransportError:
    return TransientTransportError(f"Status: {code}", status_code=code)


def _resolve(sequencer: EndpointSequencer, operation: Operation, **params):
    return asyncio.run(sequencer.resolve(operation, TOKEN, **params))


def test_soft_operation_walks_past_error_and_empty(settings: Settings) -> None:
    """500, then empty 2xx, then data: the third candidate wins, in order."""
    client = FakeClient(
        {
            f"{ROOT}/c1": _status(500),
            f"{ROOT}/c2": [],
            f"{ROOT}/c3": {"data": [{"id": "t1"}]},
        }
    )
    sequencer = EndpointSequencer(client, settings, candidates=CANDIDATES)

    records = _resolve(sequencer, Operation.TASKS)

    assert records == [{"id": "t1"}]
    assert client.calls == [f"{ROOT}/c1", f"{ROOT}/c2", f"{ROOT}/c3"]


def test_auth_failure_stops_immediately(settings: Settings) -> None:
    client = FakeClient(
        {
            f"{ROOT}/c1": AuthError("Status: 401", status_code=401),
            f"{ROOT}/c2": [{"id": "t1"}],
        }
    )
    sequencer = EndpointSequencer(client, settings, candidates=CANDIDATES)

    with pytest.raises(AuthError):
        _resolve(sequencer, Operation.TASKS)

    assert client.calls == [f"{ROOT}/c1"]


def test_relay_is_tried_after_direct_failure(relay_settings: Settings) -> None:
    relay_url = "https://relay.test/?url=" + quote(f"{ROOT}/c1", safe="")
    client = FakeClient({f"{ROOT}/c1": _status(502), relay_url: {"items": [{"id": 1}]}})
    sequencer = EndpointSequencer(client, relay_settings, candidates=CANDIDATES)

    records = _resolve(sequencer, Operation.GAMES)

    assert records == [{"id": 1}]
    assert client.calls == [f"{ROOT}/c1", relay_url]


def test_auth_failure_on_relay_skips_remaining_candidates(
    relay_settings: Settings,
) -> None:
    relay_url = "https://relay.test/?url=" + quote(f"{ROOT}/c1", safe="")
    client = FakeClient(
        {
            f"{ROOT}/c1": _status(500),
            relay_url: AuthError("Status: 403", status_code=403),
            f"{ROOT}/c2": [{"id": 1}],
        }
    )
    sequencer = EndpointSequencer(client, relay_settings, candidates=CANDIDATES)

    with pytest.raises(AuthError):
        _resolve(sequencer, Operation.PHOTOS)

    assert client.calls == [f"{ROOT}/c1", relay_url]


def test_empty_success_moves_to_next_candidate_not_relay(
    relay_settings: Settings,
) -> None:
    client = FakeClient({f"{ROOT}/c1": [], f"{ROOT}/c2": [{"id": 2}]})
    sequencer = EndpointSequencer(client, relay_settings, candidates=CANDIDATES)

    assert _resolve(sequencer, Operation.TASKS) == [{"id": 2}]
    assert client.calls == [f"{ROOT}/c1", f"{ROOT}/c2"]


def test_parse_error_is_treated_as_transient(relay_settings: Settings) -> None:
    relay_url = "https://relay.test/?url=" + quote(f"{ROOT}/c1", safe="")
    client = FakeClient(
        {
            f"{ROOT}/c1": ParseError("not json", snippet="<html>"),
            relay_url: [{"id": 3}],
        }
    )
    sequencer = EndpointSequencer(client, relay_settings, candidates=CANDIDATES)

    assert _resolve(sequencer, Operation.TASKS) == [{"id": 3}]


def test_soft_operation_degrades_to_empty(settings: Settings) -> None:
    sequencer = EndpointSequencer(FakeClient(), settings, candidates=CANDIDATES)

    assert _resolve(sequencer, Operation.PHOTOS) == []


def test_results_all_failing_raises(settings: Settings) -> None:
    client = FakeClient()
    sequencer = EndpointSequencer(client, settings, candidates=CANDIDATES)

    with pytest.raises(ResultsUnavailableError) as exc_info:
        _resolve(sequencer, Operation.RESULTS, game_id="g1")

    assert exc_info.value.attempts == 3
    assert exc_info.value.game_id == "g1"
    assert len(client.calls) == 3


def test_results_all_empty_returns_empty_list(settings: Settings) -> None:
    client = FakeClient({f"{ROOT}/c1": [], f"{ROOT}/c2": {"data": []}, f"{ROOT}/c3": []})
    sequencer = EndpointSequencer(client, settings, candidates=CANDIDATES)

    assert _resolve(sequencer, Operation.RESULTS, game_id="g1") == []
    assert len(client.calls) == 3


def test_results_empty_then_failures_returns_empty_list(settings: Settings) -> None:
    client = FakeClient({f"{ROOT}/c1": []})
    sequencer = EndpointSequencer(client, settings, candidates=CANDIDATES)

    assert _resolve(sequencer, Operation.RESULTS, game_id="g1") == []


def test_results_skip_empty_in_favour_of_later_candidate(settings: Settings) -> None:
    client = FakeClient({f"{ROOT}/c1": [], f"{ROOT}/c2": [{"name": "Owls"}]})
    sequencer = EndpointSequencer(client, settings, candidates=CANDIDATES)

    assert _resolve(sequencer, Operation.RESULTS, game_id="g1") == [{"name": "Owls"}]


def test_game_info_accepts_single_document(settings: Settings) -> None:
    client = FakeClient({f"{ROOT}/games/g1?includeTasks=true": {"data": {"title": "Hunt"}}})
    sequencer = EndpointSequencer(client, settings)

    records = _resolve(sequencer, Operation.GAME_INFO, game_id="g1")

    assert records == [{"title": "Hunt"}]
    assert len(client.calls) == 1


def test_default_candidates_render_parameters(settings: Settings) -> None:
    client = FakeClient()
    sequencer = EndpointSequencer(client, settings)

    _resolve(sequencer, Operation.TASKS, game_id="g1")

    assert client.calls == [
        f"{ROOT}/games/g1/tasks?limit=500",
        f"{ROOT}/tasks?gameId=g1&limit=500",
        f"{LEGACY}/games/g1/questions?limit=500",
    ]


def test_legacy_credential_prefers_legacy_dialect(settings: Settings) -> None:
    client = FakeClient()
    sequencer = EndpointSequencer(client, settings)

    asyncio.run(sequencer.resolve(Operation.TASKS, "ApiKey-v1 secret-token", game_id="g1"))

    assert client.calls[0] == f"{LEGACY}/games/g1/questions?limit=500"
    assert client.calls[1:] == [
        f"{ROOT}/games/g1/tasks?limit=500",
        f"{ROOT}/tasks?gameId=g1&limit=500",
    ]
    assert all(h["Authorization"] == "ApiKey-v1 secret-token" for h in client.headers)


def test_modern_credential_sends_bearer_header(settings: Settings) -> None:
    client = FakeClient({f"{ROOT}/c1": [{"id": 1}]})
    sequencer = EndpointSequencer(client, settings, candidates=CANDIDATES)

    _resolve(sequencer, Operation.GAMES)

    assert client.headers[0]["Authorization"] == f"Bearer {TOKEN}"
    assert client.headers[0]["Accept"] == "application/json"


def test_expired_deadline_stops_walking(settings: Settings) -> None:
    client = FakeClient({f"{ROOT}/c1": [{"id": 1}]})
    sequencer = EndpointSequencer(
        client, replace(settings, operation_deadline=-1.0), candidates=CANDIDATES
    )

    assert _resolve(sequencer, Operation.TASKS) == []
    assert client.calls == []


def test_collect_all_gathers_every_non_empty_candidate(settings: Settings) -> None:
    client = FakeClient(
        {
            f"{ROOT}/c1": [{"url": "https://x/1.jpg"}],
            f"{ROOT}/c2": [],
            f"{ROOT}/c3": {"items": [{"url": "https://x/2.jpg"}]},
        }
    )
    sequencer = EndpointSequencer(client, settings, candidates=CANDIDATES)

    sources = asyncio.run(sequencer.collect_all(Operation.PHOTOS, TOKEN, game_id="g1"))

    assert sources == [[{"url": "https://x/1.jpg"}], [{"url": "https://x/2.jpg"}]]
