from __future__ import annotations

import json

import pytest
from fakes import API_URL, FakeSession, connection_error

from ravensync._constants import MASK
from ravensync._transport import HttpExchange
from ravensync.audit import AuditLog
from ravensync.exceptions import (
    RavenHttpError,
    RavenNetworkError,
    RavenUnauthorizedError,
    RavenValidationError,
)


def _exchange(session: FakeSession) -> tuple[HttpExchange, AuditLog]:
    log = AuditLog()
    return HttpExchange(session, log), log  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_success_returns_payload_and_logs_once() -> None:
    session = FakeSession()
    session.route("GET", "/ravens", (200, {"results": []}))
    exchange, log = _exchange(session)

    payload = await exchange.request("GET", "/ravens", base_url=API_URL, token="tok-1")

    assert payload == {"results": []}
    assert len(log) == 1
    entry = log.entries[0]
    assert entry.endpoint == "/ravens"
    assert entry.request.method == "GET"
    assert entry.request.headers["authorization"] == MASK
    assert entry.response.status == 200
    assert entry.response.ok is True
    assert json.loads(entry.response.body or "") == {"results": []}
    assert session.calls[0].token == "tok-1"


@pytest.mark.asyncio
async def test_non_2xx_raises_http_error_after_logging() -> None:
    session = FakeSession()
    session.route("GET", "/ravens", (500, {"error": "down"}))
    exchange, log = _exchange(session)

    with pytest.raises(RavenHttpError) as excinfo:
        await exchange.request("GET", "/ravens", base_url=API_URL)

    assert excinfo.value.status == 500
    assert excinfo.value.status_text == "Internal Server Error"
    assert "down" in excinfo.value.body
    assert not isinstance(excinfo.value, RavenUnauthorizedError)
    assert len(log) == 1
    assert log.entries[0].response.ok is False


@pytest.mark.asyncio
async def test_401_raises_unauthorized() -> None:
    session = FakeSession()
    session.route("GET", "/ravens/a", (401, {"detail": "expired"}))
    exchange, log = _exchange(session)

    with pytest.raises(RavenUnauthorizedError):
        await exchange.request("GET", "/ravens/a", base_url=API_URL, token="old")

    assert log.entries[0].response.status == 401


@pytest.mark.asyncio
async def test_network_failure_still_records_an_entry() -> None:
    session = FakeSession()
    session.route("GET", "/geofences", connection_error())
    exchange, log = _exchange(session)

    with pytest.raises(RavenNetworkError):
        await exchange.request("GET", "/geofences", base_url=API_URL)

    assert len(log) == 1
    assert log.entries[0].response.status == 0
    assert log.entries[0].response.ok is False
    assert log.entries[0].response.status_text == "Network Error"


@pytest.mark.asyncio
async def test_invalid_json_is_logged_then_rejected() -> None:
    session = FakeSession()
    session.route("GET", "/ravens", (200, "<html>oops</html>"))
    exchange, log = _exchange(session)

    with pytest.raises(RavenValidationError):
        await exchange.request("GET", "/ravens", base_url=API_URL)

    assert log.entries[0].response.body == "<html>oops</html>"


@pytest.mark.asyncio
async def test_empty_body_returns_none() -> None:
    session = FakeSession()
    session.route("DELETE", "/geofences/g1", (204, None))
    exchange, _log = _exchange(session)

    assert await exchange.request("DELETE", "/geofences/g1", base_url=API_URL) is None


@pytest.mark.asyncio
async def test_auth_exchange_masks_secret_and_token() -> None:
    session = FakeSession()
    session.route("POST", "/auth/token", (200, {"token": "very-secret-token"}))
    exchange, log = _exchange(session)

    payload = await exchange.request(
        "POST",
        "/auth/token",
        base_url=API_URL,
        body={"api_key": {"key": "k", "secret": "s3cr3t"}},
    )

    assert payload == {"token": "very-secret-token"}
    entry = log.entries[0]
    assert json.loads(entry.request.body or "") == {"api_key": {"key": "k", "secret": MASK}}
    assert json.loads(entry.response.body or "") == {"token": MASK}
    assert session.calls[0].body == {"api_key": {"key": "k", "secret": "s3cr3t"}}
    assert session.calls[0].headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_query_params_are_part_of_logged_endpoint() -> None:
    session = FakeSession()
    session.route("GET", "/ravens/a/events", (200, {"results": []}))
    exchange, log = _exchange(session)

    await exchange.request("GET", "/ravens/a/events", base_url=API_URL, params={"start_timestamp": "10"})

    assert log.entries[0].endpoint == "/ravens/a/events?start_timestamp=10"
    assert session.calls[0].params == {"start_timestamp": "10"}


@pytest.mark.asyncio
async def test_audit_has_one_entry_per_call_for_mixed_outcomes() -> None:
    session = FakeSession()
    session.route("GET", "/ok", (200, {}))
    session.route("GET", "/bad", (404, {}))
    session.route("GET", "/down", connection_error())
    exchange, log = _exchange(session)

    paths = ["/ok", "/bad", "/down", "/ok", "/bad"]
    for path in paths:
        try:
            await exchange.request("GET", path, base_url=API_URL)
        except (RavenHttpError, RavenNetworkError):
            pass

    assert len(log) == len(paths)
    assert [e.response.ok for e in log.entries] == [True, False, False, True, False]


@pytest.mark.asyncio
async def test_undecodable_error_body_still_logged_with_real_status() -> None:
    session = FakeSession()
    session.route("GET", "/ravens", (500, b"\xff\xfe\xfa not utf8"))
    exchange, log = _exchange(session)

    with pytest.raises(RavenHttpError) as excinfo:
        await exchange.request("GET", "/ravens", base_url=API_URL)

    assert excinfo.value.status == 500
    assert "not utf8" in excinfo.value.body
    assert len(log) == 1
    assert log.entries[0].response.status == 500
    assert "not utf8" in (log.entries[0].response.body or "")


@pytest.mark.asyncio
async def test_undecodable_success_body_is_validation_error() -> None:
    session = FakeSession()
    session.route("GET", "/ravens", (200, b'{"results": "\xff"}'))
    exchange, log = _exchange(session)

    with pytest.raises(RavenValidationError, match="Undecodable"):
        await exchange.request("GET", "/ravens", base_url=API_URL)

    assert len(log) == 1
    assert log.entries[0].response.ok is True
