from __future__ import annotations

import json

from ravensync._constants import MASK
from ravensync._redact import (
    mask_auth_request_body,
    mask_auth_response_body,
    mask_exchange_bodies,
    mask_headers,
    redact_for_log,
)


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "results": [{"uuid": "r1"}],
        "token": "eyJhbGciOi",
        "api_key": {"key": "k", "secret": "s"},
        "nested": {"Authorization": "Bearer abc"},
    }

    redacted = redact_for_log(payload)
    assert redacted["results"] == [{"uuid": "r1"}]
    assert redacted["token"] == "<redacted>"
    assert redacted["api_key"] == {"key": "k", "secret": "<redacted>"}
    assert redacted["nested"]["Authorization"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_mask_headers_only_touches_authorization() -> None:
    headers = {"authorization": "Bearer abc", "accept": "application/json"}

    assert mask_headers(headers) == {"authorization": MASK, "accept": "application/json"}
    assert headers["authorization"] == "Bearer abc"


def test_mask_auth_bodies() -> None:
    request = json.dumps({"api_key": {"key": "k", "secret": "s"}})
    response = json.dumps({"token": "t", "expires_in": 3600})

    assert json.loads(mask_auth_request_body(request) or "") == {"api_key": {"key": "k", "secret": MASK}}
    assert json.loads(mask_auth_response_body(response) or "") == {"token": MASK, "expires_in": 3600}


def test_mask_auth_bodies_leaves_unparseable_text() -> None:
    assert mask_auth_request_body("not json") == "not json"
    assert mask_auth_response_body("<html>") == "<html>"
    assert mask_auth_response_body(None) is None


def test_mask_exchange_bodies_is_endpoint_specific() -> None:
    body = json.dumps({"token": "t"})

    assert mask_exchange_bodies("/ravens", None, body) == (None, body)
    _request, masked = mask_exchange_bodies("/auth/token", None, body)
    assert json.loads(masked or "") == {"token": MASK}
