"""Helpers for safe logging.

ravensync handles API secrets and bearer tokens.  This module masks them
before they reach DEBUG logs or the audit log shown to users.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from ravensync._constants import AUTH_ENDPOINT, MASK

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "secret",
        "api_secret",
        "apisecret",
        "token",
        "authorization",
        "cookie",
    }
)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in _SENSITIVE_VALUE_KEYS:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)


def mask_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy *headers*, masking the bearer token."""
    return {key: (MASK if key.lower() == "authorization" else value) for key, value in headers.items()}


def mask_auth_request_body(body: str | None) -> str | None:
    """Mask ``api_key.secret`` in a login request body.

    Unparseable bodies are returned untouched.
    """
    if not body:
        return body
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return body
    api_key = parsed.get("api_key") if isinstance(parsed, dict) else None
    if isinstance(api_key, dict) and api_key.get("secret"):
        api_key["secret"] = MASK
    return json.dumps(parsed, indent=2)


def mask_auth_response_body(body: str | None) -> str | None:
    """Mask ``token`` in a login response body."""
    if not body:
        return body
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return body
    if isinstance(parsed, dict) and parsed.get("token"):
        parsed["token"] = MASK
    return json.dumps(parsed, indent=2)


def mask_exchange_bodies(endpoint: str, request_body: str | None, response_body: str | None) -> tuple[str | None, str | None]:
    """Apply endpoint-specific masking to an audit entry's bodies."""
    if endpoint != AUTH_ENDPOINT:
        return request_body, response_body
    return mask_auth_request_body(request_body), mask_auth_response_body(response_body)
