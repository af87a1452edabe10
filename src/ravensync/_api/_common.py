"""Shared helpers for Raven API endpoint modules.

It is internal to ravensync and may change at any time.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ravensync._transport import Transport
from ravensync.exceptions import RavenUnauthorizedError, RavenValidationError

if TYPE_CHECKING:
    from ravensync.token import TokenManager

_logger = logging.getLogger(__name__)


async def authed_request(
    method: str,
    endpoint: str,
    *,
    api_url: str,
    tokens: TokenManager,
    transport: Transport,
    body: Any = None,
    params: Mapping[str, str] | None = None,
) -> Any:
    """Send a bearer-authenticated request, refreshing once on HTTP 401.

    The token is read as a snapshot before the call.  On 401 the caller
    asks :meth:`TokenManager.refresh` (single-flight) for a newer token
    and retries once.  A failed refresh raises
    :class:`~ravensync.exceptions.RavenSessionInvalidError`.
    """
    snapshot = tokens.snapshot()
    try:
        return await transport.request(
            method,
            endpoint,
            base_url=api_url,
            body=body,
            token=snapshot.token,
            params=params,
        )
    except RavenUnauthorizedError:
        _logger.warning("%s %s unauthorized (401); refreshing token", method, endpoint)
        token = await tokens.refresh(stale_version=snapshot.version)
        return await transport.request(
            method,
            endpoint,
            base_url=api_url,
            body=body,
            token=token,
            params=params,
        )


def results_list(payload: Any, *, endpoint: str) -> list[Any]:
    """Return ``payload["results"]``; a missing key means no results."""
    if payload is None:
        return []
    if not isinstance(payload, dict):
        raise RavenValidationError(f"{endpoint} returned {type(payload).__name__}, expected an object", endpoint=endpoint)
    results = payload.get("results")
    if results is None:
        return []
    if not isinstance(results, list):
        raise RavenValidationError(f"{endpoint} 'results' is not a list", endpoint=endpoint)
    return results


def require_object(payload: Any, *, endpoint: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise RavenValidationError(f"{endpoint} returned {type(payload).__name__}, expected an object", endpoint=endpoint)
    return payload
