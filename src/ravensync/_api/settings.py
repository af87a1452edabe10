"""Per-raven settings, driver message and trip share endpoints.

Endpoints:
  - GET/PATCH /ravens/{uuid}/settings
  - POST/DELETE /ravens/{uuid}/driver-message
  - GET /ravens/{uuid}/trip-share
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ravensync._api._common import authed_request, require_object
from ravensync._constants import RAVENS_ENDPOINT
from ravensync._transport import Transport
from ravensync.exceptions import RavenValidationError

if TYPE_CHECKING:
    from ravensync.token import TokenManager


async def fetch_raven_settings(api_url: str, tokens: TokenManager, transport: Transport, uuid: str) -> dict[str, Any]:
    endpoint = f"{RAVENS_ENDPOINT}/{uuid}/settings"
    payload = await authed_request("GET", endpoint, api_url=api_url, tokens=tokens, transport=transport)
    return require_object(payload, endpoint=endpoint)


async def update_raven_settings(
    api_url: str,
    tokens: TokenManager,
    transport: Transport,
    uuid: str,
    settings: dict[str, Any],
) -> dict[str, Any]:
    """PATCH settings.  An empty reply means the server accepted *settings* as-is."""
    endpoint = f"{RAVENS_ENDPOINT}/{uuid}/settings"
    payload = await authed_request("PATCH", endpoint, api_url=api_url, tokens=tokens, transport=transport, body=settings)
    if payload is None:
        return dict(settings)
    return require_object(payload, endpoint=endpoint)


async def set_driver_message(
    api_url: str,
    tokens: TokenManager,
    transport: Transport,
    uuid: str,
    message: str,
    duration_seconds: int,
) -> None:
    """Show *message* on the raven's screen for *duration_seconds*."""
    if duration_seconds <= 0:
        raise ValueError(f"duration_seconds must be positive, got {duration_seconds}")
    await authed_request(
        "POST",
        f"{RAVENS_ENDPOINT}/{uuid}/driver-message",
        api_url=api_url,
        tokens=tokens,
        transport=transport,
        body={"message": message, "duration": duration_seconds},
    )


async def clear_driver_message(api_url: str, tokens: TokenManager, transport: Transport, uuid: str) -> None:
    await authed_request(
        "DELETE",
        f"{RAVENS_ENDPOINT}/{uuid}/driver-message",
        api_url=api_url,
        tokens=tokens,
        transport=transport,
    )


async def fetch_trip_share_url(api_url: str, tokens: TokenManager, transport: Transport, uuid: str) -> str:
    endpoint = f"{RAVENS_ENDPOINT}/{uuid}/trip-share"
    payload = await authed_request("GET", endpoint, api_url=api_url, tokens=tokens, transport=transport)
    url = payload.get("url") if isinstance(payload, dict) else None
    if not isinstance(url, str):
        raise RavenValidationError(f"{endpoint} response did not contain a valid 'url' field", endpoint=endpoint)
    return url
