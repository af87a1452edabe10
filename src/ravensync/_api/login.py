"""Login endpoint.

Endpoint:
  - POST /auth/token
"""

from __future__ import annotations

import logging
from typing import Any

from ravensync._constants import AUTH_ENDPOINT
from ravensync._transport import Transport
from ravensync.exceptions import RavenAuthenticationError, RavenHttpError, RavenValidationError
from ravensync.models.credentials import Credentials

_logger = logging.getLogger(__name__)


def build_login_request(credentials: Credentials) -> dict[str, Any]:
    """Build the JSON body of the token exchange."""
    return {
        "api_key": {
            "key": credentials.api_key,
            "secret": credentials.api_secret,
        },
    }


def parse_login_response(payload: Any) -> str:
    """Extract the bearer token from the token exchange reply.

    Raises
    ------
    RavenAuthenticationError
        If the reply carries no token string.
    """
    token = payload.get("token") if isinstance(payload, dict) else None
    if not isinstance(token, str) or not token:
        raise RavenAuthenticationError("Login response missing token")
    return token


async def login(transport: Transport, credentials: Credentials) -> str:
    """Run the token exchange and return the bearer token.

    Network failures propagate as :class:`~ravensync.exceptions.RavenNetworkError`;
    rejected or malformed exchanges become :class:`RavenAuthenticationError`.
    """
    try:
        payload = await transport.request(
            "POST",
            AUTH_ENDPOINT,
            base_url=credentials.api_url,
            body=build_login_request(credentials),
        )
    except RavenHttpError as exc:
        raise RavenAuthenticationError(f"Failed to get token: {exc.status} {exc.body[:200]}".rstrip()) from exc
    except RavenValidationError as exc:
        raise RavenAuthenticationError(f"Failed to get token: {exc}") from exc

    token = parse_login_response(payload)
    _logger.debug("Login succeeded for key %s", credentials.api_key)
    return token
