"""Custom exception hierarchy for ravensync."""

from __future__ import annotations

_UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
_BODY_EXCERPT = 200


class RavenError(Exception):
    """Base exception for all ravensync errors."""


class RavenConfigError(RavenError):
    """Invalid or missing configuration."""


class RavenStateError(RavenError):
    """Operation is not valid in the current lifecycle state."""


class RavenValidationError(RavenError):
    """Response is malformed or lacks an expected field (e.g. a raven without uuid)."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class RavenTransportError(RavenError):
    """Wire-level failure talking to the API."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class RavenNetworkError(RavenTransportError):
    """The request never produced a response (DNS, connection reset, timeout)."""


class RavenHttpError(RavenTransportError):
    """API answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        status_text: str = "",
        body: str = "",
        endpoint: str = "",
    ) -> None:
        self.status = status
        self.status_text = status_text
        self.body = body
        super().__init__(message, endpoint=endpoint)


class RavenUnauthorizedError(RavenHttpError):
    """HTTP 401 on an authenticated call.

    Callers holding a token react to this by asking the
    :class:`~ravensync.token.TokenManager` for a refresh and retrying once.
    """


class RavenAuthenticationError(RavenError):
    """The login exchange was rejected or returned no token."""


class RavenSessionInvalidError(RavenAuthenticationError):
    """Token refresh failed; the whole session is dead.

    Never retried.  The credentials must be re-entered.
    """


class RavenSyncError(RavenError):
    """A sync pass failed.  ``str(exc)`` is the user-facing message."""


def describe_error(exc: BaseException) -> str:
    """Normalize *exc* into a single human-readable message."""
    if isinstance(exc, RavenHttpError):
        status = f"HTTP {exc.status} {exc.status_text}".rstrip()
        excerpt = exc.body[:_BODY_EXCERPT]
        where = f" from {exc.endpoint}" if exc.endpoint else ""
        return f"{status}{where}: {excerpt}" if excerpt else f"{status}{where}"
    if isinstance(exc, RavenError):
        return str(exc) or type(exc).__name__
    return _UNKNOWN_ERROR_MESSAGE
