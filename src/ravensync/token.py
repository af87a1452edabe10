"""Bearer token lifecycle: acquire, single-flight refresh, invalidate."""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum

from ravensync._api.login import login
from ravensync._transport import Transport
from ravensync.exceptions import RavenSessionInvalidError, RavenStateError, describe_error
from ravensync.models.credentials import Credentials
from ravensync.models.token import TokenSnapshot

_logger = logging.getLogger(__name__)


class TokenState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"
    INVALID = "invalid"


class TokenManager:
    """Owns the current bearer token.

    The API issues no refresh grant and no expiry, so "refresh" means
    logging in again with the last-known credentials, and expiry is only
    discovered when a call fails with HTTP 401.

    At most one refresh runs at a time.  Concurrent callers share the
    in-flight refresh, and a caller whose request used an already
    superseded token version gets the current token without another login.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._state = TokenState.UNAUTHENTICATED
        self._token: str | None = None
        self._version = 0
        self._credentials: Credentials | None = None
        self._refresh_task: asyncio.Task[str] | None = None
        # Bumped by reset() so a refresh finishing afterwards is discarded.
        self._epoch = 0

    @property
    def state(self) -> TokenState:
        return self._state

    @property
    def credentials(self) -> Credentials | None:
        return self._credentials

    @property
    def is_authenticated(self) -> bool:
        return self._state in (TokenState.AUTHENTICATED, TokenState.REFRESHING) and self._token is not None

    def snapshot(self) -> TokenSnapshot:
        """Return an immutable snapshot of the current token.

        Raises
        ------
        RavenStateError
            If no token is held.
        """
        if self._token is None:
            raise RavenStateError(f"No token available (state={self._state})")
        return TokenSnapshot(token=self._token, version=self._version)

    async def acquire(self, credentials: Credentials) -> str:
        """Log in with *credentials* and store the resulting token.

        Raises
        ------
        RavenStateError
            If a token is already held or a login is in progress.
        RavenAuthenticationError
            If the login exchange was rejected.  The manager is left
            ``INVALID`` and persisted credentials should be discarded.
        """
        if self._state not in (TokenState.UNAUTHENTICATED, TokenState.INVALID):
            raise RavenStateError(f"Cannot acquire a token while {self._state}")

        self._state = TokenState.AUTHENTICATING
        epoch = self._epoch
        try:
            token = await login(self._transport, credentials)
        except Exception:
            if epoch == self._epoch:
                self._invalidate()
            raise

        if epoch != self._epoch:
            raise RavenStateError("Token manager was reset during login")
        self._store(token, credentials)
        _logger.debug("Token acquired (version %d)", self._version)
        return token

    async def refresh(self, stale_version: int | None = None) -> str:
        """Re-login with the stored credentials and return the new token.

        Parameters
        ----------
        stale_version : int or None
            Version of the token the caller's failed request used.  When a
            newer token already exists it is returned straight away.

        Raises
        ------
        RavenSessionInvalidError
            If there is no session to refresh or the re-login failed.  The
            session is dead: token and credentials are cleared.
        """
        if (
            stale_version is not None
            and self._state == TokenState.AUTHENTICATED
            and self._token is not None
            and self._version > stale_version
        ):
            return self._token

        if self._refresh_task is None:
            if self._state != TokenState.AUTHENTICATED or self._credentials is None:
                raise RavenSessionInvalidError(f"No authenticated session to refresh (state={self._state})")
            self._state = TokenState.REFRESHING
            _logger.info("Refreshing API token")
            self._refresh_task = asyncio.create_task(self._run_refresh(self._credentials, self._epoch))

        return await asyncio.shield(self._refresh_task)

    def reset(self) -> None:
        """Forget token and credentials, returning to ``UNAUTHENTICATED``."""
        self._epoch += 1
        self._refresh_task = None
        self._token = None
        self._credentials = None
        self._state = TokenState.UNAUTHENTICATED

    async def _run_refresh(self, credentials: Credentials, epoch: int) -> str:
        try:
            token = await login(self._transport, credentials)
        except Exception as exc:
            if epoch == self._epoch:
                self._refresh_task = None
                self._invalidate()
            _logger.warning("Token refresh failed: %s", describe_error(exc))
            raise RavenSessionInvalidError(f"Session expired and re-authentication failed: {describe_error(exc)}") from exc

        if epoch != self._epoch:
            raise RavenSessionInvalidError("Session was reset during token refresh")
        self._refresh_task = None
        self._store(token, credentials)
        _logger.debug("Token refreshed (version %d)", self._version)
        return token

    def _store(self, token: str, credentials: Credentials) -> None:
        self._token = token
        self._credentials = credentials
        self._version += 1
        self._state = TokenState.AUTHENTICATED

    def _invalidate(self) -> None:
        self._token = None
        self._credentials = None
        self._state = TokenState.INVALID
