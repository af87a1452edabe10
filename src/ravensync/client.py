"""High-level async client for the Raven Data API."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

import aiohttp

from ravensync._api import events as _events_api
from ravensync._api import geofences as _geofences_api
from ravensync._api import ravens as _ravens_api
from ravensync._api import settings as _settings_api
from ravensync._api.vin import decode_vin
from ravensync._transport import HttpExchange
from ravensync.audit import AuditLog
from ravensync.config import RavenConfig
from ravensync.exceptions import RavenError, RavenStateError
from ravensync.models.credentials import Credentials
from ravensync.models.event import RavenEvent
from ravensync.models.geofence import Geofence
from ravensync.models.vehicle import VehicleDetails, VehicleInfo, VehicleSummary
from ravensync.token import TokenManager

_logger = logging.getLogger(__name__)


class RavenClient:
    """Async client for the Raven Data API.

    Every call goes through one :class:`HttpExchange`, so every call lands
    in :attr:`audit_log`.  Authenticated calls that hit HTTP 401 refresh
    the token once (single-flight) and retry.

    Usage::

        async with RavenClient(RavenConfig.from_env()) as client:
            await client.login()
            ravens = await client.get_ravens()
    """

    def __init__(
        self,
        config: RavenConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        audit_log: AuditLog | None = None,
    ) -> None:
        self._config = config or RavenConfig()
        self._external_session = session is not None
        self._http_session = session
        self._audit = audit_log if audit_log is not None else AuditLog()
        self._exchange: HttpExchange | None = None
        self._tokens: TokenManager | None = None
        if session is not None:
            self._bind(session)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RavenClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
            self._bind(self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._exchange = None
            self._tokens = None

    def _bind(self, session: aiohttp.ClientSession) -> None:
        self._exchange = HttpExchange(session, self._audit, timeout=self._config.request_timeout)
        self._tokens = TokenManager(self._exchange)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> RavenConfig:
        return self._config

    @property
    def audit_log(self) -> AuditLog:
        return self._audit

    @property
    def tokens(self) -> TokenManager:
        if self._tokens is None:
            raise RavenError("Client not initialized. Use 'async with RavenClient(...) as client:'")
        return self._tokens

    @property
    def api_url(self) -> str:
        credentials = self._tokens.credentials if self._tokens is not None else None
        if credentials is None:
            raise RavenStateError("Not logged in")
        return credentials.api_url

    def _require_exchange(self) -> HttpExchange:
        if self._exchange is None:
            raise RavenError("Client not initialized. Use 'async with RavenClient(...) as client:'")
        return self._exchange

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self, credentials: Credentials | None = None) -> str:
        """Acquire a token with *credentials* (default: from config)."""
        credentials = credentials or self._config.credentials()
        return await self.tokens.acquire(credentials)

    async def refresh_token(self) -> str:
        """Force a re-login with the last-known credentials."""
        return await self.tokens.refresh()

    def logout(self) -> None:
        """Forget token and credentials."""
        if self._tokens is not None:
            self._tokens.reset()

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def get_ravens(self) -> list[VehicleSummary]:
        """Fetch the summaries of every raven on the account."""
        return await _ravens_api.fetch_raven_summaries(self.api_url, self.tokens, self._require_exchange())

    async def get_raven_details(self, uuid: str) -> VehicleDetails:
        return await _ravens_api.fetch_raven_details(self.api_url, self.tokens, self._require_exchange(), uuid)

    async def get_geofences(self) -> list[Geofence]:
        return await _geofences_api.fetch_geofences(self.api_url, self.tokens, self._require_exchange())

    async def get_raven_events(
        self,
        uuid: str,
        *,
        start: datetime | date | None = None,
        end: datetime | date | None = None,
    ) -> list[RavenEvent]:
        """Fetch events of one raven, optionally bounded to ``[start, end]`` (whole days)."""
        return await _events_api.fetch_raven_events(
            self.api_url,
            self.tokens,
            self._require_exchange(),
            uuid,
            start=start,
            end=end,
        )

    async def get_raven_settings(self, uuid: str) -> dict[str, Any]:
        return await _settings_api.fetch_raven_settings(self.api_url, self.tokens, self._require_exchange(), uuid)

    async def get_trip_share_url(self, uuid: str) -> str:
        return await _settings_api.fetch_trip_share_url(self.api_url, self.tokens, self._require_exchange(), uuid)

    async def get_vehicle_info_from_vin(self, vin: str | None) -> VehicleInfo | None:
        """Decode *vin*; ``None`` when it cannot be decoded.  Never raises on lookup failure."""
        return await decode_vin(self._require_exchange(), vin, base_url=self._config.vin_decode_url)

    # ------------------------------------------------------------------
    # Write endpoints
    # ------------------------------------------------------------------

    async def update_raven_settings(self, uuid: str, settings: dict[str, Any]) -> dict[str, Any]:
        return await _settings_api.update_raven_settings(
            self.api_url,
            self.tokens,
            self._require_exchange(),
            uuid,
            settings,
        )

    async def set_driver_message(self, uuid: str, message: str, duration_seconds: int) -> None:
        await _settings_api.set_driver_message(
            self.api_url,
            self.tokens,
            self._require_exchange(),
            uuid,
            message,
            duration_seconds,
        )

    async def clear_driver_message(self, uuid: str) -> None:
        await _settings_api.clear_driver_message(self.api_url, self.tokens, self._require_exchange(), uuid)

    async def delete_geofence(self, geofence_uuid: str) -> None:
        await _geofences_api.delete_geofence(self.api_url, self.tokens, self._require_exchange(), geofence_uuid)
