"""Fleet sync orchestration.

One sync pass acquires a token, fetches the raven list and the geofences
concurrently, enriches every raven with its details (and VIN decode)
under a concurrency bound, and publishes the result as one
:class:`FleetSnapshot`.  Any failure aborts the pass and resets the whole
session: recovery means re-entering credentials, never a silent retry.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum

from ravensync._constants import CREDENTIALS_STORAGE_KEY
from ravensync.client import RavenClient
from ravensync.exceptions import (
    RavenSessionInvalidError,
    RavenStateError,
    RavenSyncError,
    describe_error,
)
from ravensync.limiter import ConcurrencyLimiter
from ravensync.models.audit import AuditLogEntry
from ravensync.models.credentials import Credentials
from ravensync.models.fleet import FleetSnapshot
from ravensync.models.geofence import Geofence
from ravensync.models.vehicle import VehicleInfo, VehicleRecord, VehicleSummary
from ravensync.storage import CredentialStore, MemoryCredentialStore
from ravensync.token import TokenState

_logger = logging.getLogger(__name__)

VinDecoder = Callable[[str], Awaitable[VehicleInfo | None]]


class SyncState(StrEnum):
    IDLE = "idle"
    TOKEN_ACQUIRING = "token_acquiring"
    LIST_FETCHING = "list_fetching"
    DETAIL_ENRICHING = "detail_enriching"
    COMPLETE = "complete"
    ERRORED = "errored"


@dataclasses.dataclass(frozen=True)
class ApiContext:
    """Capability handed to UI collaborators bound to the current session.

    ``token`` is the token at the time the context was built; after
    ``refresh_token()`` take a fresh context via :meth:`FleetSync.api_context`.
    """

    api_url: str
    token: str
    add_log_entry: Callable[[AuditLogEntry], None]
    refresh_token: Callable[[], Awaitable[str]]


class FleetSync:
    """Orchestrates sync passes and owns the published fleet state.

    Parameters
    ----------
    client : RavenClient
        Entered client; its token manager and audit log are shared.
    store : CredentialStore or None
        Where credentials are persisted between passes.
    vin_decoder : callable or None
        ``async (vin) -> VehicleInfo | None``.  Defaults to the client's
        NHTSA lookup when ``config.vin_decode_enabled``.
    concurrency : int or None
        Detail fetches in flight.  Defaults to ``config.detail_concurrency``.
    """

    def __init__(
        self,
        client: RavenClient,
        *,
        store: CredentialStore | None = None,
        vin_decoder: VinDecoder | None = None,
        concurrency: int | None = None,
    ) -> None:
        self._client = client
        self._store: CredentialStore = store if store is not None else MemoryCredentialStore()
        if vin_decoder is None and client.config.vin_decode_enabled:
            vin_decoder = client.get_vehicle_info_from_vin
        self._vin_decoder = vin_decoder
        self._limiter: ConcurrencyLimiter[VehicleSummary, VehicleRecord] = ConcurrencyLimiter(
            concurrency if concurrency is not None else client.config.detail_concurrency
        )
        self._snapshot = FleetSnapshot()
        self._state = SyncState.IDLE
        self._error: str | None = None
        self._selected: str | None = None
        self._running = False

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def error(self) -> str | None:
        """User-facing message of the last failed pass."""
        return self._error

    @property
    def is_syncing(self) -> bool:
        return self._running

    @property
    def snapshot(self) -> FleetSnapshot:
        return self._snapshot

    @property
    def vehicles(self) -> tuple[VehicleRecord, ...]:
        return self._snapshot.vehicles

    @property
    def geofences(self) -> tuple[Geofence, ...]:
        return self._snapshot.geofences

    @property
    def logs(self) -> tuple[AuditLogEntry, ...]:
        return self._client.audit_log.entries

    @property
    def selected(self) -> VehicleRecord | None:
        if self._selected is None:
            return None
        return self._snapshot.vehicle(self._selected)

    def select(self, uuid: str | None) -> VehicleRecord | None:
        """Select the vehicle with *uuid* (``None`` clears the selection).

        Raises
        ------
        KeyError
            If no vehicle in the current snapshot has *uuid*.
        """
        if uuid is None:
            self._selected = None
            return None
        record = self._snapshot.vehicle(uuid)
        if record is None:
            raise KeyError(uuid)
        self._selected = uuid
        return record

    # ------------------------------------------------------------------
    # Sync pass
    # ------------------------------------------------------------------

    async def sync(self, credentials: Credentials | None = None, *, is_refresh: bool = False) -> FleetSnapshot:
        """Run one sync pass and publish its snapshot.

        A fresh pass clears vehicles, geofences, selection, logs and token
        first.  A refresh pass keeps the previous snapshot visible and
        reuses the current token until the new snapshot replaces it.

        Raises
        ------
        RavenStateError
            If a pass is already running or no credentials are available.
        RavenSyncError
            If the pass failed.  The session has been reset and the stored
            credentials removed; ``str(exc)`` is the user-facing message.
        """
        if self._running:
            raise RavenStateError("A sync pass is already running")
        if credentials is None:
            credentials = self._store.get(CREDENTIALS_STORAGE_KEY)
            if credentials is None:
                raise RavenStateError("No credentials supplied or stored")
        else:
            self._store.set(CREDENTIALS_STORAGE_KEY, credentials)

        self._running = True
        self._error = None
        try:
            if not is_refresh:
                self._clear_session()
            snapshot = await self._run_pass(credentials, is_refresh=is_refresh)
        except Exception as exc:
            message = self._fail(exc)
            raise RavenSyncError(message) from exc
        finally:
            self._running = False

        self._snapshot = snapshot
        if self._selected is not None and snapshot.vehicle(self._selected) is None:
            self._selected = None
        self._state = SyncState.COMPLETE
        _logger.info("Sync complete: %d vehicles, %d geofences", len(snapshot.vehicles), len(snapshot.geofences))
        return snapshot

    async def _run_pass(self, credentials: Credentials, *, is_refresh: bool) -> FleetSnapshot:
        tokens = self._client.tokens

        self._state = SyncState.TOKEN_ACQUIRING
        reuse_token = is_refresh and tokens.is_authenticated and tokens.credentials == credentials
        if not reuse_token:
            if tokens.state not in (TokenState.UNAUTHENTICATED, TokenState.INVALID):
                tokens.reset()
            await self._client.login(credentials)

        self._state = SyncState.LIST_FETCHING
        # Both calls settle before the first failure is raised, so no
        # exchange is still running once the session is reset.
        summaries, geofences = await asyncio.gather(
            self._client.get_ravens(),
            self._client.get_geofences(),
            return_exceptions=True,
        )
        if isinstance(summaries, BaseException):
            raise summaries
        if isinstance(geofences, BaseException):
            raise geofences

        if not summaries:
            return FleetSnapshot(geofences=tuple(geofences))

        self._state = SyncState.DETAIL_ENRICHING
        records = await self._limiter.run(summaries, self._enrich)
        return FleetSnapshot(vehicles=tuple(records), geofences=tuple(geofences))

    async def _enrich(self, summary: VehicleSummary) -> VehicleRecord:
        details = await self._client.get_raven_details(summary.uuid)
        vin = details.vehicle_vin or summary.vehicle_vin
        vehicle_info = None
        if vin and self._vin_decoder is not None:
            vehicle_info = await self._vin_decoder(vin)
        return VehicleRecord.merge(summary, details, vehicle_info)

    # ------------------------------------------------------------------
    # Session capability and reset
    # ------------------------------------------------------------------

    def api_context(self) -> ApiContext:
        """Return the capability object for the current session.

        Raises
        ------
        RavenStateError
            If there is no authenticated session.
        """
        snapshot = self._client.tokens.snapshot()
        return ApiContext(
            api_url=self._client.api_url,
            token=snapshot.token,
            add_log_entry=self._client.audit_log.append,
            refresh_token=self.refresh_token,
        )

    async def refresh_token(self) -> str:
        """Refresh the session token; a failure resets the whole session."""
        try:
            return await self._client.tokens.refresh()
        except RavenSessionInvalidError as exc:
            self._fail(exc)
            raise

    def reset(self) -> None:
        """Discard credentials and all session state (user-initiated)."""
        self._store.remove(CREDENTIALS_STORAGE_KEY)
        self._clear_session()
        self._error = None
        self._state = SyncState.IDLE

    def _clear_session(self) -> None:
        self._client.logout()
        self._snapshot = FleetSnapshot()
        self._selected = None
        self._client.audit_log.clear()

    def _fail(self, exc: BaseException) -> str:
        message = describe_error(exc)
        _logger.error("Sync failed: %s", message)
        self._store.remove(CREDENTIALS_STORAGE_KEY)
        self._clear_session()
        self._state = SyncState.ERRORED
        self._error = message
        return message
