"""ravensync - Async client and sync orchestrator for the Raven fleet Data API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ravensync")
except PackageNotFoundError:
    __version__ = "0+local"
from ravensync._transport import HttpExchange
from ravensync.audit import AuditLog
from ravensync.client import RavenClient
from ravensync.config import RavenConfig
from ravensync.exceptions import (
    RavenAuthenticationError,
    RavenConfigError,
    RavenError,
    RavenHttpError,
    RavenNetworkError,
    RavenSessionInvalidError,
    RavenStateError,
    RavenSyncError,
    RavenTransportError,
    RavenUnauthorizedError,
    RavenValidationError,
    describe_error,
)
from ravensync.limiter import ConcurrencyLimiter, process_with_concurrency
from ravensync.models import (
    AuditLogEntry,
    Credentials,
    FleetSnapshot,
    Geofence,
    GeofenceShape,
    RavenEvent,
    TokenSnapshot,
    VehicleDetails,
    VehicleInfo,
    VehicleRecord,
    VehicleSummary,
)
from ravensync.storage import CredentialStore, MemoryCredentialStore
from ravensync.sync import ApiContext, FleetSync, SyncState
from ravensync.token import TokenManager, TokenState

__all__ = [
    "__version__",
    "ApiContext",
    "AuditLog",
    "AuditLogEntry",
    "ConcurrencyLimiter",
    "CredentialStore",
    "Credentials",
    "FleetSnapshot",
    "FleetSync",
    "Geofence",
    "GeofenceShape",
    "HttpExchange",
    "MemoryCredentialStore",
    "RavenAuthenticationError",
    "RavenClient",
    "RavenConfig",
    "RavenConfigError",
    "RavenError",
    "RavenEvent",
    "RavenHttpError",
    "RavenNetworkError",
    "RavenSessionInvalidError",
    "RavenStateError",
    "RavenSyncError",
    "RavenTransportError",
    "RavenUnauthorizedError",
    "RavenValidationError",
    "SyncState",
    "TokenManager",
    "TokenSnapshot",
    "TokenState",
    "VehicleDetails",
    "VehicleInfo",
    "VehicleRecord",
    "VehicleSummary",
    "describe_error",
    "process_with_concurrency",
]
