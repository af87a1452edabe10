"""Data models for Raven API responses."""

from ravensync.models._base import RavenBaseModel, RavenTimestamp, parse_epoch_timestamp
from ravensync.models.audit import AuditLogEntry, AuditRequest, AuditResponse
from ravensync.models.credentials import Credentials
from ravensync.models.event import RavenEvent
from ravensync.models.fleet import FleetSnapshot
from ravensync.models.geofence import Geofence, GeofenceShape, ShapeData
from ravensync.models.token import TokenSnapshot
from ravensync.models.vehicle import (
    LastKnownLocation,
    ObdSnapshot,
    VehicleDetails,
    VehicleInfo,
    VehicleRecord,
    VehicleSummary,
)

__all__ = [
    "AuditLogEntry",
    "AuditRequest",
    "AuditResponse",
    "Credentials",
    "FleetSnapshot",
    "Geofence",
    "GeofenceShape",
    "LastKnownLocation",
    "ObdSnapshot",
    "RavenBaseModel",
    "RavenEvent",
    "RavenTimestamp",
    "ShapeData",
    "TokenSnapshot",
    "VehicleDetails",
    "VehicleInfo",
    "VehicleRecord",
    "VehicleSummary",
    "parse_epoch_timestamp",
]
