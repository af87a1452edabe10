"""Fleet snapshot published by a sync pass."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from ravensync.models.geofence import Geofence
from ravensync.models.vehicle import VehicleRecord


class FleetSnapshot(BaseModel):
    """Vehicles and geofences from one completed sync pass.

    Replaced wholesale, never patched.
    """

    model_config = ConfigDict(frozen=True)

    vehicles: tuple[VehicleRecord, ...] = ()
    geofences: tuple[Geofence, ...] = ()

    def vehicle(self, uuid: str) -> VehicleRecord | None:
        """Return the vehicle with *uuid*, if any."""
        for record in self.vehicles:
            if record.uuid == uuid:
                return record
        return None
