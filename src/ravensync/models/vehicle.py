"""Vehicle (raven) models.

A :class:`VehicleRecord` is assembled once per sync pass from the
``/ravens`` summary, the ``/ravens/{uuid}`` details and the optional
VIN decode.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ravensync._constants import UNNAMED_VEHICLE
from ravensync.models._base import RavenBaseModel, RavenTimestamp


class VehicleInfo(BaseModel):
    """Make/model/year decoded from a VIN."""

    model_config = ConfigDict(frozen=True)

    make: str
    model: str
    year: str


class LastKnownLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    timestamp: RavenTimestamp = None


class ObdSnapshot(BaseModel):
    """Most recent OBD readings; ``timestamp`` is the newest reading's time."""

    model_config = ConfigDict(frozen=True)

    timestamp: RavenTimestamp = None
    odometer_km: float | None = None
    fuel_level_percentage: float | None = None


class VehicleSummary(RavenBaseModel):
    """Entry of the ``/ravens`` list.

    Identity is ``uuid``, unique within one sync pass.
    """

    uuid: str = Field(min_length=1)
    name: str = Field(default=UNNAMED_VEHICLE, validation_alias=AliasChoices("name", "car_persona"))
    imei: str | None = None
    serial_number: str | None = Field(
        default=None,
        validation_alias=AliasChoices("serial_number", "enclosure_serial_no"),
    )
    iccid: str | None = None
    thing_name: str | None = None
    vehicle_vin: str | None = Field(default=None, validation_alias=AliasChoices("vehicle_vin", "vin"))
    vehicle_id: str | None = None

    @field_validator("imei", "iccid", "vehicle_id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        # Numeric identifiers show up on some firmware.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class VehicleDetails(RavenBaseModel):
    """Enrichment fields from ``/ravens/{uuid}``.

    Only fields the API actually provided are set; see
    :meth:`VehicleRecord.merge`.
    """

    uuid: str | None = None
    serial_number: str | None = None
    online: bool | None = None
    engine_on: bool | None = None
    unplugged: bool | None = None
    vehicle_vin: str | None = None
    last_known_location: LastKnownLocation | None = None
    last_known_obd_snapshot: ObdSnapshot | None = None


class VehicleRecord(VehicleSummary):
    """Summary ⊕ details ⊕ optional VIN decode."""

    online: bool | None = None
    engine_on: bool | None = None
    unplugged: bool | None = None
    last_known_location: LastKnownLocation | None = None
    last_known_obd_snapshot: ObdSnapshot | None = None
    vehicle_info: VehicleInfo | None = None

    @classmethod
    def merge(
        cls,
        summary: VehicleSummary,
        details: VehicleDetails | None = None,
        vehicle_info: VehicleInfo | None = None,
    ) -> VehicleRecord:
        """Shallow-merge *details* over *summary*.

        Detail fields win on collision; fields the details payload did not
        carry keep the summary's value.
        """
        merged: dict[str, Any] = summary.model_dump(exclude_none=True)
        raw: dict[str, Any] = dict(summary.raw)
        if details is not None:
            merged.update(details.model_dump(exclude_none=True))
            raw.update(details.raw)
        if vehicle_info is not None:
            merged["vehicle_info"] = vehicle_info
        merged["raw"] = raw
        return cls.model_validate(merged)
