"""Raven list and detail endpoints.

Endpoints:
  - GET /ravens
  - GET /ravens/{uuid}
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ravensync._api._common import authed_request, require_object, results_list
from ravensync._constants import RAVENS_ENDPOINT
from ravensync._transport import Transport
from ravensync.exceptions import RavenValidationError
from ravensync.models.vehicle import LastKnownLocation, ObdSnapshot, VehicleDetails, VehicleSummary

if TYPE_CHECKING:
    from ravensync.token import TokenManager

_logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_raven_list(payload: Any) -> list[VehicleSummary]:
    """Parse the ``/ravens`` reply into summaries.

    Raises
    ------
    RavenValidationError
        If an item is not an object, has no ``uuid``, or repeats a ``uuid``.
    """
    summaries: list[VehicleSummary] = []
    seen: set[str] = set()
    for index, item in enumerate(results_list(payload, endpoint=RAVENS_ENDPOINT)):
        if not isinstance(item, dict):
            raise RavenValidationError(f"Raven at index {index} is not an object", endpoint=RAVENS_ENDPOINT)
        try:
            summary = VehicleSummary.model_validate(item)
        except ValidationError as exc:
            raise RavenValidationError(
                f"Raven at index {index} is invalid: {exc.errors()[0]['msg']} ({exc.errors()[0]['loc']})",
                endpoint=RAVENS_ENDPOINT,
            ) from exc
        if summary.uuid in seen:
            raise RavenValidationError(f"Duplicate raven uuid {summary.uuid}", endpoint=RAVENS_ENDPOINT)
        seen.add(summary.uuid)
        summaries.append(summary)
    return summaries


def _parse_location(raw: Any) -> LastKnownLocation | None:
    if not isinstance(raw, dict) or not _is_number(raw.get("timestamp")):
        return None
    if not _is_number(raw.get("latitude")) or not _is_number(raw.get("longitude")):
        return None
    return LastKnownLocation(
        latitude=raw["latitude"],
        longitude=raw["longitude"],
        timestamp=raw["timestamp"],
    )


def _parse_obd(vehicle: dict[str, Any]) -> ObdSnapshot | None:
    """Build the OBD snapshot from supported odometer/fuel readings.

    The snapshot is stamped with the newest reading's timestamp and is
    dropped when no reading carries one.
    """
    fields: dict[str, float] = {}
    newest = 0.0
    for source_key, field_name in (("odometer", "odometer_km"), ("fuelLevel", "fuel_level_percentage")):
        reading = vehicle.get(source_key)
        if not isinstance(reading, dict) or not reading.get("supported") or not _is_number(reading.get("value")):
            continue
        fields[field_name] = reading["value"]
        if _is_number(reading.get("timestamp")):
            newest = max(newest, float(reading["timestamp"]))

    if not fields or newest <= 0:
        return None
    return ObdSnapshot(timestamp=newest, **fields)


def parse_raven_details(payload: Any, *, endpoint: str) -> VehicleDetails:
    """Parse a ``/ravens/{uuid}`` reply.

    Only fields present in the reply are set on the returned model.
    """
    data = require_object(payload, endpoint=endpoint)
    fields: dict[str, Any] = {
        "uuid": data.get("ravenUuid"),
        "serial_number": data.get("serialNo"),
        "online": data.get("online"),
        "engine_on": data.get("engineOn"),
        "unplugged": data.get("unplugged"),
    }

    location = _parse_location(data.get("lastLocation"))
    if location is not None:
        fields["last_known_location"] = location

    vehicle = data.get("vehicle")
    if isinstance(vehicle, dict):
        fields["vehicle_vin"] = vehicle.get("vin")
        obd = _parse_obd(vehicle)
        if obd is not None:
            fields["last_known_obd_snapshot"] = obd

    try:
        return VehicleDetails.model_validate({**fields, "raw": data})
    except ValidationError as exc:
        raise RavenValidationError(f"{endpoint} details are invalid: {exc.errors()[0]['msg']}", endpoint=endpoint) from exc


async def fetch_raven_summaries(api_url: str, tokens: TokenManager, transport: Transport) -> list[VehicleSummary]:
    """Fetch every raven visible to the API key."""
    payload = await authed_request("GET", RAVENS_ENDPOINT, api_url=api_url, tokens=tokens, transport=transport)
    summaries = parse_raven_list(payload)
    _logger.debug("Fetched %d raven summaries", len(summaries))
    return summaries


async def fetch_raven_details(api_url: str, tokens: TokenManager, transport: Transport, uuid: str) -> VehicleDetails:
    """Fetch the detail record of one raven."""
    endpoint = f"{RAVENS_ENDPOINT}/{uuid}"
    payload = await authed_request("GET", endpoint, api_url=api_url, tokens=tokens, transport=transport)
    return parse_raven_details(payload, endpoint=endpoint)
