"""Geofence endpoints.

Endpoints:
  - GET /geofences
  - DELETE /geofences/{uuid}
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ravensync._api._common import authed_request, results_list
from ravensync._constants import GEOFENCES_ENDPOINT
from ravensync._redact import redact_for_log
from ravensync._transport import Transport
from ravensync.models.geofence import Geofence, GeofenceShape, ShapeData

if TYPE_CHECKING:
    from ravensync.token import TokenManager

_logger = logging.getLogger(__name__)


def _swap(point: Any) -> tuple[float, float]:
    """GeoJSON ``[lon, lat]`` → ``(lat, lon)``."""
    return (float(point[1]), float(point[0]))


def _parse_shape(geojson: dict[str, Any]) -> tuple[GeofenceShape, ShapeData] | None:
    geometry = geojson.get("geometry") or {}
    properties = geojson.get("properties") or {}
    coordinates = geometry.get("coordinates")

    if geometry.get("type") == "Point" and isinstance(coordinates, list) and len(coordinates) == 2:
        return GeofenceShape.CIRCLE, ShapeData(center=_swap(coordinates), radius=properties.get("radius"))
    if geometry.get("type") == "Polygon" and isinstance(coordinates, list):
        rings = [[_swap(point) for point in ring] for ring in coordinates]
        return GeofenceShape.POLYGON, ShapeData(coordinates=rings)
    return None


def parse_geofence(raw: dict[str, Any]) -> Geofence | None:
    """Parse one geofence, or return ``None`` when its shape is unusable.

    ``geojson`` arrives as a JSON string from the list endpoint and as an
    object from create/update replies; both are accepted.
    """
    try:
        geojson = raw.get("geojson")
        if isinstance(geojson, str):
            geojson = json.loads(geojson or "{}")
        shape = _parse_shape(geojson if isinstance(geojson, dict) else {})
        if shape is None:
            _logger.warning("Could not determine shape type for geofence: %s", redact_for_log(raw))
            return None
        shape_type, shape_data = shape
        return Geofence.model_validate(
            {
                "uuid": raw.get("geofence_id") or raw.get("uuid"),
                "name": raw.get("name"),
                "description": raw.get("description"),
                "start": raw.get("start"),
                "end": raw.get("end"),
                "notification": raw.get("notification"),
                "shape_type": shape_type,
                "shape_data": shape_data,
                "raw": raw,
            }
        )
    except (AttributeError, ValueError, TypeError, IndexError, ValidationError) as exc:
        _logger.warning("Failed to parse geofence %s: %s", redact_for_log(raw), exc)
        return None


def parse_geofence_list(payload: Any) -> list[Geofence]:
    """Parse the ``/geofences`` reply, dropping unparseable entries."""
    geofences: list[Geofence] = []
    for item in results_list(payload, endpoint=GEOFENCES_ENDPOINT):
        if not isinstance(item, dict):
            _logger.warning("Skipping non-object geofence entry: %r", item)
            continue
        geofence = parse_geofence(item)
        if geofence is not None:
            geofences.append(geofence)
    return geofences


async def fetch_geofences(api_url: str, tokens: TokenManager, transport: Transport) -> list[Geofence]:
    """Fetch every geofence on the account."""
    payload = await authed_request("GET", GEOFENCES_ENDPOINT, api_url=api_url, tokens=tokens, transport=transport)
    geofences = parse_geofence_list(payload)
    _logger.debug("Fetched %d geofences", len(geofences))
    return geofences


async def delete_geofence(api_url: str, tokens: TokenManager, transport: Transport, geofence_uuid: str) -> None:
    """Delete one geofence.  Any 2xx reply, with or without body, is success."""
    await authed_request(
        "DELETE",
        f"{GEOFENCES_ENDPOINT}/{geofence_uuid}",
        api_url=api_url,
        tokens=tokens,
        transport=transport,
    )
