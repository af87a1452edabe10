"""Geofence models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from ravensync.models._base import RavenBaseModel

LatLon = tuple[float, float]


class GeofenceShape(StrEnum):
    POLYGON = "POLYGON"
    CIRCLE = "CIRCLE"


class ShapeData(BaseModel):
    """Shape geometry in ``[lat, lon]`` order.

    ``coordinates`` is set for polygons (list of rings), ``center`` and
    ``radius`` (metres) for circles.
    """

    model_config = ConfigDict(frozen=True)

    coordinates: list[list[LatLon]] | None = None
    center: LatLon | None = None
    radius: float | None = None


class Geofence(RavenBaseModel):
    uuid: str = Field(min_length=1)
    name: str = ""
    description: str = ""
    shape_type: GeofenceShape
    shape_data: ShapeData
    start: str | None = None
    end: str | None = None
    notification: str = ""
    """Comma separated triggers, e.g. ``"ENTER,EXIT"``; empty for none."""
