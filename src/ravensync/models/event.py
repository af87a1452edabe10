"""Raven event model."""

from __future__ import annotations

from pydantic import Field

from ravensync.models._base import RavenBaseModel, RavenTimestamp


class RavenEvent(RavenBaseModel):
    """A device event (ignition, harsh braking, refuel, ...).

    The full API payload stays available in ``raw``.
    """

    event_type: str = ""
    event_timestamp: RavenTimestamp = None
    road_media_ids: list[str] | None = None
    cabin_media_ids: list[str] | None = None
    latitude: float | None = None
    longitude: float | None = None
    media: list[dict] = Field(default_factory=list, repr=False)
