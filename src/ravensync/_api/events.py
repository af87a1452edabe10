"""Raven event history endpoint: GET /ravens/{uuid}/events."""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ravensync._api._common import authed_request, results_list
from ravensync._constants import RAVENS_ENDPOINT
from ravensync._transport import Transport
from ravensync.exceptions import RavenValidationError
from ravensync.models.event import RavenEvent

if TYPE_CHECKING:
    from ravensync.token import TokenManager


def _epoch_seconds(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return str(int(value.timestamp()))


def build_event_params(start: datetime | date | None = None, end: datetime | date | None = None) -> dict[str, str]:
    """Build the time-window query.

    *end* is stretched to the last millisecond of its day so the window
    includes that whole day.
    """
    params: dict[str, str] = {}
    if start is not None:
        if not isinstance(start, datetime):
            start = datetime.combine(start, time.min)
        params["start_timestamp"] = _epoch_seconds(start)
    if end is not None:
        end_day = end.date() if isinstance(end, datetime) else end
        end_of_day = datetime.combine(end_day, time(23, 59, 59, 999000), tzinfo=getattr(end, "tzinfo", None))
        params["end_timestamp"] = _epoch_seconds(end_of_day)
    return params


def _media_ids(media: Any, camera: str) -> list[str] | None:
    if not isinstance(media, list):
        return None
    ids = [str(m["mediaId"]) for m in media if isinstance(m, dict) and m.get("camera") == camera and m.get("mediaId")]
    return ids or None


def parse_event(raw: dict[str, Any], *, endpoint: str) -> RavenEvent:
    fields: dict[str, Any] = {
        "event_type": raw.get("type"),
        "event_timestamp": raw.get("timestamp"),
        "road_media_ids": _media_ids(raw.get("media"), "ROAD"),
        "cabin_media_ids": _media_ids(raw.get("media"), "CABIN"),
        "media": raw.get("media") if isinstance(raw.get("media"), list) else None,
        "raw": raw,
    }
    coordinates = raw.get("coordinates")
    if isinstance(coordinates, list) and len(coordinates) == 2:
        fields["longitude"], fields["latitude"] = coordinates
    try:
        return RavenEvent.model_validate(fields)
    except ValidationError as exc:
        raise RavenValidationError(f"{endpoint} returned an invalid event: {exc.errors()[0]['msg']}", endpoint=endpoint) from exc


async def fetch_raven_events(
    api_url: str,
    tokens: TokenManager,
    transport: Transport,
    uuid: str,
    *,
    start: datetime | date | None = None,
    end: datetime | date | None = None,
) -> list[RavenEvent]:
    """Fetch events of one raven, optionally bounded to a date window."""
    endpoint = f"{RAVENS_ENDPOINT}/{uuid}/events"
    payload = await authed_request(
        "GET",
        endpoint,
        api_url=api_url,
        tokens=tokens,
        transport=transport,
        params=build_event_params(start, end) or None,
    )
    return [parse_event(item, endpoint=endpoint) for item in results_list(payload, endpoint=endpoint) if isinstance(item, dict)]
