"""VIN decode through the NHTSA vPIC service.

Endpoint:
  - GET {vin_decode_url}/{vin}?format=json

The lookup is best-effort: any failure yields ``None`` rather than an
exception, so a bad VIN never aborts a sync pass.
"""

from __future__ import annotations

import logging
from typing import Any

from ravensync._constants import UNINITIALIZED_VIN, VIN_DECODE_URL, VIN_LENGTH
from ravensync._transport import Transport
from ravensync.exceptions import RavenError, describe_error
from ravensync.models.vehicle import VehicleInfo

_logger = logging.getLogger(__name__)


def parse_vin_decode(payload: Any) -> VehicleInfo | None:
    """Pick Make, Model and Model Year out of a vPIC ``Results`` list."""
    results = payload.get("Results") if isinstance(payload, dict) else None
    if not isinstance(results, list) or not results:
        return None

    values: dict[str, str] = {}
    for row in results:
        if not isinstance(row, dict):
            continue
        variable, value = row.get("Variable"), row.get("Value")
        if isinstance(variable, str) and value and variable not in values:
            values[variable] = str(value)

    make, model, year = values.get("Make"), values.get("Model"), values.get("Model Year")
    if not make or not model or not year:
        return None
    return VehicleInfo(make=make, model=model, year=year)


async def decode_vin(transport: Transport, vin: str | None, *, base_url: str = VIN_DECODE_URL) -> VehicleInfo | None:
    """Decode *vin*, or return ``None`` when it cannot be decoded.

    Only the first 17 characters are sent; some ravens report padded VINs.
    """
    if not vin or vin == UNINITIALIZED_VIN:
        return None
    vin17 = vin[:VIN_LENGTH]
    try:
        payload = await transport.request(
            "GET",
            f"{base_url.rstrip('/')}/{vin17}",
            params={"format": "json"},
        )
    except RavenError as exc:
        _logger.warning("VIN decode failed for %s (used %s): %s", vin, vin17, describe_error(exc))
        return None
    info = parse_vin_decode(payload)
    if info is None:
        _logger.debug("VIN %s did not decode to make/model/year", vin17)
    return info
