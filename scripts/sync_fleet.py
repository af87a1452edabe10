#!/usr/bin/env python3
"""Run one fleet sync pass against the Raven Data API.

Usage
-----
Set environment variables and run::

    export RAVEN_API_URL="https://api.example.com/v1"
    export RAVEN_API_KEY="..."
    export RAVEN_API_SECRET="..."
    python scripts/sync_fleet.py

Options::

    --json               Output the snapshot as machine-readable JSON
    --log                Also print the request/response audit log
    --concurrency N      Detail fetches in flight (default: RAVEN_DETAIL_CONCURRENCY or 5)
    --no-vin             Skip VIN decoding
    --verbose, -v        Debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from ravensync import FleetSync, RavenClient, RavenConfig, RavenError  # noqa: E402
from ravensync.models import AuditLogEntry, FleetSnapshot  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _print_snapshot(snapshot: FleetSnapshot) -> None:
    print(_section(f"Vehicles ({len(snapshot.vehicles)})"))
    for record in snapshot.vehicles:
        state = "online" if record.online else "offline"
        print(f"  {record.name}  [{record.uuid}]  {state}")
        if record.vehicle_info is not None:
            info = record.vehicle_info
            print(f"    {info.year} {info.make} {info.model}  VIN {record.vehicle_vin}")
        if record.last_known_location is not None:
            loc = record.last_known_location
            seen = loc.timestamp.isoformat() if loc.timestamp else "unknown time"
            print(f"    at {loc.latitude:.5f},{loc.longitude:.5f}  ({seen})")
        if record.last_known_obd_snapshot is not None:
            obd = record.last_known_obd_snapshot
            print(f"    odometer={obd.odometer_km} km  fuel={obd.fuel_level_percentage}%")

    print(_section(f"Geofences ({len(snapshot.geofences)})"))
    for geofence in snapshot.geofences:
        print(f"  {geofence.name}  [{geofence.uuid}]  {geofence.shape_type}")


def _print_log(entries: tuple[AuditLogEntry, ...]) -> None:
    print(_section(f"Audit log ({len(entries)})"))
    for entry in entries:
        response = entry.response
        print(f"  #{entry.id} {entry.timestamp.isoformat()} {entry.request.method} {entry.endpoint} -> {response.status} {response.status_text}")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one Raven fleet sync pass")
    parser.add_argument("--json", action="store_true", help="Output as machine-readable JSON")
    parser.add_argument("--log", action="store_true", help="Also print the audit log")
    parser.add_argument("--concurrency", type=int, help="Detail fetches in flight")
    parser.add_argument("--no-vin", action="store_true", help="Skip VIN decoding")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.concurrency is not None:
        overrides["detail_concurrency"] = args.concurrency
    if args.no_vin:
        overrides["vin_decode_enabled"] = False

    try:
        config = RavenConfig.from_env(**overrides)
        credentials = config.credentials()
    except RavenError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    async with RavenClient(config) as client:
        fleet = FleetSync(client)
        try:
            snapshot = await fleet.sync(credentials)
        except RavenError as exc:
            print(f"Sync failed: {exc}", file=sys.stderr)
            return 1

        if args.json:
            output: dict[str, Any] = snapshot.model_dump(mode="json")
            if args.log:
                output["log"] = [entry.model_dump(mode="json") for entry in fleet.logs]
            print(json.dumps(output, indent=2, ensure_ascii=False))
        else:
            _print_snapshot(snapshot)
            if args.log:
                _print_log(fleet.logs)
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
