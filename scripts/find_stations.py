#!/usr/bin/env python3
"""Find the cheapest / nearest fuel stations around a point.

Credentials come from the environment (see ``FuelFinderConfig.from_env``):
- FUELFINDER_CLIENT_ID
- FUELFINDER_CLIENT_SECRET
- FUELFINDER_CACHE_PATH (optional, snapshot file)

Examples::

    python scripts/find_stations.py --lat 51.5072 --lng -0.1276
    python scripts/find_stations.py --lat 53.8008 --lng -1.5491 --fuel diesel --sort nearest --radius-km 8
    python scripts/find_stations.py --refresh --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from fuelr import (  # noqa: E402
    FuelFinderClient,
    FuelFinderConfig,
    FuelFinderError,
    FuelKind,
    LatLng,
    SnapshotStore,
    StationCacheService,
    find_stations,
    resolve_sort_mode,
)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--lat", type=float, help="Search origin latitude")
    parser.add_argument("--lng", "--lon", dest="lng", type=float, help="Search origin longitude")
    parser.add_argument("--fuel", choices=[k.value for k in FuelKind], default=FuelKind.PETROL.value)
    parser.add_argument("--sort", choices=["cheapest", "nearest", "both"], default=None)
    parser.add_argument("--radius-km", type=float, default=None, help="Ignore stations further away")
    parser.add_argument("--limit", type=int, default=10)
    parser.add_argument("--refresh", action="store_true", help="Force a refresh before searching")
    parser.add_argument("--cache", type=Path, default=None, help="Snapshot file (overrides FUELFINDER_CACHE_PATH)")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging to stderr")
    args = parser.parse_args(argv)
    if not args.refresh and (args.lat is None or args.lng is None):
        parser.error("--lat and --lng are required unless --refresh is given")
    return args


async def _run(args: argparse.Namespace) -> int:
    overrides = {"cache_path": args.cache} if args.cache is not None else {}
    config = FuelFinderConfig.from_env(**overrides)

    async with FuelFinderClient(config) as client:
        service = StationCacheService(client, SnapshotStore(config.cache_path), ttl=config.cache_ttl)
        if args.refresh:
            snapshot = await service.refresh_stations()
            print(f"Refreshed {len(snapshot.stations)} stations at {snapshot.updated_at.isoformat()}", file=sys.stderr)
        else:
            snapshot = await service.get_stations()

        if args.lat is None or args.lng is None:
            return 0

        results = find_stations(
            snapshot.stations,
            LatLng(args.lat, args.lng),
            fuel=FuelKind(args.fuel),
            sort=resolve_sort_mode(args.sort),
            limit=args.limit,
            max_distance_km=args.radius_km,
        )

        if args.json:
            print(
                json.dumps(
                    {
                        "updatedAt": snapshot.updated_at.isoformat(),
                        "results": [r.model_dump(mode="json", by_alias=True) for r in results],
                    },
                    indent=2,
                )
            )
        else:
            for r in results:
                price = f"{r.price_selected:.1f}p" if r.price_selected is not None else "n/a"
                name = r.brand_name or r.trading_name or r.node_id
                print(f"{price:>8}  {r.distance_km:6.2f} km  {name}")

        # Let a stale-while-revalidate refresh finish before the session closes.
        if service.refresh_in_flight:
            try:
                await service.refresh_stations()
            except FuelFinderError:
                pass  # already logged by the service
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except FuelFinderError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
