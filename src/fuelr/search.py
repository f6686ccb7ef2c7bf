"""Nearby-station ranking over a cached snapshot."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from fuelr.geo import LatLng, haversine_km
from fuelr.ingestion.extract import DEFAULT_FIELD_TABLES, FieldTables, extract_fuel_prices, station_lat_lng
from fuelr.ingestion.normalize import safe_str
from fuelr.models.station import FuelKind, RankedStation, SortMode

MAX_RESULTS = 50


def resolve_sort_mode(sort: str | None = None, *, cheapest: bool = False, nearest: bool = False) -> SortMode:
    """Pick a :class:`SortMode` from an explicit name or a pair of flags.

    An unknown or missing name falls back to the flags, and to
    :attr:`SortMode.BOTH` when neither flag is set.
    """
    if sort:
        try:
            return SortMode(sort.strip().lower())
        except ValueError:
            pass
    if cheapest and not nearest:
        return SortMode.CHEAPEST
    if nearest and not cheapest:
        return SortMode.NEAREST
    return SortMode.BOTH


def _is_closed(station: Mapping[str, Any]) -> bool:
    return bool(station.get("permanent_closure")) or bool(station.get("temporary_closure"))


def rank_station(
    station: Mapping[str, Any],
    origin: LatLng,
    fuel: FuelKind,
    tables: FieldTables = DEFAULT_FIELD_TABLES,
) -> RankedStation | None:
    """Position one station relative to *origin*; ``None`` without coordinates."""
    coords = station_lat_lng(station, tables)
    if coords is None:
        return None
    prices = extract_fuel_prices(station.get("fuel_prices"), tables)
    trading_name = safe_str(station.get("trading_name"))
    return RankedStation(
        node_id=str(station["node_id"]),
        brand_name=safe_str(station.get("brand_name")) or trading_name,
        trading_name=trading_name,
        lat=coords.lat,
        lng=coords.lng,
        distance_km=haversine_km(origin, coords),
        prices=prices,
        price_selected=prices.for_kind(fuel),
    )


def _price_key(station: RankedStation) -> float:
    return station.price_selected if station.price_selected is not None else math.inf


def find_stations(
    stations: Iterable[Mapping[str, Any]],
    origin: LatLng,
    *,
    fuel: FuelKind = FuelKind.PETROL,
    sort: SortMode = SortMode.BOTH,
    limit: int | None = MAX_RESULTS,
    max_distance_km: float | None = None,
    tables: FieldTables = DEFAULT_FIELD_TABLES,
) -> list[RankedStation]:
    """Rank open stations by price, distance, or price then distance.

    Stations that are temporarily or permanently closed, or whose
    location cannot be resolved, are left out. Stations without a price
    for *fuel* sort after every priced one.
    """
    ranked: list[RankedStation] = []
    for station in stations:
        if _is_closed(station):
            continue
        candidate = rank_station(station, origin, fuel, tables)
        if candidate is None:
            continue
        if max_distance_km is not None and candidate.distance_km > max_distance_km:
            continue
        ranked.append(candidate)

    if sort is SortMode.CHEAPEST:
        ranked.sort(key=_price_key)
    elif sort is SortMode.NEAREST:
        ranked.sort(key=lambda s: s.distance_km)
    else:
        ranked.sort(key=lambda s: (_price_key(s), s.distance_km))

    return ranked if limit is None else ranked[:limit]
