"""Station/price merge.

This is the only component allowed to combine fetched batches with a
cached snapshot. It never mutates the records of the snapshot it reads
from: changed stations are rebuilt as new dicts, untouched ones are
shared as-is.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from fuelr.ingestion.normalize import node_id_of
from fuelr.models.snapshot import CacheSnapshot

_logger = logging.getLogger(__name__)

StationMap = dict[str, dict[str, Any]]


def build_price_lookup(prices: Iterable[Any]) -> dict[str, list[Any]]:
    """Index price records by ``node_id``.

    Two record shapes are accepted:

    * ``{"node_id": ..., "fuel_prices": [...]}`` replaces the list for
      that station (the latest record wins);
    * a flat entry ``{"node_id": ..., "fuel_type": ..., "price": ...}``
      is appended, without its ``node_id``, to that station's list.
    """
    lookup: dict[str, list[Any]] = {}
    skipped = 0
    for record in prices:
        node_id = node_id_of(record)
        if node_id is None:
            skipped += 1
            continue
        nested = record.get("fuel_prices")
        if isinstance(nested, list):
            lookup[node_id] = list(nested)
        elif "fuel_prices" not in record:
            entry = {key: value for key, value in record.items() if key != "node_id"}
            lookup.setdefault(node_id, []).append(entry)
    if skipped:
        _logger.debug("Ignored %d price records without node_id", skipped)
    return lookup


def _upsert(target: StationMap, node_id: str, station: Mapping[str, Any]) -> None:
    """Shallow-merge *station* over the record already held for *node_id*."""
    previous = target.get(node_id)
    merged = {**previous, **station} if previous is not None else dict(station)
    merged["node_id"] = node_id
    target[node_id] = merged


def merge_stations(
    existing: CacheSnapshot | None,
    stations: Iterable[Any],
    prices: Iterable[Any],
    incremental: bool,
) -> StationMap:
    """Reconcile fetched station and price batches with *existing*.

    Full mode (``incremental`` false or no *existing* snapshot): the
    result holds exactly the fetched stations, each with prices from the
    price batch, else its embedded ``fuel_prices``, else ``[]``.

    Incremental mode: fetched stations are shallow-merged over the prior
    records, then every station with an entry in the price batch gets
    that price list. Stations absent from both batches are carried over
    unchanged.
    """
    lookup = build_price_lookup(prices)

    if not incremental or existing is None:
        merged: StationMap = {}
        for station in stations:
            node_id = node_id_of(station)
            if node_id is None:
                _logger.debug("Ignored station record without node_id")
                continue
            _upsert(merged, node_id, station)
        for node_id, station in merged.items():
            if node_id in lookup:
                station["fuel_prices"] = lookup[node_id]
            elif station.get("fuel_prices") is None:
                station["fuel_prices"] = []
        return merged

    result: StationMap = existing.by_node_id()
    touched: set[str] = set()
    for station in stations:
        node_id = node_id_of(station)
        if node_id is None:
            _logger.debug("Ignored station record without node_id")
            continue
        _upsert(result, node_id, station)
        touched.add(node_id)

    for node_id, fuel_prices in lookup.items():
        station = result.get(node_id)
        if station is None:
            continue
        if node_id not in touched:
            # Still the prior snapshot's dict: copy before writing.
            station = dict(station)
            result[node_id] = station
        station["fuel_prices"] = fuel_prices

    _logger.debug(
        "Incremental merge: %d stations updated, %d price lists applied, %d total",
        len(touched),
        sum(1 for node_id in lookup if node_id in result),
        len(result),
    )
    return result
