"""Field extraction from loosely typed station payloads.

The Fuel Finder API has shipped several encodings for coordinates, fuel
types and prices. Instead of hard-coded conditionals every lookup walks
an ordered tuple of candidate field names and takes the first usable
value. The tables live in :class:`FieldTables`; pass a customised
instance to follow upstream schema drift without touching the code.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from typing import Any

from fuelr.geo import LatLng
from fuelr.ingestion.normalize import first_number, first_present, safe_float
from fuelr.models.station import FuelKind, FuelPrices


@dataclasses.dataclass(frozen=True)
class FieldTables:
    """Candidate field names, highest priority first."""

    latitude: tuple[str, ...] = ("lat", "latitude", "lat_deg", "lat_deg_wgs84", "y")
    longitude: tuple[str, ...] = ("lng", "longitude", "lon", "long", "lng_deg", "lng_deg_wgs84", "x")
    #: GeoJSON-style ``[lng, lat]`` arrays, consulted when the scalar fields miss.
    coordinate_pairs: tuple[str, ...] = ("coordinates",)
    fuel_type: tuple[str, ...] = ("fuel_type", "fuel_type_code", "fuelType", "code")
    price: tuple[str, ...] = ("price", "price_per_litre", "price_per_liter", "unit_price", "cost")
    #: Substrings (or exact single-letter codes) that identify a fuel kind.
    diesel_markers: tuple[str, ...] = ("diesel", "b7")
    diesel_codes: tuple[str, ...] = ("d",)
    petrol_markers: tuple[str, ...] = ("unleaded", "petrol", "e10", "e5")
    petrol_codes: tuple[str, ...] = ("u",)


DEFAULT_FIELD_TABLES = FieldTables()


def station_lat_lng(station: Mapping[str, Any], tables: FieldTables = DEFAULT_FIELD_TABLES) -> LatLng | None:
    """Resolve a station's coordinates, or ``None`` when none are usable."""
    location = station.get("location")
    if not isinstance(location, Mapping):
        return None

    lat = first_number(location, tables.latitude)
    lng = first_number(location, tables.longitude)
    if lat is not None and lng is not None:
        return LatLng(lat=lat, lng=lng)

    for name in tables.coordinate_pairs:
        coords = location.get(name)
        if isinstance(coords, (list, tuple)) and len(coords) >= 2:
            pair_lng = safe_float(coords[0])
            pair_lat = safe_float(coords[1])
            if pair_lat is not None and pair_lng is not None:
                return LatLng(lat=pair_lat, lng=pair_lng)
    return None


def classify_fuel(raw: Any, tables: FieldTables = DEFAULT_FIELD_TABLES) -> FuelKind | None:
    """Map an upstream fuel type label (``"E10"``, ``"B7_STANDARD"``...) to a :class:`FuelKind`."""
    value = str(raw if raw is not None else "").strip().lower()
    if not value:
        return None
    if value in tables.diesel_codes or any(marker in value for marker in tables.diesel_markers):
        return FuelKind.DIESEL
    if value in tables.petrol_codes or any(marker in value for marker in tables.petrol_markers):
        return FuelKind.PETROL
    return None


def extract_fuel_prices(
    entries: Iterable[Any] | None,
    tables: FieldTables = DEFAULT_FIELD_TABLES,
) -> FuelPrices:
    """Collapse a station's price entries into one petrol and one diesel price.

    Later entries of the same kind win.
    """
    found: dict[FuelKind, float] = {}
    for entry in entries or ():
        if not isinstance(entry, Mapping):
            continue
        price = first_number(entry, tables.price)
        if price is None:
            continue
        kind = classify_fuel(first_present(entry, tables.fuel_type), tables)
        if kind is not None:
            found[kind] = price
    return FuelPrices(petrol=found.get(FuelKind.PETROL), diesel=found.get(FuelKind.DIESEL))
