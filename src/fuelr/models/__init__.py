"""Data models for fuelr."""

from fuelr.models.snapshot import CacheSnapshot, parse_epoch_timestamp
from fuelr.models.station import FuelKind, FuelPrices, RankedStation, SortMode
from fuelr.models.token import AccessToken

__all__ = [
    "AccessToken",
    "CacheSnapshot",
    "FuelKind",
    "FuelPrices",
    "RankedStation",
    "SortMode",
    "parse_epoch_timestamp",
]
