"""fuelr - Async client and station cache for the UK Fuel Finder API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fuelr")
except PackageNotFoundError:
    __version__ = "0+local"
from fuelr.auth import TokenManager
from fuelr.client import FuelFinderClient
from fuelr.config import FuelFinderConfig
from fuelr.exceptions import (
    FuelFinderApiError,
    FuelFinderAuthenticationError,
    FuelFinderConfigError,
    FuelFinderError,
    FuelFinderPersistenceError,
    FuelFinderTransportError,
)
from fuelr.geo import LatLng, haversine_km
from fuelr.models import AccessToken, CacheSnapshot, FuelKind, FuelPrices, RankedStation, SortMode
from fuelr.search import find_stations, resolve_sort_mode
from fuelr.service import CacheState, StationCacheService
from fuelr.state.store import SnapshotStore

__all__ = [
    "__version__",
    "AccessToken",
    "CacheSnapshot",
    "CacheState",
    "FuelFinderApiError",
    "FuelFinderAuthenticationError",
    "FuelFinderClient",
    "FuelFinderConfig",
    "FuelFinderConfigError",
    "FuelFinderError",
    "FuelFinderPersistenceError",
    "FuelFinderTransportError",
    "FuelKind",
    "FuelPrices",
    "LatLng",
    "RankedStation",
    "SnapshotStore",
    "SortMode",
    "StationCacheService",
    "TokenManager",
    "find_stations",
    "haversine_km",
    "resolve_sort_mode",
]
