"""Station search result models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FuelKind(StrEnum):
    PETROL = "petrol"
    DIESEL = "diesel"


class SortMode(StrEnum):
    CHEAPEST = "cheapest"
    NEAREST = "nearest"
    #: Cheapest first, distance breaks ties.
    BOTH = "both"


class FuelPrices(BaseModel):
    """Pump prices (pence per litre) grouped by :class:`FuelKind`."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    petrol: float | None = None
    diesel: float | None = None

    def for_kind(self, kind: FuelKind) -> float | None:
        return self.petrol if kind is FuelKind.PETROL else self.diesel


class RankedStation(BaseModel):
    """A station positioned relative to a search origin.

    Serializes with camelCase keys (``nodeId``, ``distanceKm``, ...).
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    node_id: str
    brand_name: str | None = None
    trading_name: str | None = None
    lat: float
    lng: float
    distance_km: float
    prices: FuelPrices = FuelPrices()
    price_selected: float | None = None
