from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import pytest

from fuelr._constants import FUEL_PRICES_ENDPOINT, STATIONS_ENDPOINT, TOKEN_ENDPOINT
from fuelr._transport import HttpResponse
from fuelr.client import FuelFinderClient
from fuelr.config import FuelFinderConfig
from fuelr.exceptions import FuelFinderError
from fuelr.service import StationCacheService

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class _ApiTransport:
    """One page per endpoint, then an empty page."""

    def __init__(self, pages: dict[str, list[dict[str, Any]]]) -> None:
        self._pages = pages
        self.calls: list[tuple[str, str, dict[str, str]]] = []

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> HttpResponse:
        self.calls.append((method, endpoint, dict(params or {})))
        if endpoint == TOKEN_ENDPOINT:
            return HttpResponse(200, json.dumps({"access_token": "tok", "expires_in": 3600}), endpoint)
        assert headers is not None and headers["authorization"] == "Bearer tok"
        batch = int((params or {})["batch-number"])
        data = self._pages.get(endpoint, []) if batch == 1 else []
        return HttpResponse(200, json.dumps(data), endpoint)


def _client(transport: _ApiTransport) -> FuelFinderClient:
    config = FuelFinderConfig(client_id="id", client_secret="secret")
    return FuelFinderClient(config, transport=transport, clock=lambda: _NOW)


@pytest.mark.asyncio
async def test_fetch_stations_and_prices_use_their_endpoints() -> None:
    transport = _ApiTransport(
        {
            STATIONS_ENDPOINT: [{"node_id": "A", "trading_name": "Alpha"}],
            FUEL_PRICES_ENDPOINT: [{"node_id": "A", "fuel_prices": [{"fuel_type": "E10", "price": 139.9}]}],
        }
    )

    async with _client(transport) as client:
        token = await client.ensure_access_token()
        stations = await client.fetch_stations(token)
        prices = await client.fetch_fuel_prices(token)

    assert token == "tok"
    assert stations == [{"node_id": "A", "trading_name": "Alpha"}]
    assert prices[0]["fuel_prices"][0]["price"] == 139.9
    endpoints = [endpoint for _method, endpoint, _params in transport.calls]
    assert endpoints.count(TOKEN_ENDPOINT) == 1
    assert endpoints.count(STATIONS_ENDPOINT) == 2
    assert endpoints.count(FUEL_PRICES_ENDPOINT) == 2


@pytest.mark.asyncio
async def test_client_feeds_cache_service() -> None:
    transport = _ApiTransport(
        {
            STATIONS_ENDPOINT: [{"node_id": "A"}],
            FUEL_PRICES_ENDPOINT: [{"node_id": "A", "fuel_prices": [{"fuel_type": "B7", "price": 150.0}]}],
        }
    )

    async with _client(transport) as client:
        service = StationCacheService(client, clock=lambda: _NOW)
        snapshot = await service.get_stations()

    assert snapshot.stations == ({"node_id": "A", "fuel_prices": [{"fuel_type": "B7", "price": 150.0}]},)
    assert snapshot.last_sync_at == _NOW


@pytest.mark.asyncio
async def test_uninitialized_client_raises() -> None:
    client = FuelFinderClient(FuelFinderConfig(client_id="id", client_secret="secret"))

    with pytest.raises(FuelFinderError, match="not initialized"):
        await client.fetch_stations()
