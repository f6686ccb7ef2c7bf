"""High-level async client for the Fuel Finder API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import aiohttp

from fuelr._api.batched import fetch_all_batched
from fuelr._constants import FUEL_PRICES_ENDPOINT, STATIONS_ENDPOINT
from fuelr._transport import HttpTransport, Transport
from fuelr.auth import TokenManager
from fuelr.config import FuelFinderConfig
from fuelr.exceptions import FuelFinderError

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FuelFinderClient:
    """Async client for the Fuel Finder API.

    Usage::

        async with FuelFinderClient(config) as client:
            token = await client.ensure_access_token()
            stations = await client.fetch_stations(token)

    A *transport* may be injected instead of an aiohttp session; the
    client then performs no network setup of its own.
    """

    def __init__(
        self,
        config: FuelFinderConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._clock = clock
        self._transport: Transport | None = transport
        self._tokens: TokenManager | None = (
            TokenManager(config, transport, clock=clock) if transport is not None else None
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FuelFinderClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
            self._tokens = TokenManager(self._config, self._transport, clock=self._clock)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None
            self._tokens = None

    @property
    def config(self) -> FuelFinderConfig:
        return self._config

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def ensure_access_token(self) -> str:
        """Return a valid bearer token, exchanging credentials if needed."""
        return await self._require_tokens().ensure_access_token()

    def invalidate_token(self) -> None:
        """Force token invalidation (next call will re-authenticate)."""
        if self._tokens is not None:
            self._tokens.invalidate()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise FuelFinderError("Client not initialized. Use 'async with FuelFinderClient(...) as client:'")
        return self._transport

    def _require_tokens(self) -> TokenManager:
        self._require_transport()
        assert self._tokens is not None  # noqa: S101
        return self._tokens

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def fetch_stations(self, token: str | None = None, since: datetime | None = None) -> list[dict[str, Any]]:
        """Fetch station (PFS) metadata, optionally only records changed since *since*."""
        return await fetch_all_batched(
            self._require_transport(),
            STATIONS_ENDPOINT,
            self._require_tokens(),
            token,
            since,
            max_batches=self._config.max_batches,
        )

    async def fetch_fuel_prices(self, token: str | None = None, since: datetime | None = None) -> list[dict[str, Any]]:
        """Fetch fuel price records, optionally only those changed since *since*."""
        return await fetch_all_batched(
            self._require_transport(),
            FUEL_PRICES_ENDPOINT,
            self._require_tokens(),
            token,
            since,
            max_batches=self._config.max_batches,
        )
