"""HTTP transport for the Fuel Finder API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp

from fuelr._constants import USER_AGENT
from fuelr.config import FuelFinderConfig
from fuelr.exceptions import FuelFinderTransportError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Status and body of a completed request.

    Non-2xx statuses are *not* raised by the transport: the token and
    batch endpoints each give specific statuses a meaning of their own.
    """

    status: int
    text: str
    endpoint: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as exc:
            raise FuelFinderTransportError(
                f"Invalid JSON from {self.endpoint}: {self.text[:200]}",
                status_code=self.status,
                endpoint=self.endpoint,
            ) from exc


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> HttpResponse:
        ...


class HttpTransport:
    """aiohttp-backed transport bound to the configured base URL."""

    def __init__(self, config: FuelFinderConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Mapping[str, Any] | None = None,
    ) -> HttpResponse:
        merged_headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if headers:
            merged_headers.update(headers)

        url = f"{self._config.base_url}{endpoint}"
        _logger.debug("%s %s params=%s", method, url, dict(params or {}))

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params) if params else None,
                headers=merged_headers,
                json=dict(json_body) if json_body is not None else None,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                return HttpResponse(status=resp.status, text=text, endpoint=endpoint)
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise FuelFinderTransportError(
                f"Request to {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc
