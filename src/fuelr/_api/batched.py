"""Batched (paginated) retrieval.

Endpoints:
  - GET /api/v1/pfs
  - GET /api/v1/pfs/fuel-prices

Both page through ``batch-number=1, 2, ...`` and accept an optional
``effective-start-timestamp`` to restrict results to records changed
since a watermark. Paging stops on the first empty page, on the API's
"all data fetched" 400 response, or after ``max_batches`` pages.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fuelr._constants import AUTH_FAILURE_STATUSES, END_OF_DATA_MARKER, MAX_BATCHES, WATERMARK_FORMAT
from fuelr._transport import HttpResponse, Transport
from fuelr.auth import TokenManager
from fuelr.exceptions import FuelFinderApiError, FuelFinderAuthenticationError

_logger = logging.getLogger(__name__)


def format_watermark(value: datetime) -> str:
    """Format *value* as ``YYYY-MM-DD HH:MM:SS`` in the local time zone."""
    return value.astimezone().strftime(WATERMARK_FORMAT)


def _is_end_of_data(response: HttpResponse) -> bool:
    return response.status == 400 and END_OF_DATA_MARKER in response.text


async def _get_page(
    transport: Transport,
    endpoint: str,
    tokens: TokenManager,
    token: str,
    params: dict[str, str],
) -> tuple[HttpResponse, str]:
    """Fetch one page, renewing the token once on 401/403.

    Returns the response and the token that produced it.
    """
    response = await transport.request(
        "GET", endpoint, params=params, headers={"authorization": f"Bearer {token}"}
    )
    if response.status not in AUTH_FAILURE_STATUSES:
        return response, token

    _logger.info(
        "HTTP %d on %s batch %s; forcing token renewal and retrying",
        response.status,
        endpoint,
        params["batch-number"],
    )
    tokens.invalidate(token)
    token = await tokens.ensure_access_token()
    response = await transport.request(
        "GET", endpoint, params=params, headers={"authorization": f"Bearer {token}"}
    )
    if response.status in AUTH_FAILURE_STATUSES:
        raise FuelFinderAuthenticationError(
            f"{endpoint} rejected a freshly issued token: {response.status} {response.text[:200]}",
            status_code=response.status,
            endpoint=endpoint,
            body=response.text,
        )
    return response, token


async def fetch_all_batched(
    transport: Transport,
    endpoint: str,
    tokens: TokenManager,
    token: str | None = None,
    since: datetime | None = None,
    *,
    max_batches: int = MAX_BATCHES,
) -> list[dict[str, Any]]:
    """Collect every record of *endpoint*, page by page.

    Parameters
    ----------
    transport
        HTTP transport.
    endpoint
        API path, e.g. ``/api/v1/pfs``.
    tokens
        Token manager used for the initial token (when *token* is
        ``None``) and for forced renewal on 401/403.
    token
        Bearer token to start with.
    since
        Incremental watermark; ``None`` fetches everything.
    max_batches
        Page limit. Hitting it ends the fetch without error.

    Raises
    ------
    FuelFinderAuthenticationError
        A page was still rejected after one forced token renewal.
    FuelFinderApiError
        Any other non-success status.
    """
    if token is None:
        token = await tokens.ensure_access_token()

    base_params: dict[str, str] = {}
    if since is not None:
        base_params["effective-start-timestamp"] = format_watermark(since)

    results: list[dict[str, Any]] = []
    for batch in range(1, max_batches + 1):
        params = {**base_params, "batch-number": str(batch)}
        response, token = await _get_page(transport, endpoint, tokens, token, params)

        if _is_end_of_data(response):
            _logger.debug("%s: upstream reports all data fetched at batch %d", endpoint, batch)
            break
        if not response.ok:
            raise FuelFinderApiError(
                f"Fuel Finder fetch failed: {response.status} {response.text[:200]}",
                status_code=response.status,
                endpoint=endpoint,
                body=response.text,
            )

        data = response.json()
        if not isinstance(data, list) or not data:
            break
        results.extend(data)
        _logger.debug("%s batch %d: %d rows (total %d)", endpoint, batch, len(data), len(results))
    else:
        _logger.warning("%s: stopped after the %d batch limit", endpoint, max_batches)

    return results
