"""OAuth token endpoint.

Endpoint:
  - POST /api/v1/oauth/generate_access_token
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import ValidationError

from fuelr._constants import TOKEN_ENDPOINT
from fuelr._redact import redact_for_log
from fuelr._transport import Transport
from fuelr.config import FuelFinderConfig
from fuelr.exceptions import FuelFinderApiError, FuelFinderConfigError, FuelFinderTransportError
from fuelr.models.token import AccessToken

_logger = logging.getLogger(__name__)


def build_token_request(config: FuelFinderConfig) -> dict[str, str]:
    """Build the JSON body for a client-credentials exchange.

    Raises
    ------
    FuelFinderConfigError
        If the client id or secret is missing.
    """
    if not config.client_id or not config.client_secret:
        raise FuelFinderConfigError(
            "Missing Fuel Finder client credentials (set FUELFINDER_CLIENT_ID and FUELFINDER_CLIENT_SECRET)."
        )
    return {"client_id": config.client_id, "client_secret": config.client_secret}


async def request_access_token(
    config: FuelFinderConfig,
    transport: Transport,
    now: datetime,
) -> AccessToken:
    """Exchange the configured client credentials for an access token.

    No retries: a non-success status or a body without an
    ``access_token`` raises :class:`FuelFinderApiError`.
    """
    body = build_token_request(config)
    _logger.debug("Requesting access token: %s", redact_for_log(body))

    response = await transport.request("POST", TOKEN_ENDPOINT, json_body=body)
    if not response.ok:
        raise FuelFinderApiError(
            f"Token request failed: {response.status} {response.text[:200]}",
            status_code=response.status,
            endpoint=TOKEN_ENDPOINT,
            body=response.text,
        )

    try:
        payload = response.json()
    except FuelFinderTransportError as exc:
        raise FuelFinderApiError(
            "Token response is not JSON",
            status_code=response.status,
            endpoint=TOKEN_ENDPOINT,
            body=response.text,
        ) from exc

    if not isinstance(payload, dict):
        raise FuelFinderApiError(
            "Token response is not a JSON object",
            status_code=response.status,
            endpoint=TOKEN_ENDPOINT,
            body=response.text,
        )

    _logger.debug("Token response: %s", redact_for_log(payload))
    try:
        return AccessToken.from_response(payload, now)
    except (ValidationError, ValueError, TypeError) as exc:
        raise FuelFinderApiError(
            f"Malformed token response: {exc}",
            status_code=response.status,
            endpoint=TOKEN_ENDPOINT,
            body=response.text,
        ) from exc
