"""Access token lifecycle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from fuelr._api.token import request_access_token
from fuelr._transport import Transport
from fuelr.config import FuelFinderConfig
from fuelr.models.token import AccessToken

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenManager:
    """Acquires and caches the upstream bearer token.

    The cached :class:`AccessToken` is reused while it stays valid for
    more than ``config.token_margin`` seconds. Renewals are single-flight:
    callers arriving while an exchange is running await the same task.
    """

    def __init__(
        self,
        config: FuelFinderConfig,
        transport: Transport,
        *,
        clock: Callable[[], datetime] = _utcnow,
        token: AccessToken | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._clock = clock
        self._token = token
        self._renewal: asyncio.Task[AccessToken] | None = None

    @property
    def token(self) -> AccessToken | None:
        """Currently cached token, if any (may be close to expiry)."""
        return self._token

    def invalidate(self, rejected: str | None = None) -> None:
        """Drop the cached token; the next call performs a new exchange.

        With *rejected*, the cache is only cleared while it still holds
        that token, so a token renewed in the meantime survives.
        """
        if rejected is not None and (self._token is None or self._token.access_token != rejected):
            return
        self._token = None

    async def ensure_access_token(self) -> str:
        """Return a bearer token valid beyond the safety margin."""
        token = self._token
        if token is not None and not token.expires_within(self._config.token_margin, self._clock()):
            return token.access_token

        task = self._renewal
        if task is None:
            task = asyncio.create_task(self._renew(), name="fuelr-token-renewal")
            task.add_done_callback(self._renewal_done)
            self._renewal = task
        fresh = await asyncio.shield(task)
        return fresh.access_token

    async def _renew(self) -> AccessToken:
        _logger.debug("Access token missing or expiring; requesting a new one")
        token = await request_access_token(self._config, self._transport, self._clock())
        self._token = token
        _logger.debug("Access token renewed, expires at %s", token.expires_at.isoformat())
        return token

    def _renewal_done(self, task: asyncio.Task[AccessToken]) -> None:
        if self._renewal is task:
            self._renewal = None
        if not task.cancelled():
            # Waiters re-raise the error themselves; this marks it retrieved.
            task.exception()
