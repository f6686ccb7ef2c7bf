"""Access token model."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fuelr._constants import DEFAULT_TOKEN_EXPIRES_IN_S


class AccessToken(BaseModel):
    """Bearer credential issued by the Fuel Finder OAuth endpoint.

    Instances are frozen; renewal replaces the whole object.

    Parameters
    ----------
    access_token : str
        Opaque bearer token.
    expires_at : datetime
        Absolute, timezone-aware expiry instant.
    refresh_token : str or None
        Refresh token, when the endpoint returns one.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    access_token: str = Field(min_length=1)
    expires_at: datetime
    refresh_token: str | None = None

    @field_validator("expires_at")
    @classmethod
    def _require_tz(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("expires_at must be timezone-aware")
        return value

    def expires_within(self, margin: float, now: datetime) -> bool:
        """Whether the token expires less than *margin* seconds after *now*."""
        return self.expires_at <= now + timedelta(seconds=margin)

    @classmethod
    def from_response(cls, payload: dict[str, Any], now: datetime) -> AccessToken:
        """Build a token from a decoded token-endpoint response.

        The API sometimes wraps the fields in a ``data`` envelope.
        """
        data = payload.get("data", payload)
        if not isinstance(data, dict):
            raise ValueError("token response has no object payload")
        expires_in = data.get("expires_in")
        if expires_in is None:
            expires_in = DEFAULT_TOKEN_EXPIRES_IN_S
        return cls(
            access_token=data.get("access_token") or "",
            refresh_token=data.get("refresh_token") or None,
            expires_at=now + timedelta(seconds=float(expires_in)),
        )
