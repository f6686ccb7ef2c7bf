"""Client configuration for fuelr."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from fuelr._constants import BASE_URL, CACHE_TTL_S, MAX_BATCHES, TOKEN_SAFETY_MARGIN_S


def _default_cache_path() -> Path:
    return Path.cwd() / ".cache" / "fuelr-cache.json"


@dataclasses.dataclass(frozen=True)
class FuelFinderConfig:
    """Client configuration.

    Parameters
    ----------
    client_id : str or None
        Fuel Finder OAuth client id. Required before the first token
        exchange, not at construction time.
    client_secret : str or None
        Fuel Finder OAuth client secret.
    base_url : str
        API base URL. Defaults to the public GOV.UK service.
    cache_path : Path
        Location of the JSON snapshot file.
    cache_ttl : float
        Seconds a snapshot is served without triggering a refresh.
    token_margin : float
        A cached access token is renewed once it expires within this
        many seconds.
    max_batches : int
        Hard page limit per endpoint per refresh.
    request_timeout : float
        Total timeout in seconds applied to every HTTP request.
    """

    client_id: str | None = None
    client_secret: str | None = None
    base_url: str = BASE_URL
    cache_path: Path = dataclasses.field(default_factory=_default_cache_path)
    cache_ttl: float = CACHE_TTL_S
    token_margin: float = TOKEN_SAFETY_MARGIN_S
    max_batches: int = MAX_BATCHES
    request_timeout: float = 60.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)

    @classmethod
    def from_env(cls, **overrides: Any) -> FuelFinderConfig:
        """Create configuration from environment variables.

        Reads ``FUELFINDER_CLIENT_ID``, ``FUELFINDER_CLIENT_SECRET`` and
        the optional ``FUELFINDER_*`` overrides. Explicit keyword
        arguments take precedence over environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        FuelFinderConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "FUELFINDER_CLIENT_ID": "client_id",
            "FUELFINDER_CLIENT_SECRET": "client_secret",
            "FUELFINDER_BASE_URL": "base_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = val

        cache_path_env = env.get("FUELFINDER_CACHE_PATH")
        if cache_path_env:
            config_kwargs["cache_path"] = Path(cache_path_env)

        # numeric settings, handle separately
        ttl_env = env.get("FUELFINDER_CACHE_TTL")
        if ttl_env is not None and "cache_ttl" not in overrides:
            config_kwargs["cache_ttl"] = float(ttl_env)

        batches_env = env.get("FUELFINDER_MAX_BATCHES")
        if batches_env is not None and "max_batches" not in overrides:
            config_kwargs["max_batches"] = int(batches_env)

        timeout_env = env.get("FUELFINDER_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        if "cache_path" in overrides:
            overrides["cache_path"] = Path(overrides["cache_path"])
        if "base_url" in overrides:
            overrides["base_url"] = str(overrides["base_url"]).rstrip("/")
        elif "base_url" in config_kwargs:
            config_kwargs["base_url"] = config_kwargs["base_url"].rstrip("/")

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
