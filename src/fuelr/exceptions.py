"""Custom exception hierarchy for fuelr."""

from __future__ import annotations


class FuelFinderError(Exception):
    """Base exception for all fuelr errors."""


class FuelFinderConfigError(FuelFinderError):
    """Invalid or missing configuration (e.g. no client credentials)."""


class FuelFinderTransportError(FuelFinderError):
    """HTTP-level failure (network error, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class FuelFinderApiError(FuelFinderError):
    """Upstream answered with a non-success status or a malformed payload.

    ``status_code`` and ``body`` are kept for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        self.body = body
        super().__init__(message)


class FuelFinderAuthenticationError(FuelFinderApiError):
    """Upstream rejected the access token (HTTP 401/403).

    Raised by the batched fetcher only after a forced token renewal and
    a retry of the same page also failed.
    """


class FuelFinderPersistenceError(FuelFinderError):
    """Reading or writing the snapshot file failed.

    Never escapes :class:`fuelr.state.store.SnapshotStore`: a failed
    read behaves as "no cache", a failed write is logged.
    """
