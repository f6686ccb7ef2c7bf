"""Internal constants shared across the library."""

BASE_URL = "https://www.fuel-finder.service.gov.uk"
USER_AGENT = "fuelr/0.1 (+https://www.fuel-finder.service.gov.uk)"

TOKEN_ENDPOINT = "/api/v1/oauth/generate_access_token"
STATIONS_ENDPOINT = "/api/v1/pfs"
FUEL_PRICES_ENDPOINT = "/api/v1/pfs/fuel-prices"

#: Seconds of validity a cached token must still have to be reused.
TOKEN_SAFETY_MARGIN_S: float = 30.0
#: Token lifetime assumed when the token endpoint omits ``expires_in``.
DEFAULT_TOKEN_EXPIRES_IN_S: int = 3600

#: Snapshot age after which readers trigger a background refresh.
CACHE_TTL_S: float = 60 * 60
#: Upper bound on pages fetched per endpoint per refresh.
MAX_BATCHES = 200

#: Body text of the HTTP 400 the API sends once every batch was served.
END_OF_DATA_MARKER = "All PFS data have been fetched successfully"
AUTH_FAILURE_STATUSES: frozenset[int] = frozenset({401, 403})

#: ``effective-start-timestamp`` query format (local time).
WATERMARK_FORMAT = "%Y-%m-%d %H:%M:%S"
