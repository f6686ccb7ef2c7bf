"""Cache snapshot model.

A :class:`CacheSnapshot` is one fully merged view of every known
station plus the instants it was produced and synced. The serialized
form is a single JSON document::

    {"updatedAt": 1767225600000, "lastSyncAt": 1767225590000, "stations": [...]}

Timestamps are written as epoch milliseconds; reading accepts seconds
or milliseconds.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def parse_epoch_timestamp(value: Any) -> datetime | None:
    """Convert an epoch timestamp (seconds **or** milliseconds) to a UTC datetime.

    ``datetime`` instances and ISO-8601 strings pass through; naive
    values are taken as UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            parsed = datetime.fromisoformat(value)
            return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    try:
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        return datetime.fromtimestamp(ts, tz=UTC)
    except (TypeError, OverflowError, OSError) as exc:
        raise ValueError(f"not an epoch timestamp: {value!r}") from exc


def _to_epoch_ms(value: datetime | None) -> int | None:
    if value is None:
        return None
    return int(value.timestamp() * 1000)


EpochTimestamp = Annotated[
    datetime,
    BeforeValidator(parse_epoch_timestamp),
    PlainSerializer(_to_epoch_ms, return_type=int),
]
OptionalEpochTimestamp = Annotated[
    datetime | None,
    BeforeValidator(parse_epoch_timestamp),
    PlainSerializer(_to_epoch_ms, return_type=int | None),
]


def _drop_anonymous(value: Any) -> Any:
    if not isinstance(value, (list, tuple)):
        return value
    return [item for item in value if isinstance(item, dict) and item.get("node_id") not in (None, "")]


class CacheSnapshot(BaseModel):
    """Immutable, fully merged station dataset.

    Parameters
    ----------
    updated_at : datetime
        Instant the snapshot was produced.
    last_sync_at : datetime or None
        Watermark for the *next* incremental refresh.
    stations : tuple of dict
        Station records, unique by ``node_id``. Treat as read-only.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    updated_at: EpochTimestamp
    last_sync_at: OptionalEpochTimestamp = None
    stations: Annotated[tuple[dict[str, Any], ...], BeforeValidator(_drop_anonymous)] = Field(default_factory=tuple)

    def age(self, now: datetime) -> timedelta:
        """Time elapsed between :attr:`updated_at` and *now*."""
        return now - self.updated_at

    def is_fresh(self, now: datetime, ttl: float) -> bool:
        """Whether the snapshot is younger than *ttl* seconds."""
        return self.age(now) < timedelta(seconds=ttl)

    def by_node_id(self) -> dict[str, dict[str, Any]]:
        """Return a new ``node_id`` → station mapping (records are shared, not copied)."""
        return {str(station["node_id"]): station for station in self.stations}

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, text: str | bytes) -> CacheSnapshot:
        return cls.model_validate_json(text)
