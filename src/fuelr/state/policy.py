"""Refresh policy.

Pure decisions about an existing snapshot; no I/O.
"""

from __future__ import annotations

from datetime import datetime

from fuelr.models.snapshot import CacheSnapshot


def needs_refresh(snapshot: CacheSnapshot | None, now: datetime, ttl: float) -> bool:
    """True when there is no snapshot or it is at least *ttl* seconds old."""
    if snapshot is None:
        return True
    return not snapshot.is_fresh(now, ttl)


def sync_watermark(snapshot: CacheSnapshot | None) -> datetime | None:
    """Lower bound for the next incremental fetch.

    ``None`` means the next refresh must be a full one.
    """
    if snapshot is None:
        return None
    return snapshot.last_sync_at
