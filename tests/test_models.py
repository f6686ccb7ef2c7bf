"""Tests for token and snapshot model parsing."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from fuelr.models.snapshot import CacheSnapshot, parse_epoch_timestamp
from fuelr.models.token import AccessToken

_T0 = datetime(2026, 1, 1, tzinfo=UTC)

# ------------------------------------------------------------------
# AccessToken
# ------------------------------------------------------------------


class TestAccessToken:
    def test_expires_within_margin(self) -> None:
        token = AccessToken(access_token="t", expires_at=_T0 + timedelta(seconds=10))

        assert token.expires_within(30, _T0)
        assert not token.expires_within(5, _T0)

    def test_from_response_defaults(self) -> None:
        token = AccessToken.from_response({"access_token": "t"}, _T0)

        assert token.expires_at == _T0 + timedelta(hours=1)
        assert token.refresh_token is None

    def test_frozen(self) -> None:
        token = AccessToken(access_token="t", expires_at=_T0)

        with pytest.raises(ValidationError):
            token.access_token = "other"  # type: ignore[misc]

    def test_naive_expiry_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AccessToken(access_token="t", expires_at=datetime(2026, 1, 1))


# ------------------------------------------------------------------
# CacheSnapshot
# ------------------------------------------------------------------


class TestCacheSnapshot:
    def test_freshness(self) -> None:
        snapshot = CacheSnapshot(updated_at=_T0)

        assert snapshot.is_fresh(_T0 + timedelta(minutes=59), ttl=3600)
        assert not snapshot.is_fresh(_T0 + timedelta(hours=1), ttl=3600)
        assert snapshot.age(_T0 + timedelta(minutes=5)) == timedelta(minutes=5)

    def test_json_round_trip_uses_camel_case(self) -> None:
        snapshot = CacheSnapshot(updated_at=_T0, last_sync_at=_T0, stations=({"node_id": "A"},))

        text = snapshot.to_json()
        assert '"updatedAt":1767225600000' in text
        assert '"lastSyncAt":1767225600000' in text
        assert CacheSnapshot.from_json(text) == snapshot

    def test_by_node_id(self) -> None:
        snapshot = CacheSnapshot(updated_at=_T0, stations=({"node_id": "A"}, {"node_id": 5}))

        assert set(snapshot.by_node_id()) == {"A", "5"}


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1_767_225_600, _T0),
        (1_767_225_600_000, _T0),
        ("1767225600000", _T0),
        ("2026-01-01T00:00:00", _T0),
        (None, None),
    ],
)
def test_parse_epoch_timestamp(value: object, expected: datetime | None) -> None:
    assert parse_epoch_timestamp(value) == expected
