from __future__ import annotations

import copy
from datetime import UTC, datetime
from typing import Any

from fuelr.models.snapshot import CacheSnapshot
from fuelr.state.merge import build_price_lookup, merge_stations

_T0 = datetime(2026, 1, 1, tzinfo=UTC)


def _snapshot(stations: list[dict[str, Any]]) -> CacheSnapshot:
    return CacheSnapshot(updated_at=_T0, last_sync_at=_T0, stations=tuple(stations))


def _prior() -> CacheSnapshot:
    return _snapshot(
        [
            {
                "node_id": "A",
                "trading_name": "Alpha",
                "brand_name": "BP",
                "fuel_prices": [{"fuel_type": "E10", "price": 140.9}],
            },
            {
                "node_id": "B",
                "trading_name": "Bravo",
                "temporary_closure": False,
                "fuel_prices": [{"fuel_type": "B7_STANDARD", "price": 150.9}],
            },
            {"node_id": "C", "trading_name": "Charlie", "fuel_prices": []},
        ]
    )


def test_full_mode_flat_price_entries() -> None:
    merged = merge_stations(
        None,
        [{"node_id": "A", "trading_name": "X"}],
        [{"node_id": "A", "fuel_type": "unleaded", "price": 142.9}],
        incremental=False,
    )

    assert list(merged.values()) == [
        {"node_id": "A", "trading_name": "X", "fuel_prices": [{"fuel_type": "unleaded", "price": 142.9}]},
    ]


def test_full_mode_price_fallbacks() -> None:
    merged = merge_stations(
        None,
        [
            {"node_id": "A", "fuel_prices": [{"fuel_type": "E5", "price": 155.0}]},
            {"node_id": "B", "fuel_prices": [{"fuel_type": "E5", "price": 1.0}]},
            {"node_id": "C"},
        ],
        [{"node_id": "B", "fuel_prices": [{"fuel_type": "E5", "price": 152.0}]}],
        incremental=False,
    )

    assert merged["A"]["fuel_prices"] == [{"fuel_type": "E5", "price": 155.0}]
    assert merged["B"]["fuel_prices"] == [{"fuel_type": "E5", "price": 152.0}]
    assert merged["C"]["fuel_prices"] == []


def test_full_mode_ignores_existing_snapshot() -> None:
    merged = merge_stations(_prior(), [{"node_id": "Z", "trading_name": "Zulu"}], [], incremental=False)

    assert set(merged) == {"Z"}


def test_full_mode_duplicate_ids_collapse() -> None:
    merged = merge_stations(
        None,
        [{"node_id": "A", "trading_name": "Old", "brand_name": "BP"}, {"node_id": "A", "trading_name": "New"}],
        [],
        incremental=False,
    )

    assert merged == {"A": {"node_id": "A", "trading_name": "New", "brand_name": "BP", "fuel_prices": []}}


def test_incremental_preserves_untouched_stations() -> None:
    prior = _prior()
    merged = merge_stations(prior, [{"node_id": "A", "trading_name": "Alpha 2"}], [], incremental=True)

    assert merged["B"] is prior.stations[1]
    assert merged["C"] is prior.stations[2]
    assert set(merged) == {"A", "B", "C"}


def test_incremental_shallow_merge_keeps_absent_fields() -> None:
    merged = merge_stations(_prior(), [{"node_id": "A", "trading_name": "Alpha 2"}], [], incremental=True)

    assert merged["A"] == {
        "node_id": "A",
        "trading_name": "Alpha 2",
        "brand_name": "BP",
        "fuel_prices": [{"fuel_type": "E10", "price": 140.9}],
    }


def test_incremental_price_only_update_keeps_metadata() -> None:
    merged = merge_stations(
        _prior(),
        [],
        [{"node_id": "B", "fuel_prices": [{"fuel_type": "B7_STANDARD", "price": 148.9}]}],
        incremental=True,
    )

    assert merged["B"]["trading_name"] == "Bravo"
    assert merged["B"]["temporary_closure"] is False
    assert merged["B"]["fuel_prices"] == [{"fuel_type": "B7_STANDARD", "price": 148.9}]


def test_incremental_inserts_new_station_and_ignores_orphan_prices() -> None:
    merged = merge_stations(
        _prior(),
        [{"node_id": "D", "trading_name": "Delta"}],
        [{"node_id": "Q", "fuel_prices": [{"fuel_type": "E10", "price": 1.0}]}],
        incremental=True,
    )

    assert merged["D"] == {"node_id": "D", "trading_name": "Delta"}
    assert "Q" not in merged


def test_incremental_never_mutates_prior_snapshot() -> None:
    prior = _prior()
    before = copy.deepcopy(prior.stations)

    merge_stations(
        prior,
        [{"node_id": "A", "trading_name": "Changed", "permanent_closure": True}],
        [
            {"node_id": "A", "fuel_prices": []},
            {"node_id": "C", "fuel_prices": [{"fuel_type": "E10", "price": 139.9}]},
        ],
        incremental=True,
    )

    assert prior.stations == before


def test_incremental_merge_is_idempotent() -> None:
    stations = [{"node_id": "A", "brand_name": "Shell"}, {"node_id": "E", "trading_name": "Echo"}]
    prices = [{"node_id": "C", "fuel_type": "E10", "price": 139.9}]

    once = merge_stations(_prior(), stations, prices, incremental=True)
    twice = merge_stations(_snapshot(list(once.values())), stations, prices, incremental=True)

    assert twice == once
    assert len(twice) == len(set(twice))


def test_records_without_node_id_are_skipped() -> None:
    merged = merge_stations(None, [{"trading_name": "Ghost"}, {"node_id": ""}, {"node_id": 7}], [], incremental=False)

    assert list(merged) == ["7"]


def test_price_lookup_groups_flat_entries_and_replaces_nested() -> None:
    lookup = build_price_lookup(
        [
            {"node_id": "A", "fuel_type": "E10", "price": 140.0},
            {"node_id": "A", "fuel_type": "B7", "price": 150.0},
            {"node_id": "B", "fuel_prices": [{"fuel_type": "E5", "price": 1.0}]},
            {"node_id": "B", "fuel_prices": [{"fuel_type": "E5", "price": 2.0}]},
            {"node_id": "C", "fuel_prices": None},
            "garbage",
        ]
    )

    assert lookup == {
        "A": [{"fuel_type": "E10", "price": 140.0}, {"fuel_type": "B7", "price": 150.0}],
        "B": [{"fuel_type": "E5", "price": 2.0}],
    }
