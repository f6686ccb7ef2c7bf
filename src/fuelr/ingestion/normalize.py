"""Normalization helpers.

Centralizes tolerant parsing of loosely typed upstream values.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def first_number(payload: Mapping[str, Any], fields: Iterable[str]) -> float | None:
    """Return the first value among *fields* that parses as a number."""
    for name in fields:
        parsed = safe_float(payload.get(name))
        if parsed is not None:
            return parsed
    return None


def first_present(payload: Mapping[str, Any], fields: Iterable[str]) -> Any:
    """Return the first value among *fields* that is not ``None``."""
    for name in fields:
        value = payload.get(name)
        if value is not None:
            return value
    return None


def node_id_of(record: Any) -> str | None:
    """Station identifier of a raw record, or ``None`` when unusable."""
    if not isinstance(record, Mapping):
        return None
    return safe_str(record.get("node_id"))
