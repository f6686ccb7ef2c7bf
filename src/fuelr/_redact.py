"""Helpers for safe debug logging.

Token requests carry the OAuth client secret, token responses carry
bearer tokens, and every page request carries an ``Authorization``
header. Pass such payloads through :func:`redact_for_log` before
emitting them at DEBUG level.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "clientsecret",
        "accesstoken",
        "refreshtoken",
        "token",
        "authorization",
    }
)

_REDACTED = "<redacted>"


def _is_secret_key(key: object) -> bool:
    # "client_secret", "clientSecret" and "Client-Secret" all match.
    normalized = str(key).lower().replace("_", "").replace("-", "")
    return normalized in _SECRET_KEYS


def redact_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a copy of *value* with secrets masked and long strings cut."""
    if _depth > 10:
        return "<max-depth>"

    if isinstance(value, str):
        if value.lower().startswith("bearer "):
            return f"Bearer {_REDACTED}"
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated {len(value) - max_string} chars>"
        return value

    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, Mapping):
        return {
            str(k): _REDACTED if _is_secret_key(k) else redact_for_log(v, max_string=max_string, _depth=_depth + 1)
            for k, v in value.items()
        }

    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        # Station pages hold hundreds of records; a sample is enough for logs.
        head = [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value[:3]]
        if len(value) > 3:
            head.append(f"<{len(value) - 3} more>")
        return head

    return repr(value)
