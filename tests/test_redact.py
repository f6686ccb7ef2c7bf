from __future__ import annotations

from fuelr._redact import redact_for_log


def test_redact_for_log_masks_credentials_and_tokens() -> None:
    payload = {
        "client_id": "id-123",
        "client_secret": "s3cret",
        "data": {"access_token": "abc", "refreshToken": "def", "expires_in": 3600},
        "headers": {"Authorization": "Bearer abc"},
    }

    redacted = redact_for_log(payload)
    assert redacted["client_id"] == "id-123"
    assert redacted["client_secret"] == "<redacted>"
    assert redacted["data"]["access_token"] == "<redacted>"
    assert redacted["data"]["refreshToken"] == "<redacted>"
    assert redacted["data"]["expires_in"] == 3600
    assert redacted["headers"]["Authorization"] == "<redacted>"


def test_bearer_strings_masked_outside_known_keys() -> None:
    assert redact_for_log({"auth_header": "Bearer abc"}) == {"auth_header": "Bearer <redacted>"}


def test_long_lists_and_strings_are_cut() -> None:
    redacted = redact_for_log({"rows": list(range(10)), "body": "x" * 50}, max_string=10)

    assert redacted["rows"] == [0, 1, 2, "<7 more>"]
    assert redacted["body"].startswith("x" * 10)
    assert "<truncated 40 chars>" in redacted["body"]
