from __future__ import annotations

from pydreo._redact import redact_for_log, redact_url


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "devicesn": "HTF0001",
        "accessToken": "secret",
        "nested": {"password": "pw", "reported": {"poweron": True}},
    }

    redacted = redact_for_log(payload)
    assert redacted["devicesn"] == "HTF0001"
    assert redacted["accessToken"] == "<redacted>"
    assert redacted["nested"]["password"] == "<redacted>"
    assert redacted["nested"]["reported"] == {"poweron": True}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_url_masks_token_query() -> None:
    url = "wss://wsb-us.dreo-cloud.com/websocket?accessToken=abc123&timestamp=1"
    assert redact_url(url) == "wss://wsb-us.dreo-cloud.com/websocket?accessToken=<redacted>&timestamp=1"
