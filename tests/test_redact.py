from __future__ import annotations

from pygeoengine._redact import redact_for_log, redact_url


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "name": "Depot",
        "X-Geo-Key": "secret",
        "token": {"value": "abc"},
        "password": "pw",
        "nested": {"api_key": "deadbeef", "device_id": "truck-1"},
    }

    redacted = redact_for_log(payload)
    assert redacted["name"] == "Depot"
    assert redacted["X-Geo-Key"] == "<redacted>"
    assert redacted["password"] == "<redacted>"
    assert redacted["token"] == "<redacted>"
    assert redacted["nested"]["api_key"] == "<redacted>"
    assert redacted["nested"]["device_id"] == "truck-1"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_summarises_bytes() -> None:
    assert redact_for_log(b"\x00\x01\x02") == "<bytes:3b>"


def test_redact_url_hides_key_query_parameter() -> None:
    redacted = redact_url("ws://localhost:8080/ws?key=s3cret&client=console")

    assert "s3cret" not in redacted
    assert "key=<redacted>" in redacted
    assert "client=console" in redacted
    assert redact_url("ws://localhost:8080/ws") == "ws://localhost:8080/ws"
