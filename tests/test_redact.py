from __future__ import annotations

from pysyncevents._redact import redact_for_log


def test_redact_for_log_redacts_secrets() -> None:
    payload = {
        "since": "12",
        "apiKey": "k-123",
        "X-API-Key": "k-123",
        "gui": {"user": "admin", "password": "pw"},
    }

    redacted = redact_for_log(payload)
    assert redacted["since"] == "12"
    assert redacted["apiKey"] == "<redacted>"
    assert redacted["X-API-Key"] == "<redacted>"
    assert redacted["gui"] == {"user": "admin", "password": "<redacted>"}


def test_redact_for_log_shortens_device_ids_in_event_data() -> None:
    data = {
        "device": "MFZWI3D-BONSGYC-YLTMRWG-C43ENR5",
        "folder": "f1",
        "folderLabel": "Photos",
        "peers": [{"deviceID": "P56IOI7-MZJNU2Y-IQGDREY-DM2MGTI"}],
    }

    redacted = redact_for_log(data)
    assert redacted["device"] == "MFZWI3D…"
    assert redacted["folder"] == "f1"
    assert redacted["folderLabel"] == "Photos"
    assert redacted["peers"] == [{"deviceID": "P56IOI7…"}]


def test_redact_for_log_leaves_non_string_device_fields() -> None:
    assert redact_for_log({"device": None, "deviceID": ""}) == {"device": None, "deviceID": ""}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_summarises_bytes_and_objects() -> None:
    redacted = redact_for_log({"blob": b"\x00\x01", "obj": object})
    assert redacted["blob"] == "<bytes:2b>"
    assert redacted["obj"].startswith("<class")
