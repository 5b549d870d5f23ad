"""
Test Case 02: Read-time status resolution and QR payload parsing
"""
from datetime import datetime, timedelta

from gymdesk.core.qr import RawCode, StructuredPayload, extract_checkin_code, parse_qr_payload
from gymdesk.core.status import resolve_status

NOW = datetime(2024, 3, 15, 10, 30)


def _membership(status, end_date, start_date=datetime(2024, 3, 1)):
    return {"status": status, "plan_type": "Basic", "start_date": start_date, "end_date": end_date}


def test_no_membership():
    info = resolve_status(None, NOW)
    assert info.status == "None"
    assert (info.is_active, info.is_expired, info.is_pending) == (False, False, False)
    assert info.remaining_days == 0


def test_stale_active_flag_resolves_to_expired():
    yesterday = NOW - timedelta(days=1)
    info = resolve_status(_membership("Active", yesterday), NOW)
    assert info.status == "Expired"
    assert info.is_active is False
    assert info.is_expired is True
    assert info.remaining_days == 0


def test_active_until_end_of_last_day():
    last_moment = datetime(2024, 3, 15, 23, 59, 59, 999000)
    info = resolve_status(_membership("Active", last_moment), NOW)
    assert info.status == "Active"
    assert info.is_active is True
    assert info.remaining_days == 0

    info = resolve_status(_membership("Active", last_moment), last_moment + timedelta(milliseconds=1))
    assert info.status == "Expired"


def test_active_reports_remaining_days():
    info = resolve_status(_membership("Active", datetime(2024, 4, 1, 23, 59, 59)), NOW)
    assert info.is_active is True
    assert info.remaining_days == 17
    assert "17 days remaining" in info.message


def test_pending_is_not_active():
    info = resolve_status(_membership("Pending", datetime(2024, 4, 1)), NOW)
    assert info.status == "Pending"
    assert info.is_pending is True
    assert info.is_active is False
    assert info.remaining_days == 17


def test_other_statuses_pass_through():
    for stored in ("Declined", "Expired"):
        info = resolve_status(_membership(stored, datetime(2024, 4, 1)), NOW)
        assert info.status == stored
        assert info.is_active is False
        assert info.is_pending is False


def test_active_without_end_date_is_not_active():
    info = resolve_status(_membership("Active", None), NOW)
    assert info.is_active is False
    assert info.status == "Expired"


def test_to_dict_is_serialisable_shape():
    data = resolve_status(_membership("Active", datetime(2024, 4, 1)), NOW).to_dict()
    assert set(data) == {
        "status", "is_active", "is_expired", "is_pending", "remaining_days",
        "message", "start_date", "end_date", "plan_type",
    }


# ============== QR payloads ==============

def test_structured_payload_is_preferred():
    payload = parse_qr_payload('{"qrCodeId": "GYM-ABC123", "name": "Jane"}')
    assert payload == StructuredPayload(qr_code_id="GYM-ABC123")


def test_structured_payload_alternative_keys():
    assert extract_checkin_code('{"checkin_code": " GYM-XYZ "}') == "GYM-XYZ"
    assert extract_checkin_code('{"qr_code_id": "GYM-1"}') == "GYM-1"


def test_raw_code_fallback():
    assert parse_qr_payload("  GYM-ABC123 \n") == RawCode(code="GYM-ABC123")
    # JSON without a code, or broken JSON, is treated as a raw code
    assert isinstance(parse_qr_payload('{"name": "Jane"}'), RawCode)
    assert parse_qr_payload("{not json}") == RawCode(code="{not json}")


def test_empty_input_gives_empty_code():
    assert extract_checkin_code("") == ""
    assert extract_checkin_code(None) == ""
