"""
QR payload parsing.

A scanned QR code is either the JSON document printed on the member card
(``{"qrCodeId": "GYM-...", ...}``) or the bare check-in code typed by staff.
"""
import json
from typing import NamedTuple, Union


class StructuredPayload(NamedTuple):
    qr_code_id: str


class RawCode(NamedTuple):
    code: str


QRPayload = Union[StructuredPayload, RawCode]

PAYLOAD_KEYS = ("qrCodeId", "qr_code_id", "checkin_code")


def parse_qr_payload(value) -> QRPayload:
    """
    Structured extraction first; anything that is not a JSON object carrying
    a check-in code falls back to the raw (stripped) input.
    """
    text = (value or "").strip() if isinstance(value, str) else str(value or "").strip()

    if text.startswith("{") and text.endswith("}"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            data = None
        if isinstance(data, dict):
            for key in PAYLOAD_KEYS:
                code = data.get(key)
                if isinstance(code, str) and code.strip():
                    return StructuredPayload(qr_code_id=code.strip())

    return RawCode(code=text)


def extract_checkin_code(value) -> str:
    payload = parse_qr_payload(value)
    if isinstance(payload, StructuredPayload):
        return payload.qr_code_id
    return payload.code
