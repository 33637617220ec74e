# starledger/core/encoding.py
import base64
import json
from typing import Any

from starledger.core.canon import canonical_hex
from starledger.core.errors import DecodeError


def b64url_encode(data: bytes) -> str:
    """Encode bytes to base64url (no padding, URL-safe)."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(s: str) -> bytes:
    """Decode base64url string back to bytes."""
    # Restore padding
    padding = len(s) % 4
    if padding:
        s += "=" * (4 - padding)
    return base64.urlsafe_b64decode(s)


def encode_body(payload: Any) -> str:
    """Payload → hex of its canonical JSON bytes (the block's stored body)."""
    return canonical_hex(payload)


def decode_body(body: str) -> Any:
    """Inverse of encode_body. Raises DecodeError on bad hex or bad JSON."""
    try:
        raw = bytes.fromhex(body)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Block body is not valid hex: {e}") from e
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"Block body is not valid JSON: {e}") from e
