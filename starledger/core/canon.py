# starledger/core/canon.py
from typing import Any

import jcs


def canonical_json(obj: Any) -> bytes:
    """RFC 8785 bytes. Block hashes and block bodies are both built from this form."""
    return jcs.canonicalize(obj)


def canonical_json_str(obj: Any) -> str:
    return canonical_json(obj).decode("utf-8")


def canonical_hex(obj: Any) -> str:
    """Lowercase hex of the canonical bytes; the stored form of a block payload."""
    return canonical_json(obj).hex()
