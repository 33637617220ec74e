# starledger/crypto/hashing.py
import hashlib

from starledger.core.canon import canonical_json
from starledger.core.types import Block


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def block_hash(block: Block) -> str:
    """
    sha256 over the RFC 8785 form of the block header.

    Hashed fields, in canonical (sorted) order: body, height, previousBlockHash, timestamp.
    """
    return sha256_hex(canonical_json(block.header()))
