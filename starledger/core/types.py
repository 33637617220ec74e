# starledger/core/types.py
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from starledger.core.encoding import encode_body, decode_body
from starledger.core.errors import DecodeError

GENESIS_PAYLOAD = {"data": "Genesis Block"}

STAR_FIELDS = ("identity", "message", "signature", "star")


@dataclass(frozen=True)
class StarRecord:
    """Decoded payload of a star block."""
    identity: str
    message: str
    signature: str
    star: Dict[str, Any]

    def to_dict(self) -> dict:
        return {
            "identity": self.identity,
            "message": self.message,
            "signature": self.signature,
            "star": self.star,
        }


@dataclass(frozen=True)
class Block:
    """
    Single hash-linked record in the ledger.

    Header fields (height, timestamp, previous_hash, hash) stay empty until
    ``seal`` is called by the ledger; a sealed block is never modified again.
    """
    body: str                            # hex(canonical_json(payload))
    height: int = -1                     # -1 until sealed
    timestamp: int = 0                   # unix seconds, set at seal time
    previous_hash: Optional[str] = None  # None for genesis
    hash: str = ""                       # hex(sha256), empty until sealed

    @classmethod
    def create(cls, payload: Any) -> "Block":
        """Unsealed block carrying ``payload``; only the ledger seals it."""
        return cls(body=encode_body(payload))

    @property
    def is_sealed(self) -> bool:
        return self.hash != ""

    @property
    def is_genesis(self) -> bool:
        return self.height == 0 and self.previous_hash is None

    def header(self) -> dict:
        """Everything that goes into the hash. Never includes ``hash`` itself."""
        return {
            "height": self.height,
            "timestamp": self.timestamp,
            "previousBlockHash": self.previous_hash,
            "body": self.body,
        }

    def seal(self, previous_hash: Optional[str], height: int, timestamp: int) -> "Block":
        """Fix the header fields and compute the hash. Pure: same inputs, same hash."""
        # imported here: crypto.hashing depends on Block for its type
        from starledger.crypto.hashing import block_hash

        if self.is_sealed:
            raise ValueError(f"Block at height {self.height} is already sealed")
        unsealed = replace(self, previous_hash=previous_hash, height=height, timestamp=timestamp)
        return replace(unsealed, hash=block_hash(unsealed))

    def recompute_hash(self) -> str:
        from starledger.crypto.hashing import block_hash
        return block_hash(self)

    def decode_body(self) -> Any:
        return decode_body(self.body)

    def decode_payload(self) -> StarRecord:
        """
        Structured star payload of a non-genesis block.
        Raises DecodeError if the body is not a {identity, message, signature, star} object.
        """
        data = self.decode_body()
        if not isinstance(data, dict):
            raise DecodeError(f"Block {self.height}: payload is not an object")
        missing = [k for k in STAR_FIELDS if k not in data]
        if missing:
            raise DecodeError(f"Block {self.height}: payload missing {', '.join(missing)}")
        if not isinstance(data["star"], dict):
            raise DecodeError(f"Block {self.height}: star is not an object")
        not_text = [k for k in ("identity", "message", "signature") if not isinstance(data[k], str)]
        if not_text:
            raise DecodeError(f"Block {self.height}: {', '.join(not_text)} must be strings")
        return StarRecord(
            identity=data["identity"],
            message=data["message"],
            signature=data["signature"],
            star=data["star"],
        )

    def to_dict(self) -> dict:
        """Wire form: header fields plus the stored hash."""
        return {
            "height": self.height,
            "timestamp": self.timestamp,
            "previousBlockHash": self.previous_hash,
            "hash": self.hash,
            "body": self.body,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Block":
        """Rebuild a block from its wire form. The stored hash is kept as-is, not recomputed."""
        try:
            return cls(
                body=d["body"],
                height=int(d["height"]),
                timestamp=int(d["timestamp"]),
                previous_hash=d.get("previousBlockHash"),
                hash=d["hash"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Not a block record: {e}") from e
