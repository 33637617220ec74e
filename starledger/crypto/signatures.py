# starledger/crypto/signatures.py
from typing import Protocol, runtime_checkable

from starledger.core.encoding import b64url_decode
from starledger.crypto.keys import WalletKeyPair


@runtime_checkable
class SignatureVerifier(Protocol):
    """Black-box ownership check. The ledger never looks at key material itself."""

    def verify(self, message: str, identity: str, signature: str) -> bool:
        ...


class Ed25519SignatureVerifier:
    """Default verifier: identity is a base64url Ed25519 public key (see WalletKeyPair)."""

    def verify(self, message: str, identity: str, signature: str) -> bool:
        try:
            wallet = WalletKeyPair.from_identity(identity)
            return wallet.verify_bytes(b64url_decode(signature), message.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            # not a key, not base64url, not a string, or wrong signature length
            return False
