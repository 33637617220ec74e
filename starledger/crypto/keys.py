# starledger/crypto/keys.py
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from starledger.core.encoding import b64url_encode, b64url_decode


@dataclass
class WalletKeyPair:
    """
    Ed25519 wallet. The identity (address) is the base64url raw public key,
    so anyone holding the identity string can check signatures made by it.
    """
    public_key: Ed25519PublicKey
    private_key: Optional[Ed25519PrivateKey] = None

    @classmethod
    def generate(cls) -> "WalletKeyPair":
        priv = Ed25519PrivateKey.generate()
        return cls(public_key=priv.public_key(), private_key=priv)

    @classmethod
    def from_private_b64url(cls, s: str) -> "WalletKeyPair":
        priv = Ed25519PrivateKey.from_private_bytes(b64url_decode(s))
        return cls(public_key=priv.public_key(), private_key=priv)

    @classmethod
    def from_identity(cls, identity: str) -> "WalletKeyPair":
        """Verify-only key pair. Raises ValueError if identity is not a 32-byte key."""
        return cls(public_key=Ed25519PublicKey.from_public_bytes(b64url_decode(identity)))

    @property
    def identity(self) -> str:
        raw = self.public_key.public_bytes(Encoding.Raw, PublicFormat.Raw)
        return b64url_encode(raw)

    def private_key_b64url(self) -> str:
        if self.private_key is None:
            raise ValueError("Verify-only key pair has no private key")
        raw = self.private_key.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
        return b64url_encode(raw)

    def sign_message(self, message: str) -> str:
        """Sign the UTF-8 challenge string, return base64url signature."""
        if self.private_key is None:
            raise ValueError("Cannot sign with a verify-only key pair")
        return b64url_encode(self.private_key.sign(message.encode("utf-8")))

    def verify_bytes(self, signature: bytes, data: bytes) -> bool:
        try:
            self.public_key.verify(signature, data)
            return True
        except InvalidSignature:
            return False
