"""
Star Ledger — append-only, hash-linked registry of star claims.
A claim is only recorded after the submitter signs a short-lived ownership challenge.

Single process, in-memory: no replication, no consensus, no persistence.
"""

__version__ = "0.1.0-dev"

from starledger.core.errors import (
    LedgerError,
    ChallengeError,
    ChallengeExpired,
    SignatureInvalid,
    MalformedMessage,
    DecodeError,
)
from starledger.core.types import Block, StarRecord
from starledger.crypto.keys import WalletKeyPair
from starledger.crypto.signatures import SignatureVerifier, Ed25519SignatureVerifier
from starledger.chain.challenge import ChallengeIssuer
from starledger.chain.ledger import Ledger
from starledger.verify.verifier import ChainVerifier, VerificationResult

__all__ = [
    "Block",
    "StarRecord",
    "Ledger",
    "ChallengeIssuer",
    "ChainVerifier",
    "VerificationResult",
    "WalletKeyPair",
    "SignatureVerifier",
    "Ed25519SignatureVerifier",
    "LedgerError",
    "ChallengeError",
    "ChallengeExpired",
    "SignatureInvalid",
    "MalformedMessage",
    "DecodeError",
]
