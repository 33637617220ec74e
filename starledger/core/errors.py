# starledger/core/errors.py


class LedgerError(Exception):
    """Base class for every error raised by the star ledger core."""


class ChallengeError(LedgerError):
    """A star submission was refused. The ledger is left unchanged."""


class MalformedMessage(ChallengeError):
    """Message does not parse as ``identity:issuedAt:purpose``."""


class ChallengeExpired(ChallengeError):
    """The challenge was issued more than the expiry window ago. Request a new one."""

    def __init__(self, elapsed: int, expiry_seconds: int):
        super().__init__(
            f"Challenge expired: issued {elapsed}s ago, window is {expiry_seconds}s"
        )
        self.elapsed = elapsed
        self.expiry_seconds = expiry_seconds


class SignatureInvalid(ChallengeError):
    """The verifier rejected the (message, identity, signature) triple."""


class DecodeError(LedgerError, ValueError):
    """A stored block body cannot be decoded into the expected shape."""
