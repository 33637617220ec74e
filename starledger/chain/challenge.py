# starledger/chain/challenge.py
import time
from dataclasses import dataclass
from typing import Callable

from starledger.config import DEFAULT_CHALLENGE_EXPIRY, DEFAULT_PURPOSE_TAG
from starledger.core.errors import MalformedMessage


@dataclass(frozen=True)
class Challenge:
    """Parsed ``identity:issuedAt:purpose`` string. Never stored by the ledger."""
    identity: str
    issued_at: int
    purpose: str

    def __str__(self) -> str:
        return f"{self.identity}:{self.issued_at}:{self.purpose}"

    def elapsed(self, now: int) -> int:
        return now - self.issued_at

    def is_expired(self, now: int, expiry_seconds: int = DEFAULT_CHALLENGE_EXPIRY) -> bool:
        # exactly expiry_seconds old is still accepted
        return self.elapsed(now) > expiry_seconds


def parse_challenge(message: str) -> Challenge:
    """Split from the right so the time and purpose are always the last two fields."""
    if not isinstance(message, str):
        raise MalformedMessage(f"Message must be a string, got {type(message).__name__}")
    parts = message.rsplit(":", 2)
    if len(parts) != 3:
        raise MalformedMessage(f"Message is not identity:issuedAt:purpose: {message!r}")
    identity, issued_raw, purpose = parts
    try:
        issued_at = int(issued_raw)
    except ValueError:
        raise MalformedMessage(f"Issue time is not an integer: {issued_raw!r}") from None
    return Challenge(identity=identity, issued_at=issued_at, purpose=purpose)


class ChallengeIssuer:
    """Builds ownership challenges. Stateless apart from reading the clock."""

    def __init__(self, clock: Callable[[], float] = time.time, purpose: str = DEFAULT_PURPOSE_TAG):
        self.clock = clock
        self.purpose = purpose

    def now(self) -> int:
        return int(self.clock())

    def issue(self, identity: str) -> str:
        return str(Challenge(identity=identity, issued_at=self.now(), purpose=self.purpose))
