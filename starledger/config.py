"""
Runtime configuration for the star ledger.

Environment variables:
- STARLEDGER_CHALLENGE_EXPIRY: seconds a challenge stays valid (default: 300)
- STARLEDGER_PURPOSE_TAG: last field of every challenge (default: starRegistry)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_CHALLENGE_EXPIRY = 300  # 5 minutes
DEFAULT_PURPOSE_TAG = "starRegistry"


def _opt(name: str, default: str) -> str:
    """Get optional environment variable with default."""
    return os.getenv(name, default)


def _opt_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return int(v)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {v!r}") from None


@dataclass(frozen=True)
class Settings:
    challenge_expiry_seconds: int = DEFAULT_CHALLENGE_EXPIRY
    purpose_tag: str = DEFAULT_PURPOSE_TAG

    def __post_init__(self):
        if self.challenge_expiry_seconds < 0:
            raise ValueError("challenge_expiry_seconds must be >= 0")
        if not self.purpose_tag or ":" in self.purpose_tag:
            raise ValueError("purpose_tag must be non-empty and contain no ':'")

    @staticmethod
    def load() -> Settings:
        """Load settings from environment variables."""
        return Settings(
            challenge_expiry_seconds=_opt_int("STARLEDGER_CHALLENGE_EXPIRY", DEFAULT_CHALLENGE_EXPIRY),
            purpose_tag=_opt("STARLEDGER_PURPOSE_TAG", DEFAULT_PURPOSE_TAG),
        )
