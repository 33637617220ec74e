# starledger/chain/ledger.py
import logging
import threading
import time
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional

from starledger.config import Settings
from starledger.core.types import Block, GENESIS_PAYLOAD
from starledger.core.errors import ChallengeExpired, SignatureInvalid
from starledger.crypto.signatures import SignatureVerifier, Ed25519SignatureVerifier
from starledger.chain.challenge import ChallengeIssuer, parse_challenge
from starledger.verify.verifier import ChainVerifier

logger = logging.getLogger(__name__)


class Ledger:
    """
    In-memory, append-only chain of star blocks.

    A genesis block is sealed at construction. After that the only way in is
    ``submit``: request a challenge, sign it, submit it with the star before
    the challenge expires.

    ``append`` is the only mutator and runs under a lock. Readers copy the
    block list under the same lock and work on that snapshot; sealed blocks
    never change, so the copy is consistent.
    """

    def __init__(
        self,
        verifier: Optional[SignatureVerifier] = None,
        clock: Callable[[], float] = time.time,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or Settings.load()
        self.verifier = verifier or Ed25519SignatureVerifier()
        self.clock = clock
        self.issuer = ChallengeIssuer(clock=clock, purpose=self.settings.purpose_tag)

        self._blocks: List[Block] = []
        self._height = -1
        self._lock = threading.Lock()

        self._append_genesis()

    # ── state ────────────────────────────────────────────────

    @property
    def current_height(self) -> int:
        with self._lock:
            return self._height

    def __len__(self) -> int:
        with self._lock:
            return len(self._blocks)

    def _now(self) -> int:
        return int(self.clock())

    def _snapshot(self) -> List[Block]:
        with self._lock:
            return self._blocks.copy()

    def get_chain(self) -> List[Block]:
        """Returns copy of the full chain (immutable view)"""
        return self._snapshot()

    def get_last_hash(self) -> Optional[str]:
        with self._lock:
            return self._blocks[-1].hash if self._blocks else None

    # ── append ───────────────────────────────────────────────

    def _append_genesis(self) -> Block:
        if self._blocks:
            raise RuntimeError("Genesis block already exists")
        return self.append(GENESIS_PAYLOAD)

    def append(self, payload: Any) -> Block:
        """
        Seal ``payload`` into a new block on top of the current tail.
        Read tail → next height → seal → push → advance height, all under the lock.
        """
        unsealed = Block.create(payload)
        with self._lock:
            previous_hash = self._blocks[-1].hash if self._blocks else None
            height = self._height + 1
            block = unsealed.seal(previous_hash=previous_hash, height=height, timestamp=self._now())
            self._blocks.append(block)
            self._height = height

        logger.info("[starledger] Appended block %d (%s)", block.height, block.hash[:16])
        return block

    # ── ownership-gated submission ──────────────────────────

    def request_challenge(self, identity: str) -> str:
        """Message the wallet owner must sign, e.g. ``addr1:1700000000:starRegistry``."""
        return self.issuer.issue(identity)

    def submit(self, identity: str, message: str, signature: str, star: Mapping) -> Block:
        """
        Register ``star`` for ``identity``.

        Raises MalformedMessage, ChallengeExpired or SignatureInvalid; on any
        failure nothing is appended.
        """
        if not isinstance(star, Mapping):
            raise TypeError(f"star must be a mapping, got {type(star).__name__}")

        challenge = parse_challenge(message)

        now = self._now()
        expiry = self.settings.challenge_expiry_seconds
        if challenge.is_expired(now, expiry):
            logger.warning("[starledger] Expired challenge from %s (%ds old)", identity, challenge.elapsed(now))
            raise ChallengeExpired(challenge.elapsed(now), expiry)

        if not self.verifier.verify(message, identity, signature):
            logger.warning("[starledger] Signature rejected for %s", identity)
            raise SignatureInvalid(f"Message could not be verified for identity '{identity}'")

        return self.append({
            "star": dict(star),
            "identity": identity,
            "message": message,
            "signature": signature,
        })

    # ── lookup ───────────────────────────────────────────────

    def get_block_by_hash(self, block_hash: str) -> Optional[Block]:
        for block in self._snapshot():
            if block.hash == block_hash:
                return block
        return None

    def get_block_by_height(self, height: int) -> Optional[Block]:
        with self._lock:
            if 0 <= height <= self._height:
                return self._blocks[height]
        return None

    def get_stars_by_identity(self, identity: str) -> List[Dict[str, Any]]:
        """Stars registered by ``identity``, in chain order. Raises DecodeError on a corrupt body."""
        stars = []
        for block in self._snapshot()[1:]:
            record = block.decode_payload()
            if record.identity == identity:
                stars.append(record.star)
        return stars

    # ── validation ───────────────────────────────────────────

    def validate(self) -> List[str]:
        """All structural problems in the chain; empty list means valid. Never raises."""
        result = ChainVerifier().verify(self._snapshot())
        if not result.is_valid:
            logger.warning("[starledger] %s", result.message)
        return [str(f) for f in result.failures]
