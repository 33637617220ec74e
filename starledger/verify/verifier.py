# starledger/verify/verifier.py
from typing import List, Optional
from dataclasses import dataclass, field

from starledger.core.types import Block
from starledger.core.errors import DecodeError
from starledger.crypto.signatures import SignatureVerifier


@dataclass
class VerificationFailure:
    index: int
    message: str
    category: str = "general"  # "height", "hash_chain", "hash", "payload", "signature"

    def __str__(self):
        return f"[{self.index}] {self.category}: {self.message}"


@dataclass
class VerificationResult:
    is_valid: bool
    message: str = ""
    failures: List[VerificationFailure] = field(default_factory=list)

    @property
    def first_failure(self) -> Optional[VerificationFailure]:
        return self.failures[0] if self.failures else None

    def add(self, index: int, message: str, category: str) -> None:
        self.failures.append(VerificationFailure(index, message, category))
        self.is_valid = False

    def __bool__(self):
        return self.is_valid

    def __str__(self):
        if self.is_valid:
            return "Chain is valid ✓"
        lines = [f"Verification FAILED ({len(self.failures)} issues):"]
        for f in self.failures:
            lines.append(f"  • {f}")
        return "\n".join(lines)


class ChainVerifier:
    """
    Offline verifier for star ledger chains.
    Walks every block from height 0 and collects all problems instead of stopping at the first.
    """

    def __init__(self, signature_verifier: Optional[SignatureVerifier] = None):
        """
        signature_verifier: when given, every star block's signature is re-checked too.
        """
        self.signature_verifier = signature_verifier

    def verify(self, chain: List[Block]) -> VerificationResult:
        result = VerificationResult(True)

        if not chain:
            result.add(0, "block with height 0 is missing", "height")
            result.message = "Empty chain has no genesis block"
            return result

        previous_hash = None
        for i, block in enumerate(chain):
            # 1. Block sits at its own height
            if block.height != i:
                result.add(i, f"expected height {i}, got {block.height}", "height")

            # 2. Link to the previous block (None for genesis)
            if block.previous_hash != previous_hash:
                result.add(i, "previousBlockHash does not match previous block hash", "hash_chain")

            # 3. Stored hash still matches the stored fields
            if block.recompute_hash() != block.hash:
                result.add(i, "hash does not match block contents", "hash")

            # 4. Optional ownership re-check
            if self.signature_verifier is not None and i > 0:
                self._check_signature(i, block, result)

            previous_hash = block.hash

        result.message = "Valid chain" if result.is_valid else f"Failed with {len(result.failures)} issues"
        return result

    def _check_signature(self, i: int, block: Block, result: VerificationResult) -> None:
        try:
            record = block.decode_payload()
        except DecodeError as e:
            result.add(i, str(e), "payload")
            return
        if not self.signature_verifier.verify(record.message, record.identity, record.signature):
            result.add(i, f"Invalid signature for identity '{record.identity}'", "signature")
