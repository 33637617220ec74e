# examples/star_registry_demo.py
# Run with: python examples/star_registry_demo.py
#
# Two wallets register stars concurrently, one submission arrives too late,
# one is signed by the wrong wallet, then the chain is validated.

import threading
import time

from starledger import Ledger, WalletKeyPair, ChallengeExpired, SignatureInvalid


class ManualClock:
    """Wall clock that can be pushed forward to simulate a slow client."""

    def __init__(self):
        self.offset = 0

    def __call__(self):
        return time.time() + self.offset


def register(ledger, wallet, star):
    message = ledger.request_challenge(wallet.identity)
    signature = wallet.sign_message(message)
    return ledger.submit(wallet.identity, message, signature, star)


if __name__ == "__main__":
    clock = ManualClock()
    ledger = Ledger(clock=clock)
    alice = WalletKeyPair.generate()
    bob = WalletKeyPair.generate()

    # Concurrent registrations
    stars = [
        (alice, {"ra": "16h 29m 1.0s", "dec": "-26° 29' 24.9\""}),
        (bob, {"ra": "5h 55m 10.3s", "dec": "7° 24' 25.4\""}),
    ]
    threads = [threading.Thread(target=register, args=(ledger, w, s)) for w, s in stars]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    print(f"Height after concurrent submissions: {ledger.current_height}")

    # Too late: challenge older than five minutes
    message = ledger.request_challenge(alice.identity)
    signature = alice.sign_message(message)
    clock.offset += 301
    try:
        ledger.submit(alice.identity, message, signature, {"ra": "late", "dec": "late"})
    except ChallengeExpired as e:
        print(f"Rejected: {e}")

    # Wrong wallet signs alice's challenge
    message = ledger.request_challenge(alice.identity)
    try:
        ledger.submit(alice.identity, message, bob.sign_message(message), {"ra": "x", "dec": "x"})
    except SignatureInvalid as e:
        print(f"Rejected: {e}")

    for block in ledger.get_chain():
        print(f"{block.height:3d} | {block.timestamp} | {block.hash[:16]} | prev={str(block.previous_hash)[:16]}")

    print("Alice's stars:", ledger.get_stars_by_identity(alice.identity))
    print("Bob's stars:  ", ledger.get_stars_by_identity(bob.identity))

    errors = ledger.validate()
    print("Chain valid ✓" if not errors else "\n".join(errors))
