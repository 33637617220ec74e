# tests/test_chain.py
import threading

import pytest

from starledger.chain.ledger import Ledger
from starledger.config import Settings
from starledger.crypto.keys import WalletKeyPair
from starledger.core.errors import ChallengeExpired, SignatureInvalid, MalformedMessage


class FakeClock:
    def __init__(self, now: float = 1700000000):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RejectAll:
    def verify(self, message, identity, signature):
        return False


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(clock):
    return Ledger(clock=clock, settings=Settings())


@pytest.fixture
def wallet():
    return WalletKeyPair.generate()


def register(ledger, wallet, star):
    message = ledger.request_challenge(wallet.identity)
    return ledger.submit(wallet.identity, message, wallet.sign_message(message), star)


def test_genesis_only(ledger):
    assert ledger.current_height == 0
    assert len(ledger) == 1

    genesis = ledger.get_block_by_height(0)
    assert genesis is not None
    assert genesis.height == 0
    assert genesis.previous_hash is None
    assert genesis.to_dict()["previousBlockHash"] is None
    assert "identity" not in genesis.decode_body()

    assert ledger.get_block_by_height(1) is None
    assert ledger.validate() == []


def test_request_challenge(ledger):
    assert ledger.request_challenge("addr1") == "addr1:1700000000:starRegistry"


def test_submit_star(ledger, wallet, clock):
    clock.advance(5)
    block = register(ledger, wallet, {"ra": "ra1", "dec": "dec1"})

    assert block.height == 1
    assert block.timestamp == 1700000005
    assert block.previous_hash == ledger.get_block_by_height(0).hash
    assert ledger.current_height == 1
    assert ledger.get_stars_by_identity(wallet.identity) == [{"ra": "ra1", "dec": "dec1"}]

    record = block.decode_payload()
    assert record.identity == wallet.identity
    assert record.message == f"{wallet.identity}:1700000005:starRegistry"


def test_heights_and_links_after_n_submissions(ledger, wallet):
    n = 6
    for i in range(n):
        register(ledger, wallet, {"ra": f"ra{i}", "dec": f"dec{i}"})

    assert ledger.current_height == n
    for i in range(n + 1):
        assert ledger.get_block_by_height(i) is not None
        assert ledger.get_block_by_height(i).height == i
    for i in range(1, n + 1):
        assert ledger.get_block_by_height(i).previous_hash == ledger.get_block_by_height(i - 1).hash
    assert ledger.get_last_hash() == ledger.get_block_by_height(n).hash
    assert ledger.validate() == []


def test_stars_by_identity_filters_and_keeps_order(ledger):
    alice, bob = WalletKeyPair.generate(), WalletKeyPair.generate()
    register(ledger, alice, {"ra": "a1", "dec": "a1"})
    register(ledger, bob, {"ra": "b1", "dec": "b1"})
    register(ledger, alice, {"ra": "a2", "dec": "a2", "story": "second"})

    assert ledger.get_stars_by_identity(alice.identity) == [
        {"ra": "a1", "dec": "a1"},
        {"ra": "a2", "dec": "a2", "story": "second"},
    ]
    assert ledger.get_stars_by_identity(bob.identity) == [{"ra": "b1", "dec": "b1"}]
    assert ledger.get_stars_by_identity("nobody") == []


def test_get_block_by_hash(ledger, wallet):
    block = register(ledger, wallet, {"ra": "ra1", "dec": "dec1"})
    assert ledger.get_block_by_hash(block.hash) == block
    assert ledger.get_block_by_hash("00" * 32) is None


@pytest.mark.parametrize("height", [-1, 1, 100])
def test_get_block_by_height_out_of_range(ledger, height):
    assert ledger.get_block_by_height(height) is None


def test_expired_challenge(ledger, wallet, clock):
    message = ledger.request_challenge(wallet.identity)
    signature = wallet.sign_message(message)
    clock.advance(301)

    with pytest.raises(ChallengeExpired) as exc:
        ledger.submit(wallet.identity, message, signature, {"ra": "ra1", "dec": "dec1"})
    assert exc.value.elapsed == 301
    assert ledger.current_height == 0


def test_challenge_at_expiry_boundary_accepted(ledger, wallet, clock):
    message = ledger.request_challenge(wallet.identity)
    signature = wallet.sign_message(message)
    clock.advance(300)

    block = ledger.submit(wallet.identity, message, signature, {"ra": "ra1", "dec": "dec1"})
    assert block.height == 1


def test_expiry_from_settings(clock, wallet):
    ledger = Ledger(clock=clock, settings=Settings(challenge_expiry_seconds=10))
    message = ledger.request_challenge(wallet.identity)
    clock.advance(11)
    with pytest.raises(ChallengeExpired):
        ledger.submit(wallet.identity, message, wallet.sign_message(message), {"ra": "1", "dec": "1"})


def test_invalid_signature(ledger, wallet):
    other = WalletKeyPair.generate()
    message = ledger.request_challenge(wallet.identity)

    with pytest.raises(SignatureInvalid):
        ledger.submit(wallet.identity, message, other.sign_message(message), {"ra": "ra1", "dec": "dec1"})
    with pytest.raises(SignatureInvalid):
        ledger.submit(wallet.identity, message, "not-a-signature", {"ra": "ra1", "dec": "dec1"})
    with pytest.raises(SignatureInvalid):
        ledger.submit("not-a-key", message, wallet.sign_message(message), {"ra": "ra1", "dec": "dec1"})
    with pytest.raises(SignatureInvalid):
        ledger.submit(wallet.identity, message, None, {"ra": "ra1", "dec": "dec1"})
    with pytest.raises(SignatureInvalid):
        ledger.submit(None, message, wallet.sign_message(message), {"ra": "ra1", "dec": "dec1"})
    assert ledger.current_height == 0


def test_custom_verifier_is_sole_arbiter(clock, wallet):
    ledger = Ledger(verifier=RejectAll(), clock=clock, settings=Settings())
    message = ledger.request_challenge(wallet.identity)
    with pytest.raises(SignatureInvalid):
        ledger.submit(wallet.identity, message, wallet.sign_message(message), {"ra": "1", "dec": "1"})
    assert len(ledger) == 1


def test_malformed_message(ledger, wallet):
    message = f"{wallet.identity}:yesterday:starRegistry"
    with pytest.raises(MalformedMessage):
        ledger.submit(wallet.identity, message, wallet.sign_message(message), {"ra": "1", "dec": "1"})
    assert ledger.current_height == 0


def test_star_must_be_mapping(ledger, wallet):
    message = ledger.request_challenge(wallet.identity)
    with pytest.raises(TypeError):
        ledger.submit(wallet.identity, message, wallet.sign_message(message), ["ra", "dec"])
    assert ledger.current_height == 0


def test_unrequested_but_well_formed_message_is_accepted(ledger, wallet):
    # no challenge registry: only the embedded time and the signature are checked
    message = f"{wallet.identity}:1699999990:starRegistry"
    block = ledger.submit(wallet.identity, message, wallet.sign_message(message), {"ra": "1", "dec": "1"})
    assert block.height == 1


def test_get_chain_is_a_copy(ledger):
    chain = ledger.get_chain()
    chain.clear()
    assert len(ledger) == 1


def test_concurrent_submissions():
    ledger = Ledger(settings=Settings())
    wallets = [WalletKeyPair.generate() for _ in range(8)]
    per_wallet = 10
    errors = []
    start = threading.Barrier(len(wallets))

    def worker(wallet):
        start.wait()
        try:
            for i in range(per_wallet):
                register(ledger, wallet, {"ra": f"ra{i}", "dec": f"dec{i}"})
        except Exception as e:  # surfaced below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(w,)) for w in wallets]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    n = len(wallets) * per_wallet
    assert errors == []
    assert ledger.current_height == n
    chain = ledger.get_chain()
    assert [b.height for b in chain] == list(range(n + 1))
    assert len({b.previous_hash for b in chain}) == n + 1
    assert ledger.validate() == []
    for w in wallets:
        assert len(ledger.get_stars_by_identity(w.identity)) == per_wallet
