"""Tests for wallet note scanning."""

from zkshield.core.commitment import compute_commitment
from zkshield.core.encryption import encrypt_note
from zkshield.core.keys import create_keypair
from zkshield.core.note import create_note
from zkshield.core.nullifier import InMemoryNullifierOracle, derive_spending_nullifier
from zkshield.core.stealth import derive_stealth_private_key, generate_stealth_address
from zkshield.core.wallet import ScanCandidate, balance, scan_notes, unspent


def _publish(note, recipient_pubkey, leaf_index, with_commitment=True):
    return ScanCandidate(
        encrypted_note=encrypt_note(note, recipient_pubkey),
        leaf_index=leaf_index,
        commitment=compute_commitment(note) if with_commitment else None,
    )


class TestScanNotes:
    """Tests for trial decryption over candidate notes."""

    def test_finds_only_own_notes(self, keypair, token_id):
        other = create_keypair()
        mine = create_note(keypair.public_key.x, token_id, 10)
        theirs = create_note(other.public_key.x, token_id, 20)
        candidates = [
            _publish(theirs, other.public_key, 0),
            _publish(mine, keypair.public_key, 1),
        ]

        owned = scan_notes(candidates, keypair)
        assert len(owned) == 1
        assert owned[0].note == mine
        assert owned[0].leaf_index == 1
        assert owned[0].commitment == compute_commitment(mine)
        assert owned[0].nullifier == derive_spending_nullifier(keypair.nullifier_key, owned[0].commitment, 1)
        assert owned[0].spent is None

    def test_commitment_optional(self, keypair, token_id):
        note = create_note(keypair.public_key.x, token_id, 10)
        owned = scan_notes([_publish(note, keypair.public_key, 4, with_commitment=False)], keypair)
        assert owned[0].commitment == compute_commitment(note)

    def test_mismatched_commitment_skipped(self, keypair, token_id):
        note = create_note(keypair.public_key.x, token_id, 10)
        candidate = ScanCandidate(
            encrypted_note=encrypt_note(note, keypair.public_key),
            leaf_index=0,
            commitment=compute_commitment(create_note(keypair.public_key.x, token_id, 10)),
        )
        assert scan_notes([candidate], keypair) == []

    def test_spent_status_from_oracle(self, keypair, token_id):
        first = create_note(keypair.public_key.x, token_id, 10)
        second = create_note(keypair.public_key.x, token_id, 15)
        candidates = [_publish(first, keypair.public_key, 0), _publish(second, keypair.public_key, 1)]

        oracle = InMemoryNullifierOracle()
        owned = scan_notes(candidates, keypair, oracle)
        assert [o.spent for o in owned] == [False, False]

        oracle.register(owned[0].nullifier)
        owned = scan_notes(candidates, keypair, oracle)
        assert [o.spent for o in owned] == [True, False]
        assert [o.note for o in unspent(owned)] == [second]
        assert balance(owned, token_id) == 15
        assert balance(owned, b"\xff" * 32) == 0

    def test_stealth_addressed_note(self, keypair, token_id):
        address, _ = generate_stealth_address(keypair.public_key)
        note = create_note(address.stealth_pubkey.x, token_id, 7)
        stealth_private = derive_stealth_private_key(keypair.spending_key, address.ephemeral_pubkey)

        candidate = _publish(note, address.stealth_pubkey, 2)
        assert scan_notes([candidate], keypair) == []
        owned = scan_notes([candidate], keypair, decryption_key=stealth_private)
        assert owned[0].note == note
