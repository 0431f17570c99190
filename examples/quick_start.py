#!/usr/bin/env python3
"""
Quick start guide for the zkshield core.

Run this to see a shielded transfer and an encrypted vote end to end.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from zkshield.config import configure_logging
from zkshield.core.commitment import compute_commitment
from zkshield.core.elgamal import (
    VoteOption,
    add_ballots,
    compute_ballot_decryption_shares,
    decrypt_tally,
    encrypt_vote,
    split_secret,
)
from zkshield.core.encryption import EncryptedNote, encrypt_note
from zkshield.core.keys import create_keypair
from zkshield.core.note import create_note
from zkshield.core.nullifier import InMemoryNullifierOracle
from zkshield.core.stealth import generate_stealth_address
from zkshield.core.wallet import ScanCandidate, scan_notes
from zkshield.crypto.babyjubjub import GENERATOR, derive_public_key, scalar_mul
from zkshield.crypto.domain_hash import init_poseidon_blocking
from zkshield.crypto.field import random_scalar
from zkshield.utils.encoding import field_to_hex


TOKEN = b"\x01" * 32


def main():
    """Run a simple example of the zkshield core."""

    print("=" * 70)
    print("ZKSHIELD QUICK START EXAMPLE")
    print("=" * 70)
    print()

    # Step 1: One-time hash setup
    print("Step 1: Initialize Poseidon")
    print("-" * 70)
    configure_logging()
    poseidon = init_poseidon_blocking()
    print(f"✓ Poseidon ready for widths {poseidon.widths}")
    print()

    # Step 2: Alice pays Bob at a stealth address
    print("Step 2: Alice sends 1,000,000 units to Bob")
    print("-" * 70)
    bob = create_keypair()
    address, _ = generate_stealth_address(bob.public_key)
    note = create_note(address.stealth_pubkey.x, TOKEN, 1_000_000)
    commitment = compute_commitment(note)
    wire = encrypt_note(note, bob.public_key).to_bytes()
    print(f"✓ Commitment: {field_to_hex(commitment)[:34]}...")
    print(f"  Encrypted note: {len(wire)} bytes")
    print()

    # Step 3: Bob scans and finds the note
    print("Step 3: Bob scans published notes")
    print("-" * 70)
    oracle = InMemoryNullifierOracle()
    candidates = [ScanCandidate(EncryptedNote.from_bytes(wire), leaf_index=0, commitment=commitment)]
    owned = scan_notes(candidates, bob, oracle)
    print(f"✓ Found {len(owned)} note(s), amount {owned[0].note.amount}")
    print()

    # Step 4: Bob spends it
    print("Step 4: Bob spends the note")
    print("-" * 70)
    oracle.register(owned[0].nullifier, reference="spend-1")
    print(f"✓ Nullifier published; rescan marks spent={scan_notes(candidates, bob, oracle)[0].spent}")
    print(f"  Replay accepted: {oracle.register(owned[0].nullifier)}")
    print()

    # Step 5: Encrypted vote with a 2-of-3 committee
    print("Step 5: Encrypted vote, 2-of-3 committee decryption")
    print("-" * 70)
    master = random_scalar()
    shares = split_secret(master, 2, 3)
    election_pubkey = derive_public_key(master)
    tally = add_ballots([
        encrypt_vote(3, VoteOption.YES, election_pubkey),
        encrypt_vote(2, VoteOption.NO, election_pubkey),
        encrypt_vote(4, VoteOption.YES, election_pubkey),
    ])
    submissions = [compute_ballot_decryption_shares(tally, index, share) for index, share in shares[:2]]
    for (index, share), submission in zip(shares, submissions):
        print(f"  Member {index} proofs valid: {submission.verify(derive_public_key(share), tally)}")
    results = decrypt_tally(tally, submissions, threshold=2)
    for option, point in results.items():
        total = next(m for m in range(10) if scalar_mul(GENERATOR, m) == point)
        print(f"✓ {option.name}: {total}")
    print()

    print("=" * 70)
    print("✓ QUICK START COMPLETE")
    print("=" * 70)
    print()


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)
