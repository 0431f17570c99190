"""
Wallet-side note scanning.

The scanner is handed every published encrypted note together with its
tree position. It trial-decrypts each one, keeps the notes addressed to the
wallet, recomputes their commitments and spending nullifiers, and asks the
membership oracle which of them have already been spent.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from zkshield.core.commitment import compute_commitment
from zkshield.core.encryption import EncryptedNote, try_decrypt_note
from zkshield.core.keys import Keypair
from zkshield.core.note import Note
from zkshield.core.nullifier import NullifierOracle, derive_spending_nullifier
from zkshield.crypto.domain_hash import DomainHasher
from zkshield.crypto.field import field_to_bytes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanCandidate:
    """A published encrypted note and where it sits in the commitment tree."""

    encrypted_note: EncryptedNote
    leaf_index: int
    commitment: Optional[int] = None


@dataclass(frozen=True)
class OwnedNote:
    """A decrypted note belonging to the scanning wallet."""

    note: Note
    commitment: int
    leaf_index: int
    nullifier: int
    spent: Optional[bool] = None


def scan_notes(
    candidates: Iterable[ScanCandidate],
    keypair: Keypair,
    oracle: Optional[NullifierOracle] = None,
    decryption_key: Optional[int] = None,
    suite: Optional[str] = None,
    hasher: Optional[DomainHasher] = None,
) -> List[OwnedNote]:
    """
    Find the wallet's notes among candidate ciphertexts.

    Args:
        candidates: Published notes to scan
        keypair: Wallet keys; the nullifier key comes from here
        oracle: Membership oracle for spent status (None leaves spent unset)
        decryption_key: Private scalar to decrypt with (defaults to the
            spending key)
        suite: Cipher suite the notes were encrypted with
        hasher: Domain hasher to use

    Returns:
        Owned notes in candidate order. A candidate whose published
        commitment does not match its decrypted contents is skipped.
    """
    hasher = hasher or DomainHasher()
    private_key = keypair.spending_key if decryption_key is None else decryption_key

    owned = []
    for candidate in candidates:
        note = try_decrypt_note(candidate.encrypted_note, private_key, suite)
        if note is None:
            continue

        commitment = compute_commitment(note, hasher)
        if candidate.commitment is not None and candidate.commitment != commitment:
            logger.warning("Decrypted note at leaf %d does not match its commitment", candidate.leaf_index)
            continue

        nullifier = derive_spending_nullifier(keypair.nullifier_key, commitment, candidate.leaf_index, hasher)
        spent = oracle.exists(field_to_bytes(nullifier)) if oracle is not None else None
        owned.append(OwnedNote(note, commitment, candidate.leaf_index, nullifier, spent))

    logger.debug("Scan found %d owned notes", len(owned))
    return owned


def unspent(notes: Iterable[OwnedNote]) -> List[OwnedNote]:
    """Notes the oracle did not report as spent."""
    return [owned for owned in notes if not owned.spent]


def balance(notes: Iterable[OwnedNote], token_id: bytes) -> int:
    """Sum of unspent amounts for one token."""
    return sum(owned.note.amount for owned in unspent(notes) if owned.note.token_id == token_id)
