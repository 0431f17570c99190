"""Note commitments.

    commitment = Poseidon(COMMITMENT, stealthPubX, tokenId, amount, randomness)

A commitment binds every field of a note and hides it behind the fresh
randomness. It is published in place of the note and never reversed.
"""

from typing import Optional

from zkshield.core.note import Note
from zkshield.crypto.domain_hash import Domain, DomainHasher
from zkshield.crypto.field import validate_field_element
from zkshield.exceptions import InvalidFieldElementError


def compute_commitment(note: Note, hasher: Optional[DomainHasher] = None) -> int:
    """
    Compute the commitment of a note.

    Args:
        note: The note to commit to
        hasher: Domain hasher to use (defaults to the process-wide provider)

    Returns:
        int: Commitment field element

    Raises:
        NotInitializedError: If Poseidon has not been initialised
    """
    hasher = hasher or DomainHasher()
    return hasher.hash(
        [note.stealth_pub_x, note.token_id, note.amount, note.randomness],
        Domain.COMMITMENT,
    )


def verify_commitment(commitment: int, note: Note, hasher: Optional[DomainHasher] = None) -> bool:
    """
    Check that a commitment opens to the given note.

    Returns:
        bool: True if the recomputed commitment matches, False otherwise
            (including for a commitment that is not a canonical field element)
    """
    try:
        validate_field_element(commitment, name="commitment")
    except InvalidFieldElementError:
        return False
    return compute_commitment(note, hasher) == commitment

