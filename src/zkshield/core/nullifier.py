"""Nullifier derivation.

    nk                 = Poseidon(NULLIFIER_KEY, sk, 0)
    spending_nullifier = Poseidon(SPEND_NULLIFIER, nk, commitment, leaf_index)
    action_nullifier   = Poseidon(ACTION_NULLIFIER, nk, commitment, action_domain)

Publishing a spending nullifier marks a note spent. Binding the leaf index
means the same commitment appearing at two tree positions yields two
unrelated nullifiers. Action nullifiers mark a one-time action (such as a
vote on one ballot) without consuming the note.

Whether a nullifier was already published is answered by an external
membership oracle; NullifierOracle is the seam the scanning layer calls
through, and InMemoryNullifierOracle is a local implementation of it.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol, Union

from zkshield.crypto.domain_hash import Domain, DomainHasher
from zkshield.crypto.field import FIELD_BYTES, field_to_bytes, validate_field_element
from zkshield.exceptions import InvalidFieldElementError
from zkshield.utils.encoding import bytes_to_hex


KeyInput = Union[int, bytes, bytearray]


def derive_nullifier_key(spending_key: KeyInput, hasher: Optional[DomainHasher] = None) -> int:
    """
    Derive the nullifier key from a spending key.

    Args:
        spending_key: 32-byte spending key, or the spending scalar itself

    Returns:
        int: nk = Poseidon(NULLIFIER_KEY, sk, 0)
    """
    if isinstance(spending_key, (bytes, bytearray)) and len(spending_key) != FIELD_BYTES:
        raise InvalidFieldElementError(f"spending key must be {FIELD_BYTES} bytes")
    hasher = hasher or DomainHasher()
    return hasher.hash([spending_key, 0], Domain.NULLIFIER_KEY)


def derive_spending_nullifier(
    nullifier_key: int,
    commitment: int,
    leaf_index: int,
    hasher: Optional[DomainHasher] = None,
) -> int:
    """
    Derive the nullifier that consumes the note at leaf_index.

    Raises:
        InvalidFieldElementError: If any input is not a canonical field element
    """
    validate_field_element(leaf_index, name="leaf_index")
    hasher = hasher or DomainHasher()
    return hasher.hash([nullifier_key, commitment, leaf_index], Domain.SPEND_NULLIFIER)


def derive_action_nullifier(
    nullifier_key: int,
    commitment: int,
    action_domain: KeyInput,
    hasher: Optional[DomainHasher] = None,
) -> int:
    """Derive a nullifier for a one-time action scoped by action_domain."""
    hasher = hasher or DomainHasher()
    return hasher.hash([nullifier_key, commitment, action_domain], Domain.ACTION_NULLIFIER)


def derive_vote_nullifier(
    nullifier_key: int,
    commitment: int,
    ballot_id: KeyInput,
    hasher: Optional[DomainHasher] = None,
) -> int:
    """
    Nullifier published when voting on a ballot with the note behind commitment.

    Always the domain-tagged action nullifier with the ballot id as action
    domain, so a note votes at most once per ballot and stays spendable.
    """
    return derive_action_nullifier(nullifier_key, commitment, ballot_id, hasher)


# ── membership oracle seam ─────────────────────────────────────────────

class NullifierOracle(Protocol):
    """Answers whether a nullifier (or commitment) has been published."""

    def exists(self, value: bytes) -> bool:
        ...


@dataclass
class NullifierRecord:
    """Record of a published nullifier."""

    nullifier: str
    reference: Optional[str]
    spent_at: str

    def serialize(self) -> str:
        return json.dumps(
            {"nullifier": self.nullifier, "reference": self.reference, "spent_at": self.spent_at}
        )


class InMemoryNullifierOracle:
    """
    Local set of published nullifiers.

    Key properties:
      - Every nullifier is accepted once; a second registration is a double-spend
      - The set only grows
    """

    def __init__(self):
        self.records: Dict[bytes, NullifierRecord] = {}

    def register(self, nullifier: Union[int, bytes], reference: Optional[str] = None) -> bool:
        """
        Publish a nullifier.

        Args:
            nullifier: Field element or its 32-byte encoding
            reference: Optional transaction reference

        Returns:
            True if newly registered, False if it was already published
        """
        key = _nullifier_key_bytes(nullifier)
        if key in self.records:
            return False
        self.records[key] = NullifierRecord(
            nullifier=bytes_to_hex(key),
            reference=reference,
            spent_at=datetime.now(timezone.utc).isoformat(),
        )
        return True

    def exists(self, value: Union[int, bytes]) -> bool:
        return _nullifier_key_bytes(value) in self.records

    def get_record(self, nullifier: Union[int, bytes]) -> Optional[NullifierRecord]:
        return self.records.get(_nullifier_key_bytes(nullifier))

    @property
    def size(self) -> int:
        return len(self.records)


def _nullifier_key_bytes(value: Union[int, bytes, bytearray]) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        if len(value) != FIELD_BYTES:
            raise InvalidFieldElementError(f"nullifier must be {FIELD_BYTES} bytes")
        return bytes(value)
    return field_to_bytes(value)
