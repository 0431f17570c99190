"""
Dual-key stealth addresses over BabyJubJub.

Sender:
    1. e <- random scalar, E = e*G
    2. S = e * recipient_pubkey
    3. f = Poseidon(STEALTH, S.x) mod N
    4. stealth_pubkey = recipient_pubkey + f*G

Recipient:
    S' = sk * E (= S by Diffie-Hellman commutativity)
    stealth private key = (sk + f) mod N

Only the holder of sk can recognise or spend from stealth_pubkey; E is
published next to the note so the recipient can recompute f.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from zkshield.core.keys import Keypair
from zkshield.crypto.babyjubjub import (
    GENERATOR,
    Point,
    derive_public_key,
    point_add,
    scalar_mul,
    validate_point,
)
from zkshield.crypto.domain_hash import Domain, DomainHasher
from zkshield.crypto.field import SUBGROUP_ORDER, random_scalar, validate_scalar
from zkshield.exceptions import InvalidFieldElementError, InvalidPointError


@dataclass(frozen=True)
class StealthAddress:
    """One-time receiving key and the ephemeral key needed to recognise it."""

    stealth_pubkey: Point
    ephemeral_pubkey: Point


def _stealth_factor(shared_secret: Point, hasher: DomainHasher) -> int:
    return hasher.hash([shared_secret.x], Domain.STEALTH) % SUBGROUP_ORDER


def generate_stealth_address(
    recipient_pubkey: Point,
    hasher: Optional[DomainHasher] = None,
) -> Tuple[StealthAddress, int]:
    """
    Derive a fresh stealth address for a recipient.

    Args:
        recipient_pubkey: Recipient's long-term public key

    Returns:
        (StealthAddress, ephemeral private scalar)

    Raises:
        InvalidPointError: If recipient_pubkey is not a subgroup point
    """
    validate_point(recipient_pubkey, check_subgroup=True)
    hasher = hasher or DomainHasher()

    ephemeral_private = random_scalar()
    ephemeral_pubkey = derive_public_key(ephemeral_private)
    shared_secret = scalar_mul(recipient_pubkey, ephemeral_private)

    factor = _stealth_factor(shared_secret, hasher)
    stealth_pubkey = point_add(recipient_pubkey, scalar_mul(GENERATOR, factor))

    return StealthAddress(stealth_pubkey, ephemeral_pubkey), ephemeral_private


def derive_stealth_private_key(
    recipient_private_key: int,
    ephemeral_pubkey: Point,
    hasher: Optional[DomainHasher] = None,
) -> int:
    """
    Recover the private scalar behind a stealth address.

    Raises:
        InvalidFieldElementError: If recipient_private_key is not a scalar
        InvalidPointError: If ephemeral_pubkey is not on the curve
    """
    validate_scalar(recipient_private_key, name="recipient_private_key")
    hasher = hasher or DomainHasher()
    shared_secret = scalar_mul(ephemeral_pubkey, recipient_private_key)
    factor = _stealth_factor(shared_secret, hasher)
    return (recipient_private_key + factor) % SUBGROUP_ORDER


def check_stealth_ownership(
    stealth_pubkey: Point,
    ephemeral_pubkey: Point,
    keypair: Keypair,
    hasher: Optional[DomainHasher] = None,
) -> bool:
    """True if stealth_pubkey was generated for keypair's public key."""
    try:
        stealth_private = derive_stealth_private_key(keypair.spending_key, ephemeral_pubkey, hasher)
    except (InvalidPointError, InvalidFieldElementError):
        return False
    derived = derive_public_key(stealth_private)
    return derived.x == stealth_pubkey.x and derived.y == stealth_pubkey.y
