"""
Wallet key hierarchy.

    sk   spending key, a scalar in [1, N-1]
    nk = Poseidon(NULLIFIER_KEY, sk, 0)   nullifier key
    ivk = Poseidon(IVK, sk)               incoming viewing key
    pk = sk * G                           receiving public key

(nk, ivk) together form the viewing key that can be handed to a watch-only
scanner without granting spend authority.
"""

from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from zkshield.core.nullifier import derive_nullifier_key
from zkshield.crypto.babyjubjub import Point, derive_public_key
from zkshield.crypto.domain_hash import Domain, DomainHasher
from zkshield.crypto.field import (
    SUBGROUP_ORDER,
    random_scalar,
    scalar_from_bytes,
    scalar_to_bytes,
    validate_scalar,
)
from zkshield.exceptions import InvalidFieldElementError


SEED_KDF_ITERATIONS = 100_000
DEFAULT_DERIVATION_PATH = "m/44'/501'/0'/0'"


@dataclass(frozen=True)
class ViewingKey:
    """Watch-only key material."""

    nullifier_key: int
    incoming_viewing_key: int


@dataclass(frozen=True)
class Keypair:
    """Full key set derived from one spending key."""

    spending_key: int
    viewing: ViewingKey
    public_key: Point

    @property
    def nullifier_key(self) -> int:
        return self.viewing.nullifier_key

    def export_spending_key(self) -> bytes:
        return scalar_to_bytes(self.spending_key)


def keypair_from_scalar(spending_key: int, hasher: Optional[DomainHasher] = None) -> Keypair:
    """
    Derive the full key set from a spending scalar.

    Raises:
        InvalidFieldElementError: If spending_key is zero or not below N
    """
    validate_scalar(spending_key, name="spending_key")
    if spending_key == 0:
        raise InvalidFieldElementError("spending key must be non-zero")

    hasher = hasher or DomainHasher()
    sk_bytes = scalar_to_bytes(spending_key)
    viewing = ViewingKey(
        nullifier_key=derive_nullifier_key(sk_bytes, hasher),
        incoming_viewing_key=hasher.hash([sk_bytes], Domain.IVK),
    )
    return Keypair(
        spending_key=spending_key,
        viewing=viewing,
        public_key=derive_public_key(spending_key),
    )


def keypair_from_spending_key(spending_key: bytes, hasher: Optional[DomainHasher] = None) -> Keypair:
    """Load a keypair from an exported 32-byte spending key."""
    return keypair_from_scalar(scalar_from_bytes(spending_key), hasher)


def create_keypair(hasher: Optional[DomainHasher] = None) -> Keypair:
    """Fresh random keypair."""
    return keypair_from_scalar(random_scalar(), hasher)


def derive_keypair_from_seed(
    seed_phrase: str,
    path: str = DEFAULT_DERIVATION_PATH,
    hasher: Optional[DomainHasher] = None,
) -> Keypair:
    """
    Deterministic keypair from a seed phrase.

    PBKDF2-HMAC-SHA256 with salt "zkshield" + path; the 256-bit output is
    reduced mod N.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=("zkshield" + path).encode("utf-8"),
        iterations=SEED_KDF_ITERATIONS,
    )
    material = kdf.derive(seed_phrase.encode("utf-8"))
    spending_key = int.from_bytes(material, "big") % SUBGROUP_ORDER
    if spending_key == 0:
        raise InvalidFieldElementError("seed derived a zero spending key")
    return keypair_from_scalar(spending_key, hasher)
