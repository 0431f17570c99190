"""Main package initialization."""

__version__ = "0.1.0"
__author__ = "ZKShield Team"
__description__ = "Shielded-pool cryptographic core: notes, stealth addresses, note encryption and threshold voting"

from .crypto.domain_hash import init_poseidon, init_poseidon_blocking, poseidon_hash
from .core.note import Note, create_note
from .core.commitment import compute_commitment, verify_commitment
from .core.nullifier import (
    derive_nullifier_key,
    derive_spending_nullifier,
    derive_action_nullifier,
    derive_vote_nullifier,
)
from .core.keys import Keypair, create_keypair
from .core.stealth import StealthAddress, generate_stealth_address, derive_stealth_private_key, check_stealth_ownership
from .core.encryption import EncryptedNote, encrypt_note, decrypt_note, try_decrypt_note
from .core.elgamal import (
    ElGamalCiphertext,
    elgamal_encrypt,
    combine_shares,
    generate_dleq_proof,
    verify_dleq_proof,
)

__all__ = [
    "init_poseidon",
    "init_poseidon_blocking",
    "poseidon_hash",
    "Note",
    "create_note",
    "compute_commitment",
    "verify_commitment",
    "derive_nullifier_key",
    "derive_spending_nullifier",
    "derive_action_nullifier",
    "derive_vote_nullifier",
    "Keypair",
    "create_keypair",
    "StealthAddress",
    "generate_stealth_address",
    "derive_stealth_private_key",
    "check_stealth_ownership",
    "EncryptedNote",
    "encrypt_note",
    "decrypt_note",
    "try_decrypt_note",
    "ElGamalCiphertext",
    "elgamal_encrypt",
    "combine_shares",
    "generate_dleq_proof",
    "verify_dleq_proof",
]
