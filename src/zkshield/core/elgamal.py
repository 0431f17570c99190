"""
Threshold ElGamal for encrypted voting.

Lifted ElGamal over BabyJubJub:

    c1 = r*G
    c2 = m*G + r*pk

Ciphertexts add component-wise, so a tally is the sum of all ballots and is
decrypted once. The election key is Shamir-shared among a committee; each
member publishes D_i = sk_i * c1 with a Chaum-Pedersen (DLEQ) proof that
log_G(pk_i) == log_c1(D_i). Any threshold-sized subset recovers

    m*G = c2 - sum(lambda_i * D_i)

where lambda_i are Lagrange coefficients at x = 0. Recovering m from m*G is
a bounded discrete-log search left to the caller.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple

from zkshield.crypto.babyjubjub import (
    GENERATOR,
    IDENTITY,
    POINT_BYTES,
    Point,
    derive_public_key,
    is_in_subgroup,
    scalar_mul,
    validate_point,
)
from zkshield.crypto.domain_hash import DomainHasher
from zkshield.crypto.field import (
    FIELD_BYTES,
    FIELD_MODULUS,
    SUBGROUP_ORDER,
    field_from_bytes,
    mod_inverse,
    random_scalar,
    validate_scalar,
)
from zkshield.exceptions import (
    DeserializationError,
    DuplicateIndexError,
    InsufficientSharesError,
    InvalidFieldElementError,
    InvalidPointError,
    InvalidShareIndexError,
)

logger = logging.getLogger(__name__)


# ── ciphertexts ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ElGamalCiphertext:
    """Lifted ElGamal ciphertext (c1, c2)."""

    c1: Point
    c2: Point

    def __add__(self, other: "ElGamalCiphertext") -> "ElGamalCiphertext":
        if not isinstance(other, ElGamalCiphertext):
            return NotImplemented
        return add_ciphertexts(self, other)

    def to_bytes(self) -> bytes:
        """Compact form c1.x[32] || c2.x[32]."""
        return self.c1.x.to_bytes(FIELD_BYTES, "big") + self.c2.x.to_bytes(FIELD_BYTES, "big")

    def to_bytes_full(self) -> bytes:
        """Full form c1.x || c1.y || c2.x || c2.y (128 bytes)."""
        return self.c1.to_bytes() + self.c2.to_bytes()

    @classmethod
    def from_bytes_full(cls, data: bytes) -> "ElGamalCiphertext":
        if len(data) != 2 * POINT_BYTES:
            raise DeserializationError(f"ciphertext must be {2 * POINT_BYTES} bytes")
        return cls(
            c1=Point.from_bytes(data[:POINT_BYTES]),
            c2=Point.from_bytes(data[POINT_BYTES:]),
        )


def elgamal_encrypt(message: int, pubkey: Point, randomness: int) -> ElGamalCiphertext:
    """
    Encrypt m as (r*G, m*G + r*pk).

    Args:
        message: Scalar to encrypt (e.g. voting power)
        pubkey: Election public key
        randomness: Fresh non-zero scalar; never reuse it across encryptions

    Raises:
        InvalidFieldElementError: If message or randomness is not a scalar,
            or randomness is zero
        InvalidPointError: If pubkey is not on the curve
    """
    validate_scalar(message, name="message")
    validate_scalar(randomness, name="randomness")
    if randomness == 0:
        raise InvalidFieldElementError("encryption randomness must be non-zero")
    validate_point(pubkey)

    c1 = scalar_mul(GENERATOR, randomness)
    c2 = scalar_mul(GENERATOR, message) + scalar_mul(pubkey, randomness)
    return ElGamalCiphertext(c1, c2)


def add_ciphertexts(a: ElGamalCiphertext, b: ElGamalCiphertext) -> ElGamalCiphertext:
    """Homomorphic addition: Enc(m1) + Enc(m2) = Enc(m1 + m2)."""
    return ElGamalCiphertext(a.c1 + b.c1, a.c2 + b.c2)


# ── ballots ─────────────────────────────────────────────────────────────

class VoteOption(IntEnum):
    YES = 0
    NO = 1
    ABSTAIN = 2


@dataclass(frozen=True)
class EncryptedBallot:
    """
    One ciphertext per option.

    The chosen option encrypts the voting power, the others encrypt zero, so
    summing ballots tallies every option without revealing any single vote.
    """

    yes: ElGamalCiphertext
    no: ElGamalCiphertext
    abstain: ElGamalCiphertext

    def __getitem__(self, option: VoteOption) -> ElGamalCiphertext:
        return self.ciphertexts()[VoteOption(option)]

    def __add__(self, other: "EncryptedBallot") -> "EncryptedBallot":
        if not isinstance(other, EncryptedBallot):
            return NotImplemented
        return EncryptedBallot(self.yes + other.yes, self.no + other.no, self.abstain + other.abstain)

    def ciphertexts(self) -> Dict[VoteOption, ElGamalCiphertext]:
        return {VoteOption.YES: self.yes, VoteOption.NO: self.no, VoteOption.ABSTAIN: self.abstain}

    def serialize(self) -> List[bytes]:
        """Compact 64-byte ciphertexts in option order."""
        return [ct.to_bytes() for ct in self.ciphertexts().values()]


def generate_vote_randomness() -> Dict[VoteOption, int]:
    """Independent fresh randomness for every option."""
    return {option: random_scalar() for option in VoteOption}


def encrypt_vote(
    voting_power: int,
    choice: VoteOption,
    election_pubkey: Point,
    randomness: Optional[Dict[VoteOption, int]] = None,
) -> EncryptedBallot:
    """
    Encrypt a ballot.

    Args:
        voting_power: Weight of the vote
        choice: Selected option
        election_pubkey: Committee's joint public key
        randomness: Per-option randomness (generated when omitted)

    Returns:
        EncryptedBallot

    Raises:
        ValueError: If randomness is missing an option or reuses a value
        InvalidPointError: If election_pubkey is not a subgroup point
    """
    choice = VoteOption(choice)
    validate_point(election_pubkey, check_subgroup=True)
    randomness = randomness if randomness is not None else generate_vote_randomness()

    if set(randomness) != set(VoteOption):
        raise ValueError("randomness must cover every vote option")
    if len(set(randomness.values())) != len(randomness):
        raise ValueError("randomness must be distinct per option")

    encrypted = {
        option: elgamal_encrypt(voting_power if option == choice else 0, election_pubkey, randomness[option])
        for option in VoteOption
    }
    return EncryptedBallot(
        yes=encrypted[VoteOption.YES],
        no=encrypted[VoteOption.NO],
        abstain=encrypted[VoteOption.ABSTAIN],
    )


def add_ballots(ballots: Sequence[EncryptedBallot]) -> EncryptedBallot:
    """Sum ballots option-wise into an encrypted tally."""
    if not ballots:
        raise ValueError("no ballots to add")
    total = ballots[0]
    for ballot in ballots[1:]:
        total = total + ballot
    return total


# ── Shamir sharing and Lagrange combination ─────────────────────────────

def split_secret(secret: int, threshold: int, num_shares: int) -> List[Tuple[int, int]]:
    """
    Deal Shamir shares of secret over Z_N.

    Returns:
        List of (index, share) with indices 1..num_shares

    Raises:
        ValueError: If threshold is not within 1..num_shares
    """
    validate_scalar(secret, name="secret")
    if not 1 <= threshold <= num_shares:
        raise ValueError(f"threshold must be between 1 and {num_shares}")

    coefficients = [secret] + [random_scalar() for _ in range(threshold - 1)]
    shares = []
    for index in range(1, num_shares + 1):
        value = 0
        for coefficient in reversed(coefficients):
            value = (value * index + coefficient) % SUBGROUP_ORDER
        shares.append((index, value))
    return shares


def _check_indices(indices: Sequence[int], field_order: int) -> None:
    seen = set()
    for index in indices:
        if isinstance(index, bool) or not isinstance(index, int) or index <= 0 or index % field_order == 0:
            raise InvalidShareIndexError(f"share index must be a positive integer, got {index!r}")
        residue = index % field_order
        if residue in seen:
            raise DuplicateIndexError(f"share index {index} repeats another index mod {field_order}")
        seen.add(residue)


def lagrange_coefficient(indices: Sequence[int], my_index: int, field_order: int = SUBGROUP_ORDER) -> int:
    """
    Lagrange basis polynomial for my_index evaluated at x = 0.

        lambda_i = prod_{j != i} j / (j - i)   (mod field_order)

    Raises:
        DuplicateIndexError: If indices repeat
        InvalidShareIndexError: If an index is not positive or my_index is absent
    """
    _check_indices(indices, field_order)
    if my_index not in indices:
        raise InvalidShareIndexError(f"index {my_index} is not among the participants")

    numerator = 1
    denominator = 1
    for j in indices:
        if j == my_index:
            continue
        numerator = numerator * j % field_order
        denominator = denominator * (j - my_index) % field_order
    return numerator * mod_inverse(denominator, field_order) % field_order


def compute_decryption_share(ciphertext: ElGamalCiphertext, secret_share: int) -> Point:
    """Partial decryption D_i = sk_i * c1."""
    validate_scalar(secret_share, name="secret_share")
    return scalar_mul(ciphertext.c1, secret_share)


def combine_shares(
    ciphertext: ElGamalCiphertext,
    shares: Sequence[Point],
    indices: Sequence[int],
    field_order: int = SUBGROUP_ORDER,
    threshold: Optional[int] = None,
) -> Point:
    """
    Recover the lifted message m*G from threshold decryption shares.

    Args:
        ciphertext: (Aggregated) ciphertext
        shares: Decryption shares D_i
        indices: Committee index of each share, 1-based
        field_order: Order the Lagrange coefficients are computed over
        threshold: Minimum number of shares required, if known

    Returns:
        Point: c2 - sum(lambda_i * D_i)

    Raises:
        InsufficientSharesError: No shares, or fewer than threshold
        DuplicateIndexError: An index appears twice
        InvalidShareIndexError: A non-positive index
        InvalidPointError: A share outside the prime-order subgroup
        ValueError: If shares and indices differ in length
    """
    if len(shares) != len(indices):
        raise ValueError("shares and indices must have the same length")
    if not shares:
        raise InsufficientSharesError("no decryption shares supplied")
    if threshold is not None and len(shares) < threshold:
        raise InsufficientSharesError(f"need {threshold} shares, got {len(shares)}")
    _check_indices(indices, field_order)
    for share in shares:
        validate_point(share, check_subgroup=True)

    combined = IDENTITY
    for share, index in zip(shares, indices):
        combined = combined + scalar_mul(share, lagrange_coefficient(indices, index, field_order))

    logger.debug("Combined %d decryption shares", len(shares))
    return ciphertext.c2 - combined


# ── DLEQ proofs ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DleqProof:
    """Chaum-Pedersen proof (challenge c, response s)."""

    challenge: int
    response: int

    def to_bytes(self) -> bytes:
        return self.challenge.to_bytes(FIELD_BYTES, "big") + self.response.to_bytes(FIELD_BYTES, "big")

    @classmethod
    def from_bytes(cls, data: bytes) -> "DleqProof":
        if len(data) != 2 * FIELD_BYTES:
            raise DeserializationError(f"DLEQ proof must be {2 * FIELD_BYTES} bytes")
        try:
            return cls(field_from_bytes(data[:FIELD_BYTES]), field_from_bytes(data[FIELD_BYTES:]))
        except InvalidFieldElementError as e:
            raise DeserializationError(f"invalid DLEQ proof: {e}") from e


def _dleq_challenge(
    public_key: Point,
    c1: Point,
    share: Point,
    commitment_g: Point,
    commitment_c1: Point,
    hasher: DomainHasher,
) -> int:
    return hasher.hash([
        GENERATOR.x, GENERATOR.y,
        public_key.x, public_key.y,
        c1.x, c1.y,
        share.x, share.y,
        commitment_g.x, commitment_g.y,
        commitment_c1.x, commitment_c1.y,
    ])


def generate_dleq_proof(
    secret_key: int,
    public_key: Point,
    c1: Point,
    decryption_share: Point,
    hasher: Optional[DomainHasher] = None,
) -> DleqProof:
    """
    Prove log_G(public_key) == log_c1(decryption_share).

        k <- random,  A = k*G,  B = k*c1
        c = Poseidon(G, P, c1, D, A, B)
        s = k - c*sk  (mod N)
    """
    validate_scalar(secret_key, name="secret_key")
    hasher = hasher or DomainHasher()

    k = random_scalar()
    challenge = _dleq_challenge(
        public_key, c1, decryption_share, scalar_mul(GENERATOR, k), scalar_mul(c1, k), hasher
    )
    response = (k - challenge * secret_key) % SUBGROUP_ORDER
    return DleqProof(challenge, response)


def verify_dleq_proof(
    proof: DleqProof,
    public_key: Point,
    c1: Point,
    decryption_share: Point,
    hasher: Optional[DomainHasher] = None,
) -> bool:
    """
    Check a DLEQ proof.

        A' = s*G + c*P,  B' = s*c1 + c*D,  accept iff c == Poseidon(G, P, c1, D, A', B')

    Returns:
        bool: False for out-of-range proof values and for points that are
            malformed or outside the prime-order subgroup; never raises
    """
    hasher = hasher or DomainHasher()
    if not 0 <= proof.challenge < FIELD_MODULUS or not 0 <= proof.response < SUBGROUP_ORDER:
        return False
    try:
        if not all(is_in_subgroup(point) for point in (public_key, c1, decryption_share)):
            return False
        a_prime = scalar_mul(GENERATOR, proof.response) + scalar_mul(public_key, proof.challenge)
        b_prime = scalar_mul(c1, proof.response) + scalar_mul(decryption_share, proof.challenge)
        expected = _dleq_challenge(public_key, c1, decryption_share, a_prime, b_prime, hasher)
    except (InvalidPointError, InvalidFieldElementError):
        return False
    return expected == proof.challenge


# ── committee tally ─────────────────────────────────────────────────────

@dataclass
class DecryptionShareData:
    """A committee member's shares and proofs for every option of a tally."""

    member_index: int
    shares: List[Point] = field(default_factory=list)
    proofs: List[DleqProof] = field(default_factory=list)

    def verify(self, public_share: Point, tally: EncryptedBallot, hasher: Optional[DomainHasher] = None) -> bool:
        """Check every per-option proof against the member's public share."""
        ciphertexts = list(tally.ciphertexts().values())
        if len(self.shares) != len(ciphertexts) or len(self.proofs) != len(ciphertexts):
            return False
        return all(
            verify_dleq_proof(proof, public_share, ct.c1, share, hasher)
            for ct, share, proof in zip(ciphertexts, self.shares, self.proofs)
        )


def compute_ballot_decryption_shares(
    tally: EncryptedBallot,
    member_index: int,
    secret_share: int,
    hasher: Optional[DomainHasher] = None,
) -> DecryptionShareData:
    """Produce a member's decryption share and DLEQ proof for each option."""
    public_share = derive_public_key(secret_share)
    data = DecryptionShareData(member_index=member_index)
    for ciphertext in tally.ciphertexts().values():
        share = compute_decryption_share(ciphertext, secret_share)
        data.shares.append(share)
        data.proofs.append(generate_dleq_proof(secret_share, public_share, ciphertext.c1, share, hasher))
    return data


def decrypt_tally(
    tally: EncryptedBallot,
    submissions: Sequence[DecryptionShareData],
    threshold: Optional[int] = None,
) -> Dict[VoteOption, Point]:
    """
    Combine committee submissions into the lifted total of each option.

    Proofs are not checked here; callers verify each submission first.
    """
    indices = [submission.member_index for submission in submissions]
    return {
        option: combine_shares(
            ciphertext,
            [submission.shares[position] for submission in submissions],
            indices,
            threshold=threshold,
        )
        for position, (option, ciphertext) in enumerate(tally.ciphertexts().items())
    }
