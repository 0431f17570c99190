"""Property-based tests using Hypothesis for cryptographic invariants."""

from hypothesis import HealthCheck, given, settings, strategies as st

from zkshield.core.commitment import compute_commitment, verify_commitment
from zkshield.core.elgamal import combine_shares, compute_decryption_share, elgamal_encrypt
from zkshield.core.encryption import decrypt_note, encrypt_note
from zkshield.core.keys import keypair_from_scalar
from zkshield.core.note import MAX_AMOUNT, Note
from zkshield.core.nullifier import derive_spending_nullifier
from zkshield.core.stealth import check_stealth_ownership, generate_stealth_address
from zkshield.crypto.babyjubjub import GENERATOR, is_in_subgroup, is_on_curve, scalar_mul
from zkshield.crypto.field import FIELD_MODULUS, SUBGROUP_ORDER


scalars = st.integers(min_value=1, max_value=SUBGROUP_ORDER - 1)
field_elements = st.integers(min_value=0, max_value=FIELD_MODULUS - 1)
notes = st.builds(
    Note,
    stealth_pub_x=field_elements,
    token_id=st.binary(min_size=32, max_size=32),
    amount=st.integers(min_value=0, max_value=MAX_AMOUNT),
    randomness=field_elements,
)

SLOW = settings(max_examples=10, deadline=None, suppress_health_check=[HealthCheck.too_slow])


class TestCryptographicProperties:
    """Property-based tests for system invariants."""

    @given(scalars)
    @SLOW
    def test_scalar_mul_stays_in_subgroup(self, scalar: int):
        """Property: s*G is on the curve and in the prime-order subgroup."""
        point = scalar_mul(GENERATOR, scalar)
        assert is_on_curve(point)
        assert is_in_subgroup(point)

    @given(notes)
    @SLOW
    def test_commitment_opens(self, note: Note):
        """Property: a note always opens its own commitment."""
        assert verify_commitment(compute_commitment(note), note)

    @given(notes, st.integers(min_value=1, max_value=MAX_AMOUNT))
    @SLOW
    def test_commitment_binds_amount(self, note: Note, delta: int):
        """Property: changing the amount breaks the opening."""
        altered = Note(note.stealth_pub_x, note.token_id, (note.amount + delta) % (MAX_AMOUNT + 1), note.randomness)
        assert not verify_commitment(compute_commitment(note), altered)

    @given(field_elements, field_elements, st.integers(min_value=0, max_value=2**32), st.integers(min_value=1, max_value=2**16))
    @SLOW
    def test_leaf_index_changes_nullifier(self, nk: int, commitment: int, leaf_index: int, shift: int):
        """Property: the same commitment at another position has another nullifier."""
        first = derive_spending_nullifier(nk, commitment, leaf_index)
        second = derive_spending_nullifier(nk, commitment, leaf_index + shift)
        assert first != second

    @given(notes, scalars)
    @SLOW
    def test_encryption_round_trip(self, note: Note, secret: int):
        """Property: decrypt(encrypt(n, pk), sk) == n."""
        keypair = keypair_from_scalar(secret)
        assert decrypt_note(encrypt_note(note, keypair.public_key), secret) == note

    @given(scalars)
    @SLOW
    def test_stealth_ownership(self, secret: int):
        """Property: a stealth address is recognised by its recipient."""
        keypair = keypair_from_scalar(secret)
        address, _ = generate_stealth_address(keypair.public_key)
        assert check_stealth_ownership(address.stealth_pubkey, address.ephemeral_pubkey, keypair)

    @given(st.integers(min_value=0, max_value=2**32), st.integers(min_value=0, max_value=2**32), scalars)
    @SLOW
    def test_elgamal_homomorphism(self, a: int, b: int, secret: int):
        """Property: Enc(a) + Enc(b) decrypts to (a + b)*G."""
        pubkey = scalar_mul(GENERATOR, secret)
        total = elgamal_encrypt(a, pubkey, 11) + elgamal_encrypt(b, pubkey, 13)
        share = compute_decryption_share(total, secret)
        assert combine_shares(total, [share], [1]) == scalar_mul(GENERATOR, a + b)
