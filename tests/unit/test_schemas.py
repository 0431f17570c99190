"""Tests for boundary data models."""

import pytest
from pydantic import ValidationError

from zkshield.core.commitment import compute_commitment
from zkshield.core.elgamal import (
    VoteOption,
    compute_ballot_decryption_shares,
    encrypt_vote,
)
from zkshield.core.encryption import decrypt_note, encrypt_note
from zkshield.crypto.babyjubjub import derive_public_key
from zkshield.crypto.field import FIELD_MODULUS, random_field_element, random_scalar
from zkshield.crypto.merkle import empty_leaf, merkle_node
from zkshield.exceptions import DeserializationError
from zkshield.models.schemas import (
    DecryptionShareSubmission,
    EncryptedNoteRecord,
    MerklePathResponse,
    ProofResponse,
    ProverWitness,
)
from zkshield.utils.encoding import field_to_hex


class TestMerklePathResponse:
    """Tests for the Merkle-path provider payload."""

    def test_verify(self):
        leaf = random_field_element()
        sibling = empty_leaf()
        uncle = random_field_element()
        root = merkle_node(uncle, merkle_node(sibling, leaf))
        response = MerklePathResponse(
            root=field_to_hex(root),
            path_elements=[field_to_hex(sibling), field_to_hex(uncle)],
            path_indices=[1, 1],
            leaf_index=3,
        )
        assert response.verify(leaf)
        assert not response.verify(random_field_element())

    def test_rejects_non_canonical_root(self):
        with pytest.raises(ValidationError):
            MerklePathResponse(
                root="0x" + FIELD_MODULUS.to_bytes(32, "big").hex(),
                path_elements=[],
                path_indices=[],
                leaf_index=0,
            )

    def test_rejects_bad_indices(self):
        with pytest.raises(ValidationError):
            MerklePathResponse(root=field_to_hex(1), path_elements=[field_to_hex(2)], path_indices=[2], leaf_index=0)

    def test_rejects_depth_mismatch(self):
        with pytest.raises(ValidationError):
            MerklePathResponse(root=field_to_hex(1), path_elements=[field_to_hex(2)], path_indices=[], leaf_index=0)


class TestProverModels:
    """Tests for prover witness and proof payloads."""

    def test_witness_from_values(self):
        witness = ProverWitness.from_values("transfer", {"root": 12, "path": [1, 2, 3]})
        assert witness.inputs == {"root": "12", "path": ["1", "2", "3"]}

    def test_witness_rejects_non_decimal(self):
        with pytest.raises(ValidationError):
            ProverWitness(circuit="transfer", inputs={"root": "0x12"})

    def test_proof_size(self):
        response = ProofResponse(circuit="transfer", proof="0x" + "ab" * 256)
        assert len(response.proof_bytes()) == 256
        with pytest.raises(ValidationError):
            ProofResponse(circuit="transfer", proof="0x" + "ab" * 255)


class TestEncryptedNoteRecord:
    """Tests for the indexer record of an encrypted note."""

    def test_round_trip(self, keypair, note):
        encrypted = encrypt_note(note, keypair.public_key)
        record = EncryptedNoteRecord.from_note(compute_commitment(note), 9, encrypted)
        restored = EncryptedNoteRecord.model_validate_json(record.model_dump_json())
        assert restored.commitment_value() == compute_commitment(note)
        assert decrypt_note(restored.to_encrypted_note(), keypair.spending_key) == note

    def test_rejects_bad_commitment(self):
        with pytest.raises(ValidationError):
            EncryptedNoteRecord(commitment="0x1234", leaf_index=0, encrypted_note="0x")


class TestDecryptionShareSubmission:
    """Tests for committee share submissions."""

    def test_round_trip(self):
        secret = random_scalar()
        tally = encrypt_vote(3, VoteOption.YES, derive_public_key(secret))
        data = compute_ballot_decryption_shares(tally, 1, secret)

        submission = DecryptionShareSubmission.from_share_data("ballot-1", data)
        decoded = submission.to_share_data()
        assert decoded.member_index == 1
        assert decoded.shares == data.shares
        assert decoded.proofs == data.proofs
        assert decoded.verify(derive_public_key(secret), tally)

    def test_requires_one_share_per_option(self):
        with pytest.raises(ValidationError):
            DecryptionShareSubmission(ballot_id="b", member_index=1, shares=[], proofs=[])

    def test_malformed_hex(self):
        submission = DecryptionShareSubmission(
            ballot_id="b",
            member_index=1,
            shares=["zz"] * len(VoteOption),
            proofs=["zz"] * len(VoteOption),
        )
        with pytest.raises(DeserializationError):
            submission.to_share_data()
