"""Pydantic data models for the collaborator boundary."""

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from zkshield.core.elgamal import DecryptionShareData, DleqProof, VoteOption
from zkshield.core.encryption import EncryptedNote
from zkshield.crypto.babyjubjub import Point
from zkshield.crypto.domain_hash import DomainHasher
from zkshield.crypto.merkle import verify_merkle_path
from zkshield.exceptions import DeserializationError, InvalidFieldElementError
from zkshield.utils.encoding import bytes_to_hex, field_to_hex, hex_to_bytes, hex_to_field


PROOF_SIZE = 256


def _check_field_hex(value: str) -> str:
    try:
        hex_to_field(value)
    except (ValueError, InvalidFieldElementError) as e:
        raise ValueError(f"not a canonical 32-byte field element: {value!r}") from e
    return value.lower()


class MerklePathResponse(BaseModel):
    """Authentication path returned by the Merkle-path provider."""
    root: str = Field(..., description="Merkle root (hex)")
    path_elements: List[str] = Field(..., description="Sibling per level, leaf level first (hex)")
    path_indices: List[int] = Field(..., description="0 = left child, 1 = right child")
    leaf_index: int = Field(..., ge=0, description="Leaf index in tree")

    @field_validator("root")
    @classmethod
    def _root_is_field(cls, value: str) -> str:
        return _check_field_hex(value)

    @field_validator("path_elements")
    @classmethod
    def _elements_are_fields(cls, value: List[str]) -> List[str]:
        return [_check_field_hex(element) for element in value]

    @field_validator("path_indices")
    @classmethod
    def _indices_are_bits(cls, value: List[int]) -> List[int]:
        if any(index not in (0, 1) for index in value):
            raise ValueError("path indices must be 0 or 1")
        return value

    @model_validator(mode="after")
    def _same_depth(self) -> "MerklePathResponse":
        if len(self.path_elements) != len(self.path_indices):
            raise ValueError("path_elements and path_indices must have the same length")
        return self

    def verify(self, leaf: int, hasher: Optional[DomainHasher] = None) -> bool:
        """Check that this path connects leaf to root."""
        return verify_merkle_path(
            leaf,
            hex_to_field(self.root),
            [hex_to_field(element) for element in self.path_elements],
            self.path_indices,
            hasher,
        )


WitnessValue = Union[str, List[str]]


class ProverWitness(BaseModel):
    """Named witness inputs for the remote prover, as decimal field-element strings."""
    circuit: str = Field(..., description="Circuit identifier")
    inputs: Dict[str, WitnessValue] = Field(default_factory=dict)

    @field_validator("inputs")
    @classmethod
    def _inputs_are_decimal(cls, value: Dict[str, WitnessValue]) -> Dict[str, WitnessValue]:
        for name, item in value.items():
            for element in (item if isinstance(item, list) else [item]):
                if not element.isdigit():
                    raise ValueError(f"witness input {name!r} must be decimal digits")
        return value

    @classmethod
    def from_values(cls, circuit: str, values: Dict[str, Union[int, List[int]]]) -> "ProverWitness":
        inputs: Dict[str, WitnessValue] = {}
        for name, item in values.items():
            inputs[name] = [str(v) for v in item] if isinstance(item, list) else str(item)
        return cls(circuit=circuit, inputs=inputs)


class ProofResponse(BaseModel):
    """Proof returned by the remote prover."""
    circuit: str
    proof: str = Field(..., description=f"Proof bytes (hex, {PROOF_SIZE} bytes)")
    public_inputs: List[str] = Field(default_factory=list)

    @field_validator("proof")
    @classmethod
    def _proof_size(cls, value: str) -> str:
        if len(hex_to_bytes(value)) != PROOF_SIZE:
            raise ValueError(f"proof must be {PROOF_SIZE} bytes")
        return value

    def proof_bytes(self) -> bytes:
        return hex_to_bytes(self.proof)


class EncryptedNoteRecord(BaseModel):
    """Published encrypted note as stored by the indexer."""
    commitment: str = Field(..., description="Commitment (hex)")
    leaf_index: int = Field(..., ge=0)
    encrypted_note: str = Field(..., description="Encrypted note wire form (hex)")
    created_at: datetime = Field(default_factory=datetime.now)

    class Config:
        from_attributes = True

    @field_validator("commitment")
    @classmethod
    def _commitment_is_field(cls, value: str) -> str:
        return _check_field_hex(value)

    @classmethod
    def from_note(cls, commitment: int, leaf_index: int, encrypted: EncryptedNote) -> "EncryptedNoteRecord":
        return cls(
            commitment=field_to_hex(commitment),
            leaf_index=leaf_index,
            encrypted_note=bytes_to_hex(encrypted.to_bytes()),
        )

    def to_encrypted_note(self) -> EncryptedNote:
        return EncryptedNote.from_bytes(hex_to_bytes(self.encrypted_note))

    def commitment_value(self) -> int:
        return hex_to_field(self.commitment)


class DecryptionShareSubmission(BaseModel):
    """A committee member's decryption shares for a tally, one per vote option."""
    ballot_id: str
    member_index: int = Field(..., gt=0, description="Committee index (1-based)")
    shares: List[str] = Field(..., description="Decryption share points (hex, 64 bytes each)")
    proofs: List[str] = Field(..., description="DLEQ proofs (hex, 64 bytes each)")

    @model_validator(mode="after")
    def _one_per_option(self) -> "DecryptionShareSubmission":
        if len(self.shares) != len(VoteOption) or len(self.proofs) != len(VoteOption):
            raise ValueError(f"expected {len(VoteOption)} shares and proofs")
        return self

    @classmethod
    def from_share_data(cls, ballot_id: str, data: DecryptionShareData) -> "DecryptionShareSubmission":
        return cls(
            ballot_id=ballot_id,
            member_index=data.member_index,
            shares=[bytes_to_hex(share.to_bytes()) for share in data.shares],
            proofs=[bytes_to_hex(proof.to_bytes()) for proof in data.proofs],
        )

    def to_share_data(self) -> DecryptionShareData:
        """
        Decode the submission.

        Raises:
            DeserializationError: If a share or proof is not valid hex
            InvalidPointError: If a share is not a subgroup point
        """
        try:
            share_bytes = [hex_to_bytes(share) for share in self.shares]
            proof_bytes = [hex_to_bytes(proof) for proof in self.proofs]
        except ValueError as e:
            raise DeserializationError(f"malformed submission encoding: {e}") from e
        return DecryptionShareData(
            member_index=self.member_index,
            shares=[Point.from_bytes(data) for data in share_bytes],
            proofs=[DleqProof.from_bytes(data) for data in proof_bytes],
        )
