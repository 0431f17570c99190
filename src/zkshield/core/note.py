"""Shielded note value type and its 104-byte plaintext layout."""

from dataclasses import dataclass
from typing import Optional, Union

from zkshield.crypto.field import (
    FIELD_BYTES,
    field_from_bytes,
    random_field_element,
    validate_field_element,
)
from zkshield.exceptions import DeserializationError, InvalidFieldElementError


TOKEN_ID_SIZE = 32
AMOUNT_SIZE = 8
MAX_AMOUNT = 2 ** 64 - 1

# stealthPubX[32] || tokenId[32] || amount[8, LE] || randomness[32]
NOTE_PLAINTEXT_SIZE = FIELD_BYTES + TOKEN_ID_SIZE + AMOUNT_SIZE + FIELD_BYTES


@dataclass(frozen=True)
class Note:
    """
    A shielded note.

    Attributes:
        stealth_pub_x: x-coordinate of the one-time stealth public key
        token_id: 32-byte token identifier (e.g. a mint address)
        amount: 64-bit unsigned amount
        randomness: commitment blinding value, fresh per note
    """

    stealth_pub_x: int
    token_id: bytes
    amount: int
    randomness: int

    def __post_init__(self):
        validate_field_element(self.stealth_pub_x, name="stealth_pub_x")
        validate_field_element(self.randomness, name="randomness")
        if not isinstance(self.token_id, (bytes, bytearray)) or len(self.token_id) != TOKEN_ID_SIZE:
            raise ValueError(f"token_id must be {TOKEN_ID_SIZE} bytes")
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise InvalidFieldElementError("amount must be an integer")
        if not 0 <= self.amount <= MAX_AMOUNT:
            raise InvalidFieldElementError("amount must fit in an unsigned 64-bit integer")
        if isinstance(self.token_id, bytearray):
            object.__setattr__(self, "token_id", bytes(self.token_id))

    def to_bytes(self) -> bytes:
        """Serialize to the fixed 104-byte plaintext layout."""
        return (
            self.stealth_pub_x.to_bytes(FIELD_BYTES, "big")
            + self.token_id
            + self.amount.to_bytes(AMOUNT_SIZE, "little")
            + self.randomness.to_bytes(FIELD_BYTES, "big")
        )

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray]) -> "Note":
        """
        Parse the 104-byte plaintext layout.

        Raises:
            DeserializationError: On wrong length or non-canonical field values
        """
        if len(data) != NOTE_PLAINTEXT_SIZE:
            raise DeserializationError(
                f"note plaintext must be {NOTE_PLAINTEXT_SIZE} bytes, got {len(data)}"
            )
        offset = 0
        try:
            stealth_pub_x = field_from_bytes(data[offset:offset + FIELD_BYTES])
            offset += FIELD_BYTES
            token_id = bytes(data[offset:offset + TOKEN_ID_SIZE])
            offset += TOKEN_ID_SIZE
            amount = int.from_bytes(data[offset:offset + AMOUNT_SIZE], "little")
            offset += AMOUNT_SIZE
            randomness = field_from_bytes(data[offset:offset + FIELD_BYTES])
        except InvalidFieldElementError as e:
            raise DeserializationError(f"malformed note plaintext: {e}") from e
        return cls(stealth_pub_x, token_id, amount, randomness)


def generate_randomness() -> int:
    """Fresh commitment randomness from the OS CSPRNG."""
    return random_field_element()


def create_note(
    stealth_pub_x: int,
    token_id: bytes,
    amount: int,
    randomness: Optional[int] = None,
) -> Note:
    """Build a note, sampling randomness unless one is supplied."""
    return Note(
        stealth_pub_x=stealth_pub_x,
        token_id=token_id,
        amount=amount,
        randomness=generate_randomness() if randomness is None else randomness,
    )
