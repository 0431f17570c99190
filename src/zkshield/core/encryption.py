"""
ECIES-style note encryption.

    1. e <- random scalar, E = e*G
    2. S = e * recipient_pubkey
    3. key = SHA-256("cloakcraft-ecies-key" || S.x)
    4. nonce <- 12 random bytes
    5. seal the 104-byte note plaintext under (key, nonce) with a cipher suite

Wire form:
    E.x[32] || E.y[32] || len[4, LE] || nonce[12] || encrypted || tag[16]
where len counts nonce || encrypted.

Two suites share that layout:

- ``hash-stream``: the deployed construction. Keystream block 0 is
  SHA-256(key || nonce); the block starting at byte offset o >= 32 is
  SHA-256(key || nonce || o[2, BE]), so the counter runs 32, 64, 96, ...
  encrypted = plaintext XOR keystream and tag = SHA-256(key || nonce ||
  encrypted)[:16]. This is a bespoke hash-based construction, kept for
  compatibility with existing ciphertexts, not a general-purpose AEAD.
- ``chacha20-poly1305``: the RFC 8439 AEAD from the cryptography package.

Scanning code calls try_decrypt_note on every candidate; any failure there
just means "not addressed to this key".
"""

import hmac
import logging
import secrets
import struct
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from zkshield.core.note import Note
from zkshield.crypto.babyjubjub import (
    POINT_BYTES,
    Point,
    derive_public_key,
    scalar_mul,
    validate_point,
)
from zkshield.crypto.field import FIELD_BYTES, random_scalar, validate_scalar
from zkshield.exceptions import (
    AuthenticationFailedError,
    DecryptionError,
    DeserializationError,
    EncryptionError,
    ZKShieldException,
)
from zkshield.utils.hash import hash_concatenate

logger = logging.getLogger(__name__)


KEY_DERIVATION_LABEL = b"cloakcraft-ecies-key"
NONCE_SIZE = 12
TAG_SIZE = 16
LENGTH_PREFIX_SIZE = 4
KEYSTREAM_BLOCK_SIZE = 32
MAX_KEYSTREAM_BYTES = 1 << 16


@dataclass(frozen=True)
class EncryptedNote:
    """
    Encrypted note payload.

    Attributes:
        ephemeral_pubkey: Sender's one-time ECDH key E
        ciphertext: nonce[12] || encrypted bytes
        tag: 16-byte authentication tag
    """

    ephemeral_pubkey: Point
    ciphertext: bytes
    tag: bytes

    def __post_init__(self):
        validate_point(self.ephemeral_pubkey)
        if len(self.tag) != TAG_SIZE:
            raise DeserializationError(f"tag must be {TAG_SIZE} bytes")
        if len(self.ciphertext) < NONCE_SIZE:
            raise DeserializationError("ciphertext shorter than its nonce")

    @property
    def nonce(self) -> bytes:
        return self.ciphertext[:NONCE_SIZE]

    @property
    def encrypted(self) -> bytes:
        return self.ciphertext[NONCE_SIZE:]

    def to_bytes(self) -> bytes:
        return (
            self.ephemeral_pubkey.to_bytes()
            + struct.pack("<I", len(self.ciphertext))
            + self.ciphertext
            + self.tag
        )

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray]) -> "EncryptedNote":
        """
        Parse the wire form.

        Raises:
            DeserializationError: On truncated or trailing data
            InvalidPointError: If the ephemeral key is not a subgroup point
        """
        header = POINT_BYTES + LENGTH_PREFIX_SIZE
        if len(data) < header + NONCE_SIZE + TAG_SIZE:
            raise DeserializationError(f"encrypted note too short ({len(data)} bytes)")

        ephemeral_pubkey = Point.from_bytes(data[:POINT_BYTES], check_subgroup=True)
        (length,) = struct.unpack("<I", data[POINT_BYTES:header])
        if len(data) != header + length + TAG_SIZE:
            raise DeserializationError(
                f"length prefix {length} does not match payload size {len(data) - header - TAG_SIZE}"
            )
        ciphertext = bytes(data[header:header + length])
        tag = bytes(data[header + length:])
        return cls(ephemeral_pubkey, ciphertext, tag)


# ── cipher suites ───────────────────────────────────────────────────────

class NoteCipherSuite:
    """Symmetric layer: seal/open a plaintext under a 32-byte key and 12-byte nonce."""

    name = ""

    def seal(self, key: bytes, nonce: bytes, plaintext: bytes) -> Tuple[bytes, bytes]:
        """Return (encrypted, tag)."""
        raise NotImplementedError

    def open(self, key: bytes, nonce: bytes, encrypted: bytes, tag: bytes) -> bytes:
        """Return the plaintext or raise AuthenticationFailedError."""
        raise NotImplementedError


class HashStreamSuite(NoteCipherSuite):
    """SHA-256 keystream with a truncated SHA-256 tag (deployed format)."""

    name = "hash-stream"

    @staticmethod
    def keystream(key: bytes, nonce: bytes, length: int) -> bytes:
        if length > MAX_KEYSTREAM_BYTES:
            raise EncryptionError("plaintext too long for a 16-bit offset counter")
        stream = bytearray()
        for offset in range(0, length, KEYSTREAM_BLOCK_SIZE):
            if offset == 0:
                stream += hash_concatenate(key, nonce)
            else:
                stream += hash_concatenate(key, nonce, offset.to_bytes(2, "big"))
        return bytes(stream[:length])

    @staticmethod
    def compute_tag(key: bytes, nonce: bytes, encrypted: bytes) -> bytes:
        return hash_concatenate(key, nonce, encrypted)[:TAG_SIZE]

    def seal(self, key: bytes, nonce: bytes, plaintext: bytes) -> Tuple[bytes, bytes]:
        stream = self.keystream(key, nonce, len(plaintext))
        encrypted = bytes(p ^ k for p, k in zip(plaintext, stream))
        return encrypted, self.compute_tag(key, nonce, encrypted)

    def open(self, key: bytes, nonce: bytes, encrypted: bytes, tag: bytes) -> bytes:
        expected = self.compute_tag(key, nonce, encrypted)
        # all 16 bytes are compared regardless of where a mismatch occurs
        if not hmac.compare_digest(expected, tag):
            raise AuthenticationFailedError("note authentication failed")
        stream = self.keystream(key, nonce, len(encrypted))
        return bytes(c ^ k for c, k in zip(encrypted, stream))


class ChaCha20Poly1305Suite(NoteCipherSuite):
    """RFC 8439 ChaCha20-Poly1305 from the cryptography package."""

    name = "chacha20-poly1305"

    def seal(self, key: bytes, nonce: bytes, plaintext: bytes) -> Tuple[bytes, bytes]:
        sealed = ChaCha20Poly1305(key).encrypt(nonce, plaintext, None)
        return sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]

    def open(self, key: bytes, nonce: bytes, encrypted: bytes, tag: bytes) -> bytes:
        try:
            return ChaCha20Poly1305(key).decrypt(nonce, encrypted + tag, None)
        except InvalidTag:
            raise AuthenticationFailedError("note authentication failed") from None


CIPHER_SUITES: Dict[str, NoteCipherSuite] = {
    suite.name: suite for suite in (HashStreamSuite(), ChaCha20Poly1305Suite())
}


def get_cipher_suite(name: Optional[str] = None) -> NoteCipherSuite:
    """Suite by name; None selects the configured default."""
    if name is None:
        from zkshield.config import get_settings

        name = get_settings().note_cipher
    try:
        return CIPHER_SUITES[name]
    except KeyError:
        raise ValueError(f"unknown note cipher suite {name!r}") from None


# ── ECIES ───────────────────────────────────────────────────────────────

def derive_encryption_key(shared_secret: Point) -> bytes:
    """32-byte symmetric key from the ECDH shared point's x-coordinate."""
    return hash_concatenate(KEY_DERIVATION_LABEL, shared_secret.x.to_bytes(FIELD_BYTES, "big"))


def encrypt_note(note: Note, recipient_pubkey: Point, suite: Optional[str] = None) -> EncryptedNote:
    """
    Encrypt a note to a recipient's public key.

    Args:
        note: Note to encrypt
        recipient_pubkey: Recipient's public key (must be a subgroup point)
        suite: Cipher suite name (defaults to the configured suite)

    Returns:
        EncryptedNote: Fresh ephemeral key, nonce and tag on every call

    Raises:
        InvalidPointError: If recipient_pubkey is not a subgroup point
    """
    validate_point(recipient_pubkey, check_subgroup=True)
    cipher = get_cipher_suite(suite)

    ephemeral_private = random_scalar()
    ephemeral_pubkey = derive_public_key(ephemeral_private)
    key = derive_encryption_key(scalar_mul(recipient_pubkey, ephemeral_private))

    nonce = secrets.token_bytes(NONCE_SIZE)
    encrypted, tag = cipher.seal(key, nonce, note.to_bytes())

    return EncryptedNote(ephemeral_pubkey=ephemeral_pubkey, ciphertext=nonce + encrypted, tag=tag)


def decrypt_note(encrypted: EncryptedNote, recipient_private_key: int, suite: Optional[str] = None) -> Note:
    """
    Decrypt a note with the recipient's private key.

    Raises:
        AuthenticationFailedError: Wrong key or corrupted ciphertext
        DecryptionError: If the authenticated plaintext is not a valid note
    """
    validate_scalar(recipient_private_key, name="recipient_private_key")
    cipher = get_cipher_suite(suite)

    key = derive_encryption_key(scalar_mul(encrypted.ephemeral_pubkey, recipient_private_key))
    plaintext = cipher.open(key, encrypted.nonce, encrypted.encrypted, encrypted.tag)

    try:
        return Note.from_bytes(plaintext)
    except (DeserializationError, ValueError) as e:
        raise DecryptionError(f"decrypted payload is not a note: {e}") from e


def try_decrypt_note(
    encrypted: EncryptedNote,
    recipient_private_key: int,
    suite: Optional[str] = None,
) -> Optional[Note]:
    """Decrypt, or return None if the note is not addressed to this key."""
    try:
        return decrypt_note(encrypted, recipient_private_key, suite)
    except (ZKShieldException, ValueError) as e:
        logger.debug("Note not decryptable with this key: %s", e)
        return None
