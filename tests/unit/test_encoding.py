"""Tests for encoding and hashing utilities."""

import hashlib

import pytest

from zkshield.crypto.field import FIELD_MODULUS
from zkshield.exceptions import InvalidFieldElementError
from zkshield.utils.encoding import bytes_to_hex, field_to_hex, hex_to_bytes, hex_to_field
from zkshield.utils.hash import hash_concatenate


class TestHexEncoding:
    """Test hex conversion helpers."""

    def test_bytes_to_hex_basic(self):
        assert bytes_to_hex(b"hello") == "0x68656c6c6f"

    def test_bytes_to_hex_empty(self):
        assert bytes_to_hex(b"") == "0x"

    def test_hex_to_bytes_with_and_without_prefix(self):
        assert hex_to_bytes("0x68656c6c6f") == b"hello"
        assert hex_to_bytes("68656c6c6f") == b"hello"

    def test_hex_to_bytes_case_insensitive(self):
        assert hex_to_bytes("0xFFfe") == b"\xff\xfe"

    def test_hex_to_bytes_odd_length_error(self):
        with pytest.raises(ValueError):
            hex_to_bytes("0x123")

    def test_hex_to_bytes_invalid_chars(self):
        with pytest.raises(ValueError):
            hex_to_bytes("0xzz")


class TestFieldHex:
    """Test field element hex helpers."""

    def test_field_to_hex_is_padded(self):
        assert field_to_hex(1) == "0x" + "00" * 31 + "01"

    def test_hex_to_field(self):
        assert hex_to_field(field_to_hex(FIELD_MODULUS - 1)) == FIELD_MODULUS - 1

    def test_hex_to_field_is_strict(self):
        with pytest.raises(InvalidFieldElementError):
            hex_to_field("0x01")
        with pytest.raises(InvalidFieldElementError):
            hex_to_field("0x" + FIELD_MODULUS.to_bytes(32, "big").hex())


class TestHashConcatenate:
    """Test SHA-256 over concatenated parts."""

    def test_matches_single_digest(self):
        assert hash_concatenate(b"ab", b"cd") == hashlib.sha256(b"abcd").digest()

    def test_strings_are_utf8(self):
        assert hash_concatenate("ab", b"cd") == hash_concatenate(b"abcd")
