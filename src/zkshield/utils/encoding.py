"""Encoding and decoding utilities."""

from zkshield.crypto.field import field_from_bytes, field_to_bytes


def bytes_to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string.

    Args:
        data: Bytes to convert

    Returns:
        str: Hexadecimal string with '0x' prefix
    """
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """
    Convert hexadecimal string to bytes.

    Args:
        hex_str: Hexadecimal string (with or without '0x' prefix)

    Returns:
        bytes: Decoded bytes

    Raises:
        ValueError: If hex string is invalid
    """
    if hex_str.startswith("0x"):
        hex_str = hex_str[2:]

    if len(hex_str) % 2 != 0:
        raise ValueError("Hex string must have even number of characters")

    return bytes.fromhex(hex_str)


def field_to_hex(value: int) -> str:
    """Canonical field element as a 0x-prefixed 64-digit hex string."""
    return bytes_to_hex(field_to_bytes(value))


def hex_to_field(hex_str: str) -> int:
    """Strict inverse of field_to_hex (exactly 32 bytes, canonical)."""
    return field_from_bytes(hex_to_bytes(hex_str))
