"""
Prime-field arithmetic for the BN254 scalar field.

Every hash input, curve coordinate and witness value in the protocol is an
element of Z_P where P is the BN254 scalar field prime (the native field of
the Groth16/Circom proving system). Private keys and blinding factors are
instead reduced modulo N, the order of the BabyJubJub prime-order subgroup.

Field elements are plain Python ints in canonical form (0 <= v < P). The
functions here validate that form at the boundary and fail loudly with
InvalidFieldElementError instead of silently wrapping.
"""

import secrets
from typing import Union

from zkshield.exceptions import InvalidFieldElementError


# BN254 scalar field (Fr)
FIELD_MODULUS = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# BabyJubJub prime-order subgroup size
SUBGROUP_ORDER = 2736030358979909402780800718157159386076813972158567259200215660948447373041

FIELD_BYTES = 32


def validate_field_element(value: int, modulus: int = FIELD_MODULUS, name: str = "value") -> int:
    """
    Check that value is a canonical residue modulo modulus.

    Args:
        value: Candidate element
        modulus: Modulus the value must be reduced by (defaults to P)
        name: Label used in the error message

    Returns:
        int: The value unchanged

    Raises:
        InvalidFieldElementError: If value is not an int or is out of range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldElementError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value >= modulus:
        raise InvalidFieldElementError(f"{name} is not a canonical element modulo {modulus}")
    return value


def validate_scalar(value: int, name: str = "scalar") -> int:
    """Check that value is a canonical scalar modulo the subgroup order N."""
    return validate_field_element(value, SUBGROUP_ORDER, name)


def reduce_scalar(value: int) -> int:
    """Reduce an arbitrary non-negative integer (e.g. a hash output) modulo N."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidFieldElementError("scalar reduction needs a non-negative integer")
    return value % SUBGROUP_ORDER


# ── arithmetic ──────────────────────────────────────────────────────────

def field_add(a: int, b: int) -> int:
    validate_field_element(a, name="a")
    validate_field_element(b, name="b")
    return (a + b) % FIELD_MODULUS


def field_sub(a: int, b: int) -> int:
    validate_field_element(a, name="a")
    validate_field_element(b, name="b")
    return (a - b) % FIELD_MODULUS


def field_mul(a: int, b: int) -> int:
    validate_field_element(a, name="a")
    validate_field_element(b, name="b")
    return (a * b) % FIELD_MODULUS


def field_neg(a: int) -> int:
    validate_field_element(a, name="a")
    return (-a) % FIELD_MODULUS


def mod_inverse(a: int, modulus: int) -> int:
    """
    Multiplicative inverse via the extended Euclidean algorithm.

    Args:
        a: Value to invert, taken modulo modulus
        modulus: Prime modulus

    Returns:
        int: x with a*x = 1 (mod modulus)

    Raises:
        InvalidFieldElementError: If a is zero modulo modulus or not invertible
    """
    a %= modulus
    if a == 0:
        raise InvalidFieldElementError("cannot invert zero")
    # three-argument pow runs the extended Euclidean algorithm natively
    try:
        return pow(a, -1, modulus)
    except ValueError:
        raise InvalidFieldElementError("modular inverse does not exist") from None


def field_invert(a: int) -> int:
    """Inverse in Z_P. Fails for zero."""
    validate_field_element(a, name="a")
    return mod_inverse(a, FIELD_MODULUS)


# ── byte codecs ─────────────────────────────────────────────────────────

def bytes_to_field(data: Union[bytes, bytearray]) -> int:
    """
    Lift bytes to a field element (big-endian, reduced mod P).

    This is the lenient lifting applied to hash inputs; use
    field_from_bytes when a canonical 32-byte encoding is required.
    """
    if not isinstance(data, (bytes, bytearray)):
        raise InvalidFieldElementError(f"expected bytes, got {type(data).__name__}")
    return int.from_bytes(data, "big") % FIELD_MODULUS


def field_to_bytes(value: int) -> bytes:
    """Encode a canonical field element as 32 bytes big-endian."""
    validate_field_element(value)
    return value.to_bytes(FIELD_BYTES, "big")


def field_from_bytes(data: Union[bytes, bytearray]) -> int:
    """
    Decode a strict 32-byte big-endian field element.

    Raises:
        InvalidFieldElementError: If the length is wrong or the value is >= P
    """
    if not isinstance(data, (bytes, bytearray)) or len(data) != FIELD_BYTES:
        raise InvalidFieldElementError(f"field element encoding must be {FIELD_BYTES} bytes")
    value = int.from_bytes(data, "big")
    return validate_field_element(value, name="encoded field element")


def scalar_to_bytes(value: int) -> bytes:
    validate_scalar(value)
    return value.to_bytes(FIELD_BYTES, "big")


def scalar_from_bytes(data: Union[bytes, bytearray]) -> int:
    """Decode a strict 32-byte big-endian scalar (< N)."""
    if not isinstance(data, (bytes, bytearray)) or len(data) != FIELD_BYTES:
        raise InvalidFieldElementError(f"scalar encoding must be {FIELD_BYTES} bytes")
    return validate_scalar(int.from_bytes(data, "big"), name="encoded scalar")


# ── sampling ────────────────────────────────────────────────────────────

def random_field_element() -> int:
    """Uniform element of Z_P from the OS CSPRNG."""
    return secrets.randbelow(FIELD_MODULUS)


def random_scalar() -> int:
    """Uniform non-zero scalar in [1, N-1]."""
    return secrets.randbelow(SUBGROUP_ORDER - 1) + 1
