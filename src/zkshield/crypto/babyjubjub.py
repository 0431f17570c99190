"""
BabyJubJub twisted Edwards curve arithmetic.

The curve  a*x^2 + y^2 = 1 + d*x^2*y^2  is defined over the BN254 scalar
field, so its coordinates are native witness values for the proving system.
Scalars are reduced modulo N, the order of the prime-order subgroup
generated by GENERATOR (circomlib's Base8).

Addition uses the complete twisted Edwards formula: a is a square and d is
a non-square in Z_P, so the denominators never vanish for points on the
curve and the identity (0, 1) needs no special case.
"""

from dataclasses import dataclass
from typing import Union

from zkshield.crypto.field import (
    FIELD_MODULUS,
    FIELD_BYTES,
    SUBGROUP_ORDER,
    mod_inverse,
    field_from_bytes,
    validate_field_element,
)
from zkshield.exceptions import InvalidPointError, InvalidFieldElementError


# Curve parameters
A = 168700
D = 168696

POINT_BYTES = 2 * FIELD_BYTES


@dataclass(frozen=True)
class Point:
    """Affine point (x, y) with canonical field coordinates."""

    x: int
    y: int

    def __post_init__(self):
        try:
            validate_field_element(self.x, name="x")
            validate_field_element(self.y, name="y")
        except InvalidFieldElementError as e:
            raise InvalidPointError(f"invalid point coordinate: {e}") from e

    def to_bytes(self) -> bytes:
        """x[32] || y[32], both big-endian."""
        return self.x.to_bytes(FIELD_BYTES, "big") + self.y.to_bytes(FIELD_BYTES, "big")

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray], check_subgroup: bool = True) -> "Point":
        """
        Decode a 64-byte point and validate it.

        Args:
            data: x[32] || y[32]
            check_subgroup: Also require membership in the order-N subgroup

        Raises:
            InvalidPointError: On bad length, non-canonical coordinates,
                off-curve points or (optionally) points outside the subgroup
        """
        if not isinstance(data, (bytes, bytearray)) or len(data) != POINT_BYTES:
            raise InvalidPointError(f"point encoding must be {POINT_BYTES} bytes")
        try:
            x = field_from_bytes(data[:FIELD_BYTES])
            y = field_from_bytes(data[FIELD_BYTES:])
        except InvalidFieldElementError as e:
            raise InvalidPointError(f"invalid point coordinate: {e}") from e
        point = cls(x, y)
        validate_point(point, check_subgroup=check_subgroup)
        return point

    def is_identity(self) -> bool:
        return self.x == 0 and self.y == 1

    def __add__(self, other: "Point") -> "Point":
        if not isinstance(other, Point):
            return NotImplemented
        return point_add(self, other)

    def __neg__(self) -> "Point":
        return point_negate(self)

    def __sub__(self, other: "Point") -> "Point":
        if not isinstance(other, Point):
            return NotImplemented
        return point_add(self, point_negate(other))

    def __repr__(self) -> str:
        return f"Point(x=0x{self.x:064x}, y=0x{self.y:064x})"


IDENTITY = Point(0, 1)

GENERATOR = Point(
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)


# ── predicates ──────────────────────────────────────────────────────────

def is_on_curve(point: Point) -> bool:
    """Check  a*x^2 + y^2 == 1 + d*x^2*y^2."""
    x2 = point.x * point.x % FIELD_MODULUS
    y2 = point.y * point.y % FIELD_MODULUS
    lhs = (A * x2 + y2) % FIELD_MODULUS
    rhs = (1 + D * x2 * y2) % FIELD_MODULUS
    return lhs == rhs


def is_in_subgroup(point: Point) -> bool:
    """
    Check that N * point is the identity.

    The multiplication here is by the raw order N; reducing it mod N first
    would turn the check into a multiplication by zero.
    """
    if not is_on_curve(point):
        return False
    return _multiply(point, SUBGROUP_ORDER).is_identity()


def validate_point(point: Point, check_subgroup: bool = False) -> Point:
    """
    Raise InvalidPointError unless point is on the curve (and, if requested,
    in the prime-order subgroup).
    """
    if not isinstance(point, Point):
        raise InvalidPointError(f"expected Point, got {type(point).__name__}")
    if not is_on_curve(point):
        raise InvalidPointError("point is not on the BabyJubJub curve")
    if check_subgroup and not is_in_subgroup(point):
        raise InvalidPointError("point is not in the prime-order subgroup")
    return point


# ── group law ───────────────────────────────────────────────────────────

def _add(p1: Point, p2: Point) -> Point:
    x1, y1, x2, y2 = p1.x, p1.y, p2.x, p2.y
    x1x2 = x1 * x2 % FIELD_MODULUS
    y1y2 = y1 * y2 % FIELD_MODULUS
    dxy = D * x1x2 % FIELD_MODULUS * y1y2 % FIELD_MODULUS

    x_num = (x1 * y2 + y1 * x2) % FIELD_MODULUS
    y_num = (y1y2 - A * x1x2) % FIELD_MODULUS
    x_den = (1 + dxy) % FIELD_MODULUS
    y_den = (1 - dxy) % FIELD_MODULUS

    return Point(
        x_num * mod_inverse(x_den, FIELD_MODULUS) % FIELD_MODULUS,
        y_num * mod_inverse(y_den, FIELD_MODULUS) % FIELD_MODULUS,
    )


def _multiply(point: Point, k: int) -> Point:
    result = IDENTITY
    addend = point
    while k > 0:
        if k & 1:
            result = _add(result, addend)
        addend = _add(addend, addend)
        k >>= 1
    return result


def point_add(p1: Point, p2: Point) -> Point:
    """
    Complete twisted Edwards addition.

        x3 = (x1*y2 + y1*x2) / (1 + d*x1*x2*y1*y2)
        y3 = (y1*y2 - a*x1*x2) / (1 - d*x1*x2*y1*y2)

    Raises:
        InvalidPointError: If either input is not on the curve
    """
    validate_point(p1)
    validate_point(p2)
    return _add(p1, p2)


def point_negate(point: Point) -> Point:
    """-(x, y) = (-x, y)."""
    validate_point(point)
    return Point((-point.x) % FIELD_MODULUS, point.y)


def scalar_mul(point: Point, scalar: int) -> Point:
    """
    Double-and-add scalar multiplication; scalar is reduced mod N first.

    Raises:
        InvalidPointError: If point is not on the curve
        InvalidFieldElementError: If scalar is not a non-negative integer
    """
    validate_point(point)
    if isinstance(scalar, bool) or not isinstance(scalar, int) or scalar < 0:
        raise InvalidFieldElementError("scalar must be a non-negative integer")
    return _multiply(point, scalar % SUBGROUP_ORDER)


def derive_public_key(private_key: int) -> Point:
    """Public key sk * G."""
    return scalar_mul(GENERATOR, private_key)
