"""Tests for BabyJubJub curve arithmetic."""

import pytest

from zkshield.crypto.babyjubjub import (
    GENERATOR,
    IDENTITY,
    Point,
    derive_public_key,
    is_in_subgroup,
    is_on_curve,
    point_add,
    point_negate,
    scalar_mul,
    validate_point,
)
from zkshield.crypto.field import FIELD_MODULUS, SUBGROUP_ORDER, random_scalar
from zkshield.exceptions import InvalidFieldElementError, InvalidPointError


# (0, -1) is on the curve and has order 2
ORDER_TWO_POINT = Point(0, FIELD_MODULUS - 1)
OFF_CURVE_POINT = Point(1, 1)


class TestCurveMembership:
    """Tests for on-curve and subgroup checks."""

    def test_generator_and_identity_on_curve(self):
        assert is_on_curve(GENERATOR)
        assert is_on_curve(IDENTITY)

    def test_generator_in_subgroup(self):
        assert is_in_subgroup(GENERATOR)

    def test_identity_in_subgroup(self):
        assert is_in_subgroup(IDENTITY)

    def test_low_order_point_rejected(self):
        assert is_on_curve(ORDER_TWO_POINT)
        assert not is_in_subgroup(ORDER_TWO_POINT)

    def test_off_curve_point(self):
        assert not is_on_curve(OFF_CURVE_POINT)
        assert not is_in_subgroup(OFF_CURVE_POINT)

    def test_validate_point(self):
        assert validate_point(GENERATOR, check_subgroup=True) is GENERATOR
        with pytest.raises(InvalidPointError):
            validate_point(OFF_CURVE_POINT)
        with pytest.raises(InvalidPointError):
            validate_point(ORDER_TWO_POINT, check_subgroup=True)

    def test_non_canonical_coordinate(self):
        with pytest.raises(InvalidPointError):
            Point(FIELD_MODULUS, 1)


class TestGroupLaw:
    """Tests for addition, negation and scalar multiplication."""

    def test_identity_is_neutral(self):
        assert point_add(GENERATOR, IDENTITY) == GENERATOR
        assert point_add(IDENTITY, GENERATOR) == GENERATOR

    def test_addition_commutative(self):
        p = scalar_mul(GENERATOR, 7)
        q = scalar_mul(GENERATOR, 11)
        assert p + q == q + p

    def test_addition_matches_scalar_mul(self):
        p = scalar_mul(GENERATOR, 5)
        q = scalar_mul(GENERATOR, 9)
        assert p + q == scalar_mul(GENERATOR, 14)

    def test_doubling(self):
        assert GENERATOR + GENERATOR == scalar_mul(GENERATOR, 2)

    def test_negation(self):
        assert point_add(GENERATOR, point_negate(GENERATOR)) == IDENTITY
        assert GENERATOR - GENERATOR == IDENTITY

    def test_order_times_generator_is_identity(self):
        # the scalar is reduced mod N before multiplying
        assert scalar_mul(GENERATOR, SUBGROUP_ORDER) == IDENTITY
        assert scalar_mul(GENERATOR, SUBGROUP_ORDER + 3) == scalar_mul(GENERATOR, 3)

    def test_zero_scalar(self):
        assert scalar_mul(GENERATOR, 0) == IDENTITY

    def test_negative_scalar_rejected(self):
        with pytest.raises(InvalidFieldElementError):
            scalar_mul(GENERATOR, -1)

    def test_off_curve_operands_rejected(self):
        with pytest.raises(InvalidPointError):
            point_add(GENERATOR, OFF_CURVE_POINT)
        with pytest.raises(InvalidPointError):
            scalar_mul(OFF_CURVE_POINT, 3)

    def test_public_key_in_subgroup(self):
        pub = derive_public_key(random_scalar())
        assert is_on_curve(pub)
        assert is_in_subgroup(pub)


class TestPointEncoding:
    """Tests for the 64-byte point codec."""

    def test_to_bytes_layout(self):
        encoded = GENERATOR.to_bytes()
        assert len(encoded) == 64
        assert int.from_bytes(encoded[:32], "big") == GENERATOR.x
        assert int.from_bytes(encoded[32:], "big") == GENERATOR.y

    def test_round_trip(self):
        pub = derive_public_key(random_scalar())
        assert Point.from_bytes(pub.to_bytes()) == pub

    def test_from_bytes_rejects_wrong_length(self):
        with pytest.raises(InvalidPointError):
            Point.from_bytes(b"\x00" * 63)

    def test_from_bytes_rejects_off_curve(self):
        with pytest.raises(InvalidPointError):
            Point.from_bytes(OFF_CURVE_POINT.to_bytes())

    def test_from_bytes_subgroup_check_optional(self):
        encoded = ORDER_TWO_POINT.to_bytes()
        with pytest.raises(InvalidPointError):
            Point.from_bytes(encoded)
        assert Point.from_bytes(encoded, check_subgroup=False) == ORDER_TWO_POINT
