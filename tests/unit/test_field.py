"""Tests for field arithmetic and encodings."""

import pytest

from zkshield.crypto.field import (
    FIELD_MODULUS,
    SUBGROUP_ORDER,
    bytes_to_field,
    field_add,
    field_from_bytes,
    field_invert,
    field_mul,
    field_neg,
    field_sub,
    field_to_bytes,
    mod_inverse,
    random_field_element,
    random_scalar,
    reduce_scalar,
    scalar_from_bytes,
    scalar_to_bytes,
    validate_field_element,
    validate_scalar,
)
from zkshield.exceptions import InvalidFieldElementError


class TestValidation:
    """Tests for canonical-form validation."""

    def test_accepts_canonical_values(self):
        assert validate_field_element(0) == 0
        assert validate_field_element(FIELD_MODULUS - 1) == FIELD_MODULUS - 1

    @pytest.mark.parametrize("value", [-1, FIELD_MODULUS, FIELD_MODULUS + 5])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(InvalidFieldElementError):
            validate_field_element(value)

    @pytest.mark.parametrize("value", ["1", 1.0, None, True])
    def test_rejects_non_integers(self, value):
        with pytest.raises(InvalidFieldElementError):
            validate_field_element(value)

    def test_scalar_bound_is_subgroup_order(self):
        assert validate_scalar(SUBGROUP_ORDER - 1) == SUBGROUP_ORDER - 1
        with pytest.raises(InvalidFieldElementError):
            validate_scalar(SUBGROUP_ORDER)

    def test_reduce_scalar(self):
        assert reduce_scalar(SUBGROUP_ORDER + 7) == 7


class TestArithmetic:
    """Tests for modular arithmetic."""

    def test_add_wraps(self):
        assert field_add(FIELD_MODULUS - 1, 2) == 1

    def test_sub_wraps(self):
        assert field_sub(1, 2) == FIELD_MODULUS - 1

    def test_mul(self):
        assert field_mul(FIELD_MODULUS - 1, FIELD_MODULUS - 1) == 1

    def test_neg(self):
        assert field_neg(0) == 0
        assert field_add(5, field_neg(5)) == 0

    def test_invert(self):
        a = random_field_element() or 1
        assert field_mul(a, field_invert(a)) == 1

    def test_invert_zero_fails(self):
        with pytest.raises(InvalidFieldElementError):
            field_invert(0)

    def test_mod_inverse_other_modulus(self):
        inv = mod_inverse(3, SUBGROUP_ORDER)
        assert (3 * inv) % SUBGROUP_ORDER == 1

    def test_mod_inverse_non_invertible(self):
        with pytest.raises(InvalidFieldElementError):
            mod_inverse(4, 8)

    def test_arithmetic_rejects_non_canonical_input(self):
        with pytest.raises(InvalidFieldElementError):
            field_add(FIELD_MODULUS, 1)


class TestEncoding:
    """Tests for byte encodings."""

    def test_field_bytes_big_endian(self):
        encoded = field_to_bytes(1)
        assert len(encoded) == 32
        assert encoded == b"\x00" * 31 + b"\x01"
        assert field_from_bytes(encoded) == 1

    def test_field_from_bytes_rejects_non_canonical(self):
        with pytest.raises(InvalidFieldElementError):
            field_from_bytes(FIELD_MODULUS.to_bytes(32, "big"))

    def test_field_from_bytes_rejects_wrong_length(self):
        with pytest.raises(InvalidFieldElementError):
            field_from_bytes(b"\x01" * 31)

    def test_bytes_to_field_lifts_mod_p(self):
        assert bytes_to_field(b"\xff" * 32) == int.from_bytes(b"\xff" * 32, "big") % FIELD_MODULUS
        assert bytes_to_field(b"\x02") == 2

    def test_scalar_encoding(self):
        scalar = random_scalar()
        assert scalar_from_bytes(scalar_to_bytes(scalar)) == scalar

    def test_scalar_from_bytes_rejects_order(self):
        with pytest.raises(InvalidFieldElementError):
            scalar_from_bytes(SUBGROUP_ORDER.to_bytes(32, "big"))


class TestSampling:
    """Tests for random sampling."""

    def test_random_scalar_range(self):
        for _ in range(50):
            assert 1 <= random_scalar() < SUBGROUP_ORDER

    def test_random_field_element_distinct(self):
        values = {random_field_element() for _ in range(50)}
        assert len(values) == 50
