"""Tests for the wallet key hierarchy."""

import pytest

from zkshield.core.keys import (
    create_keypair,
    derive_keypair_from_seed,
    keypair_from_scalar,
    keypair_from_spending_key,
)
from zkshield.core.nullifier import derive_nullifier_key
from zkshield.crypto.babyjubjub import derive_public_key, is_in_subgroup
from zkshield.crypto.domain_hash import Domain, poseidon_hash
from zkshield.crypto.field import SUBGROUP_ORDER, scalar_to_bytes
from zkshield.exceptions import InvalidFieldElementError


SEED = "abandon ability able about above absent absorb abstract absurd abuse access accident"


class TestKeypair:
    """Tests for keypair derivation."""

    def test_components(self, keypair):
        sk_bytes = scalar_to_bytes(keypair.spending_key)
        assert keypair.public_key == derive_public_key(keypair.spending_key)
        assert keypair.nullifier_key == derive_nullifier_key(sk_bytes)
        assert keypair.viewing.incoming_viewing_key == poseidon_hash([sk_bytes], Domain.IVK)

    def test_public_key_in_subgroup(self, keypair):
        assert is_in_subgroup(keypair.public_key)

    def test_export_and_reload(self, keypair):
        exported = keypair.export_spending_key()
        assert len(exported) == 32
        assert keypair_from_spending_key(exported) == keypair

    def test_random_keypairs_differ(self):
        assert create_keypair().spending_key != create_keypair().spending_key

    def test_rejects_zero(self):
        with pytest.raises(InvalidFieldElementError):
            keypair_from_scalar(0)

    def test_rejects_out_of_range(self):
        with pytest.raises(InvalidFieldElementError):
            keypair_from_scalar(SUBGROUP_ORDER)
        with pytest.raises(InvalidFieldElementError):
            keypair_from_spending_key(SUBGROUP_ORDER.to_bytes(32, "big"))


class TestSeedDerivation:
    """Tests for deterministic seed derivation."""

    def test_deterministic(self):
        assert derive_keypair_from_seed(SEED) == derive_keypair_from_seed(SEED)

    def test_path_separates_keys(self):
        a = derive_keypair_from_seed(SEED, "m/44'/501'/0'/0'")
        b = derive_keypair_from_seed(SEED, "m/44'/501'/1'/0'")
        assert a.spending_key != b.spending_key

    def test_phrase_separates_keys(self):
        assert derive_keypair_from_seed(SEED).spending_key != derive_keypair_from_seed(SEED + " x").spending_key
