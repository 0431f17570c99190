"""Field, curve and hash primitives."""

from zkshield.crypto.field import (
    FIELD_MODULUS,
    SUBGROUP_ORDER,
    field_add,
    field_sub,
    field_mul,
    field_neg,
    field_invert,
    bytes_to_field,
    field_to_bytes,
    field_from_bytes,
    random_field_element,
    random_scalar,
)

from zkshield.crypto.babyjubjub import (
    Point,
    GENERATOR,
    IDENTITY,
    point_add,
    point_negate,
    scalar_mul,
    derive_public_key,
    is_on_curve,
    is_in_subgroup,
)

from zkshield.crypto.poseidon import (
    Poseidon,
    PoseidonProvider,
    get_default_provider,
)

from zkshield.crypto.domain_hash import (
    Domain,
    DomainHasher,
    poseidon_hash,
    poseidon_hash_bytes,
    init_poseidon,
    init_poseidon_blocking,
)

__all__ = [
    'FIELD_MODULUS',
    'SUBGROUP_ORDER',
    'field_add',
    'field_sub',
    'field_mul',
    'field_neg',
    'field_invert',
    'bytes_to_field',
    'field_to_bytes',
    'field_from_bytes',
    'random_field_element',
    'random_scalar',
    'Point',
    'GENERATOR',
    'IDENTITY',
    'point_add',
    'point_negate',
    'scalar_mul',
    'derive_public_key',
    'is_on_curve',
    'is_in_subgroup',
    'Poseidon',
    'PoseidonProvider',
    'get_default_provider',
    'Domain',
    'DomainHasher',
    'poseidon_hash',
    'poseidon_hash_bytes',
    'init_poseidon',
    'init_poseidon_blocking',
]
