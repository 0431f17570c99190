"""
Domain-separated Poseidon hashing.

Every commitment, nullifier and key derivation in the protocol is one
Poseidon call whose first input is a fixed domain tag. Two computations
with different tags can never collide even on identical raw inputs.

Inputs are field elements (canonical ints) or raw bytes; bytes are lifted
big-endian modulo P. Outputs are field elements, or their 32-byte
big-endian encoding via poseidon_hash_bytes.
"""

from enum import IntEnum
from typing import Optional, Sequence, Union

from zkshield.crypto.field import bytes_to_field, field_to_bytes, validate_field_element
from zkshield.crypto.poseidon import Poseidon, PoseidonProvider, get_default_provider


HashInput = Union[int, bytes, bytearray]


class Domain(IntEnum):
    """Protocol-wide domain tags. Never reuse a value for another purpose."""

    COMMITMENT = 0x01
    SPEND_NULLIFIER = 0x02
    ACTION_NULLIFIER = 0x03
    NULLIFIER_KEY = 0x04
    STEALTH = 0x05
    MERKLE = 0x06
    EMPTY_LEAF = 0x07
    IVK = 0x10


def to_field(value: HashInput) -> int:
    """Lift a hash input to a field element."""
    if isinstance(value, (bytes, bytearray)):
        return bytes_to_field(value)
    return validate_field_element(value)


class DomainHasher:
    """Poseidon with domain separation, bound to one provider."""

    def __init__(self, provider: Optional[PoseidonProvider] = None):
        self._provider = provider or get_default_provider()

    @property
    def provider(self) -> PoseidonProvider:
        return self._provider

    def hash(self, inputs: Sequence[HashInput], domain: Optional[int] = None) -> int:
        """
        Hash inputs, prefixing the domain tag when one is given.

        Raises:
            NotInitializedError: If the provider has not finished setup
            InvalidFieldElementError: If an int input is not canonical
        """
        poseidon: Poseidon = self._provider.permutation
        elements = [to_field(v) for v in inputs]
        if domain is not None:
            elements.insert(0, validate_field_element(int(domain), name="domain"))
        return poseidon(elements)

    def hash_bytes(self, inputs: Sequence[HashInput], domain: Optional[int] = None) -> bytes:
        return field_to_bytes(self.hash(inputs, domain))


def poseidon_hash(inputs: Sequence[HashInput], domain: Optional[int] = None) -> int:
    """Domain-separated hash using the process-wide provider."""
    return DomainHasher().hash(inputs, domain)


def poseidon_hash_bytes(inputs: Sequence[HashInput], domain: Optional[int] = None) -> bytes:
    return field_to_bytes(poseidon_hash(inputs, domain))


async def init_poseidon() -> Poseidon:
    """Initialise the process-wide provider (idempotent, coalesced)."""
    return await get_default_provider().initialize()


def init_poseidon_blocking(timeout: Optional[float] = None) -> Poseidon:
    """Blocking counterpart of init_poseidon for synchronous callers."""
    return get_default_provider().initialize_blocking(timeout=timeout)
