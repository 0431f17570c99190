"""
Poseidon permutation over the BN254 scalar field.

Parameters follow the circomlib instantiation: S-box x^5, 8 full rounds,
the per-width partial round counts below, state initialised to
[0, in_1, ..., in_k] and the digest read from state[0]. Round constants and
the Cauchy MDS matrix are produced by the Grain LFSR procedure of the
Poseidon reference parameter script.

Generating parameters is comparatively slow in pure Python, so it happens
once, off the caller's thread, behind a PoseidonProvider. Hashing itself is
synchronous and only possible after the provider finished initialising.

Example Usage:
    >>> provider = PoseidonProvider()
    >>> poseidon = provider.initialize_blocking()
    >>> digest = poseidon([1, 2])

References:
    - Grassi et al. (2019), "Poseidon: A New Hash Function for
      Zero-Knowledge Proof Systems"
    - iden3/circomlib, circuits/poseidon.circom
"""

import asyncio
import json
import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from zkshield.crypto.field import FIELD_MODULUS, mod_inverse, validate_field_element
from zkshield.exceptions import NotInitializedError

logger = logging.getLogger(__name__)


FULL_ROUNDS = 8

# width t -> partial rounds (circomlib, x^5, 128-bit security)
PARTIAL_ROUNDS = {
    2: 56, 3: 57, 4: 56, 5: 60, 6: 60, 7: 63, 8: 64, 9: 63,
    10: 60, 11: 66, 12: 60, 13: 65, 14: 70, 15: 60, 16: 64, 17: 68,
}

MAX_INPUTS = max(PARTIAL_ROUNDS) - 1

FIELD_SIZE_BITS = FIELD_MODULUS.bit_length()


@dataclass(frozen=True)
class PoseidonParameters:
    """Round constants and MDS matrix for one state width."""

    width: int
    full_rounds: int
    partial_rounds: int
    round_constants: Tuple[int, ...]
    mds: Tuple[Tuple[int, ...], ...]

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "full_rounds": self.full_rounds,
            "partial_rounds": self.partial_rounds,
            "round_constants": [hex(c) for c in self.round_constants],
            "mds": [[hex(m) for m in row] for row in self.mds],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PoseidonParameters":
        params = cls(
            width=int(data["width"]),
            full_rounds=int(data["full_rounds"]),
            partial_rounds=int(data["partial_rounds"]),
            round_constants=tuple(int(c, 16) for c in data["round_constants"]),
            mds=tuple(tuple(int(m, 16) for m in row) for row in data["mds"]),
        )
        expected = (params.full_rounds + params.partial_rounds) * params.width
        if len(params.round_constants) != expected or len(params.mds) != params.width:
            raise ValueError(f"inconsistent Poseidon parameters for width {params.width}")
        return params


class _GrainLFSR:
    """80-bit Grain LFSR in self-shrinking mode, seeded per the reference script."""

    def __init__(self, field_size: int, width: int, full_rounds: int, partial_rounds: int):
        seed = (
            "01"                                # prime field
            + "0000"                            # S-box x^alpha
            + format(field_size, "012b")
            + format(width, "012b")
            + format(full_rounds, "010b")
            + format(partial_rounds, "010b")
            + "1" * 30
        )
        # bit i of the register is seed[i]; bit 0 is the oldest
        state = 0
        for i, bit in enumerate(seed):
            if bit == "1":
                state |= 1 << i
        for _ in range(160):
            new_bit = ((state >> 62) ^ (state >> 51) ^ (state >> 38)
                       ^ (state >> 23) ^ (state >> 13) ^ state) & 1
            state = (state >> 1) | (new_bit << 79)
        self._state = state

    def next_int(self, num_bits: int) -> int:
        """Next num_bits output bits, most significant first."""
        s = self._state
        value = 0
        produced = 0
        while produced < num_bits:
            b1 = ((s >> 62) ^ (s >> 51) ^ (s >> 38) ^ (s >> 23) ^ (s >> 13) ^ s) & 1
            s = (s >> 1) | (b1 << 79)
            b2 = ((s >> 62) ^ (s >> 51) ^ (s >> 38) ^ (s >> 23) ^ (s >> 13) ^ s) & 1
            s = (s >> 1) | (b2 << 79)
            if b1:
                value = (value << 1) | b2
                produced += 1
        self._state = s
        return value

    def next_field_element(self) -> int:
        """Rejection-sampled element of Z_P."""
        while True:
            candidate = self.next_int(FIELD_SIZE_BITS)
            if candidate < FIELD_MODULUS:
                return candidate


def generate_parameters(width: int) -> PoseidonParameters:
    """
    Derive round constants and MDS matrix for a state width.

    Raises:
        ValueError: If width is outside 2..17
    """
    if width not in PARTIAL_ROUNDS:
        raise ValueError(f"unsupported Poseidon width {width} (supported: 2..{max(PARTIAL_ROUNDS)})")

    partial_rounds = PARTIAL_ROUNDS[width]
    lfsr = _GrainLFSR(FIELD_SIZE_BITS, width, FULL_ROUNDS, partial_rounds)

    constants = tuple(
        lfsr.next_field_element()
        for _ in range((FULL_ROUNDS + partial_rounds) * width)
    )

    while True:
        samples = [lfsr.next_int(FIELD_SIZE_BITS) % FIELD_MODULUS for _ in range(2 * width)]
        while len(set(samples)) != len(samples):
            samples = [lfsr.next_int(FIELD_SIZE_BITS) % FIELD_MODULUS for _ in range(2 * width)]
        xs, ys = samples[:width], samples[width:]
        if any((x + y) % FIELD_MODULUS == 0 for x in xs for y in ys):
            continue
        mds = tuple(
            tuple(mod_inverse(x + y, FIELD_MODULUS) for y in ys)
            for x in xs
        )
        break

    return PoseidonParameters(
        width=width,
        full_rounds=FULL_ROUNDS,
        partial_rounds=partial_rounds,
        round_constants=constants,
        mds=mds,
    )


def permute(params: PoseidonParameters, state: Sequence[int]) -> List[int]:
    """Apply the full Poseidon permutation to a state of params.width elements."""
    t = params.width
    if len(state) != t:
        raise ValueError(f"state must have {t} elements, got {len(state)}")

    p = FIELD_MODULUS
    constants = params.round_constants
    mds = params.mds
    half_full = params.full_rounds // 2
    total_rounds = params.full_rounds + params.partial_rounds

    state = list(state)
    for r in range(total_rounds):
        offset = r * t
        state = [(s + constants[offset + i]) % p for i, s in enumerate(state)]
        if r < half_full or r >= half_full + params.partial_rounds:
            state = [pow(s, 5, p) for s in state]
        else:
            state[0] = pow(state[0], 5, p)
        state = [sum(m * s for m, s in zip(row, state)) % p for row in mds]
    return state


class Poseidon:
    """
    Synchronous Poseidon hash bound to a set of prepared parameters.

    Widths that were not prepared up front are derived on first use and
    cached for the lifetime of the instance.
    """

    def __init__(self, parameters: Dict[int, PoseidonParameters]):
        self._parameters = dict(parameters)
        self._lock = threading.Lock()

    @property
    def widths(self) -> List[int]:
        return sorted(self._parameters)

    def parameters_for(self, width: int) -> PoseidonParameters:
        params = self._parameters.get(width)
        if params is not None:
            return params
        with self._lock:
            params = self._parameters.get(width)
            if params is None:
                logger.info("Deriving Poseidon parameters for unprepared width %d", width)
                params = generate_parameters(width)
                self._parameters[width] = params
        return params

    def __call__(self, inputs: Sequence[int]) -> int:
        """
        Hash 1..16 canonical field elements to one field element.

        Raises:
            ValueError: On an empty or oversized input list
            InvalidFieldElementError: If an input is not canonical
        """
        if not 1 <= len(inputs) <= MAX_INPUTS:
            raise ValueError(f"Poseidon takes 1..{MAX_INPUTS} inputs, got {len(inputs)}")
        for i, value in enumerate(inputs):
            validate_field_element(value, name=f"input[{i}]")
        params = self.parameters_for(len(inputs) + 1)
        return permute(params, [0, *inputs])[0]


def _load_cache(path: Path) -> Dict[int, PoseidonParameters]:
    with open(path, "r") as f:
        data = json.load(f)
    return {
        int(width): PoseidonParameters.from_dict(entry)
        for width, entry in data.get("widths", {}).items()
    }


def _store_cache(path: Path, parameters: Dict[int, PoseidonParameters]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump({"widths": {str(w): p.to_dict() for w, p in sorted(parameters.items())}}, f)


class PoseidonProvider:
    """
    Init-once owner of the Poseidon parameters.

    initialize() and initialize_blocking() may be called concurrently from
    any number of coroutines and threads: the first caller starts parameter
    generation on a worker thread and every caller waits on the same
    future. If setup fails, every waiter sees the error and the provider
    returns to the uninitialised state so a later call can retry.

    The permutation property never blocks: before setup completed it raises
    NotInitializedError.
    """

    def __init__(self, widths: Optional[Iterable[int]] = None, params_cache: Optional[Path] = None):
        self._widths = sorted(set(widths)) if widths is not None else None
        self._params_cache = Path(params_cache) if params_cache is not None else None
        self._lock = threading.Lock()
        self._future: Optional[Future] = None
        self._instance: Optional[Poseidon] = None

    @property
    def is_initialized(self) -> bool:
        return self._instance is not None

    @property
    def permutation(self) -> Poseidon:
        instance = self._instance
        if instance is None:
            raise NotInitializedError(
                "Poseidon is not initialized; await initialize() or call initialize_blocking() first"
            )
        return instance

    async def initialize(self) -> Poseidon:
        """Prepare the parameters without blocking the event loop."""
        if self._instance is not None:
            return self._instance
        return await asyncio.wrap_future(self._start())

    def initialize_blocking(self, timeout: Optional[float] = None) -> Poseidon:
        """Prepare the parameters, waiting on the calling thread."""
        if self._instance is not None:
            return self._instance
        return self._start().result(timeout=timeout)

    def reset(self) -> None:
        """Drop the prepared parameters (mainly for tests)."""
        with self._lock:
            self._instance = None
            self._future = None

    def _start(self) -> Future:
        with self._lock:
            if self._future is None:
                self._future = Future()
                worker = threading.Thread(
                    target=self._build,
                    args=(self._future,),
                    name="poseidon-setup",
                    daemon=True,
                )
                worker.start()
            return self._future

    def _build(self, future: Future) -> None:
        try:
            instance = Poseidon(self._load_or_generate())
        except Exception as e:
            logger.error("Poseidon setup failed: %s", e)
            with self._lock:
                if self._future is future:
                    self._future = None
            future.set_exception(e)
            return
        with self._lock:
            self._instance = instance
        future.set_result(instance)

    def _resolve_settings(self):
        widths, cache = self._widths, self._params_cache
        if widths is None or cache is None:
            from zkshield.config import get_settings

            settings = get_settings()
            if widths is None:
                widths = sorted(set(settings.poseidon_widths))
            if cache is None and settings.poseidon_params_cache is not None:
                cache = Path(settings.poseidon_params_cache)
        return widths, cache

    def _load_or_generate(self) -> Dict[int, PoseidonParameters]:
        widths, cache = self._resolve_settings()
        parameters: Dict[int, PoseidonParameters] = {}

        if cache is not None and cache.exists():
            parameters = _load_cache(cache)
            logger.info("Loaded Poseidon parameters for widths %s from %s", sorted(parameters), cache)

        missing = [w for w in widths if w not in parameters]
        if missing:
            logger.info("Generating Poseidon parameters for widths %s", missing)
            for width in missing:
                parameters[width] = generate_parameters(width)
            if cache is not None:
                _store_cache(cache, parameters)
                logger.info("Stored Poseidon parameters in %s", cache)

        return parameters


_default_provider = PoseidonProvider()


def get_default_provider() -> PoseidonProvider:
    """Process-wide provider used by the module-level hash helpers."""
    return _default_provider
