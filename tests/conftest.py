"""Pytest configuration and fixtures."""

import pytest
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from zkshield.core.keys import create_keypair
from zkshield.core.note import create_note
from zkshield.crypto.domain_hash import init_poseidon_blocking


@pytest.fixture(scope="session", autouse=True)
def poseidon():
    """Process-wide Poseidon provider, initialised once per test session."""
    return init_poseidon_blocking()


@pytest.fixture
def keypair():
    """Fresh random wallet keypair."""
    return create_keypair()


@pytest.fixture
def token_id():
    return bytes(range(32))


@pytest.fixture
def note(keypair, token_id):
    """Note addressed to the keypair's public key."""
    return create_note(keypair.public_key.x, token_id, 1_000_000)
