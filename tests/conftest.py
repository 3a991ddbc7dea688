"""
Shared pytest fixtures for the safe-migrate test suite.
"""

import os
import sys

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from safe_migrate.address import Address  # noqa: E402

# Default mnemonic of ganache-cli deterministic accounts.
GANACHE_PHRASE = (
    "myth like bonus scare over problem client lizard "
    "pioneer submit female collect"
)


@pytest.fixture
def ganache_phrase():
    return GANACHE_PHRASE


@pytest.fixture
def recovery_addresses():
    """Addresses at m/44'/60'/0'/0/0 and /1 of the ganache phrase."""
    return [
        Address.from_hex("0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1"),
        Address.from_hex("0xFFcf8FDEE72ac11b5c542428B35EEF5769C409f0"),
    ]


@pytest.fixture
def device_owner():
    return Address.from_hex("0x22d491Bde2303f2f43325b2108D26f1eAbA1e32b")


@pytest.fixture
def safe_address():
    return Address.from_hex("0x0b54478f3a29BfAD2b67a0d7Dbe23e8f61B1EbC6")


@pytest.fixture
def new_owner():
    return Address(b"\xee" * 20)
