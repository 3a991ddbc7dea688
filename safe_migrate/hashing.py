"""
Keccak-256, the hash used for every digest, selector and address.

This is the original Keccak submission padding used by Ethereum, not the
NIST-standardised SHA3-256 in :mod:`hashlib`.
"""

from __future__ import annotations

from Crypto.Hash import keccak


def keccak256(data: bytes) -> bytes:
    """Return the 32-byte Keccak-256 digest of *data*."""
    return keccak.new(digest_bits=256, data=bytes(data)).digest()
