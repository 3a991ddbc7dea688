"""
ABI call data for the one Safe method this tool invokes.

``addOwnerWithThreshold(address owner, uint256 _threshold)`` packs into a
fixed 68-byte buffer: the 4-byte selector followed by two 32-byte argument
slots.  The address is right-aligned in its slot; the threshold is written
as a big-endian u32 in the last four bytes of the second slot.
"""

from __future__ import annotations

import struct

from safe_migrate.address import Address
from safe_migrate.hashing import keccak256

ADD_OWNER_SIGNATURE = "addOwnerWithThreshold(address,uint256)"
ADD_OWNER_SELECTOR = keccak256(ADD_OWNER_SIGNATURE.encode("ascii"))[:4]

SELECTOR_END = 4
OWNER_OFFSET = 16
OWNER_END = 36
THRESHOLD_OFFSET = 64
CALL_DATA_LENGTH = 68

U32_MAX = 0xFFFFFFFF


def add_owner_with_threshold(owner: Address, threshold: int) -> bytes:
    """Call data adding *owner* and setting the signature threshold."""
    if not 0 <= threshold <= U32_MAX:
        raise ValueError(f"Threshold out of u32 range: {threshold}")
    buffer = bytearray(CALL_DATA_LENGTH)
    buffer[:SELECTOR_END] = ADD_OWNER_SELECTOR
    buffer[OWNER_OFFSET:OWNER_END] = bytes(owner)
    struct.pack_into(">I", buffer, THRESHOLD_OFFSET, threshold)
    return bytes(buffer)


encode_add_owner = add_owner_with_threshold
