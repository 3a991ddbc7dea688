"""
Ethereum addresses.

An :class:`Address` is an immutable 20-byte value.  It renders in the
EIP-55 mixed-case checksum form and parses from hex with or without the
``0x`` prefix.  Mixed-case input must carry a valid checksum.
"""

from __future__ import annotations

from dataclasses import dataclass

from safe_migrate.hashing import keccak256

ADDRESS_LENGTH = 20


def to_checksum(raw: bytes) -> str:
    """EIP-55 checksum encoding of 20 raw address bytes."""
    lower = raw.hex()
    digest = keccak256(lower.encode("ascii")).hex()
    chars = [
        c.upper() if c.isalpha() and int(digest[i], 16) >= 8 else c
        for i, c in enumerate(lower)
    ]
    return "0x" + "".join(chars)


@dataclass(frozen=True)
class Address:
    """A 20-byte account or contract address."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, (bytes, bytearray)):
            raise TypeError("Address expects bytes")
        if len(self.raw) != ADDRESS_LENGTH:
            raise ValueError(
                f"Address must be {ADDRESS_LENGTH} bytes, got {len(self.raw)}"
            )
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def from_hex(cls, text: str) -> Address:
        """Parse a hex address, verifying the checksum of mixed-case input."""
        body = text.strip()
        if body[:2] in ("0x", "0X"):
            body = body[2:]
        if len(body) != ADDRESS_LENGTH * 2:
            raise ValueError(f"Invalid address length: {text!r}")
        try:
            raw = bytes.fromhex(body)
        except ValueError as exc:
            raise ValueError(f"Invalid address hex: {text!r}") from exc
        address = cls(raw)
        if body != body.lower() and body != body.upper():
            if str(address)[2:] != body:
                raise ValueError(f"Invalid address checksum: {text!r}")
        return address

    @classmethod
    def zero(cls) -> Address:
        return cls(bytes(ADDRESS_LENGTH))

    def is_zero(self) -> bool:
        return not any(self.raw)

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return to_checksum(self.raw)

    def __repr__(self) -> str:
        return f"Address({self})"
