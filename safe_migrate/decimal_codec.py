"""
Binary to decimal conversion for JSON wire formats.

Relay payloads carry integers wider than 64 bits (gas values, signature
``r`` and ``s``) as base-10 strings.  The conversion walks the input bit by
bit, doubling a running power of two held as a little-endian list of
decimal digits and adding it into the accumulator whenever the bit is set.
"""

from __future__ import annotations


def _add(acc: list[int], addend: list[int]) -> None:
    """In-place ``acc += addend`` over little-endian decimal digit lists."""
    if len(acc) < len(addend):
        acc.extend([0] * (len(addend) - len(acc)))
    carry = 0
    for i in range(len(acc)):
        total = acc[i] + carry + (addend[i] if i < len(addend) else 0)
        acc[i] = total % 10
        carry = total // 10
    if carry:
        acc.append(carry)


def to_decimal(value: bytes, byteorder: str = "big") -> str:
    """
    Render the unsigned integer encoded by *value* as a decimal string.

    Any length is accepted; empty or all-zero input yields ``"0"``.  The
    result never has leading zeros.
    """
    if byteorder not in ("big", "little"):
        raise ValueError(f"byteorder must be 'big' or 'little', not {byteorder!r}")
    least_significant_first = reversed(value) if byteorder == "big" else iter(value)

    digits = [0]
    power = [1]
    for byte in least_significant_first:
        for bit in range(8):
            if (byte >> bit) & 1:
                _add(digits, power)
            _add(power, list(power))

    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
    return "".join(str(d) for d in reversed(digits))


def u128_to_decimal(value: int) -> str:
    """Decimal rendering of an unsigned 128-bit integer."""
    if not 0 <= value < 1 << 128:
        raise ValueError(f"Value out of u128 range: {value}")
    return to_decimal(value.to_bytes(16, "big"))
