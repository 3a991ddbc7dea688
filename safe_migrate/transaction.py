"""
Safe transactions and their EIP-712 signing digest.

A :class:`SafeTransaction` is hashed in three fixed-layout steps:

  1. the domain separator, ``keccak(DOMAIN_TYPEHASH || verifyingContract)``
     over a 64-byte buffer
  2. the ``SafeTx`` struct hash over a 352-byte buffer of eleven 32-byte
     words
  3. the digest, ``keccak(0x1901 || domainSeparator || structHash)`` over a
     66-byte buffer

Every field is written at a named offset.  Numbers are big-endian and
right-aligned in their word; absent addresses leave their word zeroed.
"""

from __future__ import annotations

from dataclasses import dataclass

from safe_migrate.address import Address
from safe_migrate.hashing import keccak256
from safe_migrate.keys import PrivateKey, sign
from safe_migrate.models import U64_MAX, U128_MAX, Operation, SignedSafeTransaction

DOMAIN_TYPEHASH = keccak256(b"EIP712Domain(address verifyingContract)")
SAFE_TX_TYPEHASH = keccak256(
    b"SafeTx(address to,uint256 value,bytes data,uint8 operation,"
    b"uint256 safeTxGas,uint256 baseGas,uint256 gasPrice,"
    b"address gasToken,address refundReceiver,uint256 nonce)"
)

# ---- domain buffer layout ----
DOMAIN_BUFFER_LENGTH = 64
DOMAIN_TYPEHASH_OFFSET = 0
DOMAIN_CONTRACT_OFFSET = 44

# ---- SafeTx buffer layout ----
STRUCT_BUFFER_LENGTH = 352
STRUCT_TYPEHASH_OFFSET = 0
STRUCT_TO_OFFSET = 44
STRUCT_VALUE_OFFSET = 80
STRUCT_DATA_HASH_OFFSET = 96
STRUCT_OPERATION_OFFSET = 159
STRUCT_SAFE_TX_GAS_OFFSET = 176
STRUCT_BASE_GAS_OFFSET = 208
STRUCT_GAS_PRICE_OFFSET = 240
STRUCT_GAS_TOKEN_OFFSET = 268
STRUCT_REFUND_RECEIVER_OFFSET = 300
STRUCT_NONCE_OFFSET = 344

# ---- digest buffer layout ----
DIGEST_BUFFER_LENGTH = 66
DIGEST_PREFIX = b"\x19\x01"
DIGEST_DOMAIN_OFFSET = 2
DIGEST_STRUCT_OFFSET = 34

U128_WIDTH = 16
U64_WIDTH = 8


def _put(buffer: bytearray, offset: int, data: bytes) -> None:
    buffer[offset:offset + len(data)] = data


def domain_separator(safe: Address) -> bytes:
    """EIP-712 domain separator of the Safe at *safe*."""
    buffer = bytearray(DOMAIN_BUFFER_LENGTH)
    _put(buffer, DOMAIN_TYPEHASH_OFFSET, DOMAIN_TYPEHASH)
    _put(buffer, DOMAIN_CONTRACT_OFFSET, bytes(safe))
    return keccak256(buffer)


@dataclass(frozen=True)
class SafeTransaction:
    """A pending Safe multisig transaction."""

    to: Address
    value: int
    data: bytes
    operation: Operation
    safe_tx_gas: int
    base_gas: int
    gas_price: int
    gas_token: Address | None
    refund_receiver: Address | None
    nonce: int

    def __post_init__(self) -> None:
        for name in ("value", "safe_tx_gas", "base_gas", "gas_price"):
            number = getattr(self, name)
            if not 0 <= number <= U128_MAX:
                raise ValueError(f"{name} out of u128 range: {number}")
        if not 0 <= self.nonce <= U64_MAX:
            raise ValueError(f"nonce out of u64 range: {self.nonce}")
        object.__setattr__(self, "data", bytes(self.data))
        object.__setattr__(self, "operation", Operation(self.operation))

    def struct_hash(self) -> bytes:
        """Keccak-256 of the ABI-encoded ``SafeTx`` struct."""
        buffer = bytearray(STRUCT_BUFFER_LENGTH)
        _put(buffer, STRUCT_TYPEHASH_OFFSET, SAFE_TX_TYPEHASH)
        _put(buffer, STRUCT_TO_OFFSET, bytes(self.to))
        _put(buffer, STRUCT_VALUE_OFFSET, self.value.to_bytes(U128_WIDTH, "big"))
        _put(buffer, STRUCT_DATA_HASH_OFFSET, keccak256(self.data))
        buffer[STRUCT_OPERATION_OFFSET] = int(self.operation)
        _put(buffer, STRUCT_SAFE_TX_GAS_OFFSET, self.safe_tx_gas.to_bytes(U128_WIDTH, "big"))
        _put(buffer, STRUCT_BASE_GAS_OFFSET, self.base_gas.to_bytes(U128_WIDTH, "big"))
        _put(buffer, STRUCT_GAS_PRICE_OFFSET, self.gas_price.to_bytes(U128_WIDTH, "big"))
        if self.gas_token is not None:
            _put(buffer, STRUCT_GAS_TOKEN_OFFSET, bytes(self.gas_token))
        if self.refund_receiver is not None:
            _put(buffer, STRUCT_REFUND_RECEIVER_OFFSET, bytes(self.refund_receiver))
        _put(buffer, STRUCT_NONCE_OFFSET, self.nonce.to_bytes(U64_WIDTH, "big"))
        return keccak256(buffer)

    def signing_digest(self, safe: Address) -> bytes:
        """The 32-byte digest Safe owners sign for this transaction."""
        buffer = bytearray(DIGEST_BUFFER_LENGTH)
        _put(buffer, 0, DIGEST_PREFIX)
        _put(buffer, DIGEST_DOMAIN_OFFSET, domain_separator(safe))
        _put(buffer, DIGEST_STRUCT_OFFSET, self.struct_hash())
        return keccak256(buffer)

    def sign(self, safe: Address, key: PrivateKey) -> SignedSafeTransaction:
        """Sign for execution by *safe* with a single owner key."""
        signature = sign(self.signing_digest(safe), key)
        return SignedSafeTransaction(safe=safe, transaction=self, signatures=[signature])


def signing_digest(tx: SafeTransaction, safe: Address) -> bytes:
    return tx.signing_digest(safe)
