"""
Wire models exchanged with the Safe relay service.

Provides:
  - :class:`Operation` — the Safe operation kind
  - :class:`SafeInfo` — Safe state returned by ``GET /v1/safes/{safe}/``
  - :class:`EstimateParameters` / :class:`Estimate` — gas estimation request
    and response
  - :class:`SignedSafeTransaction` — the signed transaction JSON contract
  - :class:`ExecutedTransaction` — the relay's acknowledgement

JSON conventions: keys are camelCase; integers wider than 64 bits are
decimal strings; byte strings are ``0x``-prefixed lowercase hex; addresses
are EIP-55 strings and absent addresses are ``null``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from safe_migrate.address import Address
from safe_migrate.decimal_codec import to_decimal, u128_to_decimal
from safe_migrate.keys import Signature

if TYPE_CHECKING:
    from safe_migrate.transaction import SafeTransaction

U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1


class Operation(IntEnum):
    """Safe operation kind.  Only plain calls are supported."""

    CALL = 0

    def __str__(self) -> str:
        return self.name.lower()


# ---- parsing helpers ----

def _require(raw: dict[str, Any], key: str) -> Any:
    try:
        return raw[key]
    except KeyError:
        raise ValueError(f"Missing field {key!r}") from None


def _parse_uint(value: Any, limit: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"Field {name!r} must be an integer or decimal string")
    try:
        number = int(value, 10) if isinstance(value, str) else value
    except ValueError:
        raise ValueError(f"Field {name!r} is not a decimal integer: {value!r}") from None
    if not 0 <= number <= limit:
        raise ValueError(f"Field {name!r} out of range: {number}")
    return number


def _parse_address(value: Any, name: str) -> Address:
    if not isinstance(value, str):
        raise ValueError(f"Field {name!r} must be a hex address")
    return Address.from_hex(value)


def _parse_optional_address(value: Any, name: str) -> Address | None:
    if value is None:
        return None
    return _parse_address(value, name)


def _hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _address_or_none(address: Address | None) -> str | None:
    return None if address is None else str(address)


# ---- relay responses ----

@dataclass
class SafeInfo:
    """Safe state reported by the relay."""

    nonce: int
    threshold: int
    owners: list[Address]
    version: str

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SafeInfo:
        owners = _require(raw, "owners")
        if not isinstance(owners, list):
            raise ValueError("Field 'owners' must be a list")
        version = _require(raw, "version")
        if not isinstance(version, str):
            raise ValueError("Field 'version' must be a string")
        return cls(
            nonce=_parse_uint(_require(raw, "nonce"), U64_MAX, "nonce"),
            threshold=_parse_uint(_require(raw, "threshold"), U64_MAX, "threshold"),
            owners=[_parse_address(o, "owners") for o in owners],
            version=version,
        )


@dataclass
class Estimate:
    """Gas estimate for a Safe transaction."""

    safe_tx_gas: int
    base_gas: int
    gas_price: int
    last_used_nonce: int | None = None
    gas_token: Address | None = None
    refund_receiver: Address | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Estimate:
        last_used_nonce = raw.get("lastUsedNonce")
        return cls(
            safe_tx_gas=_parse_uint(_require(raw, "safeTxGas"), U128_MAX, "safeTxGas"),
            base_gas=_parse_uint(_require(raw, "baseGas"), U128_MAX, "baseGas"),
            gas_price=_parse_uint(_require(raw, "gasPrice"), U128_MAX, "gasPrice"),
            last_used_nonce=(
                None if last_used_nonce is None
                else _parse_uint(last_used_nonce, U64_MAX, "lastUsedNonce")
            ),
            gas_token=_parse_optional_address(raw.get("gasToken"), "gasToken"),
            refund_receiver=_parse_optional_address(
                raw.get("refundReceiver"), "refundReceiver"
            ),
        )


@dataclass
class ExecutedTransaction:
    """Relay acknowledgement of a submitted transaction."""

    transaction_hash: bytes

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ExecutedTransaction:
        value = _require(raw, "transactionHash")
        if not isinstance(value, str):
            raise ValueError("Field 'transactionHash' must be a hex string")
        body = value[2:] if value.startswith(("0x", "0X")) else value
        try:
            tx_hash = bytes.fromhex(body)
        except ValueError:
            raise ValueError(f"Invalid transaction hash: {value!r}") from None
        if len(tx_hash) != 32:
            raise ValueError(f"Transaction hash must be 32 bytes, got {len(tx_hash)}")
        return cls(transaction_hash=tx_hash)


# ---- relay requests ----

@dataclass
class EstimateParameters:
    """Request body for the gas estimation endpoint."""

    safe: Address
    to: Address
    value: int
    data: bytes
    operation: Operation = Operation.CALL
    gas_token: Address | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "safe": str(self.safe),
            "to": str(self.to),
            "value": u128_to_decimal(self.value),
            "data": _hex(self.data),
            "operation": int(self.operation),
        }
        if self.gas_token is not None:
            body["gasToken"] = str(self.gas_token)
        return body


def signature_to_dict(signature: Signature) -> dict[str, Any]:
    return {
        "v": signature.v,
        "r": to_decimal(signature.r),
        "s": to_decimal(signature.s),
    }


@dataclass
class SignedSafeTransaction:
    """A Safe transaction together with its owner signatures."""

    safe: Address
    transaction: SafeTransaction
    signatures: list[Signature] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        tx = self.transaction
        return {
            "safe": str(self.safe),
            "to": str(tx.to),
            "value": u128_to_decimal(tx.value),
            "data": _hex(tx.data),
            "operation": int(tx.operation),
            "gasToken": _address_or_none(tx.gas_token),
            "safeTxGas": u128_to_decimal(tx.safe_tx_gas),
            "dataGas": u128_to_decimal(tx.base_gas),
            "gasPrice": u128_to_decimal(tx.gas_price),
            "refundReceiver": _address_or_none(tx.refund_receiver),
            "nonce": tx.nonce,
            "signatures": [signature_to_dict(s) for s in self.signatures],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
