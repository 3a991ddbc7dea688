"""
secp256k1 private keys, addresses and recoverable signatures.

Provides:
  - :class:`PrivateKey`, a 32-byte scalar that is zeroed when its ``with``
    block ends (or when :meth:`PrivateKey.wipe` is called)
  - address derivation (Keccak-256 of the uncompressed public point)
  - deterministic (RFC 6979) recoverable ECDSA with low-s normalisation
    and ``v`` in electrum notation (27 / 28)
  - public-key recovery, used to check a signature against an address
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.ecdsa import InvalidPointError
from ecdsa.errors import MalformedPointError
from ecdsa.numbertheory import SquareRootError
from ecdsa.util import sigdecode_string, sigencode_strings_canonize

from safe_migrate.address import Address
from safe_migrate.errors import SigningFailure
from safe_migrate.hashing import keccak256

SECRET_LENGTH = 32
DIGEST_LENGTH = 32
ELECTRUM_V_OFFSET = 27

_ORDER = SECP256k1.order


@dataclass(frozen=True)
class Signature:
    """A recoverable signature in electrum notation."""

    v: int
    r: bytes
    s: bytes

    @property
    def recovery_id(self) -> int:
        return self.v - ELECTRUM_V_OFFSET

    def to_bytes(self) -> bytes:
        """65-byte ``r || s || v`` encoding used by Safe contracts."""
        return self.r + self.s + bytes([self.v])

    def __str__(self) -> str:
        return "0x" + self.to_bytes().hex()


class PrivateKey:
    """A secp256k1 private scalar with an explicit wipe lifecycle.

    Use it as a context manager so the secret is overwritten on every exit
    path::

        with derive_private_key(phrase) as key:
            signature = key.sign(digest)
    """

    def __init__(self, secret: bytes | bytearray):
        if len(secret) != SECRET_LENGTH:
            raise ValueError(
                f"Private key must be {SECRET_LENGTH} bytes, got {len(secret)}"
            )
        if not 0 < int.from_bytes(secret, "big") < _ORDER:
            raise ValueError("Private key is outside the secp256k1 scalar range")
        self._secret = bytearray(secret)
        self._wiped = False

    @classmethod
    def from_hex(cls, text: str) -> PrivateKey:
        body = text[2:] if text.startswith(("0x", "0X")) else text
        return cls(bytes.fromhex(body))

    # ---- lifecycle ----

    def __enter__(self) -> PrivateKey:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __del__(self) -> None:
        if getattr(self, "_secret", None) is not None:
            self.wipe()

    def wipe(self) -> None:
        """Overwrite the secret with zeros.  Further use raises ValueError."""
        for i in range(len(self._secret)):
            self._secret[i] = 0
        self._wiped = True

    @property
    def wiped(self) -> bool:
        return self._wiped

    def secret_exponent(self) -> int:
        if self._wiped:
            raise ValueError("Private key has been wiped")
        return int.from_bytes(self._secret, "big")

    # ---- derived values ----

    def public_key(self) -> bytes:
        """65-byte uncompressed public key (``0x04 || x || y``)."""
        signing_key = SigningKey.from_secret_exponent(
            self.secret_exponent(), curve=SECP256k1
        )
        return signing_key.get_verifying_key().to_string("uncompressed")

    def address(self) -> Address:
        return address_of(self)

    def sign(self, digest: bytes) -> Signature:
        return sign(digest, self)

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else "live"
        return f"PrivateKey(<{state}>)"


def public_key_to_address(public_key: bytes) -> Address:
    """Address of a 65-byte uncompressed (or 64-byte raw) public key."""
    if len(public_key) == 65 and public_key[0] == 0x04:
        public_key = public_key[1:]
    if len(public_key) != 64:
        raise ValueError(f"Invalid uncompressed public key length: {len(public_key)}")
    return Address(keccak256(public_key)[12:])


def address_of(key: PrivateKey) -> Address:
    """The Ethereum address controlled by *key*."""
    return public_key_to_address(key.public_key())


def sign(digest: bytes, key: PrivateKey) -> Signature:
    """Recoverable ECDSA signature of a 32-byte *digest*.

    The nonce is derived per RFC 6979 with HMAC-SHA256, ``s`` is normalised
    to the lower half of the group order and ``v`` is ``27 + recovery_id``.
    The recovery id is found by recovering both candidate keys from
    ``(r, s)`` and matching them against the signer's own public key.

    Raises :class:`SigningFailure` for a digest of the wrong length, and
    when neither candidate matches.  That happens only when the nonce
    point's x-coordinate is at or above the group order (recovery id 2 or
    3), which electrum ``v`` values cannot express.
    """
    if len(digest) != DIGEST_LENGTH:
        raise SigningFailure(
            f"Digest must be {DIGEST_LENGTH} bytes, got {len(digest)}"
        )
    digest = bytes(digest)
    signing_key = SigningKey.from_secret_exponent(
        key.secret_exponent(), curve=SECP256k1
    )
    r, s = signing_key.sign_digest_deterministic(
        digest, hashfunc=hashlib.sha256, sigencode=sigencode_strings_canonize
    )
    expected = signing_key.get_verifying_key().to_string("uncompressed")

    for recovery_id, candidate in enumerate(_recover_candidates(digest, r + s)):
        if candidate == expected:
            return Signature(v=ELECTRUM_V_OFFSET + recovery_id, r=r, s=s)
    raise SigningFailure(
        "Signature needs recovery id 2 or 3 (R.x overflows the group order); "
        "v can only be 27 or 28"
    )


def _recover_candidates(digest: bytes, raw_signature: bytes) -> list[bytes]:
    """Both public keys that verify *raw_signature*, even R.y first."""
    try:
        keys = VerifyingKey.from_public_key_recovery_with_digest(
            raw_signature, digest, SECP256k1,
            hashfunc=hashlib.sha256, sigdecode=sigdecode_string,
        )
    except (SquareRootError, InvalidPointError, MalformedPointError) as exc:
        raise SigningFailure("Signature r is not a curve x-coordinate") from exc
    return [k.to_string("uncompressed") for k in keys]


def recover_public_key(digest: bytes, signature: Signature) -> bytes:
    """Recover the 65-byte uncompressed public key that produced *signature*."""
    if len(digest) != DIGEST_LENGTH:
        raise SigningFailure(
            f"Digest must be {DIGEST_LENGTH} bytes, got {len(digest)}"
        )
    if signature.recovery_id not in (0, 1):
        raise SigningFailure(f"Unsupported signature v value: {signature.v}")
    if len(signature.r) != 32 or len(signature.s) != 32:
        raise SigningFailure("Signature r and s must be 32 bytes each")
    r = int.from_bytes(signature.r, "big")
    s = int.from_bytes(signature.s, "big")
    if not (0 < r < _ORDER and 0 < s < _ORDER):
        raise SigningFailure("Signature values are outside the group order")

    candidates = _recover_candidates(bytes(digest), signature.r + signature.s)
    return candidates[signature.recovery_id]


def recover_address(digest: bytes, signature: Signature) -> Address:
    """The address whose key produced *signature* over *digest*."""
    return public_key_to_address(recover_public_key(digest, signature))
