"""
Recovery-phrase key derivation for safe-migrate.

Turns a BIP-39 recovery phrase into the secp256k1 private key of an
Ethereum account:

  - BIP-39 phrase validation against the English word list (with checksum)
  - PBKDF2-HMAC-SHA512 seed stretching
  - BIP-32 hierarchical derivation along ``m/44'/60'/0'/0/{index}``

Every intermediate node is wiped once the final key has been extracted,
whether derivation succeeds or fails.
"""

from __future__ import annotations

import hashlib
import hmac
import struct
import unicodedata

from Crypto.Hash import RIPEMD160
from ecdsa import SECP256k1, SigningKey
from mnemonic import Mnemonic

from safe_migrate.errors import DerivationFailure, InvalidPhrase
from safe_migrate.keys import PrivateKey

SEED_ITERATIONS = 2048
SEED_LENGTH = 64
VALID_WORD_COUNTS = (12, 15, 18, 21, 24)

ETHEREUM_COIN_TYPE = 60


# ===================================================================
#  BIP-39 Mnemonic Support
# ===================================================================

_MNEMONIC: Mnemonic | None = None


def _get_mnemonic() -> Mnemonic:
    global _MNEMONIC
    if _MNEMONIC is None:
        _MNEMONIC = Mnemonic("english")
    return _MNEMONIC


def validate_mnemonic(phrase: str) -> str:
    """
    Check a recovery phrase and return it in canonical single-spaced form.

    Raises :class:`InvalidPhrase` for a wrong word count, a word outside the
    English list, or a checksum mismatch.
    """
    words = unicodedata.normalize("NFKD", phrase).split()
    if len(words) not in VALID_WORD_COUNTS:
        raise InvalidPhrase(
            f"Expected 12/15/18/21/24 words, got {len(words)}"
        )
    mnemo = _get_mnemonic()
    known = set(mnemo.wordlist)
    for position, word in enumerate(words, start=1):
        if word not in known:
            raise InvalidPhrase(f"Word {position} is not in the BIP-39 English list")
    normalized = " ".join(words)
    if not mnemo.check(normalized):
        raise InvalidPhrase("Recovery phrase checksum mismatch")
    return normalized


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """Convert a mnemonic phrase to a 64-byte seed (BIP-39)."""
    phrase = unicodedata.normalize("NFKD", mnemonic)
    salt = unicodedata.normalize("NFKD", "mnemonic" + passphrase)
    return hashlib.pbkdf2_hmac(
        "sha512", phrase.encode("utf-8"), salt.encode("utf-8"),
        SEED_ITERATIONS, dklen=SEED_LENGTH,
    )


# ===================================================================
#  HD Key Derivation (BIP-32 / BIP-44)
# ===================================================================

def _hash160(data: bytes) -> bytes:
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


class HDNode:
    """
    Hierarchical Deterministic key derivation node.

    Implements BIP-32 private derivation with HMAC-SHA512.
    Path notation: m/44'/60'/account'/0/index
    """

    HARDENED = 0x80000000
    ORDER = SECP256k1.order

    def __init__(self, private_key: bytes | bytearray, chain_code: bytes | bytearray,
                 depth: int = 0, index: int = 0,
                 parent_fingerprint: bytes = b"\x00" * 4):
        self._private_key = bytearray(private_key)
        self._chain_code = bytearray(chain_code)
        self.depth = depth
        self.index = index
        self.parent_fingerprint = parent_fingerprint

    @classmethod
    def from_seed(cls, seed: bytes | bytearray) -> HDNode:
        """Create master node from a BIP-39 seed."""
        digest = bytearray(hmac.new(b"Bitcoin seed", bytes(seed), hashlib.sha512).digest())
        try:
            key_int = int.from_bytes(digest[:32], "big")
            if key_int == 0 or key_int >= cls.ORDER:
                raise DerivationFailure("Master key is outside the secp256k1 scalar range")
            return cls(private_key=digest[:32], chain_code=digest[32:])
        finally:
            _zero(digest)

    @property
    def private_key(self) -> bytes:
        return bytes(self._private_key)

    @property
    def chain_code(self) -> bytes:
        return bytes(self._chain_code)

    def _compressed_pub(self) -> bytes:
        """Get compressed (33-byte) public key."""
        sk = SigningKey.from_string(bytes(self._private_key), curve=SECP256k1)
        return sk.get_verifying_key().to_string("compressed")

    @property
    def fingerprint(self) -> bytes:
        """First 4 bytes of Hash160 of the compressed public key."""
        return _hash160(self._compressed_pub())[:4]

    def derive_child(self, index: int) -> HDNode:
        """Derive a child node at the given index."""
        if not 0 <= index <= 0xFFFFFFFF:
            raise ValueError(f"Child index out of range: {index}")
        if index >= self.HARDENED:
            data = b"\x00" + bytes(self._private_key) + struct.pack(">I", index)
        else:
            data = self._compressed_pub() + struct.pack(">I", index)

        digest = bytearray(hmac.new(bytes(self._chain_code), data, hashlib.sha512).digest())
        try:
            tweak = int.from_bytes(digest[:32], "big")
            if tweak >= self.ORDER:
                raise DerivationFailure(f"Derived tweak out of range at index {index}")
            child_key_int = (tweak + int.from_bytes(self._private_key, "big")) % self.ORDER
            if child_key_int == 0:
                raise DerivationFailure(f"Derived key is zero at index {index}")
            return HDNode(
                private_key=child_key_int.to_bytes(32, "big"),
                chain_code=digest[32:],
                depth=self.depth + 1,
                index=index,
                parent_fingerprint=self.fingerprint,
            )
        finally:
            _zero(digest)

    def derive_path(self, path: str) -> HDNode:
        """
        Derive from a BIP-44 path string like "m/44'/60'/0'/0/0".

        Intermediate nodes are wiped; the caller owns the returned node.
        """
        if path in ("m", ""):
            return self
        if path.startswith("m/"):
            path = path[2:]

        node = self
        try:
            for component in path.split("/"):
                if component.endswith("'"):
                    index = int(component[:-1]) + self.HARDENED
                else:
                    index = int(component)
                child = node.derive_child(index)
                if node is not self:
                    node.wipe()
                node = child
        except BaseException:
            if node is not self:
                node.wipe()
            raise
        return node

    def to_private_key(self) -> PrivateKey:
        """Copy this node's key into a wipeable :class:`PrivateKey`."""
        return PrivateKey(self._private_key)

    def wipe(self) -> None:
        _zero(self._private_key)
        _zero(self._chain_code)


def _zero(buffer: bytearray) -> None:
    for i in range(len(buffer)):
        buffer[i] = 0


def ethereum_path(account_index: int) -> str:
    """The BIP-44 Ethereum path for the given account index."""
    if not 0 <= account_index < HDNode.HARDENED:
        raise ValueError(f"Account index out of range: {account_index}")
    return f"m/44'/{ETHEREUM_COIN_TYPE}'/0'/0/{account_index}"


def derive_private_key(phrase: str, account_index: int = 0,
                       passphrase: str = "") -> PrivateKey:
    """
    Derive the private key for ``m/44'/60'/0'/0/{account_index}``.

    Raises :class:`InvalidPhrase` when the phrase fails validation and
    :class:`DerivationFailure` when a derivation step is degenerate.
    The returned key should be used as a context manager so that it is
    wiped once signing is done.
    """
    path = ethereum_path(account_index)
    normalized = validate_mnemonic(phrase)
    seed = bytearray(mnemonic_to_seed(normalized, passphrase))
    master: HDNode | None = None
    leaf: HDNode | None = None
    try:
        master = HDNode.from_seed(seed)
        leaf = master.derive_path(path)
        return leaf.to_private_key()
    finally:
        _zero(seed)
        if leaf is not None:
            leaf.wipe()
        if master is not None:
            master.wipe()
