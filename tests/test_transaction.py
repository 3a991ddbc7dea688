"""
Tests for safe_migrate.transaction — SafeTx structured hashing.

Covers:
  - Type hashes
  - The published digest for a fixed transaction and Safe
  - Field sensitivity of the struct hash
  - Absent addresses hash like the zero address
  - Range validation at construction
  - Signing a transaction for a Safe
"""

import dataclasses
import unittest

from safe_migrate.address import Address
from safe_migrate.hashing import keccak256
from safe_migrate.keys import PrivateKey, recover_address
from safe_migrate.models import Operation
from safe_migrate.transaction import (
    DOMAIN_TYPEHASH,
    SAFE_TX_TYPEHASH,
    SafeTransaction,
    domain_separator,
    signing_digest,
)

SAFE = Address.from_hex("0x0b54478f3a29BfAD2b67a0d7Dbe23e8f61B1EbC6")
KEY_0 = "4f3edf983ac636a65a842ce7c78d9aa706d3b113bce9c46f30d7d21715b23b1d"


def _fixture_tx(**overrides) -> SafeTransaction:
    fields = dict(
        to=Address(b"\x01" * 20),
        value=2,
        data=b"\x03",
        operation=Operation.CALL,
        safe_tx_gas=4,
        base_gas=5,
        gas_price=6,
        gas_token=Address(b"\x07" * 20),
        refund_receiver=Address(b"\x08" * 20),
        nonce=9,
    )
    fields.update(overrides)
    return SafeTransaction(**fields)


class TestTypeHashes(unittest.TestCase):

    def test_domain_typehash(self):
        self.assertEqual(
            DOMAIN_TYPEHASH.hex(),
            "035aff83d86937d35b32e04f0ddc6ff469290eef2f1b692d8a815c89404d4749",
        )

    def test_safe_tx_typehash(self):
        self.assertEqual(
            SAFE_TX_TYPEHASH.hex(),
            "bb8310d486368db6bd6f849402fdd73ad53d316b5a4b2644ad6efe0f941286d8",
        )


class TestSigningDigest(unittest.TestCase):

    def test_fixture(self):
        self.assertEqual(
            _fixture_tx().signing_digest(SAFE).hex(),
            "59485d05fff460e1687ea64c018781e440cbd8cb6a14c82d1ee2c7756fe4f7cb",
        )

    def test_function_alias(self):
        tx = _fixture_tx()
        self.assertEqual(signing_digest(tx, SAFE), tx.signing_digest(SAFE))

    def test_digest_composition(self):
        tx = _fixture_tx()
        expected = keccak256(b"\x19\x01" + domain_separator(SAFE) + tx.struct_hash())
        self.assertEqual(tx.signing_digest(SAFE), expected)

    def test_domain_separator_layout(self):
        expected = keccak256(DOMAIN_TYPEHASH + bytes(12) + bytes(SAFE))
        self.assertEqual(domain_separator(SAFE), expected)

    def test_depends_on_safe(self):
        tx = _fixture_tx()
        self.assertNotEqual(tx.signing_digest(SAFE), tx.signing_digest(Address.zero()))

    def test_every_field_changes_struct_hash(self):
        base = _fixture_tx().struct_hash()
        changes = dict(
            to=Address(b"\x11" * 20),
            value=3,
            data=b"\x04",
            safe_tx_gas=5,
            base_gas=6,
            gas_price=7,
            gas_token=Address(b"\x17" * 20),
            refund_receiver=Address(b"\x18" * 20),
            nonce=10,
        )
        for name, value in changes.items():
            with self.subTest(field=name):
                self.assertNotEqual(_fixture_tx(**{name: value}).struct_hash(), base)

    def test_absent_addresses_hash_as_zero(self):
        absent = _fixture_tx(gas_token=None, refund_receiver=None)
        zeroed = _fixture_tx(gas_token=Address.zero(), refund_receiver=Address.zero())
        self.assertEqual(absent.struct_hash(), zeroed.struct_hash())

    def test_large_values(self):
        tx = _fixture_tx(value=(1 << 128) - 1, nonce=(1 << 64) - 1)
        self.assertEqual(len(tx.signing_digest(SAFE)), 32)


class TestValidation(unittest.TestCase):

    def test_value_out_of_range(self):
        with self.assertRaises(ValueError):
            _fixture_tx(value=1 << 128)

    def test_negative_gas(self):
        with self.assertRaises(ValueError):
            _fixture_tx(gas_price=-1)

    def test_nonce_out_of_range(self):
        with self.assertRaises(ValueError):
            _fixture_tx(nonce=1 << 64)

    def test_unknown_operation(self):
        with self.assertRaises(ValueError):
            _fixture_tx(operation=1)

    def test_immutable(self):
        tx = _fixture_tx()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            tx.nonce = 10

    def test_operation_display(self):
        self.assertEqual(str(_fixture_tx().operation), "call")


class TestSign(unittest.TestCase):

    def test_signed_by_key(self):
        tx = _fixture_tx()
        key = PrivateKey.from_hex(KEY_0)
        signed = tx.sign(SAFE, key)
        self.assertEqual(signed.safe, SAFE)
        self.assertIs(signed.transaction, tx)
        self.assertEqual(len(signed.signatures), 1)
        recovered = recover_address(tx.signing_digest(SAFE), signed.signatures[0])
        self.assertEqual(recovered, key.address())
