"""
Tests for safe_migrate.models — relay wire models.

Covers:
  - SafeInfo / Estimate / ExecutedTransaction parsing and rejection
  - EstimateParameters request body (gasToken omitted when absent)
  - SignedSafeTransaction JSON contract
"""

import json
import unittest

from safe_migrate.address import Address
from safe_migrate.keys import Signature
from safe_migrate.models import (
    Estimate,
    EstimateParameters,
    ExecutedTransaction,
    Operation,
    SafeInfo,
    SignedSafeTransaction,
)
from safe_migrate.transaction import SafeTransaction

SAFE = "0x0b54478f3a29BfAD2b67a0d7Dbe23e8f61B1EbC6"
OWNER_0 = "0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1"
OWNER_1 = "0xFFcf8FDEE72ac11b5c542428B35EEF5769C409f0"
R_HEX = "408790f153cbfa2722fc708a57d97a43b24429724cf060df7c915d468c43bd84"
S_HEX = "61c96aac95ce37d7a31087b6634f4a3ea439a9f704b5c818584fa2a32fa83859"


class TestSafeInfo(unittest.TestCase):

    def test_from_dict(self):
        info = SafeInfo.from_dict({
            "address": SAFE,
            "nonce": 7,
            "threshold": 1,
            "owners": [OWNER_0, OWNER_1],
            "version": "1.1.1",
        })
        self.assertEqual(info.nonce, 7)
        self.assertEqual(info.threshold, 1)
        self.assertEqual(info.owners, [Address.from_hex(OWNER_0), Address.from_hex(OWNER_1)])
        self.assertEqual(info.version, "1.1.1")

    def test_missing_field(self):
        with self.assertRaises(ValueError):
            SafeInfo.from_dict({"nonce": 0, "threshold": 1, "owners": []})

    def test_bad_owner(self):
        with self.assertRaises(ValueError):
            SafeInfo.from_dict({
                "nonce": 0, "threshold": 1, "owners": ["0x1234"], "version": "1.1.1",
            })

    def test_negative_nonce(self):
        with self.assertRaises(ValueError):
            SafeInfo.from_dict({
                "nonce": -1, "threshold": 1, "owners": [], "version": "1.1.1",
            })


class TestEstimate(unittest.TestCase):

    def test_from_dict(self):
        est = Estimate.from_dict({
            "safeTxGas": "52409",
            "baseGas": "48896",
            "dataGas": "48896",
            "operationalGas": "0",
            "gasPrice": "1000000001",
            "lastUsedNonce": 6,
            "gasToken": "0x0000000000000000000000000000000000000000",
            "refundReceiver": OWNER_1,
        })
        self.assertEqual(est.safe_tx_gas, 52409)
        self.assertEqual(est.base_gas, 48896)
        self.assertEqual(est.gas_price, 1000000001)
        self.assertEqual(est.last_used_nonce, 6)
        self.assertTrue(est.gas_token.is_zero())
        self.assertEqual(
            str(est.refund_receiver), OWNER_1
        )

    def test_optional_fields(self):
        est = Estimate.from_dict({"safeTxGas": "1", "baseGas": "2", "gasPrice": "3"})
        self.assertIsNone(est.last_used_nonce)
        self.assertIsNone(est.gas_token)
        self.assertIsNone(est.refund_receiver)

    def test_wide_gas_price(self):
        wide = str((1 << 128) - 1)
        est = Estimate.from_dict({"safeTxGas": "0", "baseGas": "0", "gasPrice": wide})
        self.assertEqual(est.gas_price, (1 << 128) - 1)

    def test_rejects_non_numeric(self):
        with self.assertRaises(ValueError):
            Estimate.from_dict({"safeTxGas": "lots", "baseGas": "2", "gasPrice": "3"})

    def test_rejects_overflow(self):
        with self.assertRaises(ValueError):
            Estimate.from_dict({
                "safeTxGas": str(1 << 128), "baseGas": "2", "gasPrice": "3",
            })

    def test_rejects_bool(self):
        with self.assertRaises(ValueError):
            Estimate.from_dict({"safeTxGas": True, "baseGas": "2", "gasPrice": "3"})


class TestExecutedTransaction(unittest.TestCase):

    def test_from_dict(self):
        executed = ExecutedTransaction.from_dict({"transactionHash": "0x" + "ab" * 32})
        self.assertEqual(executed.transaction_hash, b"\xab" * 32)

    def test_unprefixed(self):
        executed = ExecutedTransaction.from_dict({"transactionHash": "cd" * 32})
        self.assertEqual(executed.transaction_hash, b"\xcd" * 32)

    def test_wrong_length(self):
        with self.assertRaises(ValueError):
            ExecutedTransaction.from_dict({"transactionHash": "0xabcd"})

    def test_missing(self):
        with self.assertRaises(ValueError):
            ExecutedTransaction.from_dict({})


class TestEstimateParameters(unittest.TestCase):

    def test_without_gas_token(self):
        params = EstimateParameters(
            safe=Address.from_hex(SAFE),
            to=Address.from_hex(SAFE),
            value=0,
            data=b"\x0d\x58\x2f\x13",
        )
        self.assertEqual(params.to_dict(), {
            "safe": SAFE,
            "to": SAFE,
            "value": "0",
            "data": "0x0d582f13",
            "operation": 0,
        })

    def test_with_gas_token(self):
        token = Address(b"\x07" * 20)
        params = EstimateParameters(
            safe=Address.from_hex(SAFE),
            to=Address.from_hex(SAFE),
            value=0,
            data=b"",
            gas_token=token,
        )
        self.assertEqual(params.to_dict()["gasToken"], str(token))


class TestSignedSafeTransaction(unittest.TestCase):

    def setUp(self):
        self.tx = SafeTransaction(
            to=Address.from_hex(SAFE),
            value=0,
            data=b"\xab\xcd",
            operation=Operation.CALL,
            safe_tx_gas=52409,
            base_gas=48896,
            gas_price=(1 << 100),
            gas_token=None,
            refund_receiver=Address.from_hex(OWNER_1),
            nonce=7,
        )
        self.signature = Signature(v=28, r=bytes.fromhex(R_HEX), s=bytes.fromhex(S_HEX))
        self.signed = SignedSafeTransaction(
            safe=Address.from_hex(SAFE), transaction=self.tx, signatures=[self.signature],
        )

    def test_to_dict(self):
        self.assertEqual(self.signed.to_dict(), {
            "safe": SAFE,
            "to": SAFE,
            "value": "0",
            "data": "0xabcd",
            "operation": 0,
            "gasToken": None,
            "safeTxGas": "52409",
            "dataGas": "48896",
            "gasPrice": str(1 << 100),
            "refundReceiver": OWNER_1,
            "nonce": 7,
            "signatures": [{
                "v": 28,
                "r": str(int(R_HEX, 16)),
                "s": str(int(S_HEX, 16)),
            }],
        })

    def test_to_json(self):
        payload = json.loads(self.signed.to_json())
        self.assertIsNone(payload["gasToken"])
        self.assertIsInstance(payload["nonce"], int)
        self.assertIsInstance(payload["signatures"][0]["v"], int)
        self.assertIsInstance(payload["signatures"][0]["r"], str)

    def test_operation_serializes_as_number(self):
        self.assertIs(type(self.signed.to_dict()["operation"]), int)
