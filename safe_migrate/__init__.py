"""
safe-migrate — move a Gnosis Safe from the legacy Safe mobile app to the
Safe multisig web app by adding a new owner.

Modules:
  - hashing         Keccak-256
  - wallet          BIP-39 / BIP-32 key derivation from a recovery phrase
  - keys            private keys, addresses and recoverable signatures
  - address         EIP-55 checksummed addresses
  - abi             ``addOwnerWithThreshold`` call data
  - transaction     Safe transactions and their EIP-712 digest
  - decimal_codec   binary to decimal strings for JSON payloads
  - models          relay wire models
  - relay           async relay client
  - etherscan       transaction links
  - migration       the end-to-end migration workflow
  - config          TOML + environment configuration
  - logging_config  log formatting
"""

from safe_migrate.address import Address
from safe_migrate.errors import (
    Aborted,
    DerivationFailure,
    InvalidPhrase,
    RelayError,
    SafeMigrateError,
    SigningFailure,
    UnsupportedSafe,
)
from safe_migrate.keys import PrivateKey, Signature, address_of, sign
from safe_migrate.transaction import SafeTransaction, signing_digest
from safe_migrate.wallet import derive_private_key

__version__ = "0.1.0"

__all__ = [
    "Aborted",
    "Address",
    "DerivationFailure",
    "InvalidPhrase",
    "PrivateKey",
    "RelayError",
    "SafeMigrateError",
    "SafeTransaction",
    "Signature",
    "SigningFailure",
    "UnsupportedSafe",
    "address_of",
    "derive_private_key",
    "sign",
    "signing_digest",
]
