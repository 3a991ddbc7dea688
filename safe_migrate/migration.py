"""
Legacy-app Safe migration workflow.

The legacy Safe mobile app deploys Safes with three owners (the device key
and two recovery accounts derived from the recovery phrase) and a threshold
of one.  Migration adds a new owner through ``addOwnerWithThreshold``,
signed by the primary recovery account and executed by the relay.

Every irreversible step is gated by an operator confirmation; declining
any of them raises :class:`Aborted` before anything is submitted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from safe_migrate.abi import add_owner_with_threshold
from safe_migrate.address import Address
from safe_migrate.config import MigrationConfig
from safe_migrate.errors import Aborted, UnsupportedSafe
from safe_migrate.models import (
    Estimate,
    EstimateParameters,
    ExecutedTransaction,
    Operation,
    SafeInfo,
)
from safe_migrate.relay import RelayClient
from safe_migrate.transaction import SafeTransaction
from safe_migrate.wallet import derive_private_key

logger = logging.getLogger("safe_migrate.migration")

Confirm = Callable[[str], bool]
Echo = Callable[[str], None]


def check_safe(info: SafeInfo, recovery: Sequence[Address],
               rules: MigrationConfig | None = None) -> None:
    """
    Raise :class:`UnsupportedSafe` unless *info* describes a legacy-app Safe
    recoverable by the *recovery* addresses.

    Only membership is checked; the owner slots the recovery accounts
    occupy are not.
    """
    rules = rules or MigrationConfig()
    if info.version != rules.required_version:
        raise UnsupportedSafe(f"unsupported Safe version {info.version}")
    if len(info.owners) != rules.required_owner_count or info.threshold != rules.required_threshold:
        raise UnsupportedSafe(
            f"unsupported Safe configuration: {len(info.owners)} owners, "
            f"threshold {info.threshold}"
        )
    owners = set(info.owners)
    if not all(address in owners for address in recovery):
        raise UnsupportedSafe("recovery phrase is not for this Safe")


def build_transaction(safe: Address, owner: Address, info: SafeInfo,
                      estimate: Estimate, threshold: int = 1) -> SafeTransaction:
    """The self-call adding *owner* to *safe*, priced by *estimate*."""
    return SafeTransaction(
        to=safe,
        value=0,
        data=add_owner_with_threshold(owner, threshold),
        operation=Operation.CALL,
        safe_tx_gas=estimate.safe_tx_gas,
        base_gas=estimate.base_gas,
        gas_price=estimate.gas_price,
        gas_token=estimate.gas_token,
        refund_receiver=estimate.refund_receiver,
        nonce=info.nonce,
    )


def _display_option(value: Address | None) -> str:
    return "-" if value is None else str(value)


def describe_transaction(tx: SafeTransaction, safe: Address) -> list[str]:
    """Human-readable summary lines, ending with the signing digest."""
    return [
        f"  to: {tx.to}",
        f"  value: {tx.value}",
        f"  data: 0x{tx.data.hex()}",
        f"  operation: {tx.operation}",
        f"  safe transaction gas: {tx.safe_tx_gas}",
        f"  base gas: {tx.base_gas}",
        f"  gas price: {tx.gas_price}",
        f"  gas token: {_display_option(tx.gas_token)}",
        f"  refund receiver: {_display_option(tx.refund_receiver)}",
        f"  nonce: {tx.nonce}",
        f"  hash: 0x{tx.signing_digest(safe).hex()}",
    ]


def _require(confirm: Confirm, prompt: str) -> None:
    if not confirm(prompt):
        logger.info("Operator declined confirmation")
        raise Aborted("aborted")


async def migrate(
    relay: RelayClient,
    safe: Address,
    owner: Address,
    phrase: str,
    confirm: Confirm,
    echo: Echo = print,
    gas_token: Address | None = None,
    rules: MigrationConfig | None = None,
) -> ExecutedTransaction:
    """
    Add *owner* to the legacy-app *safe* recovered by *phrase*.

    Returns the relay's acknowledgement.  The recovery key is wiped before
    returning, on success and on every error path.
    """
    rules = rules or MigrationConfig()

    with derive_private_key(phrase, rules.secondary_recovery_index) as secondary_key:
        secondary_address = secondary_key.address()

    with derive_private_key(phrase, rules.recovery_index) as recovery_key:
        recovery_address = recovery_key.address()

        echo(f"Using Safe {safe}")
        echo("Using Recovery accounts:")
        echo(f"  - {recovery_address}")
        echo(f"  - {secondary_address}")

        info = await relay.get_safe(safe)
        logger.info(
            f"Safe {safe}: version={info.version} owners={len(info.owners)} "
            f"threshold={info.threshold} nonce={info.nonce}"
        )
        check_safe(info, [recovery_address, secondary_address], rules)

        data = add_owner_with_threshold(owner, rules.threshold)
        estimate = await relay.estimate_safe_transaction(EstimateParameters(
            safe=safe,
            to=safe,
            value=0,
            data=data,
            operation=Operation.CALL,
            gas_token=gas_token,
        ))
        logger.info(
            f"Estimate: safeTxGas={estimate.safe_tx_gas} baseGas={estimate.base_gas} "
            f"gasPrice={estimate.gas_price}"
        )

        _require(confirm, f"About to add {owner} as an owner (yes to continue)")
        _require(confirm, f"Are you sure, this will add a new owner to the Safe {safe}")
        _require(confirm, "Are you absolutely sure!")

        tx = build_transaction(safe, owner, info, estimate, rules.threshold)
        for line in describe_transaction(tx, safe):
            echo(line)
        _require(confirm, "Are you still 100% sure")

        signed = tx.sign(safe, recovery_key)
        echo(f"Using signature {signed.signatures[0]}")
        _require(confirm, "Are absolutely positively undoubtedly sure")

    executed = await relay.post_transaction(signed)
    logger.info(f"Relayed transaction 0x{executed.transaction_hash.hex()}")
    return executed
