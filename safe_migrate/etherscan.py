"""Etherscan links for relayed transactions."""

from __future__ import annotations

from safe_migrate.models import ExecutedTransaction
from safe_migrate.relay import Network

_HOST_PREFIX = {
    Network.MAINNET: "",
    Network.RINKEBY: "rinkeby.",
}


def render_link(network: Network, executed: ExecutedTransaction) -> str:
    """Etherscan URL of *executed* on *network*."""
    return (
        f"https://{_HOST_PREFIX[network]}etherscan.io/tx/"
        f"0x{executed.transaction_hash.hex()}"
    )
