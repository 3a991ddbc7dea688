#!/usr/bin/env python3
"""
safe-migrate runner — migrate a Safe from the legacy Safe app to the Safe
multisig web app by adding a new owner.

Usage:
    python run_migrate.py <SAFE> <OWNER> [--network rinkeby] [--gas-token 0x...]

The recovery phrase is read from the terminal without echo.  Five
confirmations (answer ``yes``) are required before the signed transaction
is handed to the relay.

Environment variables (alternative to flags):
    SAFE_MIGRATE_NETWORK, SAFE_MIGRATE_RELAY_URL, SAFE_MIGRATE_GAS_TOKEN
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import getpass
import logging
import os
import sys

# ---------------------------------------------------------------------------
# Ensure the project root is in sys.path so imports work before pip install
# ---------------------------------------------------------------------------
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from safe_migrate.address import Address  # noqa: E402
from safe_migrate.config import load_config  # noqa: E402
from safe_migrate.errors import Aborted, InvalidPhrase, SafeMigrateError  # noqa: E402
from safe_migrate.etherscan import render_link  # noqa: E402
from safe_migrate.logging_config import setup_logging  # noqa: E402
from safe_migrate.migration import migrate  # noqa: E402
from safe_migrate.relay import Network, RelayClient  # noqa: E402

logger = logging.getLogger("safe_migrate")


# ===================================================================
#  Terminal helpers
# ===================================================================

def read_phrase(prompt: str = "Legacy Safe recovery phrase") -> str:
    """Read the recovery phrase without echo; empty input is rejected."""
    phrase = getpass.getpass(f"{prompt}: ")
    if not phrase.strip():
        raise InvalidPhrase("empty recovery phrase")
    return phrase


def confirm(prompt: str) -> bool:
    """Ask on stdout; only an exact ``yes`` counts as agreement."""
    try:
        answer = input(f"{prompt}? ")
    except EOFError:
        raise Aborted("error reading from stdin") from None
    return answer == "yes"


# ===================================================================
#  Main entry point
# ===================================================================

def _address(text: str) -> Address:
    try:
        return Address.from_hex(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="safe-migrate",
        description="Migrate a Safe from Legacy App to Multisig",
    )
    p.add_argument("safe", metavar="SAFE", type=_address,
                   help="The address of the Safe to migrate")
    p.add_argument("owner", metavar="OWNER", type=_address,
                   help="The address of the new owner to be added to the Safe")
    p.add_argument("--network", choices=[str(n) for n in Network], default=None,
                   help="The Safe's Ethereum network")
    p.add_argument("--gas-token", type=_address, default=None,
                   help="The token to pay transaction gas in")
    p.add_argument("--config", default=None, help="Path to a safe-migrate.toml file")
    return p.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        cfg = load_config(args.config)
    except (OSError, ValueError) as exc:
        logger.error(f"ERROR: {exc}")
        return 1
    setup_logging(cfg.logging.level, cfg.logging.format, cfg.logging.file)

    if args.network:
        cfg.relay.network = args.network

    try:
        gas_token = args.gas_token
        if gas_token is None and cfg.migration.gas_token:
            gas_token = Address.from_hex(cfg.migration.gas_token)
        network = cfg.relay.selected_network()
        phrase = read_phrase()
        async with RelayClient(cfg.relay.url_for(network),
                               timeout=cfg.relay.timeout_seconds) as relay:
            executed = await migrate(
                relay,
                args.safe,
                args.owner,
                phrase,
                confirm=confirm,
                gas_token=gas_token,
                rules=cfg.migration,
            )
    except (SafeMigrateError, ValueError) as exc:
        logger.error(f"ERROR: {exc}")
        return 1

    print("Transaction successfully relayed:")
    print(render_link(network, executed))
    return 0


def main_sync() -> None:
    """Synchronous entry point for console_scripts."""
    code = 1
    with contextlib.suppress(KeyboardInterrupt):
        code = asyncio.run(main())
    sys.exit(code)


if __name__ == "__main__":
    main_sync()
