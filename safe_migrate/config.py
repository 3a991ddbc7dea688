"""
TOML-based configuration for safe-migrate.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values.

Usage:
    from safe_migrate.config import load_config
    cfg = load_config("safe-migrate.toml")
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from safe_migrate.relay import RELAY_URLS, Network


@dataclass
class RelayConfig:
    """Relay service selection."""
    network: str = "rinkeby"
    mainnet_url: str = RELAY_URLS[Network.MAINNET]
    rinkeby_url: str = RELAY_URLS[Network.RINKEBY]
    timeout_seconds: float = 30.0
    url_override: str | None = None

    def selected_network(self) -> Network:
        return Network.from_name(self.network)

    def url_for(self, network: Network) -> str:
        """Relay URL for *network*; ``url_override`` wins for the selected one."""
        if self.url_override and network is self.selected_network():
            return self.url_override
        if network is Network.MAINNET:
            return self.mainnet_url
        return self.rinkeby_url


@dataclass
class MigrationConfig:
    """Rules a Safe must satisfy before an owner is added.

    ``recovery_index`` selects the account that signs;
    ``secondary_recovery_index`` must also be an owner.
    """
    gas_token: str | None = None
    threshold: int = 1
    required_version: str = "1.1.1"
    required_owner_count: int = 3
    required_threshold: int = 1
    recovery_index: int = 0
    secondary_recovery_index: int = 1


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: str | None = None


@dataclass
class SafeMigrateConfig:
    """Top-level configuration container."""
    relay: RelayConfig = field(default_factory=RelayConfig)
    migration: MigrationConfig = field(default_factory=MigrationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _merge(dc: Any, raw: dict[str, Any]) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if hasattr(dc, key_under):
            setattr(dc, key_under, value)


def load_config(path: str | None = None) -> SafeMigrateConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    Env-var mapping:
        SAFE_MIGRATE_NETWORK    -> relay.network
        SAFE_MIGRATE_RELAY_URL  -> relay.url_override (selected network only)
        SAFE_MIGRATE_TIMEOUT    -> relay.timeout_seconds
        SAFE_MIGRATE_GAS_TOKEN  -> migration.gas_token
        SAFE_MIGRATE_LOG_LEVEL  -> logging.level
        SAFE_MIGRATE_LOG_FMT    -> logging.format
    """
    cfg = SafeMigrateConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            for section_name, section_dc in [
                ("relay", cfg.relay),
                ("migration", cfg.migration),
                ("logging", cfg.logging),
            ]:
                if section_name in data:
                    _merge(section_dc, data[section_name])

    # ── Environment variable overrides ───────────────────────────
    if v := os.environ.get("SAFE_MIGRATE_NETWORK"):
        cfg.relay.network = v.lower()
    if v := os.environ.get("SAFE_MIGRATE_RELAY_URL"):
        cfg.relay.url_override = v
    if v := os.environ.get("SAFE_MIGRATE_TIMEOUT"):
        try:
            cfg.relay.timeout_seconds = float(v)
        except ValueError:
            raise ValueError(f"SAFE_MIGRATE_TIMEOUT is not a number: {v!r}") from None
    if v := os.environ.get("SAFE_MIGRATE_GAS_TOKEN"):
        cfg.migration.gas_token = v
    if v := os.environ.get("SAFE_MIGRATE_LOG_LEVEL"):
        cfg.logging.level = v.upper()
    if v := os.environ.get("SAFE_MIGRATE_LOG_FMT"):
        cfg.logging.format = v

    return cfg
