"""
Async client for the Gnosis Safe relay service.

Provides:
  - :class:`Network` — supported chains and their default relay URLs
  - :class:`RelayClient` — Safe lookup, gas estimation and transaction
    submission over ``aiohttp``

Any response outside 200..399 raises :class:`RelayError` carrying the status
code and body.  Transport failures and unreadable JSON are wrapped the same
way.  No retries are attempted.
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Any

import aiohttp

from safe_migrate.address import Address
from safe_migrate.errors import RelayError
from safe_migrate.models import (
    Estimate,
    EstimateParameters,
    ExecutedTransaction,
    SafeInfo,
    SignedSafeTransaction,
)

logger = logging.getLogger("safe_migrate.relay")

DEFAULT_TIMEOUT = 30.0


class Network(Enum):
    """Networks served by a Safe relay, valued by chain id."""

    MAINNET = 1
    RINKEBY = 4

    @classmethod
    def from_name(cls, name: str) -> Network:
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"invalid network '{name}'") from None

    @property
    def chain_id(self) -> int:
        return self.value

    @property
    def relay_url(self) -> str:
        return RELAY_URLS[self]

    def __str__(self) -> str:
        return self.name.lower()


RELAY_URLS = {
    Network.MAINNET: "https://safe-relay.gnosis.io/api",
    Network.RINKEBY: "https://safe-relay.rinkeby.gnosis.io/api",
}


class RelayClient:
    """
    Client for one relay deployment.

    Use as an async context manager so the HTTP session is closed::

        async with RelayClient.for_network(Network.RINKEBY) as relay:
            info = await relay.get_safe(safe)
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    @classmethod
    def for_network(cls, network: Network, timeout: float = DEFAULT_TIMEOUT) -> RelayClient:
        return cls(network.relay_url, timeout=timeout)

    # ---- lifecycle ----

    async def __aenter__(self) -> RelayClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    # ---- endpoints ----

    async def get_safe(self, safe: Address) -> SafeInfo:
        """Current nonce, threshold, owners and version of *safe*."""
        raw = await self._request("GET", f"/v1/safes/{safe}/")
        return self._parse(SafeInfo, raw)

    async def estimate_safe_transaction(self, params: EstimateParameters) -> Estimate:
        """Gas estimate for executing *params* through the relay."""
        raw = await self._request(
            "POST",
            f"/v2/safes/{params.safe}/transactions/estimate/",
            params.to_dict(),
        )
        return self._parse(Estimate, raw)

    async def post_transaction(self, signed: SignedSafeTransaction) -> ExecutedTransaction:
        """Submit a signed transaction for execution."""
        raw = await self._request(
            "POST",
            f"/v1/safes/{signed.safe}/transactions/",
            signed.to_dict(),
        )
        logger.debug(f"Relay accepted transaction: {raw}")
        return self._parse(ExecutedTransaction, raw)

    # ---- internals ----

    async def _request(self, method: str, path: str, body: dict | None = None) -> Any:
        url = self.base_url + path
        logger.debug(f"{method} {url}")
        session = self._get_session()
        try:
            async with session.request(method, url, json=body) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 400:
                    logger.warning(f"{method} {url} failed with HTTP {resp.status}")
                    raise RelayError(f"HTTP {resp.status}: {text}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RelayError(f"{method} {url} failed: {exc}") from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise RelayError(f"Invalid JSON from {url}: {exc}") from exc

    @staticmethod
    def _parse(model: Any, raw: Any) -> Any:
        if not isinstance(raw, dict):
            raise RelayError(f"Expected a JSON object for {model.__name__}")
        try:
            return model.from_dict(raw)
        except ValueError as exc:
            raise RelayError(f"Malformed {model.__name__} payload: {exc}") from exc
