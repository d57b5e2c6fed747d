"""
Wallet session: one account, many chains.

The session owns a query client and a signing client for every configured
chain, plus the single mutable ``current_chain`` pointer. All chain switches
and all transfer/swap/bridge operations go through one ``asyncio.Lock`` so a
transaction is always signed with the client of the chain it is sent to.
"""

from __future__ import annotations

import asyncio
import binascii
import logging
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Optional, Protocol

from aiohttp import ClientTimeout
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_keys.exceptions import ValidationError as KeyValidationError
from web3 import AsyncWeb3

from ...config import settings
from ..chains.models import ChainDescriptor
from ..chains.registry import ChainRegistry
from ..errors import InvalidCredential, NotConnected, UnknownChain

logger = logging.getLogger(__name__)

_PRIVATE_KEY_RE = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")

ClientFactory = Callable[[ChainDescriptor], Any]


def hex_hash(value: Any) -> str:
    """Normalize a transaction hash (HexBytes, bytes or str) to ``0x``-prefixed hex."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    text = str(value)
    return text if text.startswith("0x") else f"0x{text}"


def default_client_factory(descriptor: ChainDescriptor) -> AsyncWeb3:
    provider = AsyncWeb3.AsyncHTTPProvider(
        descriptor.rpc_url,
        request_kwargs={"timeout": ClientTimeout(total=settings.rpc_timeout_seconds)},
    )
    return AsyncWeb3(provider)


class SigningClient:
    """Signs and broadcasts for one account on one chain.

    The private key stays inside the wrapped ``LocalAccount``; callers only
    ever see signed envelopes.
    """

    def __init__(self, account: LocalAccount, query_client: Any, descriptor: ChainDescriptor):
        self._account = account
        self.query_client = query_client
        self.descriptor = descriptor

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain_id(self) -> int:
        return self.descriptor.chain_id

    def sign_transaction(self, tx: Dict[str, Any]) -> bytes:
        if int(tx.get("chainId", self.chain_id)) != self.chain_id:
            raise NotConnected(
                f"Refusing to sign for chain {tx.get('chainId')} with the {self.descriptor.key} signer",
                chain=self.descriptor.key,
            )
        signed = self._account.sign_transaction(tx)
        return bytes(signed.raw_transaction)

    async def send_raw_transaction(self, raw: bytes) -> str:
        tx_hash = await self.query_client.eth.send_raw_transaction(raw)
        return hex_hash(tx_hash)


@dataclass
class ChainClientBinding:
    """Clients for one chain, created once per session."""
    descriptor: ChainDescriptor
    query_client: Any
    signing_client: Optional[SigningClient]


class SignerCapability(Protocol):
    """What the route executor may do with the session's signing ability."""

    def current_signer(self) -> SigningClient: ...

    async def switch_and_get_signer(self, chain_id: int) -> SigningClient: ...


class _SessionSignerCapability:
    """Capability bound to a session; only usable while an operation holds the lock."""

    def __init__(self, session: "WalletSession"):
        self._session = session

    def current_signer(self) -> SigningClient:
        return self._session.get_signing_client()

    async def switch_and_get_signer(self, chain_id: int) -> SigningClient:
        descriptor = self._session.registry.by_chain_id(chain_id)
        if not self._session.in_operation:
            raise NotConnected(
                "Chain switches from route execution are only allowed inside the task running the wallet operation",
                chain=descriptor.key,
            )
        self._session._set_current_chain(descriptor.key)
        return self._session.get_signing_client()


class WalletSession:
    """Single authoritative holder of the account's signing capability."""

    def __init__(
        self,
        account: LocalAccount,
        registry: ChainRegistry,
        bindings: Dict[str, ChainClientBinding],
        *,
        default_chain: Optional[str] = None,
    ):
        self._account = account
        self.registry = registry
        self._bindings = bindings
        self._current_chain = registry.normalize(default_chain) if default_chain else registry.keys[0]
        self._lock = asyncio.Lock()
        self._owner: Optional[asyncio.Task] = None

    @classmethod
    def initialize(
        cls,
        secret_key: str,
        registry: ChainRegistry,
        *,
        client_factory: Optional[ClientFactory] = None,
        default_chain: Optional[str] = None,
    ) -> "WalletSession":
        """Derive the account once and build clients for every configured chain."""
        account = _account_from_key(secret_key)
        factory = client_factory or default_client_factory

        bindings: Dict[str, ChainClientBinding] = {}
        for descriptor in registry:
            query_client = factory(descriptor)
            bindings[descriptor.key] = ChainClientBinding(
                descriptor=descriptor,
                query_client=query_client,
                signing_client=SigningClient(account, query_client, descriptor),
            )

        session = cls(account, registry, bindings, default_chain=default_chain)
        logger.info(
            "Wallet session initialized for %s on %d chains (current=%s)",
            account.address,
            len(bindings),
            session.current_chain,
        )
        return session

    # ─────────────────────────────────────────────────────────────────────────
    # Accessors
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def address(self) -> str:
        return self._account.address

    def get_address(self) -> str:
        return self._account.address

    @property
    def current_chain(self) -> str:
        return self._current_chain

    @property
    def in_operation(self) -> bool:
        """True only for the task currently holding the operation lock."""
        return self._owner is not None and self._owner is asyncio.current_task()

    def chain_descriptor(self, chain: Optional[str] = None) -> ChainDescriptor:
        return self.get_binding(chain).descriptor

    def get_binding(self, chain: Optional[str] = None) -> ChainClientBinding:
        key = self.registry.normalize(chain) if chain else self._current_chain
        binding = self._bindings.get(key)
        if binding is None:
            raise UnknownChain(key)
        return binding

    def get_query_client(self, chain: Optional[str] = None) -> Any:
        return self.get_binding(chain).query_client

    def get_signing_client(self) -> SigningClient:
        """Signing client for ``current_chain``."""
        binding = self._bindings.get(self._current_chain)
        if binding is None or binding.signing_client is None:
            raise NotConnected("Wallet not connected", chain=self._current_chain)
        return binding.signing_client

    def signer_capability(self) -> SignerCapability:
        return _SessionSignerCapability(self)

    # ─────────────────────────────────────────────────────────────────────────
    # Chain switching
    # ─────────────────────────────────────────────────────────────────────────

    def _set_current_chain(self, key: str) -> None:
        if key not in self._bindings:
            raise UnknownChain(key)
        if key != self._current_chain:
            logger.info("Switching chain %s -> %s", self._current_chain, key)
            self._current_chain = key

    async def switch_chain(self, chain: str) -> None:
        """Set ``current_chain``; waits for any in-flight operation to finish."""
        key = self.registry.normalize(chain)
        async with self._lock:
            self._set_current_chain(key)

    @asynccontextmanager
    async def operation(self, chain: str) -> AsyncIterator[ChainClientBinding]:
        """Hold the session for one switch → sign → broadcast sequence."""
        key = self.registry.normalize(chain)
        async with self._lock:
            self._set_current_chain(key)
            self._owner = asyncio.current_task()
            try:
                yield self._bindings[key]
            finally:
                self._owner = None

    # ─────────────────────────────────────────────────────────────────────────
    # Balances
    # ─────────────────────────────────────────────────────────────────────────

    async def get_balance(self, chain: Optional[str] = None) -> Optional[int]:
        """Native balance in wei, or ``None`` when the RPC call fails."""
        binding = self.get_binding(chain)
        try:
            return int(await binding.query_client.eth.get_balance(self.address))
        except Exception as exc:
            logger.warning(
                "Error getting wallet balance on %s: %s",
                binding.descriptor.key,
                exc,
            )
            return None

    async def close(self) -> None:
        for binding in self._bindings.values():
            provider = getattr(binding.query_client, "provider", None)
            disconnect = getattr(provider, "disconnect", None)
            if disconnect is None:
                continue
            try:
                await disconnect()
            except Exception as exc:
                logger.debug("Provider disconnect failed for %s: %s", binding.descriptor.key, exc)


def _account_from_key(secret_key: str) -> LocalAccount:
    if not isinstance(secret_key, str) or not _PRIVATE_KEY_RE.match(secret_key.strip()):
        raise InvalidCredential("Private key must be 32 bytes of hex (optionally 0x-prefixed)")
    key = secret_key.strip()
    if not key.startswith("0x"):
        key = "0x" + key
    try:
        return Account.from_key(key)
    except (ValueError, TypeError, binascii.Error, KeyValidationError) as exc:
        raise InvalidCredential(f"Invalid private key: {exc}") from exc
