"""
Wallet agent: the Python entry point consumers use.

Wires one ``WalletSession`` to the transfer service, the route orchestrator
and token reads, built from settings on first use.

Usage:
    agent = get_wallet_agent()

    result = await agent.transfer(TransferParams(
        from_chain="sepolia",
        to_address="0x...",
        amount="0.01",
    ))
    print(result.to_dict())
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config import settings
from ..core.chains.registry import ChainRegistry
from ..core.errors import NotConnected
from ..core.execution.transfer import TransferService
from ..core.routing.models import ExecutionOptions
from ..core.routing.orchestrator import RouteOrchestrator
from ..core.routing.strategies import RouteSelector, get_selector
from ..core.wallet.models import (
    BridgeParams,
    SwapParams,
    TokenBalance,
    TokenInfo,
    TransactionResult,
    TransferParams,
)
from ..core.wallet.session import ClientFactory, WalletSession
from ..providers.lifi import LiFiProvider
from .tokens import TokenService

logger = logging.getLogger(__name__)


class WalletAgent:
    """Transfer, swap, bridge and balance reads for one agent key."""

    def __init__(
        self,
        session: WalletSession,
        *,
        aggregator: Optional[LiFiProvider] = None,
        selector: Optional[RouteSelector] = None,
        options: Optional[ExecutionOptions] = None,
    ) -> None:
        self.session = session
        self.transfers = TransferService(session)
        self.routes = RouteOrchestrator(
            session,
            aggregator or LiFiProvider(),
            selector=selector or get_selector(settings.route_selector),
            options=options,
        )
        self.tokens = TokenService(session)

    @classmethod
    def from_settings(
        cls,
        *,
        client_factory: Optional[ClientFactory] = None,
        aggregator: Optional[LiFiProvider] = None,
    ) -> "WalletAgent":
        if not settings.has_private_key:
            raise NotConnected("EVM_PRIVATE_KEY not configured")
        registry = ChainRegistry.from_config(settings.evm_chains)
        session = WalletSession.initialize(
            settings.evm_private_key,
            registry,
            client_factory=client_factory,
            default_chain=settings.default_chain,
        )
        return cls(session, aggregator=aggregator)

    def get_address(self) -> str:
        return self.session.get_address()

    @property
    def current_chain(self) -> str:
        return self.session.current_chain

    async def switch_chain(self, chain: str) -> None:
        await self.session.switch_chain(chain)

    async def get_balance(self, chain: Optional[str] = None) -> Optional[int]:
        """Native balance in wei on ``chain`` (default: current chain); ``None`` if unavailable."""
        return await self.session.get_balance(chain)

    async def get_token_balance(self, chain: str, token: Optional[str] = None) -> TokenBalance:
        return await self.tokens.get_balance(chain, token)

    async def get_token_info(self, chain: str, token: str) -> TokenInfo:
        return await self.tokens.get_token_info(chain, token)

    async def wallet_summary(self) -> str:
        return await self.tokens.wallet_summary()

    async def transfer(self, params: TransferParams) -> TransactionResult:
        return await self.transfers.transfer(params)

    async def swap(self, params: SwapParams) -> TransactionResult:
        return await self.routes.swap(params)

    async def bridge(self, params: BridgeParams) -> TransactionResult:
        return await self.routes.bridge(params)

    async def close(self) -> None:
        await self.session.close()


# Singleton instance
_agent: Optional[WalletAgent] = None


def get_wallet_agent() -> WalletAgent:
    """Get the singleton wallet agent, building it from settings on first use.

    Raises:
        NotConnected: no private key is configured
    """
    global _agent
    if _agent is None:
        _agent = WalletAgent.from_settings()
        logger.info("Wallet agent ready for %s", _agent.get_address())
    return _agent


def set_wallet_agent(agent: Optional[WalletAgent]) -> None:
    """Replace the singleton (tests, or an app that builds its own agent)."""
    global _agent
    _agent = agent


async def close_wallet_agent() -> None:
    """Disconnect the singleton's providers and drop it."""
    global _agent
    if _agent is not None:
        await _agent.close()
        _agent = None
