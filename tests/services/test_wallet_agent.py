import pytest

from agent_wallet.config import settings
from agent_wallet.core.errors import NotConnected
from agent_wallet.core.routing.strategies import fastest
from agent_wallet.services.wallet_agent import (
    WalletAgent,
    close_wallet_agent,
    get_wallet_agent,
    set_wallet_agent,
)

HARDHAT_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"


def test_from_settings_requires_a_key(monkeypatch):
    monkeypatch.setattr(settings, "evm_private_key", "")

    with pytest.raises(NotConnected):
        WalletAgent.from_settings()


def test_from_settings_builds_session(monkeypatch, fake_clients, aggregator):
    monkeypatch.setattr(settings, "evm_private_key", HARDHAT_KEY)
    monkeypatch.setattr(settings, "default_chain", "base")
    monkeypatch.setattr(settings, "route_selector", "fastest")

    agent = WalletAgent.from_settings(
        client_factory=lambda descriptor: fake_clients[descriptor.key],
        aggregator=aggregator,
    )

    assert agent.get_address() == "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
    assert agent.current_chain == "base"
    assert agent.routes.selector is fastest
    assert agent.routes.config.integrator == "agent-wallet-tests"


@pytest.mark.asyncio
async def test_singleton_can_be_replaced_and_closed(session, aggregator):
    agent = WalletAgent(session, aggregator=aggregator)
    set_wallet_agent(agent)

    assert get_wallet_agent() is agent
    await agent.switch_chain("sepolia")
    assert agent.current_chain == "sepolia"

    await close_wallet_agent()
    set_wallet_agent(None)


@pytest.mark.asyncio
async def test_get_balance_passes_through(session, fake_clients, aggregator):
    fake_clients["ethereum"].eth.balance = 42
    agent = WalletAgent(session, aggregator=aggregator)

    assert await agent.get_balance() == 42
    assert "Balance: 0.0000 ETH" in await agent.wallet_summary()
