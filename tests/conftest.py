"""Shared fixtures: an in-memory stand-in for AsyncWeb3 and the LI.FI client."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from agent_wallet.core.chains import NATIVE_PLACEHOLDER, ChainRegistry
from agent_wallet.core.wallet.session import WalletSession

# Hardhat / anvil account #0; never holds real funds.
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

FAKE_TX_HASH = bytes.fromhex("ab" * 32)


async def _resolve(value: Any) -> Any:
    if isinstance(value, Exception):
        raise value
    return value


class FakeCall:
    def __init__(self, contract: "FakeContract", name: str, args: tuple):
        self._contract = contract
        self._name = name
        self._args = args

    async def call(self) -> Any:
        self._contract.calls.append((self._name, self._args))
        return await _resolve(self._contract.values[self._name])


class FakeFunctions:
    def __init__(self, contract: "FakeContract"):
        self._contract = contract

    def __getattr__(self, name: str):
        def build(*args: Any) -> FakeCall:
            return FakeCall(self._contract, name, args)

        return build


class FakeContract:
    def __init__(self, address: str, values: Dict[str, Any]):
        self.address = address
        self.values = values
        self.calls: List[tuple] = []
        self.functions = FakeFunctions(self)


class FakeEth:
    """The subset of ``AsyncWeb3.eth`` the wallet touches."""

    def __init__(self, chain_id: int):
        self.chain_id_value = chain_id
        self.balance: Any = 10**18
        self.gas_estimate: Any = 21_000
        self.gas_price_value: Any = 1_000_000_000
        self.nonce: Any = 7
        self.send_result: Any = FAKE_TX_HASH
        self.receipt: Any = {"status": 1}
        self.code: Any = b"\x60\x80\x60\x40"
        self.tokens: Dict[str, Dict[str, Any]] = {}

        self.estimated: List[Dict[str, Any]] = []
        self.sent: List[bytes] = []
        self.nonce_requests: List[tuple] = []
        self.receipts_awaited: List[str] = []
        self.contracts: Dict[str, FakeContract] = {}

    async def get_balance(self, address: str) -> int:
        return await _resolve(self.balance)

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        self.estimated.append(dict(tx))
        return await _resolve(self.gas_estimate)

    @property
    def gas_price(self):
        return _resolve(self.gas_price_value)

    async def get_transaction_count(self, address: str, block_identifier: str = "latest") -> int:
        self.nonce_requests.append((address, block_identifier))
        return await _resolve(self.nonce)

    async def send_raw_transaction(self, raw: bytes) -> Any:
        self.sent.append(bytes(raw))
        return await _resolve(self.send_result)

    async def wait_for_transaction_receipt(self, tx_hash: str, timeout: float = 120, poll_latency: float = 0.1):
        self.receipts_awaited.append(tx_hash)
        return await _resolve(self.receipt)

    async def get_code(self, address: str) -> bytes:
        return await _resolve(self.code)

    def contract(self, address: str, abi: Any) -> FakeContract:
        key = address.lower()
        if key not in self.contracts:
            self.contracts[key] = FakeContract(address, self.tokens.setdefault(key, {}))
        return self.contracts[key]

    def add_token(self, address: str, **values: Any) -> Dict[str, Any]:
        token = self.tokens.setdefault(address.lower(), {})
        token.update(values)
        return token


class FakeWeb3:
    def __init__(self, chain_id: int):
        self.eth = FakeEth(chain_id)
        self.provider = None


class FakeAggregator:
    """Stand-in for ``LiFiProvider`` with awaitable, inspectable methods."""

    def __init__(self):
        self.integrator = "agent-wallet-tests"
        self.get_routes = AsyncMock(return_value=[])
        self.get_step_transaction = AsyncMock(side_effect=self._populate)
        self.get_status = AsyncMock(return_value={"status": "DONE"})
        self.transaction_requests: Dict[str, Dict[str, Any]] = {}
        self.estimate_updates: Dict[str, Dict[str, Any]] = {}

    async def _populate(self, step: Dict[str, Any]) -> Dict[str, Any]:
        populated = copy.deepcopy(step)
        populated["estimate"].update(self.estimate_updates.get(step["id"], {}))
        populated["transactionRequest"] = self.transaction_requests[step["id"]]
        return populated


ROUTER = "0x1231deb6f5749ef6ce6943a275a1d3e7486f4eae"
USDC_BASE = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
USDC_ETHEREUM = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


def make_step(
    step_id: str,
    *,
    from_chain: int,
    to_chain: int,
    from_token: str = NATIVE_PLACEHOLDER,
    to_token: str = USDC_BASE,
    from_amount: int = 10**15,
    to_amount: int = 3_000_000,
    approval_address: Optional[str] = ROUTER,
    tool: str = "uniswap",
    duration: float = 30,
    gas_usd: str = "0.05",
) -> Dict[str, Any]:
    return {
        "id": step_id,
        "type": "lifi",
        "tool": tool,
        "action": {
            "fromChainId": from_chain,
            "toChainId": to_chain,
            "fromToken": {"address": from_token, "chainId": from_chain, "symbol": "ETH", "decimals": 18},
            "toToken": {"address": to_token, "chainId": to_chain, "symbol": "USDC", "decimals": 6},
            "fromAmount": str(from_amount),
            "fromAddress": TEST_ADDRESS,
            "toAddress": TEST_ADDRESS,
            "slippage": 0.005,
        },
        "estimate": {
            "fromAmount": str(from_amount),
            "toAmount": str(to_amount),
            "toAmountMin": str(int(to_amount * 0.995)),
            "approvalAddress": approval_address,
            "executionDuration": duration,
            "gasCosts": [{"amountUSD": gas_usd}],
        },
    }


def make_route(route_id: str, steps: List[Dict[str, Any]], *, gas_usd: str = "0.05") -> Dict[str, Any]:
    first, last = steps[0], steps[-1]
    return {
        "id": route_id,
        "fromChainId": first["action"]["fromChainId"],
        "toChainId": last["action"]["toChainId"],
        "fromAmount": first["action"]["fromAmount"],
        "toAmount": last["estimate"]["toAmount"],
        "gasCostUSD": gas_usd,
        "steps": steps,
    }


def tx_request(chain_id: int, *, value: int = 0, data: str = "0xdeadbeef", to: str = ROUTER) -> Dict[str, Any]:
    return {
        "to": to,
        "data": data,
        "value": hex(value),
        "chainId": chain_id,
        "gasLimit": hex(200_000),
        "gasPrice": hex(1_000_000_000),
    }


@pytest.fixture
def registry() -> ChainRegistry:
    return ChainRegistry.from_config(None)


@pytest.fixture
def fake_clients(registry) -> Dict[str, FakeWeb3]:
    return {descriptor.key: FakeWeb3(descriptor.chain_id) for descriptor in registry}


@pytest.fixture
def session(registry, fake_clients) -> WalletSession:
    return WalletSession.initialize(
        TEST_PRIVATE_KEY,
        registry,
        client_factory=lambda descriptor: fake_clients[descriptor.key],
    )


@pytest.fixture
def aggregator() -> FakeAggregator:
    return FakeAggregator()


@pytest.fixture
def route_builders():
    """Route JSON builders (``make_step``, ``make_route``, ``tx_request``) plus well-known addresses."""

    class Builders:
        step = staticmethod(make_step)
        route = staticmethod(make_route)
        request = staticmethod(tx_request)
        router = ROUTER
        usdc_base = USDC_BASE
        usdc_ethereum = USDC_ETHEREUM
        address = TEST_ADDRESS
        private_key = TEST_PRIVATE_KEY
        tx_hash = "0x" + FAKE_TX_HASH.hex()

    return Builders
