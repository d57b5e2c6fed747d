import pytest

from agent_wallet.core.chains import ChainRegistry, NATIVE_PLACEHOLDER
from agent_wallet.core.errors import InvalidParameter, UnknownChain


def test_default_table_has_ethereum_base_sepolia():
    registry = ChainRegistry.from_config(None)

    assert registry.keys == ["ethereum", "base", "sepolia"]
    assert registry.resolve("ethereum").chain_id == 1
    assert registry.resolve("base").chain_id == 8453
    assert registry.resolve("sepolia").native_currency.decimals == 18
    assert len(registry) == 3


def test_aliases_and_chain_ids_resolve_to_keys():
    registry = ChainRegistry.from_config(None)

    assert registry.normalize("ETH") == "ethereum"
    assert registry.normalize("mainnet") == "ethereum"
    assert registry.normalize("8453") == "base"
    assert registry.by_chain_id(11155111).key == "sepolia"
    assert "Base" in registry
    assert "polygon" not in registry


def test_unknown_chain_raises():
    registry = ChainRegistry.from_config(None)

    with pytest.raises(UnknownChain):
        registry.resolve("solana")
    with pytest.raises(UnknownChain) as exc_info:
        registry.by_chain_id(10)
    assert "Chain ID 10 not supported" in str(exc_info.value)
    assert registry.get("solana") is None


def test_configured_table_replaces_defaults():
    registry = ChainRegistry.from_config({
        "optimism": {
            "chainId": 10,
            "name": "OP Mainnet",
            "rpcUrl": "https://mainnet.optimism.io",
            "nativeCurrency": {"name": "Ether", "symbol": "ETH", "decimals": 18},
            "blockExplorerUrl": "https://optimistic.etherscan.io",
        },
        "local": {
            "chain_id": 31337,
            "rpc_url": "http://127.0.0.1:8545",
            "native_currency": {"symbol": "GO"},
            "testnet": True,
        },
    })

    assert registry.keys == ["optimism", "local"]
    assert registry.normalize("op") == "optimism"
    assert registry.resolve("local").native_currency.symbol == "GO"
    assert registry.resolve("local").name == "Local"
    with pytest.raises(UnknownChain):
        registry.resolve("ethereum")


@pytest.mark.parametrize(
    "entry",
    [
        {"name": "Broken", "rpcUrl": "https://x", "nativeCurrency": {}},
        {"chainId": 5, "nativeCurrency": {}},
        {"chainId": 5, "rpcUrl": "https://x", "nativeCurrency": "ETH"},
        {"chainId": -1, "rpcUrl": "https://x", "nativeCurrency": {}},
    ],
)
def test_malformed_entries_are_invalid_parameters(entry):
    with pytest.raises(InvalidParameter):
        ChainRegistry.from_config({"broken": entry})


def test_duplicate_chain_ids_are_rejected():
    entry = {"chainId": 1, "rpcUrl": "https://x", "nativeCurrency": {"symbol": "ETH"}}
    with pytest.raises(InvalidParameter):
        ChainRegistry.from_config({"a": entry, "b": dict(entry)})


def test_aggregator_chain_shape():
    registry = ChainRegistry.from_config(None)
    base = next(chain for chain in registry.aggregator_chains() if chain["id"] == 8453)

    assert base["chainType"] == "EVM"
    assert base["key"] == "base"
    assert base["nativeToken"]["address"] == NATIVE_PLACEHOLDER
    assert base["metamask"]["chainId"] == "0x2105"
    assert base["rpcUrls"]["public"]["http"] == ["https://base.llamarpc.com"]


def test_explorer_url():
    descriptor = ChainRegistry.from_config(None).resolve("sepolia")
    assert descriptor.explorer_tx_url("0xabc") == "https://sepolia.etherscan.io/tx/0xabc"
