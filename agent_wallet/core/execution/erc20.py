"""ERC20 contract reads shared by transfers, route execution and token queries."""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from eth_utils import to_checksum_address

# Standard ERC-20 ABI (read functions plus transfer/approve)
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "name",
        "outputs": [{"name": "", "type": "string"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "totalSupply",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
]


def erc20_contract(client: Any, token_address: str) -> Any:
    return client.eth.contract(address=to_checksum_address(token_address), abi=ERC20_ABI)


async def read_decimals(client: Any, token_address: str) -> int:
    return int(await erc20_contract(client, token_address).functions.decimals().call())


async def read_balance(client: Any, token_address: str, owner: str) -> int:
    contract = erc20_contract(client, token_address)
    return int(await contract.functions.balanceOf(to_checksum_address(owner)).call())


async def read_allowance(client: Any, token_address: str, owner: str, spender: str) -> int:
    contract = erc20_contract(client, token_address)
    return int(
        await contract.functions.allowance(
            to_checksum_address(owner),
            to_checksum_address(spender),
        ).call()
    )


async def read_metadata(client: Any, token_address: str) -> Dict[str, Any]:
    """Name, symbol, decimals and total supply in one round of concurrent calls."""
    functions = erc20_contract(client, token_address).functions
    name, symbol, decimals, total_supply = await asyncio.gather(
        functions.name().call(),
        functions.symbol().call(),
        functions.decimals().call(),
        functions.totalSupply().call(),
    )
    return {
        "name": str(name),
        "symbol": str(symbol),
        "decimals": int(decimals),
        "total_supply": int(total_supply),
    }
