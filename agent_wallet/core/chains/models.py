"""Typed chain metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from .constants import NATIVE_PLACEHOLDER


@dataclass(frozen=True)
class NativeCurrency:
    name: str
    symbol: str
    decimals: int = 18


@dataclass(frozen=True)
class ChainDescriptor:
    """Immutable metadata for one supported EVM chain."""

    key: str
    chain_id: int
    name: str
    native_currency: NativeCurrency
    rpc_url: str
    block_explorer_url: str = ""
    testnet: bool = False

    @classmethod
    def from_mapping(cls, key: str, data: Mapping[str, Any]) -> "ChainDescriptor":
        """Build a descriptor from camelCase or snake_case configuration.

        Raises ``KeyError``/``TypeError``/``ValueError`` on malformed entries;
        the registry turns those into ``InvalidParameter``.
        """

        def pick(*names: str, default: Any = None) -> Any:
            for name in names:
                if name in data and data[name] is not None:
                    return data[name]
            if default is None:
                raise KeyError(names[0])
            return default

        currency = pick('nativeCurrency', 'native_currency')
        if not isinstance(currency, Mapping):
            raise TypeError('nativeCurrency must be a mapping')

        chain_id = int(pick('chainId', 'chain_id'))
        if chain_id <= 0:
            raise ValueError(f'chainId must be positive, got {chain_id}')

        rpc_url = str(pick('rpcUrl', 'rpc_url')).strip()
        if not rpc_url:
            raise ValueError('rpcUrl must not be empty')

        return cls(
            key=key,
            chain_id=chain_id,
            name=str(pick('name', default=key.title())),
            native_currency=NativeCurrency(
                name=str(currency.get('name') or 'Ether'),
                symbol=str(currency.get('symbol') or 'ETH'),
                decimals=int(currency.get('decimals', 18)),
            ),
            rpc_url=rpc_url,
            block_explorer_url=str(pick('blockExplorerUrl', 'block_explorer_url', default='')),
            testnet=bool(data.get('testnet', False)),
        )

    @property
    def hex_chain_id(self) -> str:
        return hex(self.chain_id)

    def explorer_tx_url(self, tx_hash: str) -> str:
        if not self.block_explorer_url:
            return ''
        return f"{self.block_explorer_url.rstrip('/')}/tx/{tx_hash}"

    def to_aggregator_chain(self) -> Dict[str, Any]:
        """Render the chain in the shape the route aggregator configuration uses."""
        native = self.native_currency
        return {
            'id': self.chain_id,
            'key': self.name.lower(),
            'name': self.name,
            'chainType': 'EVM',
            'coin': native.symbol,
            'mainnet': not self.testnet,
            'nativeToken': {
                'chainId': self.chain_id,
                'address': NATIVE_PLACEHOLDER,
                'symbol': native.symbol,
                'decimals': native.decimals,
                'name': native.name,
                'coinKey': native.symbol,
                'priceUSD': '0',
                'logoURI': '',
            },
            'rpcUrls': {'public': {'http': [self.rpc_url]}},
            'blockExplorerUrls': [self.block_explorer_url] if self.block_explorer_url else [],
            'metamask': {
                'chainId': self.hex_chain_id,
                'chainName': self.name,
                'nativeCurrency': {
                    'name': native.name,
                    'symbol': native.symbol,
                    'decimals': native.decimals,
                },
                'rpcUrls': [self.rpc_url],
                'blockExplorerUrls': [self.block_explorer_url] if self.block_explorer_url else [],
            },
            'diamondAddress': NATIVE_PLACEHOLDER,
        }
