"""Built-in chain table and shared chain constants."""

from typing import Any, Dict

NATIVE_PLACEHOLDER = '0x0000000000000000000000000000000000000000'

DEFAULT_CHAIN_KEY = 'ethereum'

# Keyed by chain identifier; replaced wholesale when EVM_CHAINS is configured.
DEFAULT_CHAIN_CONFIGS: Dict[str, Dict[str, Any]] = {
    'ethereum': {
        'chainId': 1,
        'name': 'Ethereum',
        'rpcUrl': 'https://eth.llamarpc.com',
        'nativeCurrency': {
            'name': 'Ether',
            'symbol': 'ETH',
            'decimals': 18,
        },
        'blockExplorerUrl': 'https://etherscan.io',
    },
    'base': {
        'chainId': 8453,
        'name': 'Base',
        'rpcUrl': 'https://base.llamarpc.com',
        'nativeCurrency': {
            'name': 'Ether',
            'symbol': 'ETH',
            'decimals': 18,
        },
        'blockExplorerUrl': 'https://basescan.org',
    },
    'sepolia': {
        'chainId': 11155111,
        'name': 'Sepolia',
        'rpcUrl': 'https://rpc.sepolia.org',
        'nativeCurrency': {
            'name': 'Sepolia Ether',
            'symbol': 'ETH',
            'decimals': 18,
        },
        'blockExplorerUrl': 'https://sepolia.etherscan.io',
        'testnet': True,
    },
}

__all__ = [
    'NATIVE_PLACEHOLDER',
    'DEFAULT_CHAIN_KEY',
    'DEFAULT_CHAIN_CONFIGS',
]
