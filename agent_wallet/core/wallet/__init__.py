"""
Wallet session and operation models.

One private key, many chains. The session holds per-chain clients and the
single ``current_chain`` pointer; every signing operation runs inside
``WalletSession.operation`` so a switch can never interleave with a send.

Usage:
    from agent_wallet.core.chains import ChainRegistry
    from agent_wallet.core.wallet import WalletSession

    registry = ChainRegistry.from_config(settings.evm_chains)
    session = WalletSession.initialize(settings.evm_private_key, registry)

    await session.switch_chain("base")
    balance = await session.get_balance()   # wei, or None if the RPC failed
"""

from .models import (
    DEFAULT_SLIPPAGE_BPS,
    MAX_SLIPPAGE_BPS,
    MIN_SLIPPAGE_BPS,
    BridgeParams,
    SwapParams,
    TokenBalance,
    TokenInfo,
    TransactionResult,
    TransferParams,
)
from .session import (
    ChainClientBinding,
    SignerCapability,
    SigningClient,
    WalletSession,
    default_client_factory,
)
from .units import from_smallest_unit, parse_amount, to_smallest_unit

__all__ = [
    # Models
    "DEFAULT_SLIPPAGE_BPS",
    "MIN_SLIPPAGE_BPS",
    "MAX_SLIPPAGE_BPS",
    "BridgeParams",
    "SwapParams",
    "TokenBalance",
    "TokenInfo",
    "TransactionResult",
    "TransferParams",
    # Session
    "ChainClientBinding",
    "SignerCapability",
    "SigningClient",
    "WalletSession",
    "default_client_factory",
    # Units
    "from_smallest_unit",
    "parse_amount",
    "to_smallest_unit",
]
