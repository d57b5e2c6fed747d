"""
Wallet operation models.

Parameter objects handed in by callers (already extracted from the user's
request) and the single normalized result shape returned by transfer, swap
and bridge.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..chains.constants import NATIVE_PLACEHOLDER


DEFAULT_SLIPPAGE_BPS = 50
MIN_SLIPPAGE_BPS = 1
MAX_SLIPPAGE_BPS = 500


@dataclass
class TransferParams:
    """Native (or ERC20 when ``token`` is set) transfer on one chain."""
    from_chain: str
    to_address: str
    amount: str                                 # Decimal string, human units
    data: Optional[str] = None                  # Optional calldata (hex)
    token: Optional[str] = None                 # ERC20 contract; None = native


@dataclass
class SwapParams:
    """Same-chain token swap routed through the aggregator."""
    chain: str
    from_token: str
    to_token: str
    amount: str
    slippage_bps: Optional[int] = None          # Defaults to 50 (0.5%)

    @property
    def slippage_decimal(self) -> float:
        """Basis points as the fraction the aggregator expects (50 -> 0.005)."""
        return (self.slippage_bps or DEFAULT_SLIPPAGE_BPS) / 10_000


@dataclass
class BridgeParams:
    """Cross-chain transfer routed through the aggregator."""
    from_chain: str
    to_chain: str
    amount: str
    from_token: str = NATIVE_PLACEHOLDER
    to_token: str = NATIVE_PLACEHOLDER
    to_address: Optional[str] = None            # Defaults to the sender


@dataclass
class TransactionResult:
    """Normalized output of transfer, swap and bridge."""
    hash: str
    from_address: str
    to_address: str
    value: str                                  # Smallest units, decimal string
    chain_id: int
    data: Optional[str] = None
    token: Optional[str] = None
    explorer_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "hash": self.hash,
            "from": self.from_address,
            "to": self.to_address,
            "value": self.value,
            "chainId": self.chain_id,
        }
        if self.data is not None:
            payload["data"] = self.data
        if self.token is not None:
            payload["token"] = self.token
        if self.explorer_url:
            payload["explorerUrl"] = self.explorer_url
        return payload


@dataclass
class TokenBalance:
    """Balance of the session account for one asset on one chain."""
    chain: str
    address: str
    symbol: str
    decimals: int
    raw: int
    formatted: str
    token: Optional[str] = None                 # None = native currency


@dataclass
class TokenInfo:
    """ERC20 metadata read from the token contract."""
    chain: str
    address: str
    name: str
    symbol: str
    decimals: int
    total_supply: int
    total_supply_formatted: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)
