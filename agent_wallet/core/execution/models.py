"""
Transaction execution models and types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class TransactionType(str, Enum):
    """Types of transactions."""
    TRANSFER = "transfer"
    TOKEN_TRANSFER = "token_transfer"
    APPROVE = "approve"
    SWAP = "swap"
    BRIDGE = "bridge"


@dataclass
class GasEstimate:
    """Gas estimation for a legacy (gasPrice) transaction."""
    gas_limit: int
    gas_price_wei: int
    estimated_cost_wei: int = 0

    def __post_init__(self):
        if self.estimated_cost_wei == 0:
            self.estimated_cost_wei = self.gas_limit * self.gas_price_wei


@dataclass
class PreparedTransaction:
    """A transaction ready to be estimated, signed and broadcast."""
    tx_type: TransactionType
    chain_id: int
    from_address: str
    to_address: str
    data: str = "0x"                            # Encoded calldata (hex)
    value: int = 0                              # Wei to send
    gas_estimate: Optional[GasEstimate] = None
    nonce: Optional[int] = None

    description: str = ""

    def to_call(self) -> Dict[str, Any]:
        """Call object for ``eth_estimateGas``."""
        return {
            "from": self.from_address,
            "to": self.to_address,
            "value": self.value,
            "data": self.data,
        }

    def to_signable(self, *, nonce: int, gas: int, gas_price: int) -> Dict[str, Any]:
        """Legacy transaction dict accepted by ``LocalAccount.sign_transaction``."""
        self.nonce = nonce
        self.gas_estimate = GasEstimate(gas_limit=gas, gas_price_wei=gas_price)
        return {
            "to": self.to_address,
            "value": self.value,
            "data": self.data,
            "gas": gas,
            "gasPrice": gas_price,
            "nonce": nonce,
            "chainId": self.chain_id,
        }
