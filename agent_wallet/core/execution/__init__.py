"""
Transaction Execution Layer

Builds, signs and broadcasts the transactions the wallet sends directly:
- TransferService: native and ERC20 transfers for one wallet session
- TransactionBuilder: native/ERC20 transfers, approvals, aggregator requests

Usage:
    from agent_wallet.core.execution import TransferService

    service = TransferService(session)
    result = await service.transfer(TransferParams(
        from_chain="sepolia",
        to_address="0x...",
        amount="0.01",
    ))
"""

from .models import GasEstimate, PreparedTransaction, TransactionType
from .transfer import TransferService
from .tx_builder import MAX_UINT256, TransactionBuilder

__all__ = [
    "GasEstimate",
    "PreparedTransaction",
    "TransactionType",
    "TransactionBuilder",
    "TransferService",
    "MAX_UINT256",
]
