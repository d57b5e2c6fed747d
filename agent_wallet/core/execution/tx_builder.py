"""
Transaction builder for the transaction shapes the wallet signs.
"""

from typing import Any, Dict, Mapping

from eth_utils import to_checksum_address

from ..wallet.units import MAX_UINT256
from .models import PreparedTransaction, TransactionType


# Common contract selectors (minimal for encoding)
ERC20_APPROVE_SELECTOR = "0x095ea7b3"  # approve(address,uint256)
ERC20_TRANSFER_SELECTOR = "0xa9059cbb"  # transfer(address,uint256)


def _encode_uint256(value: int) -> str:
    """Encode a uint256 as a 32-byte hex string (without 0x prefix)."""
    if value < 0 or value > MAX_UINT256:
        raise ValueError(f"uint256 out of range: {value}")
    return format(value, "064x")


def _encode_address(address: str) -> str:
    """Encode an address as a 32-byte hex string (without 0x prefix)."""
    return address.lower().replace("0x", "").zfill(64)


def _parse_quantity(value: Any) -> int:
    """Aggregator quantities arrive as hex strings, decimal strings or ints."""
    if value is None or value == "":
        return 0
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.startswith("0x") else int(text)


class TransactionBuilder:
    """
    Builds transactions for the wallet.

    Handles:
    - Native token transfers (with optional calldata)
    - ERC20 transfers and approvals
    - Transaction requests returned by the route aggregator
    """

    @staticmethod
    def build_native_transfer(
        chain_id: int,
        from_address: str,
        to_address: str,
        amount_wei: int,
        data: str = "0x",
    ) -> PreparedTransaction:
        return PreparedTransaction(
            tx_type=TransactionType.TRANSFER,
            chain_id=chain_id,
            from_address=to_checksum_address(from_address),
            to_address=to_checksum_address(to_address),
            data=data or "0x",
            value=amount_wei,
            description=f"Transfer native token to {to_address[:10]}...",
        )

    @staticmethod
    def build_erc20_transfer(
        chain_id: int,
        from_address: str,
        token_address: str,
        to_address: str,
        amount: int,
    ) -> PreparedTransaction:
        """
        Build an ERC20 transfer transaction.

        Args:
            chain_id: The chain ID
            from_address: The sender address
            token_address: The ERC20 token contract
            to_address: The recipient address
            amount: The amount to transfer (in smallest units)

        Returns:
            PreparedTransaction ready to be signed
        """
        # Encode: transfer(address to, uint256 amount)
        calldata = (
            ERC20_TRANSFER_SELECTOR +
            _encode_address(to_address) +
            _encode_uint256(amount)
        )

        return PreparedTransaction(
            tx_type=TransactionType.TOKEN_TRANSFER,
            chain_id=chain_id,
            from_address=to_checksum_address(from_address),
            to_address=to_checksum_address(token_address),
            data=calldata,
            value=0,
            description=f"Transfer tokens to {to_address[:10]}...",
        )

    @staticmethod
    def build_erc20_approve(
        chain_id: int,
        owner_address: str,
        token_address: str,
        spender_address: str,
        amount: int,
        *,
        infinite: bool = False,
    ) -> PreparedTransaction:
        """
        Build an ERC20 approval transaction.

        The allowance is the exact ``amount`` unless ``infinite`` is set, in
        which case ``MAX_UINT256`` is approved.
        """
        # Encode: approve(address spender, uint256 amount)
        calldata = (
            ERC20_APPROVE_SELECTOR +
            _encode_address(spender_address) +
            _encode_uint256(MAX_UINT256 if infinite else amount)
        )

        return PreparedTransaction(
            tx_type=TransactionType.APPROVE,
            chain_id=chain_id,
            from_address=to_checksum_address(owner_address),
            to_address=to_checksum_address(token_address),
            data=calldata,
            value=0,
            description=f"Approve {spender_address[:10]}... to spend tokens",
        )

    @staticmethod
    def build_from_request(
        request: Mapping[str, Any],
        *,
        chain_id: int,
        from_address: str,
        tx_type: TransactionType = TransactionType.SWAP,
    ) -> PreparedTransaction:
        """
        Build a transaction from an aggregator ``transactionRequest``.

        Raises:
            ValueError: the request has no target address
        """
        to_address = request.get("to")
        if not to_address:
            raise ValueError("Transaction request has no target address")

        data = str(request.get("data") or "0x")
        request_chain = request.get("chainId")
        return PreparedTransaction(
            tx_type=tx_type,
            chain_id=_parse_quantity(request_chain) if request_chain else chain_id,
            from_address=to_checksum_address(from_address),
            to_address=to_checksum_address(to_address),
            data=data if data.startswith("0x") else f"0x{data}",
            value=_parse_quantity(request.get("value")),
            description=f"{tx_type.value} via aggregator",
        )

    @staticmethod
    def gas_hints(request: Mapping[str, Any]) -> Dict[str, int]:
        """Gas limit / price suggested by the aggregator, if any."""
        hints: Dict[str, int] = {}
        if request.get("gasLimit"):
            hints["gas"] = _parse_quantity(request["gasLimit"])
        if request.get("gasPrice"):
            hints["gas_price"] = _parse_quantity(request["gasPrice"])
        return hints
