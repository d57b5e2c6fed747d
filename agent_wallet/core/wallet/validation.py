"""Parameter validation shared by transfer, swap and bridge.

All checks here are local; nothing in this module touches the network.
"""

from __future__ import annotations

import re
from typing import Optional

from eth_utils import is_address, is_checksum_address, to_checksum_address

from ..chains.registry import ChainRegistry
from ..errors import InvalidParameter
from .models import (
    MAX_SLIPPAGE_BPS,
    MIN_SLIPPAGE_BPS,
    BridgeParams,
    SwapParams,
    TransferParams,
)
from .units import parse_amount

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HEX_DATA_RE = re.compile(r"^0x([0-9a-fA-F]{2})*$")


def is_hex_address(value: object) -> bool:
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


def require_address(value: Optional[str], field_name: str) -> str:
    """Return the checksummed form of a 20-byte ``0x`` address.

    Mixed-case input must carry a valid EIP-55 checksum.
    """
    if not value:
        raise InvalidParameter(f"Missing {field_name}", field_name=field_name)
    if not is_hex_address(value) or not is_address(value):
        raise InvalidParameter(
            f"Invalid {field_name}. Must be a valid Ethereum address. Got: {value}",
            field_name=field_name,
        )
    body = value[2:]
    if body != body.lower() and body != body.upper() and not is_checksum_address(value):
        raise InvalidParameter(
            f"Invalid {field_name}. Checksum does not match. Got: {value}",
            field_name=field_name,
        )
    return to_checksum_address(value)


def require_calldata(value: Optional[str]) -> str:
    if value is None or value == "":
        return "0x"
    if not isinstance(value, str) or not _HEX_DATA_RE.match(value):
        raise InvalidParameter(f"Invalid data. Must be 0x-prefixed hex. Got: {value!r}", field_name="data")
    return value


def require_chain(registry: ChainRegistry, chain: Optional[str], field_name: str) -> str:
    if not chain:
        raise InvalidParameter(f"{field_name} is required", field_name=field_name)
    if chain not in registry:
        supported = ", ".join(registry.keys)
        raise InvalidParameter(
            f"Unsupported {field_name} {chain!r}. Must be one of: {supported}",
            field_name=field_name,
        )
    return registry.normalize(chain)


def validate_transfer(params: TransferParams, registry: ChainRegistry) -> TransferParams:
    chain = require_chain(registry, params.from_chain, "from_chain")
    if params.amount in (None, ""):
        raise InvalidParameter(
            "Transfer failed: Missing required parameters. Need fromChain, toAddress, and amount.",
            field_name="amount",
        )
    parse_amount(params.amount)
    return TransferParams(
        from_chain=chain,
        to_address=require_address(params.to_address, "to_address"),
        amount=str(params.amount).strip(),
        data=require_calldata(params.data),
        token=require_address(params.token, "token") if params.token else None,
    )


def validate_swap(params: SwapParams, registry: ChainRegistry) -> SwapParams:
    chain = require_chain(registry, params.chain, "chain")
    from_token = require_address(params.from_token, "from_token")
    to_token = require_address(params.to_token, "to_token")
    if not params.amount:
        raise InvalidParameter("Amount is required", field_name="amount")
    parse_amount(params.amount)

    slippage = params.slippage_bps
    if slippage is not None:
        if isinstance(slippage, bool) or not isinstance(slippage, int):
            raise InvalidParameter(f"Slippage must be an integer number of basis points. Got: {slippage!r}", field_name="slippage_bps")
        if slippage < MIN_SLIPPAGE_BPS or slippage > MAX_SLIPPAGE_BPS:
            raise InvalidParameter(
                f"Slippage must be between {MIN_SLIPPAGE_BPS} and {MAX_SLIPPAGE_BPS} basis points",
                field_name="slippage_bps",
            )
    if from_token == to_token:
        raise InvalidParameter("Input and output tokens must differ", field_name="to_token")

    return SwapParams(
        chain=chain,
        from_token=from_token,
        to_token=to_token,
        amount=str(params.amount).strip(),
        slippage_bps=slippage,
    )


def validate_bridge(params: BridgeParams, registry: ChainRegistry) -> BridgeParams:
    from_chain = require_chain(registry, params.from_chain, "from_chain")
    to_chain = require_chain(registry, params.to_chain, "to_chain")
    if not params.amount:
        raise InvalidParameter("Amount is required", field_name="amount")
    parse_amount(params.amount)

    from_token = require_address(params.from_token, "from_token")
    to_token = require_address(params.to_token, "to_token")
    if from_chain == to_chain and from_token == to_token:
        raise InvalidParameter(
            "Bridge source and destination are identical; choose another chain or token",
            field_name="to_chain",
        )

    return BridgeParams(
        from_chain=from_chain,
        to_chain=to_chain,
        amount=str(params.amount).strip(),
        from_token=from_token,
        to_token=to_token,
        to_address=require_address(params.to_address, "to_address") if params.to_address else None,
    )
