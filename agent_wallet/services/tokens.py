"""
Token reads for the wallet account: native and ERC20 balances, token
metadata, and the one-line wallet summary handed to the agent as context.

Reads never take the session's operation lock; they only use the query
clients, which are safe to share.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.errors import InvalidParameter, RpcError
from ..core.execution import erc20
from ..core.wallet.models import TokenBalance, TokenInfo
from ..core.wallet.session import WalletSession
from ..core.wallet.units import format_display, from_smallest_unit
from ..core.wallet.validation import require_address, require_chain


logger = logging.getLogger(__name__)


class TokenService:
    """Balance and token metadata queries for one wallet session."""

    def __init__(self, session: WalletSession):
        self.session = session

    async def get_balance(self, chain: str, token: Optional[str] = None) -> TokenBalance:
        """Balance of the session account on ``chain``.

        Native balances come from the session (an RPC failure raises
        ``RpcError`` here because the caller explicitly asked for a number);
        ERC20 balances read ``balanceOf``, ``symbol`` and ``decimals``.
        """
        key = require_chain(self.session.registry, chain, "chain")
        descriptor = self.session.chain_descriptor(key)
        address = self.session.get_address()

        if token is None:
            raw = await self.session.get_balance(key)
            if raw is None:
                raise RpcError(f"Balance unavailable on {key}", chain=key, step="get_balance")
            native = descriptor.native_currency
            return TokenBalance(
                chain=key,
                address=address,
                symbol=native.symbol,
                decimals=native.decimals,
                raw=raw,
                formatted=from_smallest_unit(raw, native.decimals),
            )

        token = require_address(token, "token")
        client = self.session.get_query_client(key)
        try:
            raw = await erc20.read_balance(client, token, address)
            contract = erc20.erc20_contract(client, token)
            symbol = str(await contract.functions.symbol().call())
            decimals = int(await contract.functions.decimals().call())
        except Exception as exc:
            logger.error("Error reading token %s balance on %s: %s", token, key, exc)
            raise RpcError(f"Could not read token balance for {token} on {key}: {exc}", chain=key, step="balance_of") from exc

        return TokenBalance(
            chain=key,
            address=address,
            symbol=symbol,
            decimals=decimals,
            raw=raw,
            formatted=from_smallest_unit(raw, decimals),
            token=token,
        )

    async def get_token_info(self, chain: str, token: str) -> TokenInfo:
        """Name, symbol, decimals and total supply of an ERC20 contract."""
        key = require_chain(self.session.registry, chain, "chain")
        token = require_address(token, "token")
        client = self.session.get_query_client(key)

        try:
            code = await client.eth.get_code(token)
        except Exception as exc:
            raise RpcError(f"Could not read code at {token} on {key}: {exc}", chain=key, step="get_code") from exc
        if not code or bytes(code) in (b"", b"\x00"):
            raise InvalidParameter(f"Address is not a contract: {token}", field_name="token")

        try:
            metadata = await erc20.read_metadata(client, token)
        except Exception as exc:
            logger.warning("Token %s on %s does not answer ERC20 reads: %s", token, key, exc)
            raise InvalidParameter(f"Not a valid ERC20 token contract: {token}", field_name="token") from exc

        return TokenInfo(
            chain=key,
            address=token,
            name=metadata["name"],
            symbol=metadata["symbol"],
            decimals=metadata["decimals"],
            total_supply=metadata["total_supply"],
            total_supply_formatted=from_smallest_unit(metadata["total_supply"], metadata["decimals"]),
        )

    async def wallet_summary(self) -> str:
        """Address plus native balance on the current chain, for agent context."""
        address = self.session.get_address()
        descriptor = self.session.chain_descriptor()
        raw = await self.session.get_balance()
        if raw is None:
            shown = "unavailable"
        else:
            shown = format_display(raw, descriptor.native_currency.decimals)
        return f"EVM Wallet Address: {address}\nBalance: {shown} {descriptor.native_currency.symbol}"
