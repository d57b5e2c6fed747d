"""
Direct transfers: validate, estimate, sign locally, broadcast.

The whole sequence runs inside ``WalletSession.operation`` so the chain the
transaction is built for is the chain whose signing client signs it. Node
acceptance of the raw envelope ends the operation; confirmation is not
awaited.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from ...config import settings
from ...logging_config import bind_operation, clear_operation
from ..errors import InsufficientBalance, TransferFailed, WalletError
from ..wallet.models import TransactionResult, TransferParams
from ..wallet.session import ChainClientBinding, WalletSession
from ..wallet.units import to_smallest_unit
from ..wallet.validation import validate_transfer
from . import erc20
from .models import PreparedTransaction
from .tx_builder import TransactionBuilder


logger = logging.getLogger(__name__)


@contextmanager
def transfer_step(step: str, chain: str) -> Iterator[None]:
    """Wrap node failures of one transfer step as ``TransferFailed``."""
    try:
        yield
    except WalletError:
        raise
    except Exception as exc:
        logger.error("Transfer step %s failed on %s: %s", step, chain, exc)
        raise TransferFailed(exc, step=step, chain=chain) from exc


class TransferService:
    """Native and ERC20 transfers for one wallet session."""

    def __init__(self, session: WalletSession, *, balance_precheck: Optional[bool] = None):
        self.session = session
        self.balance_precheck = settings.balance_precheck if balance_precheck is None else balance_precheck

    async def transfer(self, params: TransferParams) -> TransactionResult:
        params = validate_transfer(params, self.session.registry)

        async with self.session.operation(params.from_chain) as binding:
            bind_operation(operation="transfer", chain=binding.descriptor.key)
            try:
                return await self._transfer(binding, params)
            finally:
                clear_operation()

    async def _transfer(self, binding: ChainClientBinding, params: TransferParams) -> TransactionResult:
        descriptor = binding.descriptor
        chain = descriptor.key
        client = binding.query_client
        from_address = self.session.get_address()

        logger.info(
            "Starting transfer of %s %s on %s to %s",
            params.amount,
            params.token or descriptor.native_currency.symbol,
            chain,
            params.to_address,
        )

        if params.token:
            with transfer_step("decimals", chain):
                decimals = await erc20.read_decimals(client, params.token)
        else:
            decimals = descriptor.native_currency.decimals
        value = to_smallest_unit(params.amount, decimals)

        balance = await self._balance(binding, params.token)
        logger.info("Current balance on %s: %s (required %s)", chain, balance, value)
        if self.balance_precheck and balance is not None and balance < value:
            raise InsufficientBalance(
                required=value,
                available=balance,
                chain=chain,
                symbol="" if params.token else descriptor.native_currency.symbol,
            )

        tx = self._build(descriptor.chain_id, from_address, params, value)

        with transfer_step("estimate_gas", chain):
            gas = int(await client.eth.estimate_gas(tx.to_call()))
        with transfer_step("gas_price", chain):
            gas_price = int(await client.eth.gas_price)
        with transfer_step("nonce", chain):
            nonce = int(await client.eth.get_transaction_count(from_address, "pending"))
        logger.info("Estimated gas %d at price %d (nonce %d)", gas, gas_price, nonce)

        signer = self.session.get_signing_client()
        with transfer_step("sign", chain):
            raw = signer.sign_transaction(tx.to_signable(nonce=nonce, gas=gas, gas_price=gas_price))
        with transfer_step("broadcast", chain):
            tx_hash = await signer.send_raw_transaction(raw)

        logger.info("Transfer broadcast on %s: %s", chain, tx_hash)
        return TransactionResult(
            hash=tx_hash,
            from_address=from_address,
            to_address=params.to_address,
            value=str(value),
            chain_id=descriptor.chain_id,
            data=tx.data,
            token=params.token,
            explorer_url=descriptor.explorer_tx_url(tx_hash) or None,
        )

    async def _balance(self, binding: ChainClientBinding, token: Optional[str]) -> Optional[int]:
        if token is None:
            return await self.session.get_balance(binding.descriptor.key)
        try:
            return await erc20.read_balance(binding.query_client, token, self.session.get_address())
        except Exception as exc:
            logger.warning("Error getting token balance on %s: %s", binding.descriptor.key, exc)
            return None

    @staticmethod
    def _build(chain_id: int, from_address: str, params: TransferParams, value: int) -> PreparedTransaction:
        if params.token:
            return TransactionBuilder.build_erc20_transfer(
                chain_id=chain_id,
                from_address=from_address,
                token_address=params.token,
                to_address=params.to_address,
                amount=value,
            )
        return TransactionBuilder.build_native_transfer(
            chain_id=chain_id,
            from_address=from_address,
            to_address=params.to_address,
            amount_wei=value,
            data=params.data or "0x",
        )
