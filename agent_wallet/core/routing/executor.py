"""
Route executor: drives an aggregator route step by step with local signing.

For every step:
- switch the session to the step's source chain through the signer capability
- ensure the ERC20 allowance (exact amount unless infinite approval is enabled)
- ask the aggregator to populate the step transaction
- run the update / exchange-rate hooks
- sign locally and broadcast

Intermediate steps are waited on (receipt, plus aggregator status for
cross-chain steps) so the next step sees settled funds. The final step ends
at broadcast.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from web3.exceptions import TimeExhausted

from ...config import settings
from ...providers.lifi import LiFiProvider
from ..errors import AggregatorError, ExecutionFailed, WalletError
from ..execution import erc20
from ..execution.models import PreparedTransaction, TransactionType
from ..execution.tx_builder import TransactionBuilder
from ..wallet.session import SigningClient
from .models import (
    AggregatorConfig,
    ExchangeRateUpdate,
    ExecutionOptions,
    ExecutionProcess,
    ProcessStatus,
    ProcessType,
    Route,
    RouteStep,
    StepExecution,
)


logger = logging.getLogger(__name__)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class RouteExecutor:
    """Executes a selected route against the wallet session's signers."""

    def __init__(
        self,
        aggregator: LiFiProvider,
        config: AggregatorConfig,
        *,
        receipt_timeout: Optional[float] = None,
        receipt_poll: Optional[float] = None,
        status_timeout: Optional[float] = None,
        status_poll: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.aggregator = aggregator
        self.config = config
        self.receipt_timeout = receipt_timeout or settings.receipt_timeout_seconds
        self.receipt_poll = receipt_poll or settings.receipt_poll_seconds
        self.status_timeout = status_timeout or settings.bridge_status_timeout_seconds
        self.status_poll = status_poll or settings.bridge_status_poll_seconds
        self._sleep = sleep

    async def execute(self, route: Route, options: Optional[ExecutionOptions] = None) -> Route:
        """Run every step in order; stops at the first failed step.

        Typed wallet errors (unknown chain, aggregator failures, reverted
        intermediate transactions) are recorded on the step and re-raised.
        Other failures are recorded as a FAILED process and execution stops,
        leaving the caller to inspect the step executions.
        """
        options = options or ExecutionOptions()
        last_index = len(route.steps) - 1

        for index, step in enumerate(route.steps):
            step.execution = StepExecution()
            try:
                await self._execute_step(route, step, options, settle=index < last_index)
            except WalletError as exc:
                self._mark_failed(step, str(exc))
                raise
            except Exception as exc:
                logger.error("Route %s step %d (%s) failed: %s", route.id, index, step.tool, exc)
                self._mark_failed(step, str(exc) or type(exc).__name__)
                break

            if step.execution.status == ProcessStatus.FAILED:
                break

        return route

    async def _execute_step(
        self,
        route: Route,
        step: RouteStep,
        options: ExecutionOptions,
        *,
        settle: bool,
    ) -> None:
        execution = step.execution or StepExecution()
        step.execution = execution

        signer = await self._signer_for(step.action.from_chain_id)
        client = signer.query_client

        if not step.action.is_native_input and step.estimate.approval_address:
            await self._ensure_allowance(signer, step, execution, options)

        process_type = ProcessType.CROSS_CHAIN if step.action.is_cross_chain else ProcessType.SWAP
        process = execution.start(process_type, signer.chain_id)

        previous_to_amount = step.estimate.to_amount
        populated = await self.aggregator.get_step_transaction(step.to_json())
        step.apply_update(populated)
        await self._notify(route, options)

        if previous_to_amount and step.estimate.to_amount < previous_to_amount:
            accepted = await self._accept_rate_update(step, previous_to_amount, options)
            if not accepted:
                process.status = ProcessStatus.FAILED
                process.message = "Exchange rate has changed and the update was not accepted"
                execution.status = ProcessStatus.FAILED
                logger.warning("Route %s rejected rate update for step %s", route.id, step.id)
                return

        tx = TransactionBuilder.build_from_request(
            step.transaction_request or {},
            chain_id=signer.chain_id,
            from_address=signer.address,
            tx_type=TransactionType.BRIDGE if step.action.is_cross_chain else TransactionType.SWAP,
        )
        tx_hash = await self._sign_and_send(signer, tx, TransactionBuilder.gas_hints(step.transaction_request or {}))
        process.tx_hash = tx_hash
        process.data = tx.data
        process.status = ProcessStatus.PENDING
        execution.status = ProcessStatus.PENDING
        logger.info("Route %s step %s broadcast on chain %d: %s", route.id, step.id, signer.chain_id, tx_hash)
        await self._notify(route, options)

        if not settle:
            return

        await self._wait_for_receipt(client, tx_hash)
        if step.action.is_cross_chain:
            await self._wait_for_bridge(step, tx_hash)
        process.status = ProcessStatus.DONE
        execution.status = ProcessStatus.DONE

    @staticmethod
    async def _notify(route: Route, options: ExecutionOptions) -> None:
        if options.update_route_hook is not None:
            await _maybe_await(options.update_route_hook(route))

    async def _signer_for(self, chain_id: int) -> SigningClient:
        signer = self.config.signer.current_signer()
        if signer.chain_id != chain_id:
            signer = await self.config.signer.switch_and_get_signer(chain_id)
        return signer

    async def _ensure_allowance(
        self,
        signer: SigningClient,
        step: RouteStep,
        execution: StepExecution,
        options: ExecutionOptions,
    ) -> None:
        spender = step.estimate.approval_address
        token = step.action.from_token
        amount = step.action.from_amount
        process = execution.start(ProcessType.TOKEN_ALLOWANCE, signer.chain_id)

        allowance = await erc20.read_allowance(signer.query_client, token, signer.address, spender)
        if allowance >= amount:
            process.status = ProcessStatus.DONE
            return

        approve = TransactionBuilder.build_erc20_approve(
            chain_id=signer.chain_id,
            owner_address=signer.address,
            token_address=token,
            spender_address=spender,
            amount=amount,
            infinite=options.infinite_approval,
        )
        tx_hash = await self._sign_and_send(signer, approve, {})
        process.tx_hash = tx_hash
        process.data = approve.data
        process.status = ProcessStatus.PENDING
        logger.info("Approval for %s to %s broadcast: %s", token, spender, tx_hash)

        await self._wait_for_receipt(signer.query_client, tx_hash)
        process.status = ProcessStatus.DONE

    async def _accept_rate_update(
        self,
        step: RouteStep,
        previous_to_amount: int,
        options: ExecutionOptions,
    ) -> bool:
        update = ExchangeRateUpdate(
            to_token=step.action.to_token,
            to_token_symbol=step.action.to_token_symbol,
            old_to_amount=str(previous_to_amount),
            new_to_amount=str(step.estimate.to_amount),
        )
        logger.info(
            "Exchange rate update for %s: %s -> %s",
            update.to_token_symbol or update.to_token,
            update.old_to_amount,
            update.new_to_amount,
        )
        hook = options.accept_exchange_rate_update_hook
        if hook is None:
            return True
        return bool(await _maybe_await(hook(update)))

    async def _sign_and_send(
        self,
        signer: SigningClient,
        tx: PreparedTransaction,
        hints: Dict[str, int],
    ) -> str:
        client = signer.query_client
        gas = hints.get("gas") or int(await client.eth.estimate_gas(tx.to_call()))
        gas_price = hints.get("gas_price") or int(await client.eth.gas_price)
        nonce = int(await client.eth.get_transaction_count(signer.address, "pending"))
        raw = signer.sign_transaction(tx.to_signable(nonce=nonce, gas=gas, gas_price=gas_price))
        return await signer.send_raw_transaction(raw)

    async def _wait_for_receipt(self, client: Any, tx_hash: str) -> None:
        try:
            receipt = await client.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.receipt_timeout,
                poll_latency=self.receipt_poll,
            )
        except TimeExhausted as exc:
            raise ExecutionFailed(
                ProcessStatus.PENDING.value,
                f"No receipt for {tx_hash} after {self.receipt_timeout}s",
            ) from exc

        if int(receipt.get("status", 1)) == 0:
            raise ExecutionFailed(ProcessStatus.FAILED.value, f"Transaction {tx_hash} reverted")

    async def _wait_for_bridge(self, step: RouteStep, tx_hash: str) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.status_timeout

        while True:
            try:
                status = await self.aggregator.get_status(
                    tx_hash,
                    bridge=step.tool or None,
                    from_chain=step.action.from_chain_id,
                    to_chain=step.action.to_chain_id,
                )
            except AggregatorError as exc:
                if exc.status_code != 404:
                    raise
                status = {"status": "NOT_FOUND"}

            state = str(status.get("status") or "NOT_FOUND").upper()
            if state == "DONE":
                return
            if state == "FAILED":
                raise ExecutionFailed(
                    ProcessStatus.FAILED.value,
                    status.get("substatusMessage") or f"Cross-chain transfer {tx_hash} failed",
                )

            if loop.time() >= deadline:
                raise ExecutionFailed(
                    ProcessStatus.PENDING.value,
                    f"Cross-chain transfer {tx_hash} not settled after {self.status_timeout}s",
                )
            await self._sleep(self.status_poll)

    @staticmethod
    def _mark_failed(step: RouteStep, message: str) -> None:
        execution = step.execution or StepExecution()
        step.execution = execution
        open_process: Optional[ExecutionProcess] = None
        for process in reversed(execution.process):
            if process.status != ProcessStatus.DONE:
                open_process = process
                break
        if open_process is None:
            open_process = execution.start(ProcessType.SWAP, step.action.from_chain_id)
        open_process.status = ProcessStatus.FAILED
        open_process.message = message
        execution.status = ProcessStatus.FAILED
