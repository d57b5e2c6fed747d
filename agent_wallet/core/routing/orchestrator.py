"""Swap and bridge through aggregator routes, signed by the wallet session."""

from __future__ import annotations

import logging
from typing import List, Optional

from ...config import settings
from ...logging_config import bind_operation, clear_operation
from ...providers.lifi import LiFiProvider, get_lifi_provider
from ..chains.constants import NATIVE_PLACEHOLDER
from ..chains.models import ChainDescriptor
from ..errors import ExecutionFailed, InsufficientBalance, NoRouteFound, RpcError, WalletError
from ..execution import erc20
from ..wallet.models import DEFAULT_SLIPPAGE_BPS, BridgeParams, SwapParams, TransactionResult
from ..wallet.session import ChainClientBinding, WalletSession
from ..wallet.units import to_smallest_unit
from ..wallet.validation import validate_bridge, validate_swap
from .executor import RouteExecutor
from .models import (
    AggregatorConfig,
    ExecutionOptions,
    ProcessStatus,
    Route,
    RouteRequest,
)
from .strategies import RouteSelector, first_route


logger = logging.getLogger(__name__)


class RouteOrchestrator:
    """Drives the aggregator for swaps and bridges on behalf of one session.

    Usage:
        orchestrator = RouteOrchestrator(session)
        result = await orchestrator.swap(SwapParams(chain="base", ...))
    """

    def __init__(
        self,
        session: WalletSession,
        aggregator: Optional[LiFiProvider] = None,
        *,
        selector: RouteSelector = first_route,
        options: Optional[ExecutionOptions] = None,
        executor: Optional[RouteExecutor] = None,
        balance_precheck: Optional[bool] = None,
    ) -> None:
        self.session = session
        self.aggregator = aggregator or get_lifi_provider()
        self.selector = selector
        self.options = options or ExecutionOptions()
        self.balance_precheck = settings.balance_precheck if balance_precheck is None else balance_precheck
        self.config = AggregatorConfig(
            integrator=getattr(self.aggregator, "integrator", settings.lifi_integrator),
            chains=session.registry.aggregator_chains(),
            signer=session.signer_capability(),
        )
        self.executor = executor or RouteExecutor(self.aggregator, self.config)

    async def swap(self, params: SwapParams) -> TransactionResult:
        params = validate_swap(params, self.session.registry)
        slippage_bps = params.slippage_bps or settings.default_slippage_bps or DEFAULT_SLIPPAGE_BPS

        async with self.session.operation(params.chain) as binding:
            bind_operation(operation="swap", chain=binding.descriptor.key)
            try:
                descriptor = binding.descriptor
                address = self.session.get_address()
                amount = await self._source_amount(binding, params.from_token, params.amount)
                if self.balance_precheck:
                    await self._require_balance(binding, params.from_token, amount, reject_unknown=False)

                request = RouteRequest(
                    from_chain_id=descriptor.chain_id,
                    to_chain_id=descriptor.chain_id,
                    from_token=params.from_token,
                    to_token=params.to_token,
                    from_amount=amount,
                    from_address=address,
                    slippage=slippage_bps / 10_000,
                )
                return await self._run(request, descriptor, address)
            finally:
                clear_operation()

    async def bridge(self, params: BridgeParams) -> TransactionResult:
        params = validate_bridge(params, self.session.registry)
        to_descriptor = self.session.registry.resolve(params.to_chain)

        async with self.session.operation(params.from_chain) as binding:
            bind_operation(operation="bridge", chain=binding.descriptor.key, to_chain=to_descriptor.key)
            try:
                descriptor = binding.descriptor
                address = self.session.get_address()
                amount = await self._source_amount(binding, params.from_token, params.amount)
                await self._require_balance(binding, params.from_token, amount, reject_unknown=True)

                request = RouteRequest(
                    from_chain_id=descriptor.chain_id,
                    to_chain_id=to_descriptor.chain_id,
                    from_token=params.from_token,
                    to_token=params.to_token,
                    from_amount=amount,
                    from_address=address,
                    to_address=params.to_address or address,
                    slippage=settings.default_slippage_bps / 10_000,
                )
                return await self._run(request, descriptor, address)
            finally:
                clear_operation()

    async def get_routes(self, request: RouteRequest) -> List[Route]:
        payload = request.to_payload()
        payload["options"]["integrator"] = self.config.integrator
        raw_routes = await self.aggregator.get_routes(payload)
        return [Route.from_json(raw) for raw in raw_routes]

    async def _run(self, request: RouteRequest, descriptor: ChainDescriptor, address: str) -> TransactionResult:
        routes = await self.get_routes(request)
        logger.info("Aggregator returned %d routes for %s -> %s", len(routes), request.from_chain_id, request.to_chain_id)
        if not routes:
            raise NoRouteFound(chain=descriptor.key)

        route = self.selector(routes)
        approval_address = route.steps[0].estimate.approval_address if route.steps else None

        executed = await self.executor.execute(route, self.options)
        return self._to_result(executed, request, descriptor, address, approval_address)

    async def _source_amount(self, binding: ChainClientBinding, token: str, amount: str) -> int:
        if _is_native(token):
            decimals = binding.descriptor.native_currency.decimals
        else:
            try:
                decimals = await erc20.read_decimals(binding.query_client, token)
            except WalletError:
                raise
            except Exception as exc:
                raise RpcError(
                    f"Could not read decimals of {token}: {exc}",
                    chain=binding.descriptor.key,
                    step="decimals",
                ) from exc
        return to_smallest_unit(amount, decimals)

    async def _require_balance(
        self,
        binding: ChainClientBinding,
        token: str,
        amount: int,
        *,
        reject_unknown: bool,
    ) -> None:
        chain = binding.descriptor.key
        if _is_native(token):
            balance = await self.session.get_balance(chain)
            symbol = binding.descriptor.native_currency.symbol
        else:
            symbol = ""
            try:
                balance = await erc20.read_balance(binding.query_client, token, self.session.get_address())
            except Exception as exc:
                logger.warning("Error getting token balance on %s: %s", chain, exc)
                balance = None

        logger.info("Balance on %s: %s (required %s)", chain, balance, amount)
        if balance is None:
            if reject_unknown:
                raise InsufficientBalance(required=amount, available=None, chain=chain, symbol=symbol)
            return
        if balance < amount:
            raise InsufficientBalance(required=amount, available=balance, chain=chain, symbol=symbol)

    @staticmethod
    def _to_result(
        route: Route,
        request: RouteRequest,
        descriptor: ChainDescriptor,
        address: str,
        approval_address: Optional[str],
    ) -> TransactionResult:
        first = route.steps[0] if route.steps else None
        process = first.execution.main_process() if first and first.execution else None
        if process is None or process.status is None or process.status == ProcessStatus.FAILED:
            raise ExecutionFailed(
                process.status.value if process and process.status else None,
                process.message if process else None,
                chain=descriptor.key,
            )

        for step in route.steps[1:]:
            if step.execution and step.execution.status == ProcessStatus.FAILED:
                failed = step.execution.main_process()
                raise ExecutionFailed(
                    ProcessStatus.FAILED.value,
                    failed.message if failed else None,
                    chain=descriptor.key,
                )

        to_address = approval_address or (first.transaction_request or {}).get("to") or ""
        return TransactionResult(
            hash=process.tx_hash or "",
            from_address=address,
            to_address=to_address,
            value=str(request.from_amount),
            chain_id=descriptor.chain_id,
            data=process.data,
            token=None if _is_native(request.from_token) else request.from_token,
            explorer_url=descriptor.explorer_tx_url(process.tx_hash) if process.tx_hash else None,
        )


def _is_native(token: str) -> bool:
    return token.lower() == NATIVE_PLACEHOLDER
