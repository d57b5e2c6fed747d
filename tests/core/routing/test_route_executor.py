from unittest.mock import AsyncMock

import pytest

from agent_wallet.core.chains import NATIVE_PLACEHOLDER
from agent_wallet.core.errors import ExecutionFailed
from agent_wallet.core.execution.tx_builder import MAX_UINT256
from agent_wallet.core.routing.executor import RouteExecutor
from agent_wallet.core.routing.models import (
    AggregatorConfig,
    ExecutionOptions,
    ProcessStatus,
    ProcessType,
    Route,
)


def _executor(session, aggregator, **kwargs):
    config = AggregatorConfig(
        integrator=aggregator.integrator,
        chains=session.registry.aggregator_chains(),
        signer=session.signer_capability(),
    )
    return RouteExecutor(aggregator, config, receipt_timeout=5, receipt_poll=0.01, status_timeout=5, status_poll=0.01, **kwargs)


def _usdc_sell_route(builders, amount=2_000_000):
    step = builders.step(
        "s1",
        from_chain=8453,
        to_chain=8453,
        from_token=builders.usdc_base,
        to_token=NATIVE_PLACEHOLDER,
        from_amount=amount,
        to_amount=10**15,
    )
    return Route.from_json(builders.route("r1", [step]))


@pytest.mark.asyncio
async def test_erc20_input_gets_exact_approval_first(session, fake_clients, aggregator, route_builders):
    eth = fake_clients["base"].eth
    eth.add_token(route_builders.usdc_base, allowance=0)
    aggregator.transaction_requests["s1"] = route_builders.request(8453)
    route = _usdc_sell_route(route_builders)

    async with session.operation("base"):
        await _executor(session, aggregator).execute(route)

    execution = route.steps[0].execution
    allowance, swap = execution.process
    assert allowance.type == ProcessType.TOKEN_ALLOWANCE
    assert allowance.status == ProcessStatus.DONE
    assert allowance.data.startswith("0x095ea7b3")
    assert allowance.data.endswith(format(2_000_000, "064x"))
    assert swap.type == ProcessType.SWAP
    assert swap.status == ProcessStatus.PENDING
    assert swap.tx_hash == route_builders.tx_hash
    assert len(eth.sent) == 2
    assert eth.receipts_awaited == [route_builders.tx_hash]


@pytest.mark.asyncio
async def test_infinite_approval_option(session, fake_clients, aggregator, route_builders):
    fake_clients["base"].eth.add_token(route_builders.usdc_base, allowance=0)
    aggregator.transaction_requests["s1"] = route_builders.request(8453)
    route = _usdc_sell_route(route_builders)

    async with session.operation("base"):
        await _executor(session, aggregator).execute(route, ExecutionOptions(infinite_approval=True))

    allowance = route.steps[0].execution.process[0]
    assert int(allowance.data[74:], 16) == MAX_UINT256


@pytest.mark.asyncio
async def test_sufficient_allowance_skips_approval(session, fake_clients, aggregator, route_builders):
    eth = fake_clients["base"].eth
    eth.add_token(route_builders.usdc_base, allowance=10**12)
    aggregator.transaction_requests["s1"] = route_builders.request(8453)
    route = _usdc_sell_route(route_builders)

    async with session.operation("base"):
        await _executor(session, aggregator).execute(route)

    assert route.steps[0].execution.process[0].status == ProcessStatus.DONE
    assert route.steps[0].execution.process[0].tx_hash is None
    assert len(eth.sent) == 1


@pytest.mark.asyncio
async def test_multi_step_route_switches_chain_and_settles_intermediate_step(
    session, fake_clients, aggregator, route_builders
):
    bridge = route_builders.step(
        "bridge",
        from_chain=1,
        to_chain=8453,
        to_token=NATIVE_PLACEHOLDER,
        to_amount=10**15,
        tool="across",
    )
    swap = route_builders.step("swap", from_chain=8453, to_chain=8453)
    aggregator.transaction_requests["bridge"] = route_builders.request(1, value=10**15)
    aggregator.transaction_requests["swap"] = route_builders.request(8453, value=10**15)
    route = Route.from_json(route_builders.route("r1", [bridge, swap]))
    updates = []

    async with session.operation("ethereum"):
        await _executor(session, aggregator).execute(route, ExecutionOptions(update_route_hook=updates.append))

        assert session.current_chain == "base"

    first, second = (step.execution for step in route.steps)
    assert first.status == ProcessStatus.DONE
    assert first.process[0].type == ProcessType.CROSS_CHAIN
    assert second.status == ProcessStatus.PENDING
    assert fake_clients["ethereum"].eth.receipts_awaited == [route_builders.tx_hash]
    assert fake_clients["base"].eth.receipts_awaited == []
    assert len(fake_clients["ethereum"].eth.sent) == 1
    assert len(fake_clients["base"].eth.sent) == 1
    aggregator.get_status.assert_awaited_once_with(
        route_builders.tx_hash, bridge="across", from_chain=1, to_chain=8453
    )
    assert len(updates) == 4


@pytest.mark.asyncio
async def test_bridge_status_is_polled_until_done(session, aggregator, route_builders):
    aggregator.get_status.side_effect = [{"status": "PENDING"}, {"status": "NOT_FOUND"}, {"status": "DONE"}]
    bridge = route_builders.step("bridge", from_chain=1, to_chain=8453, to_token=NATIVE_PLACEHOLDER)
    swap = route_builders.step("swap", from_chain=8453, to_chain=8453)
    aggregator.transaction_requests["bridge"] = route_builders.request(1)
    aggregator.transaction_requests["swap"] = route_builders.request(8453)
    route = Route.from_json(route_builders.route("r1", [bridge, swap]))
    sleep = AsyncMock()

    async with session.operation("ethereum"):
        await _executor(session, aggregator, sleep=sleep).execute(route)

    assert aggregator.get_status.await_count == 3
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_failed_bridge_status_stops_the_route(session, fake_clients, aggregator, route_builders):
    aggregator.get_status.return_value = {"status": "FAILED", "substatusMessage": "refunded"}
    bridge = route_builders.step("bridge", from_chain=1, to_chain=8453, to_token=NATIVE_PLACEHOLDER)
    swap = route_builders.step("swap", from_chain=8453, to_chain=8453)
    aggregator.transaction_requests["bridge"] = route_builders.request(1)
    aggregator.transaction_requests["swap"] = route_builders.request(8453)
    route = Route.from_json(route_builders.route("r1", [bridge, swap]))

    async with session.operation("ethereum"):
        with pytest.raises(ExecutionFailed) as exc_info:
            await _executor(session, aggregator).execute(route)

    assert "refunded" in str(exc_info.value)
    assert route.steps[0].execution.status == ProcessStatus.FAILED
    assert route.steps[1].execution is None
    assert fake_clients["base"].eth.sent == []


@pytest.mark.asyncio
async def test_reverted_intermediate_transaction_fails(session, fake_clients, aggregator, route_builders):
    fake_clients["ethereum"].eth.receipt = {"status": 0}
    bridge = route_builders.step("bridge", from_chain=1, to_chain=8453, to_token=NATIVE_PLACEHOLDER)
    swap = route_builders.step("swap", from_chain=8453, to_chain=8453)
    aggregator.transaction_requests["bridge"] = route_builders.request(1)
    route = Route.from_json(route_builders.route("r1", [bridge, swap]))

    async with session.operation("ethereum"):
        with pytest.raises(ExecutionFailed) as exc_info:
            await _executor(session, aggregator).execute(route)

    assert exc_info.value.status == "FAILED"
    aggregator.get_status.assert_not_awaited()


@pytest.mark.asyncio
async def test_rejected_rate_update_fails_without_sending(session, fake_clients, aggregator, route_builders):
    step = route_builders.step("s1", from_chain=8453, to_chain=8453, to_amount=3_000_000)
    aggregator.transaction_requests["s1"] = route_builders.request(8453, value=10**15)
    aggregator.estimate_updates["s1"] = {"toAmount": "2500000"}
    route = Route.from_json(route_builders.route("r1", [step]))
    seen = []

    def reject(update):
        seen.append(update)
        return False

    async with session.operation("base"):
        await _executor(session, aggregator).execute(route, ExecutionOptions(accept_exchange_rate_update_hook=reject))

    assert seen[0].old_to_amount == "3000000"
    assert seen[0].new_to_amount == "2500000"
    assert seen[0].to_token_symbol == "USDC"
    assert route.steps[0].execution.status == ProcessStatus.FAILED
    assert fake_clients["base"].eth.sent == []


@pytest.mark.asyncio
async def test_improved_rate_does_not_ask(session, fake_clients, aggregator, route_builders):
    step = route_builders.step("s1", from_chain=8453, to_chain=8453, to_amount=3_000_000)
    aggregator.transaction_requests["s1"] = route_builders.request(8453)
    aggregator.estimate_updates["s1"] = {"toAmount": "3100000"}
    route = Route.from_json(route_builders.route("r1", [step]))
    hook = AsyncMock(return_value=False)

    async with session.operation("base"):
        await _executor(session, aggregator).execute(route, ExecutionOptions(accept_exchange_rate_update_hook=hook))

    hook.assert_not_awaited()
    assert len(fake_clients["base"].eth.sent) == 1


@pytest.mark.asyncio
async def test_unexpected_error_marks_step_failed(session, aggregator, route_builders):
    aggregator.get_step_transaction.side_effect = RuntimeError("upstream exploded")
    route = Route.from_json(route_builders.route("r1", [route_builders.step("s1", from_chain=8453, to_chain=8453)]))

    async with session.operation("base"):
        await _executor(session, aggregator).execute(route)

    process = route.steps[0].execution.main_process()
    assert process.status == ProcessStatus.FAILED
    assert process.message == "upstream exploded"
