"""Typed views over aggregator route JSON plus execution bookkeeping."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..chains.constants import NATIVE_PLACEHOLDER
from ..wallet.session import SignerCapability


class ProcessType(str, Enum):
    TOKEN_ALLOWANCE = "TOKEN_ALLOWANCE"
    SWAP = "SWAP"
    CROSS_CHAIN = "CROSS_CHAIN"


class ProcessStatus(str, Enum):
    STARTED = "STARTED"
    PENDING = "PENDING"
    DONE = "DONE"
    FAILED = "FAILED"


def _int(value: Any) -> int:
    if value in (None, ""):
        return 0
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.startswith("0x") else int(text)


def _float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class StepAction:
    from_chain_id: int
    to_chain_id: int
    from_token: str
    to_token: str
    from_amount: int
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    slippage: Optional[float] = None
    to_token_symbol: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "StepAction":
        from_token = data.get("fromToken") or {}
        to_token = data.get("toToken") or {}
        return cls(
            from_chain_id=int(data.get("fromChainId") or from_token.get("chainId") or 0),
            to_chain_id=int(data.get("toChainId") or to_token.get("chainId") or 0),
            from_token=str(from_token.get("address") or NATIVE_PLACEHOLDER),
            to_token=str(to_token.get("address") or NATIVE_PLACEHOLDER),
            from_amount=_int(data.get("fromAmount")),
            from_address=data.get("fromAddress"),
            to_address=data.get("toAddress"),
            slippage=data.get("slippage"),
            to_token_symbol=str(to_token.get("symbol") or ""),
        )

    @property
    def is_cross_chain(self) -> bool:
        return self.from_chain_id != self.to_chain_id

    @property
    def is_native_input(self) -> bool:
        return self.from_token.lower() == NATIVE_PLACEHOLDER


@dataclass
class StepEstimate:
    from_amount: int
    to_amount: int
    to_amount_min: int
    approval_address: Optional[str]
    execution_duration: float = 0.0
    gas_cost_usd: float = 0.0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "StepEstimate":
        gas_costs = data.get("gasCosts") or []
        return cls(
            from_amount=_int(data.get("fromAmount")),
            to_amount=_int(data.get("toAmount")),
            to_amount_min=_int(data.get("toAmountMin")),
            approval_address=data.get("approvalAddress"),
            execution_duration=_float(data.get("executionDuration")),
            gas_cost_usd=sum(_float(cost.get("amountUSD")) for cost in gas_costs),
        )


@dataclass
class ExecutionProcess:
    """One tracked unit of work inside a step (approval, swap, bridge)."""
    type: ProcessType
    status: ProcessStatus
    tx_hash: Optional[str] = None
    data: Optional[str] = None
    message: Optional[str] = None
    chain_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.type.value, "status": self.status.value}
        if self.tx_hash:
            payload["txHash"] = self.tx_hash
        if self.data:
            payload["data"] = self.data
        if self.message:
            payload["message"] = self.message
        if self.chain_id is not None:
            payload["chainId"] = self.chain_id
        return payload


@dataclass
class StepExecution:
    status: ProcessStatus = ProcessStatus.STARTED
    process: List[ExecutionProcess] = field(default_factory=list)

    def start(self, process_type: ProcessType, chain_id: int) -> ExecutionProcess:
        process = ExecutionProcess(type=process_type, status=ProcessStatus.STARTED, chain_id=chain_id)
        self.process.append(process)
        return process

    def main_process(self) -> Optional[ExecutionProcess]:
        """The swap / cross-chain process, falling back to the first recorded one."""
        for process in self.process:
            if process.type in (ProcessType.SWAP, ProcessType.CROSS_CHAIN):
                return process
        return self.process[0] if self.process else None


@dataclass
class RouteStep:
    id: str
    type: str
    tool: str
    action: StepAction
    estimate: StepEstimate
    raw: Dict[str, Any]
    transaction_request: Optional[Dict[str, Any]] = None
    execution: Optional[StepExecution] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "RouteStep":
        return cls(
            id=str(data.get("id") or ""),
            type=str(data.get("type") or ""),
            tool=str(data.get("tool") or ""),
            action=StepAction.from_json(data.get("action") or {}),
            estimate=StepEstimate.from_json(data.get("estimate") or {}),
            raw=copy.deepcopy(data),
            transaction_request=data.get("transactionRequest"),
        )

    def to_json(self) -> Dict[str, Any]:
        """Raw step JSON for re-submission to the aggregator."""
        payload = copy.deepcopy(self.raw)
        payload.pop("execution", None)
        payload.pop("transactionRequest", None)
        return payload

    def apply_update(self, data: Dict[str, Any]) -> None:
        """Merge a populated step returned by ``stepTransaction``."""
        updated = RouteStep.from_json(data)
        self.action = updated.action
        self.estimate = updated.estimate
        self.transaction_request = updated.transaction_request
        self.raw = updated.raw


@dataclass
class Route:
    id: str
    from_chain_id: int
    to_chain_id: int
    from_amount: int
    to_amount: int
    steps: List[RouteStep]
    raw: Dict[str, Any]
    gas_cost_usd: float = 0.0

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Route":
        return cls(
            id=str(data.get("id") or ""),
            from_chain_id=int(data.get("fromChainId") or 0),
            to_chain_id=int(data.get("toChainId") or 0),
            from_amount=_int(data.get("fromAmount")),
            to_amount=_int(data.get("toAmount")),
            steps=[RouteStep.from_json(step) for step in data.get("steps") or []],
            raw=copy.deepcopy(data),
            gas_cost_usd=_float(data.get("gasCostUSD")),
        )

    @property
    def execution_duration(self) -> float:
        return sum(step.estimate.execution_duration for step in self.steps)

    def to_dict(self) -> Dict[str, Any]:
        payload = copy.deepcopy(self.raw)
        payload["steps"] = []
        for step in self.steps:
            step_json = step.to_json()
            if step.execution is not None:
                step_json["execution"] = {
                    "status": step.execution.status.value,
                    "process": [process.to_dict() for process in step.execution.process],
                }
            payload["steps"].append(step_json)
        return payload


@dataclass
class ExchangeRateUpdate:
    to_token: str
    to_token_symbol: str
    old_to_amount: str
    new_to_amount: str


UpdateRouteHook = Callable[[Route], Union[None, Awaitable[None]]]
AcceptExchangeRateHook = Callable[[ExchangeRateUpdate], Union[bool, Awaitable[bool]]]


@dataclass
class ExecutionOptions:
    update_route_hook: Optional[UpdateRouteHook] = None
    accept_exchange_rate_update_hook: Optional[AcceptExchangeRateHook] = None
    infinite_approval: bool = False


@dataclass
class RouteRequest:
    from_chain_id: int
    to_chain_id: int
    from_token: str
    to_token: str
    from_amount: int
    from_address: str
    to_address: Optional[str] = None
    slippage: float = 0.005
    order: str = "RECOMMENDED"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "fromChainId": self.from_chain_id,
            "toChainId": self.to_chain_id,
            "fromTokenAddress": self.from_token,
            "toTokenAddress": self.to_token,
            "fromAmount": str(self.from_amount),
            "fromAddress": self.from_address,
            "toAddress": self.to_address or self.from_address,
            "options": {
                "slippage": self.slippage,
                "order": self.order,
            },
        }


@dataclass
class AggregatorConfig:
    """Everything the route executor is given about the wallet.

    The signer capability exposes signing clients only; the secret key never
    leaves the session.
    """
    integrator: str
    chains: List[Dict[str, Any]]
    signer: SignerCapability
