"""
Aggregated swap and bridge routing.

The aggregator finds routes; this package decides how it is driven: which
route is picked, how approvals are sized, and which local signer signs each
step.
"""

from .executor import RouteExecutor
from .models import (
    AggregatorConfig,
    ExchangeRateUpdate,
    ExecutionOptions,
    ExecutionProcess,
    ProcessStatus,
    ProcessType,
    Route,
    RouteRequest,
    RouteStep,
    StepAction,
    StepEstimate,
    StepExecution,
)
from .orchestrator import RouteOrchestrator
from .strategies import RouteSelector, cheapest_gas, fastest, first_route, get_selector

__all__ = [
    "AggregatorConfig",
    "ExchangeRateUpdate",
    "ExecutionOptions",
    "ExecutionProcess",
    "ProcessStatus",
    "ProcessType",
    "Route",
    "RouteExecutor",
    "RouteOrchestrator",
    "RouteRequest",
    "RouteSelector",
    "RouteStep",
    "StepAction",
    "StepEstimate",
    "StepExecution",
    "cheapest_gas",
    "fastest",
    "first_route",
    "get_selector",
]
