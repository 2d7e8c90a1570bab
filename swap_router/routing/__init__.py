"""Route search: enumeration, quoting, optimization and execution planning."""

from swap_router.routing.optimizer import OptimizedAllocation, RouteOptimizer
from swap_router.routing.pathfinding import PathEnumerator
from swap_router.routing.planner import ExecutionPlanner, SwapInstruction, TradePlan
from swap_router.routing.quoter import GasModel, Quoter
from swap_router.routing.types import (
    HopQuote,
    Quote,
    Route,
    RouteAllocation,
    RouteQuote,
    RouteShare,
    TradeType,
)

__all__ = [
    # Types
    "TradeType",
    "Route",
    "RouteShare",
    "RouteAllocation",
    "HopQuote",
    "RouteQuote",
    "Quote",
    # Components
    "PathEnumerator",
    "GasModel",
    "Quoter",
    "RouteOptimizer",
    "OptimizedAllocation",
    "ExecutionPlanner",
    "SwapInstruction",
    "TradePlan",
]
