"""AMM (Automated Market Maker) implementations."""

from swap_router.amm.base import FEE_DENOMINATOR, PairPool, SwapResult, SwapSimulator
from swap_router.amm.concentrated import (
    ConcentratedLiquidityAMM,
    ConcentratedLiquidityPool,
    TickInfo,
)
from swap_router.amm.constant_product import (
    ConstantProductAMM,
    ConstantProductPool,
    constant_product_amm,
)
from swap_router.amm.registry import SimulatorRegistry, build_default_registry

# Any pool the routing layer can simulate
AnyPool = ConstantProductPool | ConcentratedLiquidityPool

__all__ = [
    # Base classes
    "FEE_DENOMINATOR",
    "PairPool",
    "SwapResult",
    "SwapSimulator",
    "AnyPool",
    # Constant product
    "ConstantProductAMM",
    "ConstantProductPool",
    "constant_product_amm",
    # Concentrated liquidity
    "ConcentratedLiquidityAMM",
    "ConcentratedLiquidityPool",
    "TickInfo",
    # Registry
    "SimulatorRegistry",
    "build_default_registry",
]
