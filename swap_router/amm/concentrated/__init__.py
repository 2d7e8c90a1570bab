"""Concentrated liquidity (UniswapV3-style) pool support.

This package provides:
- Pool dataclass (ConcentratedLiquidityPool) and TickInfo
- Tick and sqrt price integer math
- AMM class for local swap simulation
"""

from .amm import ConcentratedLiquidityAMM, concentrated_liquidity_amm
from .constants import (
    FEE_HIGH,
    FEE_LOW,
    FEE_LOWEST,
    FEE_MEDIUM,
    FEE_TIERS,
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
    TICK_SPACING,
)
from .pool import ConcentratedLiquidityPool, TickInfo
from .swap_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio

__all__ = [
    # Constants
    "FEE_LOWEST",
    "FEE_LOW",
    "FEE_MEDIUM",
    "FEE_HIGH",
    "FEE_TIERS",
    "TICK_SPACING",
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_RATIO",
    "MAX_SQRT_RATIO",
    "Q96",
    # Pool
    "ConcentratedLiquidityPool",
    "TickInfo",
    # Math
    "get_sqrt_ratio_at_tick",
    "get_tick_at_sqrt_ratio",
    # AMM
    "ConcentratedLiquidityAMM",
    "concentrated_liquidity_amm",
]
