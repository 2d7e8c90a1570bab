"""ConcentratedLiquidityPool dataclass for tick-based pools."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import ClassVar

from swap_router.amm.base import PairPool

from .constants import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK, TICK_SPACING
from .swap_math import get_sqrt_ratio_at_tick


@dataclass(frozen=True, order=True)
class TickInfo:
    """An initialized tick and the liquidity change when crossing it upward."""

    index: int
    liquidity_net: int


@dataclass(frozen=True)
class ConcentratedLiquidityPool(PairPool):
    """Represents a UniswapV3-style concentrated liquidity pool.

    The pool state includes:
    - Current price (as sqrt_price_x96)
    - Current tick
    - Active liquidity at the current tick
    - Net liquidity changes at each initialized tick

    Unlike constant product pools, token order is significant for the
    stored price (token1 per token0), so reversed tokens are rejected
    rather than reordered.
    """

    kind: ClassVar[str] = "concentrated_liquidity"

    sqrt_price_x96: int
    liquidity: int
    tick: int
    ticks: tuple[TickInfo, ...] = ()
    # 0 means "derive from the fee tier"
    tick_spacing: int = 0

    def __post_init__(self) -> None:
        self._normalize()
        if self.token0 > self.token1:
            raise ValueError(
                f"Pool {self.address} tokens out of order: token0 must sort before token1"
            )
        if not MIN_SQRT_RATIO <= self.sqrt_price_x96 < MAX_SQRT_RATIO:
            raise ValueError(f"Pool {self.address} sqrt price out of range: {self.sqrt_price_x96}")
        if self.liquidity < 0:
            raise ValueError(f"Pool {self.address} has negative liquidity")
        # After crossing a tick downward the price sits exactly on tick + 1
        if not MIN_TICK <= self.tick <= MAX_TICK or not (
            get_sqrt_ratio_at_tick(self.tick) <= self.sqrt_price_x96
            and (self.tick == MAX_TICK or self.sqrt_price_x96 <= get_sqrt_ratio_at_tick(self.tick + 1))
        ):
            raise ValueError(
                f"Pool {self.address} tick {self.tick} does not match sqrt price {self.sqrt_price_x96}"
            )

        ticks = tuple(sorted(self.ticks))
        indices = [t.index for t in ticks]
        if len(set(indices)) != len(indices):
            raise ValueError(f"Pool {self.address} has duplicate ticks")
        object.__setattr__(self, "ticks", ticks)

        if self.tick_spacing <= 0:
            object.__setattr__(self, "tick_spacing", TICK_SPACING.get(self.fee, 60))

    @property
    def liquidity_score(self) -> int:
        return self.liquidity

    def next_initialized_tick(self, tick: int, zero_for_one: bool) -> TickInfo | None:
        """Nearest initialized tick in the swap direction.

        Selling token0 moves the price down, so the search covers ticks at
        or below ``tick``; selling token1 searches strictly above it.
        Returns None when no initialized tick remains in that direction.
        """
        position = bisect_right(self.ticks, tick, key=lambda t: t.index)
        if zero_for_one:
            return self.ticks[position - 1] if position > 0 else None
        return self.ticks[position] if position < len(self.ticks) else None


__all__ = ["ConcentratedLiquidityPool", "TickInfo"]
