"""Concentrated liquidity swap simulation.

Walks initialized ticks in the direction of the trade, one price range at a
time, the same way the UniswapV3 pool contract does. A trade that cannot be
filled before the price reaches its bound raises InsufficientLiquidity; there
are no partial fills.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog

from swap_router.amm.base import SwapResult, price_impact
from swap_router.errors import InsufficientLiquidity
from swap_router.models.types import normalize_address

from .constants import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK, Q192
from .pool import ConcentratedLiquidityPool
from .swap_math import compute_swap_step, get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio

logger = structlog.get_logger()


@dataclass
class _SwapState:
    amount_remaining: int
    amount_calculated: int
    sqrt_price_x96: int
    tick: int
    liquidity: int
    ticks_crossed: int = 0


class ConcentratedLiquidityAMM:
    """Local tick-walking simulator for concentrated liquidity pools."""

    def simulate_swap(
        self,
        pool: ConcentratedLiquidityPool,
        token_in: str,
        amount_in: int,
    ) -> SwapResult:
        """Simulate a swap through a pool (exact input).

        Args:
            pool: The pool snapshot
            token_in: Input token address
            amount_in: Amount of input token, fee included

        Returns:
            SwapResult with the output, post-trade pool and price impact

        Raises:
            InsufficientLiquidity: If the input cannot be fully sold
        """
        zero_for_one = pool.is_token0(token_in)
        token_out = pool.get_token_out(token_in)

        state = self._swap(pool, zero_for_one, amount_in, exact_input=True)
        amount_out = state.amount_calculated
        if amount_in > 0 and amount_out == 0:
            raise InsufficientLiquidity(
                "Input too small to produce any output",
                pool=pool.address,
                token_in=token_in,
                amount_in=amount_in,
            )

        return self._result(pool, state, token_in, token_out, amount_in, amount_out, zero_for_one)

    def simulate_swap_exact_output(
        self,
        pool: ConcentratedLiquidityPool,
        token_in: str,
        amount_out: int,
    ) -> SwapResult:
        """Simulate a swap to get an exact output amount.

        Raises:
            InsufficientLiquidity: If the pool cannot deliver ``amount_out``
        """
        zero_for_one = pool.is_token0(token_in)
        token_out = pool.get_token_out(token_in)

        state = self._swap(pool, zero_for_one, amount_out, exact_input=False)
        amount_in = state.amount_calculated

        return self._result(pool, state, token_in, token_out, amount_in, amount_out, zero_for_one)

    def _swap(
        self,
        pool: ConcentratedLiquidityPool,
        zero_for_one: bool,
        amount: int,
        exact_input: bool,
    ) -> _SwapState:
        if amount < 0:
            raise ValueError(f"Swap amount must be non-negative: {amount}")

        sqrt_price_limit = MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1
        state = _SwapState(
            amount_remaining=amount,
            amount_calculated=0,
            sqrt_price_x96=pool.sqrt_price_x96,
            tick=pool.tick,
            liquidity=pool.liquidity,
        )

        while state.amount_remaining > 0 and state.sqrt_price_x96 != sqrt_price_limit:
            sqrt_price_start = state.sqrt_price_x96

            next_tick = pool.next_initialized_tick(state.tick, zero_for_one)
            if next_tick is not None:
                tick_next = max(MIN_TICK, min(MAX_TICK, next_tick.index))
            else:
                tick_next = MIN_TICK if zero_for_one else MAX_TICK
            sqrt_price_next = get_sqrt_ratio_at_tick(tick_next)

            if zero_for_one:
                sqrt_target = max(sqrt_price_next, sqrt_price_limit)
            else:
                sqrt_target = min(sqrt_price_next, sqrt_price_limit)

            state.sqrt_price_x96, step_in, step_out, fee_amount = compute_swap_step(
                state.sqrt_price_x96,
                sqrt_target,
                state.liquidity,
                state.amount_remaining,
                pool.fee,
                exact_input,
            )

            if exact_input:
                state.amount_remaining -= step_in + fee_amount
                state.amount_calculated += step_out
            else:
                state.amount_remaining -= step_out
                state.amount_calculated += step_in + fee_amount

            if state.sqrt_price_x96 == sqrt_price_next:
                if next_tick is not None:
                    liquidity_net = -next_tick.liquidity_net if zero_for_one else next_tick.liquidity_net
                    state.liquidity += liquidity_net
                    if state.liquidity < 0:
                        raise ValueError(
                            f"Pool {pool.address} liquidity went negative crossing tick {tick_next}"
                        )
                    state.ticks_crossed += 1
                state.tick = tick_next - 1 if zero_for_one else tick_next
            elif state.sqrt_price_x96 != sqrt_price_start:
                state.tick = get_tick_at_sqrt_ratio(state.sqrt_price_x96)

        if state.amount_remaining > 0:
            logger.debug(
                "concentrated_swap_exhausted",
                pool=pool.address,
                amount=amount,
                remaining=state.amount_remaining,
                ticks_crossed=state.ticks_crossed,
            )
            raise InsufficientLiquidity(
                "Trade exceeds liquidity available in the tick range",
                pool=pool.address,
                amount=amount,
                exact_input=exact_input,
                remaining=state.amount_remaining,
            )

        return state

    def _result(
        self,
        pool: ConcentratedLiquidityPool,
        state: _SwapState,
        token_in: str,
        token_out: str,
        amount_in: int,
        amount_out: int,
        zero_for_one: bool,
    ) -> SwapResult:
        new_pool = replace(
            pool,
            sqrt_price_x96=state.sqrt_price_x96,
            tick=state.tick,
            liquidity=state.liquidity,
        )

        # Mid price as output per input
        price_squared = pool.sqrt_price_x96 * pool.sqrt_price_x96
        if zero_for_one:
            mid_num, mid_den = price_squared, Q192
        else:
            mid_num, mid_den = Q192, price_squared

        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            token_in=normalize_address(token_in),
            token_out=token_out,
            pool=pool,
            new_pool=new_pool,
            price_impact=price_impact(amount_in, amount_out, mid_num, mid_den),
            ticks_crossed=state.ticks_crossed,
        )


# Singleton instance
concentrated_liquidity_amm = ConcentratedLiquidityAMM()


__all__ = ["ConcentratedLiquidityAMM", "concentrated_liquidity_amm"]
