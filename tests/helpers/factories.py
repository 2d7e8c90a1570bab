"""Factory functions for creating test objects.

Usage:
    from tests.helpers import make_cp_pool
    # or
    from tests.helpers.factories import make_cp_pool, make_full_range_cl_pool

    pool = make_cp_pool(WETH, USDC, 1000 * 10**18, 2_500_000 * 10**6)
"""

from swap_router.amm import ConcentratedLiquidityPool, ConstantProductPool, TickInfo
from swap_router.amm.concentrated import Q96
from swap_router.models.request import RouteRequest
from tests.helpers.constants import RECIPIENT, TOKEN_DECIMALS, USDC, WETH, pool_address

# Global counter for unique pool addresses
_pool_counter = 0

# Widest ticks usable with 60 tick spacing
FULL_RANGE_LOWER = -887220
FULL_RANGE_UPPER = 887220


def _next_address() -> str:
    global _pool_counter
    _pool_counter += 1
    return pool_address(0x10000 + _pool_counter)


def make_cp_pool(
    token_a: str = WETH,
    token_b: str = USDC,
    reserve_a: int = 1000 * 10**18,
    reserve_b: int = 2_500_000 * 10**6,
    fee: int = 3000,
    address: str | None = None,
) -> ConstantProductPool:
    """Create a constant product pool with reserves given per token.

    Tokens may be passed in any order; the pool sorts them.
    """
    return ConstantProductPool(
        address=address or _next_address(),
        token0=token_a,
        token1=token_b,
        fee=fee,
        reserve0=reserve_a,
        reserve1=reserve_b,
    )


def make_full_range_cl_pool(
    token_a: str = WETH,
    token_b: str = USDC,
    liquidity: int = 10**24,
    fee: int = 3000,
    address: str | None = None,
) -> ConcentratedLiquidityPool:
    """Create a concentrated liquidity pool at price 1 with one full-range position."""
    token0, token1 = sorted((token_a.lower(), token_b.lower()))
    return ConcentratedLiquidityPool(
        address=address or _next_address(),
        token0=token0,
        token1=token1,
        fee=fee,
        sqrt_price_x96=Q96,
        liquidity=liquidity,
        tick=0,
        ticks=(
            TickInfo(FULL_RANGE_LOWER, liquidity),
            TickInfo(FULL_RANGE_UPPER, -liquidity),
        ),
    )


def make_request(
    token_in: str = WETH,
    token_out: str = USDC,
    amount: int | str = 10**18,
    trade_type: str = "exactInput",
    slippage: str | None = "1/200",
    deadline_offset: int | None = 600,
    recipient: str = RECIPIENT,
) -> RouteRequest:
    """Create a routing request with sensible defaults."""
    return RouteRequest.model_validate(
        {
            "tokenIn": {"address": token_in, "decimals": TOKEN_DECIMALS.get(token_in, 18)},
            "tokenOut": {"address": token_out, "decimals": TOKEN_DECIMALS.get(token_out, 18)},
            "amount": str(amount),
            "tradeType": trade_type,
            "recipient": recipient,
            "slippageTolerance": slippage,
            "deadlineOffset": deadline_offset,
        }
    )


__all__ = [
    "FULL_RANGE_LOWER",
    "FULL_RANGE_UPPER",
    "make_cp_pool",
    "make_full_range_cl_pool",
    "make_request",
]
