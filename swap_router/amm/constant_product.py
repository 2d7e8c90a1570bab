"""Constant product AMM (x * y = k).

The fee is taken from the input before applying the invariant, the way
UniswapV2 and its forks do it:

    amount_out = (in * (1e6 - fee) * res_out) / (res_in * 1e6 + in * (1e6 - fee))
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from math import isqrt
from typing import ClassVar

import structlog

from swap_router.amm.base import FEE_DENOMINATOR, PairPool, SwapResult, price_impact
from swap_router.errors import InsufficientLiquidity
from swap_router.models.types import normalize_address
from swap_router.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class ConstantProductPool(PairPool):
    """Snapshot of a constant product pool.

    Tokens are kept in canonical order (token0 < token1 by address); if
    they arrive reversed the reserves are swapped along with them.
    """

    kind: ClassVar[str] = "constant_product"

    reserve0: int
    reserve1: int

    def __post_init__(self) -> None:
        self._normalize()
        if self.reserve0 < 0 or self.reserve1 < 0:
            raise ValueError(f"Pool {self.address} has negative reserves")
        if self.token0 > self.token1:
            token0, token1 = self.token1, self.token0
            reserve0, reserve1 = self.reserve1, self.reserve0
            object.__setattr__(self, "token0", token0)
            object.__setattr__(self, "token1", token1)
            object.__setattr__(self, "reserve0", reserve0)
            object.__setattr__(self, "reserve1", reserve1)

    @property
    def fee_multiplier(self) -> int:
        """Share of the input that reaches the curve (997000 for a 0.30% pool)."""
        return FEE_DENOMINATOR - self.fee

    @property
    def liquidity_score(self) -> int:
        return isqrt(self.reserve0 * self.reserve1)

    def get_reserves(self, token_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if self.is_token0(token_in):
            return self.reserve0, self.reserve1
        # Raises ValueError for a token outside the pool
        self.get_token_out(token_in)
        return self.reserve1, self.reserve0

    def with_reserves(self, reserve_in: int, reserve_out: int, token_in: str) -> ConstantProductPool:
        """Copy of this pool with reserves given from ``token_in``'s side."""
        if self.is_token0(token_in):
            return replace(self, reserve0=reserve_in, reserve1=reserve_out)
        return replace(self, reserve0=reserve_out, reserve1=reserve_in)


class ConstantProductAMM:
    """Constant product math and swap simulation."""

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = FEE_DENOMINATOR - 3000,
    ) -> int:
        """Output for an exact input, floored.

        Returns 0 for non-positive input or empty reserves.
        """
        if amount_in <= 0:
            return 0
        if reserve_in <= 0 or reserve_out <= 0:
            return 0

        amount_in_with_fee = S(amount_in) * S(fee_multiplier)
        numerator = amount_in_with_fee * S(reserve_out)
        denominator = S(reserve_in) * S(FEE_DENOMINATOR) + amount_in_with_fee

        return (numerator // denominator).value

    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = FEE_DENOMINATOR - 3000,
    ) -> int | None:
        """Input required for an exact output, rounded up.

        Returns None when the output cannot be taken from the pool
        (empty reserves, or ``amount_out >= reserve_out``).
        """
        if amount_out <= 0:
            return 0
        if reserve_in <= 0 or reserve_out <= 0 or fee_multiplier <= 0:
            return None
        if amount_out >= reserve_out:
            return None

        numerator = S(reserve_in) * S(amount_out) * S(FEE_DENOMINATOR)
        denominator = (S(reserve_out) - S(amount_out)) * S(fee_multiplier)

        return ((numerator // denominator) + S(1)).value

    def simulate_swap(
        self,
        pool: ConstantProductPool,
        token_in: str,
        amount_in: int,
    ) -> SwapResult:
        """Simulate a swap through a pool (exact input).

        Raises:
            InsufficientLiquidity: If either reserve is empty or the
                input is too small to buy anything
        """
        reserve_in, reserve_out = pool.get_reserves(token_in)

        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity(
                "Pool has no liquidity",
                pool=pool.address,
                token_in=token_in,
                amount_in=amount_in,
            )

        amount_out = self.get_amount_out(amount_in, reserve_in, reserve_out, pool.fee_multiplier)
        if amount_in > 0 and amount_out == 0:
            raise InsufficientLiquidity(
                "Input too small to produce any output",
                pool=pool.address,
                token_in=token_in,
                amount_in=amount_in,
            )

        return self._result(pool, token_in, amount_in, amount_out)

    def simulate_swap_exact_output(
        self,
        pool: ConstantProductPool,
        token_in: str,
        amount_out: int,
    ) -> SwapResult:
        """Simulate a swap to get an exact output amount.

        The required input is rounded up, then checked forward. The result
        reports exactly ``amount_out``; any rounding surplus stays in the pool.

        Raises:
            InsufficientLiquidity: If the output cannot be taken from the pool
        """
        reserve_in, reserve_out = pool.get_reserves(token_in)
        token_out = pool.get_token_out(token_in)

        amount_in = self.get_amount_in(amount_out, reserve_in, reserve_out, pool.fee_multiplier)
        if amount_in is None:
            raise InsufficientLiquidity(
                "Requested output exceeds pool reserves",
                pool=pool.address,
                token_out=token_out,
                amount_out=amount_out,
                reserve_out=reserve_out,
            )

        # Forward check: the rounded-up input must buy at least amount_out
        forward_out = self.get_amount_out(amount_in, reserve_in, reserve_out, pool.fee_multiplier)
        if forward_out < amount_out:
            # get_amount_in rounds up, so this means the math is broken
            logger.error(
                "constant_product_exact_output_short",
                pool=pool.address,
                requested=amount_out,
                actual=forward_out,
            )
            raise InsufficientLiquidity(
                "Forward simulation fell short of requested output",
                pool=pool.address,
                amount_out=amount_out,
            )

        return self._result(pool, token_in, amount_in, amount_out)

    def _result(
        self,
        pool: ConstantProductPool,
        token_in: str,
        amount_in: int,
        amount_out: int,
    ) -> SwapResult:
        reserve_in, reserve_out = pool.get_reserves(token_in)

        # The whole input, fee included, stays in the pool
        new_pool = pool.with_reserves(
            (S(reserve_in) + S(amount_in)).value,
            (S(reserve_out) - S(amount_out)).value,
            token_in,
        )

        return SwapResult(
            amount_in=amount_in,
            amount_out=amount_out,
            token_in=normalize_address(token_in),
            token_out=pool.get_token_out(token_in),
            pool=pool,
            new_pool=new_pool,
            price_impact=price_impact(amount_in, amount_out, reserve_out, reserve_in),
        )


# Singleton instance
constant_product_amm = ConstantProductAMM()


__all__ = [
    "ConstantProductAMM",
    "ConstantProductPool",
    "constant_product_amm",
]
