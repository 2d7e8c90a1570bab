"""Base types shared by all pool families."""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import ClassVar, Protocol, runtime_checkable

from swap_router.models.types import normalize_address

# Fees are expressed in pips: hundredths of a basis point
FEE_DENOMINATOR = 1_000_000


@dataclass(frozen=True)
class PairPool:
    """Common identity of a two-token pool.

    Subclasses are immutable snapshots. A swap never changes a pool in
    place; the simulators return a new pool value holding the post-trade
    state.
    """

    kind: ClassVar[str] = "unknown"

    address: str
    token0: str
    token1: str
    # Fee in pips (3000 = 0.30%)
    fee: int

    def _normalize(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address))
        object.__setattr__(self, "token0", normalize_address(self.token0))
        object.__setattr__(self, "token1", normalize_address(self.token1))
        if self.token0 == self.token1:
            raise ValueError(f"Pool {self.address} connects {self.token0} to itself")
        if not 0 <= self.fee < FEE_DENOMINATOR:
            raise ValueError(f"Pool {self.address} fee out of range: {self.fee}")

    @property
    def tokens(self) -> tuple[str, str]:
        return (self.token0, self.token1)

    def has_token(self, token: str) -> bool:
        return normalize_address(token) in (self.token0, self.token1)

    def is_token0(self, token: str) -> bool:
        """Check if token is token0 (determines swap direction)."""
        return normalize_address(token) == self.token0

    def get_token_out(self, token_in: str) -> str:
        """Get the output token for a given input token."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == self.token0:
            return self.token1
        elif token_in_norm == self.token1:
            return self.token0
        else:
            raise ValueError(f"Token {token_in} not in pool {self.address}")

    @property
    def liquidity_score(self) -> int:
        """Depth proxy used to rank candidate routes. Higher is deeper."""
        raise NotImplementedError


@dataclass(frozen=True)
class SwapResult:
    """Result of simulating a swap through one pool."""

    amount_in: int
    amount_out: int
    token_in: str
    token_out: str
    pool: PairPool
    # Pool state after the swap; the input pool is left untouched
    new_pool: PairPool
    # Relative shortfall of the execution price against the pre-trade mid price
    price_impact: Fraction
    ticks_crossed: int = 0

    @property
    def pool_address(self) -> str:
        return self.pool.address


@runtime_checkable
class SwapSimulator(Protocol):
    """Exact-input / exact-output simulation for one pool family."""

    def simulate_swap(self, pool: PairPool, token_in: str, amount_in: int) -> SwapResult:
        """Simulate selling exactly ``amount_in`` of ``token_in``.

        Raises:
            InsufficientLiquidity: If the pool cannot fill the amount
        """
        ...

    def simulate_swap_exact_output(
        self, pool: PairPool, token_in: str, amount_out: int
    ) -> SwapResult:
        """Simulate buying exactly ``amount_out`` of the other token.

        Raises:
            InsufficientLiquidity: If the pool cannot deliver the amount
        """
        ...


def price_impact(
    amount_in: int,
    amount_out: int,
    mid_price_num: int,
    mid_price_den: int,
) -> Fraction:
    """Shortfall of the realized rate against the mid price.

    The mid price is given as output-per-input ``mid_price_num / mid_price_den``.
    Returns ``1 - (amount_out / amount_in) / mid_price``, clamped at zero.
    """
    if amount_in <= 0 or mid_price_num <= 0:
        return Fraction(0)
    impact = 1 - Fraction(amount_out * mid_price_den, amount_in * mid_price_num)
    return max(impact, Fraction(0))


__all__ = [
    "FEE_DENOMINATOR",
    "PairPool",
    "SwapResult",
    "SwapSimulator",
    "price_impact",
]
