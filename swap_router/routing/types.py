"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction

from swap_router.amm import AnyPool
from swap_router.models.types import normalize_address


class TradeType(str, Enum):
    """Which side of the trade is fixed."""

    EXACT_INPUT = "exactInput"
    EXACT_OUTPUT = "exactOutput"


@dataclass(frozen=True)
class Route:
    """An ordered sequence of pools from token_in to token_out.

    ``path`` is derived: the token entering each hop, followed by the final
    output token. Pools are references into the graph snapshot.
    """

    pools: tuple[AnyPool, ...]
    token_in: str
    token_out: str
    path: tuple[str, ...] = field(init=False, compare=False)

    def __post_init__(self) -> None:
        if not self.pools:
            raise ValueError("Route needs at least one pool")
        object.__setattr__(self, "pools", tuple(self.pools))
        object.__setattr__(self, "token_in", normalize_address(self.token_in))
        object.__setattr__(self, "token_out", normalize_address(self.token_out))

        addresses = [pool.address for pool in self.pools]
        if len(set(addresses)) != len(addresses):
            raise ValueError(f"Route repeats a pool: {addresses}")

        path = [self.token_in]
        for pool in self.pools:
            if not pool.has_token(path[-1]):
                raise ValueError(f"Pool {pool.address} does not trade {path[-1]}")
            path.append(pool.get_token_out(path[-1]))
        if path[-1] != self.token_out:
            raise ValueError(f"Route ends at {path[-1]}, expected {self.token_out}")
        object.__setattr__(self, "path", tuple(path))

    @classmethod
    def from_pools(cls, pools: tuple[AnyPool, ...], token_in: str) -> Route:
        """Build a route, deriving the output token from the last hop."""
        token = normalize_address(token_in)
        for pool in pools:
            token = pool.get_token_out(token)
        return cls(pools=tuple(pools), token_in=token_in, token_out=token)

    @property
    def hops(self) -> int:
        return len(self.pools)

    @property
    def addresses(self) -> tuple[str, ...]:
        """Ordered pool addresses; the route's identity for dedup and ordering."""
        return tuple(pool.address for pool in self.pools)

    @property
    def liquidity(self) -> int:
        """Bottleneck liquidity: the shallowest pool along the route."""
        return min(pool.liquidity_score for pool in self.pools)

    def shares_pool_with(self, other: Route) -> bool:
        return not set(self.addresses).isdisjoint(other.addresses)

    def __str__(self) -> str:
        return " -> ".join(token[-6:] for token in self.path)


@dataclass(frozen=True)
class RouteShare:
    """Part of a trade sent through one route."""

    route: Route
    amount: int

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(f"Share amount must be an int, got {type(self.amount).__name__}")
        if self.amount < 0:
            raise ValueError(f"Share amount cannot be negative: {self.amount}")


@dataclass(frozen=True)
class RouteAllocation:
    """Routes and their integer shares of the total amount.

    For exact input the shares split the input; for exact output they split
    the output. Shares always sum to ``total`` exactly.
    """

    shares: tuple[RouteShare, ...]
    total: int
    trade_type: TradeType = TradeType.EXACT_INPUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "shares", tuple(self.shares))
        if not self.shares:
            raise ValueError("Allocation needs at least one route")
        if sum(share.amount for share in self.shares) != self.total:
            raise ValueError(
                f"Shares sum to {sum(s.amount for s in self.shares)}, expected {self.total}"
            )
        keys = [share.route.addresses for share in self.shares]
        if len(set(keys)) != len(keys):
            raise ValueError("A route may appear only once per allocation")
        token_pairs = {(share.route.token_in, share.route.token_out) for share in self.shares}
        if len(token_pairs) != 1:
            raise ValueError("All routes in an allocation must share token_in and token_out")

    @classmethod
    def single(
        cls, route: Route, total: int, trade_type: TradeType = TradeType.EXACT_INPUT
    ) -> RouteAllocation:
        return cls(shares=(RouteShare(route, total),), total=total, trade_type=trade_type)

    @classmethod
    def from_buckets(
        cls,
        routes: tuple[Route, ...],
        buckets: tuple[int, ...],
        bucket_count: int,
        total: int,
        trade_type: TradeType = TradeType.EXACT_INPUT,
    ) -> RouteAllocation:
        """Allocation from bucket counts; the last route absorbs rounding."""
        amounts = [total * count // bucket_count for count in buckets[:-1]]
        amounts.append(total - sum(amounts))
        shares = tuple(RouteShare(route, amount) for route, amount in zip(routes, amounts))
        return cls(shares=shares, total=total, trade_type=trade_type)

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(share.route for share in self.shares)

    @property
    def token_in(self) -> str:
        return self.shares[0].route.token_in

    @property
    def token_out(self) -> str:
        return self.shares[0].route.token_out

    @property
    def is_split(self) -> bool:
        return len(self.shares) > 1


@dataclass(frozen=True)
class HopQuote:
    """Simulated result of one hop."""

    pool: AnyPool
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    gas_units: int
    price_impact: Fraction
    ticks_crossed: int
    # Post-trade pool state, only used to chain further simulation
    new_pool: AnyPool


@dataclass(frozen=True)
class RouteQuote:
    """Simulated result of one route."""

    route: Route
    amount_in: int
    amount_out: int
    # Hop gas only; the per-transaction base cost is added once per Quote
    gas_units: int
    hops: tuple[HopQuote, ...]

    @property
    def price_impact(self) -> Fraction:
        """Compound impact: 1 - product of (1 - hop impact)."""
        remaining = Fraction(1)
        for hop in self.hops:
            remaining *= 1 - hop.price_impact
        return 1 - remaining

    @property
    def post_pools(self) -> dict[str, AnyPool]:
        """Pool states after this route's trade, keyed by address."""
        return {hop.pool.address: hop.new_pool for hop in self.hops}


@dataclass(frozen=True)
class Quote:
    """Evaluated result of a route or a whole allocation."""

    trade_type: TradeType
    amount_in: int
    amount_out: int
    gas_units: int
    route_quotes: tuple[RouteQuote, ...]

    @classmethod
    def combine(
        cls, trade_type: TradeType, route_quotes: tuple[RouteQuote, ...], base_gas: int
    ) -> Quote:
        return cls(
            trade_type=trade_type,
            amount_in=sum(rq.amount_in for rq in route_quotes),
            amount_out=sum(rq.amount_out for rq in route_quotes),
            gas_units=base_gas + sum(rq.gas_units for rq in route_quotes),
            route_quotes=route_quotes,
        )

    @property
    def price_impact(self) -> Fraction:
        """Input-weighted price impact across routes."""
        if self.amount_in == 0:
            return Fraction(0)
        weighted = sum(rq.price_impact * rq.amount_in for rq in self.route_quotes)
        return Fraction(weighted) / self.amount_in


__all__ = [
    "HopQuote",
    "Quote",
    "Route",
    "RouteAllocation",
    "RouteQuote",
    "RouteShare",
    "TradeType",
]
