"""Route quoting: simulate amounts through routes and allocations.

Every simulation reads the immutable pool snapshot and returns new values,
so quotes for different candidates can run concurrently on a thread pool.
Gas is a model, not a live estimate: a fixed per-transaction base plus a
per-hop cost by pool family.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from concurrent.futures import Executor
from dataclasses import dataclass, field

import structlog

from swap_router.amm import AnyPool, SimulatorRegistry, build_default_registry
from swap_router.amm.base import SwapResult
from swap_router.constants import BASE_SWAP_GAS, CONCENTRATED_SWAP_GAS, CONSTANT_PRODUCT_SWAP_GAS
from swap_router.errors import InsufficientLiquidity
from swap_router.routing.types import (
    HopQuote,
    Quote,
    Route,
    RouteAllocation,
    RouteQuote,
    TradeType,
)

logger = structlog.get_logger()


def _default_hop_gas() -> dict[str, int]:
    return {
        "constant_product": CONSTANT_PRODUCT_SWAP_GAS,
        "concentrated_liquidity": CONCENTRATED_SWAP_GAS,
    }


@dataclass(frozen=True)
class GasModel:
    """Deterministic gas estimate from route length and pool mix.

    ``hop_gas`` is keyed by the simulator registry's type name for a pool.
    """

    base_gas: int = BASE_SWAP_GAS
    hop_gas: dict[str, int] = field(default_factory=_default_hop_gas, hash=False)
    # Extra gas per initialized tick crossed; 0 keeps the estimate a
    # function of the route alone
    tick_crossing_gas: int = 0

    def hop_cost(self, pool_type: str, ticks_crossed: int = 0) -> int:
        """Gas for one hop through a pool of the given type.

        Raises:
            ValueError: If the pool type has no gas entry
        """
        try:
            cost = self.hop_gas[pool_type]
        except KeyError:
            raise ValueError(f"No gas cost for pool type '{pool_type}'") from None
        return cost + self.tick_crossing_gas * ticks_crossed

    def total_gas(self, route_gas: Sequence[int]) -> int:
        """Transaction gas for routes executed together."""
        return self.base_gas + sum(route_gas)


class Quoter:
    """Evaluates routes and allocations against a pool snapshot.

    Args:
        registry: Simulator dispatch by pool type
        gas_model: Gas estimate model
        executor: Thread pool for ``quote_many``; sequential if None
    """

    def __init__(
        self,
        registry: SimulatorRegistry | None = None,
        gas_model: GasModel | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.registry = registry if registry is not None else build_default_registry()
        self.gas_model = gas_model if gas_model is not None else GasModel()
        self.executor = executor

    def hop_gas(self, pool: AnyPool, ticks_crossed: int = 0) -> int:
        """Gas for one hop, priced by the pool's registered type name."""
        return self.gas_model.hop_cost(self.registry.get_type_name(pool), ticks_crossed)

    def route_gas(self, route: Route) -> int:
        """Hop gas for a route, assuming no ticks crossed."""
        return sum(self.hop_gas(pool) for pool in route.pools)

    def quote(self, route: Route, amount_in: int) -> Quote:
        """Quote selling ``amount_in`` through a route.

        Raises:
            InsufficientLiquidity: If any hop cannot fill its amount
        """
        route_quote = self.simulate_route(route, amount_in, TradeType.EXACT_INPUT)
        return Quote.combine(TradeType.EXACT_INPUT, (route_quote,), self.gas_model.base_gas)

    def quote_exact_output(self, route: Route, amount_out: int) -> Quote:
        """Quote buying ``amount_out`` through a route.

        Raises:
            InsufficientLiquidity: If any hop cannot deliver its amount
        """
        route_quote = self.simulate_route(route, amount_out, TradeType.EXACT_OUTPUT)
        return Quote.combine(TradeType.EXACT_OUTPUT, (route_quote,), self.gas_model.base_gas)

    def quote_allocation(self, allocation: RouteAllocation) -> Quote:
        """Quote every share of an allocation and sum the results.

        Each route is simulated independently against the snapshot.

        Raises:
            InsufficientLiquidity: If any share cannot be filled
        """
        route_quotes = tuple(
            self.simulate_route(share.route, share.amount, allocation.trade_type)
            for share in allocation.shares
            if share.amount > 0
        )
        return Quote.combine(allocation.trade_type, route_quotes, self.gas_model.base_gas)

    def quote_many(
        self,
        routes: Sequence[Route],
        amount: int,
        trade_type: TradeType = TradeType.EXACT_INPUT,
    ) -> list[Quote | InsufficientLiquidity]:
        """Quote each route for the same amount.

        Failures are returned in place rather than raised; results are in
        the same order as ``routes``.
        """

        def quote_one(route: Route) -> Quote | InsufficientLiquidity:
            try:
                if trade_type is TradeType.EXACT_INPUT:
                    return self.quote(route, amount)
                return self.quote_exact_output(route, amount)
            except InsufficientLiquidity as err:
                return err

        if self.executor is None:
            return [quote_one(route) for route in routes]
        return list(self.executor.map(quote_one, routes))

    def bucket_quotes(
        self,
        route: Route,
        total: int,
        buckets: int,
        trade_type: TradeType = TradeType.EXACT_INPUT,
    ) -> list[int | None]:
        """Cumulative quotes for ``total * k // buckets``, k = 0..buckets.

        Each increment is simulated against the pool states left by the
        previous increments, so price impact grows with the size. Entry k
        is the output (exact input) or required input (exact output) for
        that cumulative amount, or None once the route cannot fill it.
        """
        table: list[int | None] = [0]
        states: dict[str, AnyPool] = {}
        cumulative = 0
        previous = 0

        for k in range(1, buckets + 1):
            target = total * k // buckets
            increment = target - previous
            previous = target
            if increment == 0:
                table.append(cumulative)
                continue
            try:
                route_quote = self.simulate_route(route, increment, trade_type, states)
            except InsufficientLiquidity:
                table.extend([None] * (buckets + 1 - k))
                break
            states.update(route_quote.post_pools)
            if trade_type is TradeType.EXACT_INPUT:
                cumulative += route_quote.amount_out
            else:
                cumulative += route_quote.amount_in
            table.append(cumulative)

        return table

    def simulate_route(
        self,
        route: Route,
        amount: int,
        trade_type: TradeType,
        states: Mapping[str, AnyPool] | None = None,
    ) -> RouteQuote:
        """Simulate one route.

        Args:
            route: Route to simulate
            amount: Input (exact input) or output (exact output) amount
            trade_type: Which side ``amount`` fixes
            states: Pool states to use instead of the snapshot's, by address

        Raises:
            InsufficientLiquidity: If any hop cannot fill its amount
        """
        pools = [
            states.get(pool.address, pool) if states else pool
            for pool in route.pools
        ]
        try:
            if trade_type is TradeType.EXACT_INPUT:
                results = self._forward(pools, route, amount)
            else:
                results = self._backward(pools, route, amount)
        except InsufficientLiquidity as err:
            err.params.setdefault("route", list(route.addresses))
            raise

        hops = tuple(
            HopQuote(
                pool=result.pool,
                token_in=result.token_in,
                token_out=result.token_out,
                amount_in=result.amount_in,
                amount_out=result.amount_out,
                gas_units=self.hop_gas(result.pool, result.ticks_crossed),
                price_impact=result.price_impact,
                ticks_crossed=result.ticks_crossed,
                new_pool=result.new_pool,
            )
            for result in results
        )
        return RouteQuote(
            route=route,
            amount_in=hops[0].amount_in,
            amount_out=hops[-1].amount_out,
            gas_units=sum(hop.gas_units for hop in hops),
            hops=hops,
        )

    def _forward(self, pools: list[AnyPool], route: Route, amount_in: int) -> list[SwapResult]:
        results: list[SwapResult] = []
        current = amount_in
        for i, pool in enumerate(pools):
            result = self.registry.simulate_swap(pool, route.path[i], current)
            results.append(result)
            current = result.amount_out
        return results

    def _backward(self, pools: list[AnyPool], route: Route, amount_out: int) -> list[SwapResult]:
        # Work backwards: each hop must deliver what the next hop consumes
        results: list[SwapResult] = []
        required = amount_out
        for i in range(len(pools) - 1, -1, -1):
            result = self.registry.simulate_swap_exact_output(pools[i], route.path[i], required)
            results.append(result)
            required = result.amount_in
        results.reverse()
        return results


__all__ = ["GasModel", "Quoter"]
