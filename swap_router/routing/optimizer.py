"""Route optimizer: pick the single route or split with the best net result.

This is a bounded heuristic search, not an exhaustive optimization:

1. Quote every candidate at the full amount; the best net score is the
   baseline allocation.
2. Take the top-K candidates by raw amount and build incremental bucket
   tables for them (``buckets`` equal slices of the total).
3. Score every split of the buckets across 2..max_splits of those routes,
   skipping combinations whose routes share a pool (their quotes would not
   be independent).
4. The best split is re-quoted exactly and replaces the baseline only if it
   scores strictly higher. Ties go to fewer routes, then enumeration order.

Scores are exact rationals. For exact input the score is
``amount_out - gas_units * gas_price`` with the gas price in output-token
units; for exact output it is ``-(amount_in + gas_units * gas_price)`` with
the gas price in input-token units.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from fractions import Fraction
from itertools import combinations

import structlog

from swap_router.errors import InsufficientLiquidity, NoViableRoute
from swap_router.routing.quoter import Quoter
from swap_router.routing.types import Quote, Route, RouteAllocation, TradeType

logger = structlog.get_logger()


@dataclass(frozen=True)
class OptimizedAllocation:
    """Winning allocation with its exact quote and net score."""

    allocation: RouteAllocation
    quote: Quote
    score: Fraction
    candidates_considered: int = 0
    # Gas price the score was computed with, in quote-token units
    gas_price: Fraction = Fraction(0)

    @property
    def trade_type(self) -> TradeType:
        return self.allocation.trade_type

    @property
    def gas_cost(self) -> Fraction:
        """Gas cost of the quote in quote-token units."""
        return self.gas_price * self.quote.gas_units


def score_quote(quote: Quote, gas_price: Fraction) -> Fraction:
    """Net score of a quote; higher is better."""
    gas_cost = gas_price * quote.gas_units
    if quote.trade_type is TradeType.EXACT_INPUT:
        return quote.amount_out - gas_cost
    return -(quote.amount_in + gas_cost)


def compositions(total: int, parts: int) -> list[tuple[int, ...]]:
    """All ways to write ``total`` as an ordered sum of ``parts`` positive ints."""
    result = []
    for cuts in combinations(range(1, total), parts - 1):
        bounds = (0, *cuts, total)
        result.append(tuple(bounds[i + 1] - bounds[i] for i in range(parts)))
    return result


class RouteOptimizer:
    """Searches single routes and bucketed splits for the best allocation.

    Args:
        quoter: Quoter bound to the current snapshot
        top_k: Number of best single routes considered for splitting
        buckets: Number of equal slices the amount is divided into
        max_splits: Maximum number of routes in one allocation
    """

    def __init__(
        self,
        quoter: Quoter,
        top_k: int = 4,
        buckets: int = 20,
        max_splits: int = 3,
    ) -> None:
        if top_k < 1 or buckets < 1 or max_splits < 1:
            raise ValueError("top_k, buckets and max_splits must be positive")
        self.quoter = quoter
        self.top_k = top_k
        self.buckets = buckets
        self.max_splits = max_splits

    def optimize(
        self,
        candidates: Sequence[Route],
        total_amount: int,
        gas_price: Fraction | int = 0,
        trade_type: TradeType = TradeType.EXACT_INPUT,
    ) -> OptimizedAllocation:
        """Find the allocation with the best gas-adjusted result.

        Args:
            candidates: Candidate routes, in enumeration order
            total_amount: Input (exact input) or output (exact output) amount
            gas_price: Price of one gas unit in output-token units (exact
                input) or input-token units (exact output)
            trade_type: Which side ``total_amount`` fixes

        Raises:
            NoViableRoute: If no candidate can fill the amount
        """
        gas_price = Fraction(gas_price)
        if gas_price < 0:
            raise ValueError(f"Gas price cannot be negative: {gas_price}")

        quotes = self.quoter.quote_many(candidates, total_amount, trade_type)
        viable = [
            (index, route, quote)
            for index, (route, quote) in enumerate(zip(candidates, quotes))
            if isinstance(quote, Quote)
        ]
        for route, quote in zip(candidates, quotes):
            if isinstance(quote, InsufficientLiquidity):
                logger.debug("route_candidate_dropped", route=str(route), reason=str(quote))

        if not viable:
            raise NoViableRoute(
                "No candidate route can fill the amount",
                amount=total_amount,
                trade_type=trade_type.value,
                candidates=len(candidates),
            )

        # max() keeps the first of equal scores: enumeration order
        _, best_route, best_quote = max(viable, key=lambda v: score_quote(v[2], gas_price))
        best = OptimizedAllocation(
            allocation=RouteAllocation.single(best_route, total_amount, trade_type),
            quote=best_quote,
            score=score_quote(best_quote, gas_price),
            candidates_considered=len(candidates),
            gas_price=gas_price,
        )

        split = self._best_split(viable, total_amount, gas_price, trade_type)
        if split is not None and split.score > best.score:
            best = replace(split, candidates_considered=len(candidates), gas_price=gas_price)

        logger.debug(
            "route_optimized",
            candidates=len(candidates),
            viable=len(viable),
            routes=len(best.allocation.shares),
            amount_in=best.quote.amount_in,
            amount_out=best.quote.amount_out,
            gas_units=best.quote.gas_units,
        )
        return best

    def _best_split(
        self,
        viable: list[tuple[int, Route, Quote]],
        total_amount: int,
        gas_price: Fraction,
        trade_type: TradeType,
    ) -> OptimizedAllocation | None:
        if self.max_splits < 2 or self.buckets < 2 or len(viable) < 2:
            return None

        if trade_type is TradeType.EXACT_INPUT:
            ranked = sorted(viable, key=lambda v: (-v[2].amount_out, v[0]))
        else:
            ranked = sorted(viable, key=lambda v: (v[2].amount_in, v[0]))
        top = [route for _, route, _ in ranked[: self.top_k]]

        tables = [
            self.quoter.bucket_quotes(route, total_amount, self.buckets, trade_type)
            for route in top
        ]
        route_gas = [self.quoter.route_gas(route) for route in top]

        best_score: Fraction | None = None
        best_choice: tuple[tuple[int, ...], tuple[int, ...]] | None = None

        for size in range(2, min(self.max_splits, len(top)) + 1):
            for members in combinations(range(len(top)), size):
                if any(
                    top[a].shares_pool_with(top[b]) for a, b in combinations(members, 2)
                ):
                    continue
                gas_cost = gas_price * self.quoter.gas_model.total_gas(
                    [route_gas[m] for m in members]
                )
                for parts in compositions(self.buckets, size):
                    amounts = [tables[m][count] for m, count in zip(members, parts)]
                    if any(amount is None for amount in amounts):
                        continue
                    value = sum(amounts)
                    if trade_type is TradeType.EXACT_INPUT:
                        score = value - gas_cost
                    else:
                        score = -(value + gas_cost)
                    if best_score is None or score > best_score:
                        best_score = score
                        best_choice = (members, parts)

        if best_choice is None:
            return None

        members, parts = best_choice
        allocation = RouteAllocation.from_buckets(
            tuple(top[m] for m in members), parts, self.buckets, total_amount, trade_type
        )
        try:
            quote = self.quoter.quote_allocation(allocation)
        except InsufficientLiquidity as err:
            # Rounding moved a share past a route's capacity
            logger.debug("split_requote_failed", reason=str(err))
            return None

        return OptimizedAllocation(
            allocation=allocation,
            quote=quote,
            score=score_quote(quote, gas_price),
        )


__all__ = ["OptimizedAllocation", "RouteOptimizer", "compositions", "score_quote"]
