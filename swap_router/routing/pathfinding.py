"""Candidate route enumeration over the pool graph.

Routes are enumerated breadth-first, so every route of n hops is found
before any route of n + 1 hops. Beyond the first hop only base tokens
(major, deep-liquidity tokens) may serve as intermediates; unrestricted
intermediates would make the candidate space explode through hub tokens.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

import structlog

from swap_router.amm import AnyPool
from swap_router.errors import NoRouteFound
from swap_router.models.types import normalize_address
from swap_router.pools.graph import PoolGraph
from swap_router.routing.types import Route

logger = structlog.get_logger()


class PathEnumerator:
    """Enumerates candidate routes between two tokens.

    Usage:
        enumerator = PathEnumerator(base_tokens=MAINNET_BASE_TOKENS)
        routes = enumerator.enumerate(graph, token_in, token_out, max_hops=3, max_candidates=10)
    """

    def __init__(self, base_tokens: Iterable[str] | None = None) -> None:
        """Initialize the enumerator.

        Args:
            base_tokens: Tokens allowed as intermediates in routes of two or
                more hops. None allows any token.
        """
        self.base_tokens: frozenset[str] | None = (
            frozenset(normalize_address(t) for t in base_tokens) if base_tokens is not None else None
        )

    def enumerate(
        self,
        graph: PoolGraph,
        token_in: str,
        token_out: str,
        max_hops: int = 3,
        max_candidates: int = 10,
    ) -> list[Route]:
        """Find candidate routes from token_in to token_out.

        Candidates are ordered by fewer hops first, then higher bottleneck
        liquidity, then pool address sequence, and truncated to
        ``max_candidates``. Each ordered pool sequence appears once; no
        route revisits a pool or a token.

        Args:
            graph: Pool graph for this computation
            token_in: Starting token address
            token_out: Target token address
            max_hops: Maximum number of pools in a route
            max_candidates: Maximum number of routes to return

        Returns:
            Non-empty list of routes

        Raises:
            NoRouteFound: If the tokens are equal, unknown to the graph, or
                not connected within ``max_hops``
            ValueError: If max_hops or max_candidates is not positive
        """
        if max_hops < 1 or max_candidates < 1:
            raise ValueError(
                f"max_hops and max_candidates must be positive: {max_hops}, {max_candidates}"
            )

        token_in_norm = normalize_address(token_in)
        token_out_norm = normalize_address(token_out)
        params = {"token_in": token_in_norm, "token_out": token_out_norm, "max_hops": max_hops}

        if token_in_norm == token_out_norm:
            raise NoRouteFound("Input and output token are the same", **params)
        if not graph.has_token(token_in_norm) or not graph.has_token(token_out_norm):
            raise NoRouteFound("Token not present in any pool", **params)

        routes = self._search(graph, token_in_norm, token_out_norm, max_hops)
        if not routes:
            raise NoRouteFound("No path connects the tokens", **params)

        routes.sort(key=lambda r: (r.hops, -r.liquidity, r.addresses))
        selected = routes[:max_candidates]

        logger.debug(
            "route_candidates",
            token_in=token_in_norm[-8:],
            token_out=token_out_norm[-8:],
            found=len(routes),
            selected=len(selected),
            max_hops=max_hops,
        )
        return selected

    def _search(
        self, graph: PoolGraph, token_in: str, token_out: str, max_hops: int
    ) -> list[Route]:
        routes: list[Route] = []
        seen: set[tuple[str, ...]] = set()

        # (current token, tokens visited, pools so far)
        queue: deque[tuple[str, frozenset[str], tuple[AnyPool, ...]]] = deque(
            [(token_in, frozenset([token_in]), ())]
        )

        while queue:
            current, visited, pools = queue.popleft()
            used = {pool.address for pool in pools}

            for pool in graph.pools_for_token(current):
                if pool.address in used:
                    continue
                next_token = pool.get_token_out(current)
                if next_token in visited:
                    continue
                candidate = pools + (pool,)

                if next_token == token_out:
                    key = tuple(p.address for p in candidate)
                    if key not in seen:
                        seen.add(key)
                        routes.append(Route(pools=candidate, token_in=token_in, token_out=token_out))
                    continue

                if len(candidate) >= max_hops:
                    continue
                if not self._allowed_intermediate(next_token):
                    continue
                queue.append((next_token, visited | {next_token}, candidate))

        return routes

    def _allowed_intermediate(self, token: str) -> bool:
        return self.base_tokens is None or token in self.base_tokens


__all__ = ["PathEnumerator"]
