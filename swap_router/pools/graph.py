"""Pool graph: the set of known pools as a multigraph over tokens.

A PoolGraph is built once per routing computation from a PoolSnapshot and
never changes afterwards. Routes and quotes hold references into it; every
simulation returns new pool values instead of touching the graph.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

import structlog

from swap_router.amm import AnyPool
from swap_router.models.types import normalize_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class PoolSnapshot:
    """Pools read at one logical instant (a single block)."""

    pools: tuple[AnyPool, ...]
    block_number: int | None = None
    timestamp: int | None = None
    chain_id: int = 1

    @property
    def pool_count(self) -> int:
        return len(self.pools)


@dataclass(frozen=True)
class _Adjacency:
    by_pair: dict[frozenset[str], tuple[AnyPool, ...]] = field(default_factory=dict)
    neighbors: dict[str, frozenset[str]] = field(default_factory=dict)
    by_address: dict[str, AnyPool] = field(default_factory=dict)


class PoolGraph:
    """Undirected multigraph of tokens connected by pools.

    Each pool appears in exactly one adjacency entry, keyed by its unordered
    token pair. Several pools may share a pair (different fee tiers or pool
    families). Iteration orders are deterministic: pools keep the order they
    were added in, so routing over the same snapshot is reproducible.

    Usage:
        graph = PoolGraph.from_snapshot(snapshot)
        for pool in graph.pools_for_pair(WETH, USDC):
            ...
    """

    def __init__(
        self,
        pools: Iterable[AnyPool] = (),
        block_number: int | None = None,
        timestamp: int | None = None,
    ) -> None:
        """Build the graph.

        Args:
            pools: Pools to index. A later pool with the same address
                replaces an earlier one.
            block_number: Block the pools were read at, if known
            timestamp: Unix time of that block, if known

        Raises:
            ValueError: If a pool connects a token to itself
        """
        self.block_number = block_number
        self.timestamp = timestamp

        by_address: dict[str, AnyPool] = {}
        for pool in pools:
            if pool.token0 == pool.token1:
                raise ValueError(f"Pool {pool.address} connects {pool.token0} to itself")
            if pool.address in by_address:
                logger.debug(
                    "pool_replaced",
                    pool=pool.address[-8:],
                    token0=pool.token0[-8:],
                    token1=pool.token1[-8:],
                )
                # Re-insert so the replacement takes the later position
                del by_address[pool.address]
            by_address[pool.address] = pool

        by_pair: dict[frozenset[str], list[AnyPool]] = {}
        neighbors: dict[str, set[str]] = {}
        for pool in by_address.values():
            by_pair.setdefault(frozenset(pool.tokens), []).append(pool)
            neighbors.setdefault(pool.token0, set()).add(pool.token1)
            neighbors.setdefault(pool.token1, set()).add(pool.token0)

        self._adjacency = _Adjacency(
            by_pair={pair: tuple(group) for pair, group in by_pair.items()},
            neighbors={token: frozenset(adj) for token, adj in neighbors.items()},
            by_address=by_address,
        )

        logger.debug(
            "pool_graph_built",
            pools=len(by_address),
            tokens=len(neighbors),
            block_number=block_number,
        )

    @classmethod
    def from_snapshot(cls, snapshot: PoolSnapshot) -> PoolGraph:
        """Build a graph over every pool in a snapshot."""
        return cls(snapshot.pools, block_number=snapshot.block_number, timestamp=snapshot.timestamp)

    def pools_for_pair(self, token_a: str, token_b: str) -> tuple[AnyPool, ...]:
        """All pools trading token_a against token_b (order independent)."""
        pair = frozenset((normalize_address(token_a), normalize_address(token_b)))
        return self._adjacency.by_pair.get(pair, ())

    def neighbors(self, token: str) -> frozenset[str]:
        """Tokens directly tradeable with ``token`` through at least one pool."""
        return self._adjacency.neighbors.get(normalize_address(token), frozenset())

    def pools_for_token(self, token: str) -> Iterator[AnyPool]:
        """Pools containing ``token``, grouped by counterpart token."""
        token_norm = normalize_address(token)
        for other in sorted(self.neighbors(token_norm)):
            yield from self.pools_for_pair(token_norm, other)

    def has_token(self, token: str) -> bool:
        return normalize_address(token) in self._adjacency.neighbors

    def get_pool(self, address: str) -> AnyPool | None:
        return self._adjacency.by_address.get(normalize_address(address))

    @property
    def tokens(self) -> frozenset[str]:
        return frozenset(self._adjacency.neighbors)

    @property
    def pools(self) -> tuple[AnyPool, ...]:
        return tuple(self._adjacency.by_address.values())

    @property
    def pool_count(self) -> int:
        """Number of unique pools in the graph."""
        return len(self._adjacency.by_address)

    def __len__(self) -> int:
        return self.pool_count

    def __iter__(self) -> Iterator[AnyPool]:
        return iter(self.pools)


__all__ = ["PoolGraph", "PoolSnapshot"]
