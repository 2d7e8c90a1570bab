"""Pool storage: snapshots, the pool graph and snapshot parsing."""

from swap_router.pools.graph import PoolGraph, PoolSnapshot
from swap_router.pools.parsing import parse_pool, parse_snapshot

__all__ = ["PoolGraph", "PoolSnapshot", "parse_pool", "parse_snapshot"]
