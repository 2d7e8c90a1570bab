"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest
import structlog

from swap_router.amm import ConstantProductPool
from swap_router.pools import PoolGraph, PoolSnapshot
from swap_router.routing import ExecutionPlanner, PathEnumerator, Quoter, RouteOptimizer
from tests.helpers import DAI, LUSD, USDC, WETH, make_cp_pool, pool_address

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Fixed wall clock for deterministic deadlines
FIXED_NOW = 1_700_000_000


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog.configure() done by an entry point under test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return FIXTURES_DIR


def load_snapshot_fixture(name: str) -> dict[str, Any]:
    """Load a snapshot document fixture by name (e.g., "mainnet_small")."""
    path = FIXTURES_DIR / "snapshots" / f"{name}.json"
    with open(path) as f:
        return json.load(f)


# =============================================================================
# Pools
# =============================================================================


@pytest.fixture
def weth_usdc_pool() -> ConstantProductPool:
    """WETH/USDC at 2500 USDC per WETH, 0.30% fee."""
    return make_cp_pool(WETH, USDC, 1000 * 10**18, 2_500_000 * 10**6, address=pool_address(1))


@pytest.fixture
def weth_usdc_low_fee_pool() -> ConstantProductPool:
    """Shallower WETH/USDC pool with a 0.05% fee."""
    return make_cp_pool(WETH, USDC, 500 * 10**18, 1_250_000 * 10**6, fee=500, address=pool_address(2))


@pytest.fixture
def weth_dai_pool() -> ConstantProductPool:
    return make_cp_pool(WETH, DAI, 1000 * 10**18, 2_500_000 * 10**18, address=pool_address(3))


@pytest.fixture
def dai_usdc_pool() -> ConstantProductPool:
    return make_cp_pool(
        DAI, USDC, 5_000_000 * 10**18, 5_000_000 * 10**6, fee=100, address=pool_address(4)
    )


@pytest.fixture
def weth_lusd_pool() -> ConstantProductPool:
    """1000 WETH / 2,000,000 LUSD at a 0.30% fee."""
    return make_cp_pool(WETH, LUSD, 1000 * 10**18, 2_000_000 * 10**18, address=pool_address(5))


@pytest.fixture
def mainnet_pools(
    weth_usdc_pool, weth_usdc_low_fee_pool, weth_dai_pool, dai_usdc_pool, weth_lusd_pool
) -> tuple[ConstantProductPool, ...]:
    return (weth_usdc_pool, weth_usdc_low_fee_pool, weth_dai_pool, dai_usdc_pool, weth_lusd_pool)


@pytest.fixture
def mainnet_snapshot(mainnet_pools) -> PoolSnapshot:
    return PoolSnapshot(pools=mainnet_pools, block_number=19_000_000, timestamp=FIXED_NOW)


@pytest.fixture
def mainnet_graph(mainnet_snapshot) -> PoolGraph:
    return PoolGraph.from_snapshot(mainnet_snapshot)


# =============================================================================
# Routing components
# =============================================================================


@pytest.fixture
def enumerator() -> PathEnumerator:
    """Enumerator without base-token restrictions."""
    return PathEnumerator(base_tokens=None)


@pytest.fixture
def quoter() -> Quoter:
    return Quoter()


@pytest.fixture
def optimizer(quoter) -> RouteOptimizer:
    return RouteOptimizer(quoter, top_k=4, buckets=20, max_splits=3)


@pytest.fixture
def planner() -> ExecutionPlanner:
    return ExecutionPlanner(clock=lambda: FIXED_NOW)
