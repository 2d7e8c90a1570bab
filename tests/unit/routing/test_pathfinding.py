"""Tests for candidate route enumeration."""

import pytest

from swap_router.errors import NoRouteFound
from swap_router.pools import PoolGraph
from swap_router.routing import PathEnumerator
from tests.helpers import DAI, LUSD, UNI, USDC, WETH, make_cp_pool, pool_address


class TestPathEnumerator:
    def test_ordering_hops_then_liquidity(self, mainnet_graph, enumerator):
        routes = enumerator.enumerate(mainnet_graph, WETH, USDC)

        assert [r.addresses for r in routes] == [
            (pool_address(1),),
            (pool_address(2),),
            (pool_address(3), pool_address(4)),
        ]

    def test_route_path(self, mainnet_graph, enumerator):
        two_hop = enumerator.enumerate(mainnet_graph, WETH, USDC)[-1]

        assert two_hop.path == (WETH, DAI, USDC)
        assert two_hop.hops == 2

    def test_max_candidates_truncates(self, mainnet_graph, enumerator):
        routes = enumerator.enumerate(mainnet_graph, WETH, USDC, max_candidates=2)

        assert [r.hops for r in routes] == [1, 1]

    def test_max_hops(self, mainnet_graph, enumerator):
        routes = enumerator.enumerate(mainnet_graph, LUSD, USDC, max_hops=2)
        assert all(r.hops <= 2 for r in routes)
        assert len(routes) == 2

        routes = enumerator.enumerate(mainnet_graph, LUSD, USDC, max_hops=3)
        assert len(routes) == 3
        assert routes[-1].path == (LUSD, WETH, DAI, USDC)

    def test_base_tokens_restrict_intermediates(self, mainnet_graph):
        enumerator = PathEnumerator(base_tokens={WETH, USDC})

        routes = enumerator.enumerate(mainnet_graph, WETH, USDC)

        assert all(r.hops == 1 for r in routes)

    def test_endpoints_need_not_be_base_tokens(self, mainnet_graph):
        enumerator = PathEnumerator(base_tokens={WETH})

        routes = enumerator.enumerate(mainnet_graph, LUSD, USDC, max_hops=2)

        assert {r.path for r in routes} == {(LUSD, WETH, USDC)}

    def test_no_duplicates_or_repeated_pools(self, mainnet_graph, enumerator):
        routes = enumerator.enumerate(mainnet_graph, LUSD, USDC, max_hops=3, max_candidates=50)

        keys = [r.addresses for r in routes]
        assert len(keys) == len(set(keys))
        for route in routes:
            assert len(set(route.addresses)) == len(route.addresses)
            assert len(set(route.path)) == len(route.path)

    def test_deterministic(self, mainnet_graph, enumerator):
        first = enumerator.enumerate(mainnet_graph, LUSD, USDC)
        second = enumerator.enumerate(mainnet_graph, LUSD, USDC)

        assert first == second


class TestNoRouteFound:
    def test_same_token(self, mainnet_graph, enumerator):
        with pytest.raises(NoRouteFound) as exc_info:
            enumerator.enumerate(mainnet_graph, WETH, WETH)

        assert exc_info.value.params["token_in"] == WETH

    def test_unknown_token(self, mainnet_graph, enumerator):
        with pytest.raises(NoRouteFound):
            enumerator.enumerate(mainnet_graph, WETH, UNI)

    def test_disconnected_tokens(self, enumerator):
        graph = PoolGraph([make_cp_pool(USDC, DAI), make_cp_pool(WETH, LUSD)])

        with pytest.raises(NoRouteFound) as exc_info:
            enumerator.enumerate(graph, WETH, USDC, max_hops=3)

        assert exc_info.value.params == {"token_in": WETH, "token_out": USDC, "max_hops": 3}
        assert exc_info.value.kind == "no_route_found"

    def test_beyond_max_hops(self, mainnet_graph, enumerator):
        with pytest.raises(NoRouteFound):
            enumerator.enumerate(mainnet_graph, LUSD, USDC, max_hops=1)

    def test_invalid_limits(self, mainnet_graph, enumerator):
        with pytest.raises(ValueError):
            enumerator.enumerate(mainnet_graph, WETH, USDC, max_hops=0)
        with pytest.raises(ValueError):
            enumerator.enumerate(mainnet_graph, WETH, USDC, max_candidates=0)
