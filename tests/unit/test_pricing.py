"""Tests for gas price conversion."""

from fractions import Fraction

import pytest

from swap_router.pools import PoolGraph, PoolSnapshot
from swap_router.pricing import DEFAULT_ESTIMATION_AMOUNT, GasPriceConverter
from swap_router.routing import Quote
from tests.helpers import GNO, USDC, WETH, make_cp_pool

GWEI = 10**9


@pytest.fixture
def converter(enumerator, quoter) -> GasPriceConverter:
    return GasPriceConverter(enumerator, quoter, native_token=WETH)


class TestGasPriceConverter:
    def test_native_token(self, converter, mainnet_graph):
        estimate = converter.convert(mainnet_graph, 20 * GWEI, WETH)

        assert estimate.source == "native"
        assert estimate.price_per_gas == 20 * GWEI

    def test_converts_through_best_route(self, converter, mainnet_graph, enumerator, quoter):
        estimate = converter.convert(mainnet_graph, 20 * GWEI, USDC)

        routes = enumerator.enumerate(mainnet_graph, WETH, USDC)
        best = max(
            q.amount_out
            for q in quoter.quote_many(routes, DEFAULT_ESTIMATION_AMOUNT)
            if isinstance(q, Quote)
        )
        assert estimate.source == "pool"
        assert estimate.token == USDC
        assert estimate.price_per_gas == Fraction(20 * GWEI * best, 10**18)

    def test_roughly_spot_price(self, converter, mainnet_graph):
        """20 gwei at ~2500 USDC per WETH is ~0.00005 USDC per gas."""
        estimate = converter.convert(mainnet_graph, 20 * GWEI, USDC)

        # USDC has 6 decimals, so ~50 raw units per gas
        assert 45 < estimate.price_per_gas < 51

    def test_zero_gas_price(self, converter, mainnet_graph):
        assert converter.convert(mainnet_graph, 0, USDC).price_per_gas == 0

    def test_no_route_defaults_to_zero(self, converter, mainnet_graph):
        estimate = converter.convert(mainnet_graph, 20 * GWEI, GNO)

        assert estimate.source == "default"
        assert estimate.price_per_gas == 0

    def test_unfillable_route_defaults_to_zero(self, enumerator, quoter):
        graph = PoolGraph.from_snapshot(PoolSnapshot(pools=(make_cp_pool(WETH, USDC, 0, 0),)))
        converter = GasPriceConverter(enumerator, quoter, native_token=WETH)

        assert converter.convert(graph, 20 * GWEI, USDC).source == "default"

    def test_negative_gas_price(self, converter, mainnet_graph):
        with pytest.raises(ValueError):
            converter.convert(mainnet_graph, -1, USDC)
