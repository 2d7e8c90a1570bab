"""Tests for SimulatorRegistry dispatch."""

from dataclasses import dataclass

import pytest

from swap_router.amm import (
    ConcentratedLiquidityPool,
    ConstantProductPool,
    PairPool,
    SimulatorRegistry,
    build_default_registry,
)
from swap_router.amm.base import SwapResult
from tests.helpers import USDC, WETH, make_cp_pool, make_full_range_cl_pool


class RecordingSimulator:
    """Simulator that returns a fixed output and records calls."""

    def __init__(self, amount_out: int = 42) -> None:
        self.amount_out = amount_out
        self.calls: list[tuple[str, str, int]] = []

    def simulate_swap(self, pool, token_in, amount_in):
        self.calls.append(("exact_input", token_in, amount_in))
        return SwapResult(
            amount_in=amount_in,
            amount_out=self.amount_out,
            token_in=token_in,
            token_out=pool.get_token_out(token_in),
            pool=pool,
            new_pool=pool,
            price_impact=0,
        )

    def simulate_swap_exact_output(self, pool, token_in, amount_out):
        self.calls.append(("exact_output", token_in, amount_out))
        return SwapResult(
            amount_in=amount_out * 2,
            amount_out=amount_out,
            token_in=token_in,
            token_out=pool.get_token_out(token_in),
            pool=pool,
            new_pool=pool,
            price_impact=0,
        )


@dataclass(frozen=True)
class UnregisteredPool(PairPool):
    pass


class TestSimulatorRegistry:
    def test_dispatch_by_pool_type(self):
        registry = SimulatorRegistry()
        simulator = RecordingSimulator()
        registry.register(ConstantProductPool, simulator)
        pool = make_cp_pool(WETH, USDC)

        result = registry.simulate_swap(pool, WETH, 100)

        assert result.amount_out == 42
        assert simulator.calls == [("exact_input", WETH, 100)]

    def test_exact_output_dispatch(self):
        registry = SimulatorRegistry()
        simulator = RecordingSimulator()
        registry.register(ConstantProductPool, simulator)

        result = registry.simulate_swap_exact_output(make_cp_pool(WETH, USDC), WETH, 10)

        assert result.amount_in == 20
        assert simulator.calls == [("exact_output", WETH, 10)]

    def test_unregistered_pool_raises(self):
        registry = SimulatorRegistry()
        pool = UnregisteredPool(address="0x" + "01" * 20, token0=USDC, token1=WETH, fee=3000)

        with pytest.raises(TypeError, match="No simulator registered"):
            registry.simulate_swap(pool, WETH, 1)
        assert not registry.is_registered(pool)
        assert registry.get_type_name(pool) == "unknown"

    def test_type_name_defaults_to_kind(self):
        registry = build_default_registry()

        assert registry.get_type_name(make_cp_pool(WETH, USDC)) == "constant_product"
        assert (
            registry.get_type_name(make_full_range_cl_pool(WETH, USDC)) == "concentrated_liquidity"
        )

    def test_explicit_type_name(self):
        registry = SimulatorRegistry()
        registry.register(ConcentratedLiquidityPool, RecordingSimulator(), "uniswap_v3")

        assert registry.get_type_name(make_full_range_cl_pool(WETH, USDC)) == "uniswap_v3"

    def test_registries_are_independent(self):
        first = SimulatorRegistry()
        first.register(ConstantProductPool, RecordingSimulator())
        second = SimulatorRegistry()

        pool = make_cp_pool(WETH, USDC)
        assert first.is_registered(pool)
        assert not second.is_registered(pool)
