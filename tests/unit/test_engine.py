"""Tests for the routing engine pipeline."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from fractions import Fraction

import pytest

from swap_router.config import RouterConfig
from swap_router.engine import RoutingEngine
from swap_router.errors import (
    DataUnavailable,
    InvalidDeadline,
    InvalidSlippageTolerance,
    NoRouteFound,
    NoViableRoute,
    RoutingCancelled,
    StaleDataTimeout,
)
from swap_router.routing import TradeType
from swap_router.sources import FixedGasPriceSource, StaticPoolSource
from tests.conftest import FIXED_NOW
from tests.helpers import GNO, LUSD, USDC, WETH, make_request


class SlowPoolSource:
    """Blocks until released, like an indexer that stopped answering."""

    def __init__(self, snapshot):
        self.snapshot = snapshot
        self.release = threading.Event()

    def fetch_pools(self, token_a, token_b=None):
        self.release.wait(timeout=5)
        return self.snapshot


class FailingPoolSource:
    def fetch_pools(self, token_a, token_b=None):
        raise DataUnavailable("Indexer down", url="http://indexer.test")


class CancellingPoolSource:
    """Sets the cancel event while the snapshot is being fetched."""

    def __init__(self, snapshot, cancel_event):
        self.snapshot = snapshot
        self.cancel_event = cancel_event

    def fetch_pools(self, token_a, token_b=None):
        self.cancel_event.set()
        return self.snapshot


class HangingGasSource:
    """A JSON-RPC node that accepts the connection and never answers."""

    def __init__(self):
        self.release = threading.Event()

    def current_gas_price(self):
        self.release.wait(timeout=5)
        return 10**9


class FailingGasSource:
    def current_gas_price(self):
        raise DataUnavailable("Gas price RPC request failed", url="http://node.test")


class CountingGasSource:
    def __init__(self, gas_price_wei):
        self.gas_price_wei = gas_price_wei
        self.calls = 0

    def current_gas_price(self):
        self.calls += 1
        return self.gas_price_wei


@pytest.fixture
def config() -> RouterConfig:
    return RouterConfig(base_tokens=None, snapshot_timeout=2.0)


@pytest.fixture
def make_engine(config, mainnet_snapshot):
    engines = []

    def factory(pool_source=None, gas_price=0, gas_price_source=None, **kwargs):
        engine = RoutingEngine(
            kwargs.pop("config", config),
            pool_source=pool_source or StaticPoolSource(mainnet_snapshot),
            gas_price_source=gas_price_source or FixedGasPriceSource(gas_price),
            clock=lambda: FIXED_NOW,
            **kwargs,
        )
        engines.append(engine)
        return engine

    yield factory
    for engine in engines:
        engine.close()


class TestRouting:
    def test_exact_input(self, make_engine):
        engine = make_engine()

        plan = engine.route(make_request(amount=10**18))

        assert plan.trade_type is TradeType.EXACT_INPUT
        assert plan.amount_in == 10**18
        assert plan.amount_out > 2_400 * 10**6
        assert plan.minimum_output == plan.amount_out * 199 // 200
        assert plan.deadline == FIXED_NOW + 600
        assert plan.block_number == 19_000_000

    def test_exact_output(self, make_engine):
        engine = make_engine()

        plan = engine.route(make_request(amount=1000 * 10**6, trade_type="exactOutput"))

        assert plan.trade_type is TradeType.EXACT_OUTPUT
        assert plan.amount_out == 1000 * 10**6
        assert plan.maximum_input == -(-plan.amount_in * 201 // 200)

    def test_defaults_applied(self, make_engine):
        engine = make_engine()

        plan = engine.route(make_request(slippage=None, deadline_offset=None))

        assert plan.slippage_tolerance == Fraction(1, 200)
        assert plan.deadline == FIXED_NOW + 1800

    def test_decimal_slippage(self, make_engine):
        plan = make_engine().route(make_request(slippage="0.01"))

        assert plan.slippage_tolerance == Fraction(1, 100)

    def test_multi_hop(self, make_engine):
        plan = make_engine().route(make_request(token_in=LUSD, token_out=USDC, amount=1000 * 10**18))

        assert plan.instructions[0].route.path[0] == LUSD
        assert plan.instructions[0].route.hops >= 2

    def test_deterministic(self, make_engine):
        request = make_request(amount=150 * 10**18)

        first = make_engine().route(request)
        second = make_engine().route(request)

        assert first == second

    def test_gas_price_is_charged(self, make_engine):
        plan = make_engine(gas_price=20 * 10**9).route(make_request())

        # ~50 raw USDC per gas at 20 gwei and ~2500 USDC per WETH
        assert 45 * plan.gas_units < plan.gas_cost < 51 * plan.gas_units

    def test_gas_price_read_once_per_request(self, config, mainnet_snapshot):
        gas = CountingGasSource(10**9)
        with RoutingEngine(
            config, pool_source=StaticPoolSource(mainnet_snapshot), gas_price_source=gas
        ) as engine:
            engine.route(make_request())

        assert gas.calls == 1

    def test_injected_executor_left_running(self, make_engine):
        executor = ThreadPoolExecutor(max_workers=2)
        try:
            engine = make_engine(executor=executor)
            engine.route(make_request())
            engine.close()

            # Still usable after the engine closed
            assert executor.submit(lambda: 1).result() == 1
        finally:
            executor.shutdown()


class TestValidation:
    @pytest.mark.parametrize("slippage", ["abc", "1", "-1/100", "3/2"])
    def test_invalid_slippage(self, make_engine, slippage):
        with pytest.raises(InvalidSlippageTolerance):
            make_engine().route(make_request(slippage=slippage))

    @pytest.mark.parametrize("offset", [0, -60])
    def test_invalid_deadline(self, make_engine, offset):
        with pytest.raises(InvalidDeadline):
            make_engine().route(make_request(deadline_offset=offset))

    def test_zero_amount(self, make_engine):
        with pytest.raises(ValueError, match="positive"):
            make_engine().route(make_request(amount=0))

    def test_validation_happens_before_fetch(self, make_engine):
        """A bad request never touches the pool source."""
        engine = make_engine(pool_source=FailingPoolSource())

        with pytest.raises(InvalidDeadline):
            engine.route(make_request(deadline_offset=0))


class TestFailures:
    def test_no_route(self, make_engine):
        with pytest.raises(NoRouteFound):
            make_engine().route(make_request(token_out=GNO))

    def test_no_viable_route(self, make_engine):
        with pytest.raises(NoViableRoute):
            make_engine().route(
                make_request(amount=10_000_000 * 10**6, trade_type="exactOutput")
            )

    def test_source_failure_propagates(self, make_engine):
        with pytest.raises(DataUnavailable, match="Indexer down"):
            make_engine(pool_source=FailingPoolSource()).route(make_request())

    def test_snapshot_timeout(self, make_engine, mainnet_snapshot):
        source = SlowPoolSource(mainnet_snapshot)
        engine = make_engine(pool_source=source, config=RouterConfig(snapshot_timeout=0.05))
        try:
            with pytest.raises(StaleDataTimeout) as exc_info:
                engine.route(make_request())
        finally:
            source.release.set()

        assert exc_info.value.params["timeout_seconds"] == 0.05
        assert exc_info.value.params["source"] == "pool_snapshot"

    def test_gas_price_timeout(self, make_engine):
        gas = HangingGasSource()
        engine = make_engine(gas_price_source=gas, config=RouterConfig(snapshot_timeout=0.2))
        started = time.monotonic()
        try:
            with pytest.raises(StaleDataTimeout) as exc_info:
                engine.route(make_request())
            elapsed = time.monotonic() - started
        finally:
            gas.release.set()

        assert exc_info.value.params["source"] == "gas_price"
        assert elapsed < 1.0

    def test_fetches_share_one_deadline(self, make_engine, mainnet_snapshot):
        """A slow snapshot leaves less time for the gas price, not more."""
        source = SlowPoolSource(mainnet_snapshot)
        gas = HangingGasSource()
        engine = make_engine(
            pool_source=source, gas_price_source=gas, config=RouterConfig(snapshot_timeout=0.2)
        )
        started = time.monotonic()
        try:
            with pytest.raises(StaleDataTimeout):
                engine.route(make_request())
            elapsed = time.monotonic() - started
        finally:
            source.release.set()
            gas.release.set()

        assert elapsed < 1.0

    def test_gas_source_failure_propagates(self, make_engine):
        with pytest.raises(DataUnavailable, match="Gas price RPC"):
            make_engine(gas_price_source=FailingGasSource()).route(make_request())


class TestCancellation:
    def test_cancelled_before_start(self, make_engine):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(RoutingCancelled) as exc_info:
            make_engine().route(make_request(), cancel_event=cancel)

        assert exc_info.value.params["stage"] == "snapshot"

    def test_cancelled_during_fetch(self, make_engine, mainnet_snapshot):
        cancel = threading.Event()
        engine = make_engine(pool_source=CancellingPoolSource(mainnet_snapshot, cancel))

        with pytest.raises(RoutingCancelled) as exc_info:
            engine.route(make_request(), cancel_event=cancel)

        assert exc_info.value.params["stage"] == "enumerate"

    def test_unset_event_completes(self, make_engine):
        plan = make_engine().route(make_request(), cancel_event=threading.Event())

        assert plan.amount_in == 10**18
