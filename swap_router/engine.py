"""Routing engine: one request in, one trade plan (or a typed failure) out.

The pipeline for a request:

1. Validate slippage tolerance, deadline and amount (no network yet)
2. Fetch a pool snapshot and the gas price, bounded by ``config.snapshot_timeout``
3. Build the pool graph and enumerate candidate routes
4. Convert the gas price into quote-token units
5. Optimize the allocation and build the trade plan

Fetching market data is the only blocking step; everything after it is pure
computation on immutable values. Cancellation is checked between stages.
Nothing is retried: a failed fetch surfaces to the caller as is.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor
from fractions import Fraction

import structlog

from swap_router.amm import SimulatorRegistry
from swap_router.config import DEFAULT_ROUTER_CONFIG, RouterConfig
from swap_router.errors import (
    InvalidSlippageTolerance,
    RoutingCancelled,
    StaleDataTimeout,
)
from swap_router.models.request import RouteRequest, parse_fraction
from swap_router.pools.graph import PoolGraph, PoolSnapshot
from swap_router.pricing import GasPriceConverter
from swap_router.routing.optimizer import RouteOptimizer
from swap_router.routing.pathfinding import PathEnumerator
from swap_router.routing.planner import (
    ExecutionPlanner,
    TradePlan,
    validate_deadline_offset,
    validate_slippage_tolerance,
)
from swap_router.routing.quoter import Quoter
from swap_router.routing.types import TradeType
from swap_router.sources import GasPriceSource, PoolStateSource

logger = structlog.get_logger()


class RoutingEngine:
    """Computes trade plans from routing requests.

    Args:
        config: Router configuration
        pool_source: Where pool snapshots come from
        gas_price_source: Where the native gas price comes from
        executor: Thread pool for the market data fetches and quoting. If None,
            the engine creates one with ``config.max_workers`` threads and
            shuts it down in ``close()``.
        clock: Current unix time, used for deadlines
        registry: Simulator registry; the default handles both pool families
    """

    def __init__(
        self,
        config: RouterConfig = DEFAULT_ROUTER_CONFIG,
        *,
        pool_source: PoolStateSource,
        gas_price_source: GasPriceSource,
        executor: Executor | None = None,
        clock: Callable[[], float] = time.time,
        registry: SimulatorRegistry | None = None,
    ) -> None:
        self.config = config
        self.pool_source = pool_source
        self.gas_price_source = gas_price_source
        self._owns_executor = executor is None
        self.executor = (
            executor
            if executor is not None
            else ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="router")
        )

        self.enumerator = PathEnumerator(config.base_tokens)
        self.quoter = Quoter(registry=registry, gas_model=config.gas_model, executor=self.executor)
        self.optimizer = RouteOptimizer(
            self.quoter,
            top_k=config.top_k,
            buckets=config.buckets,
            max_splits=config.max_splits,
        )
        self.planner = ExecutionPlanner(clock=clock)
        self.gas_pricer = GasPriceConverter(
            self.enumerator,
            self.quoter,
            native_token=config.native_token,
            max_hops=config.max_hops,
            max_candidates=config.max_candidates,
        )

    def route(self, request: RouteRequest, cancel_event: threading.Event | None = None) -> TradePlan:
        """Route one request.

        Args:
            request: The validated request
            cancel_event: Set it from another thread to abandon the computation

        Returns:
            The finalized trade plan

        Raises:
            InvalidSlippageTolerance: If the tolerance is malformed or out of range
            InvalidDeadline: If the deadline offset is not positive
            ValueError: If the amount is zero or has too many decimals
            StaleDataTimeout: If the snapshot or gas price fetch exceeds its deadline
            DataUnavailable: If the pool or gas source fails
            NoRouteFound: If the tokens are not connected
            NoViableRoute: If no route can fill the amount
            RoutingCancelled: If ``cancel_event`` is set before the plan is returned
        """
        slippage = self._slippage(request)
        deadline_offset = validate_deadline_offset(
            request.deadline_offset
            if request.deadline_offset is not None
            else self.config.default_deadline_offset
        )
        amount = request.fixed_amount(self.config.chain_id)
        if amount.raw == 0:
            raise ValueError("Trade amount must be positive")

        token_in = request.token_in.address
        token_out = request.token_out.address
        trade_type = request.trade_type

        logger.info(
            "routing_request",
            token_in=token_in,
            token_out=token_out,
            amount=amount.raw,
            trade_type=trade_type.value,
        )

        _check_cancelled(cancel_event, "snapshot")
        snapshot, gas_price_wei = self._fetch_inputs(token_in, token_out)

        _check_cancelled(cancel_event, "enumerate")
        graph = PoolGraph.from_snapshot(snapshot)
        candidates = self.enumerator.enumerate(
            graph,
            token_in,
            token_out,
            max_hops=self.config.max_hops,
            max_candidates=self.config.max_candidates,
        )

        _check_cancelled(cancel_event, "gas_price")
        # Gas is charged in the token the score is measured in
        quote_token = token_out if trade_type is TradeType.EXACT_INPUT else token_in
        gas_price = self.gas_pricer.convert(graph, gas_price_wei, quote_token)

        _check_cancelled(cancel_event, "optimize")
        optimized = self.optimizer.optimize(
            candidates,
            amount.raw,
            gas_price=gas_price.price_per_gas,
            trade_type=trade_type,
        )

        _check_cancelled(cancel_event, "plan")
        plan = self.planner.plan(
            optimized,
            slippage_tolerance=slippage,
            deadline_offset=deadline_offset,
            recipient=request.recipient,
            block_number=snapshot.block_number,
        )

        logger.info(
            "routing_complete",
            routes=plan.route_count,
            amount_in=plan.amount_in,
            amount_out=plan.amount_out,
            gas_units=plan.gas_units,
            gas_price_source=gas_price.source,
            block_number=snapshot.block_number,
        )
        return plan

    def close(self) -> None:
        """Shut down the executor if the engine created it."""
        if self._owns_executor:
            self.executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> RoutingEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _slippage(self, request: RouteRequest) -> Fraction:
        if request.slippage_tolerance is None:
            return validate_slippage_tolerance(self.config.default_slippage)
        try:
            value = parse_fraction(request.slippage_tolerance)
        except ValueError as err:
            raise InvalidSlippageTolerance(
                "Slippage tolerance is not a valid fraction",
                slippage_tolerance=request.slippage_tolerance,
            ) from err
        return validate_slippage_tolerance(value)

    def _fetch_inputs(self, token_in: str, token_out: str) -> tuple[PoolSnapshot, int]:
        """Fetch the pool snapshot and the gas price concurrently.

        Both fetches share one deadline of ``config.snapshot_timeout``
        seconds; missing it raises StaleDataTimeout naming the source
        that was late.
        """
        timeout = self.config.snapshot_timeout
        deadline = time.monotonic() + timeout
        snapshot_future = self.executor.submit(self.pool_source.fetch_pools, token_in, token_out)
        gas_future = self.executor.submit(self.gas_price_source.current_gas_price)

        pending = {"pool_snapshot": snapshot_future, "gas_price": gas_future}
        results = {}
        try:
            for source, future in pending.items():
                try:
                    results[source] = future.result(timeout=max(0.0, deadline - time.monotonic()))
                except TimeoutError:
                    logger.warning("source_fetch_timeout", source=source, timeout_seconds=timeout)
                    raise StaleDataTimeout(
                        "Market data fetch timed out",
                        source=source,
                        timeout_seconds=timeout,
                        token_in=token_in,
                        token_out=token_out,
                    ) from None
        finally:
            for future in pending.values():
                future.cancel()

        snapshot = results["pool_snapshot"]
        logger.debug(
            "snapshot_fetched",
            pools=snapshot.pool_count,
            block_number=snapshot.block_number,
        )
        return snapshot, results["gas_price"]


def _check_cancelled(cancel_event: threading.Event | None, stage: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("routing_cancelled", stage=stage)
        raise RoutingCancelled("Routing computation cancelled", stage=stage)


__all__ = ["RoutingEngine"]
