"""API endpoints for the swap router."""

from __future__ import annotations

import asyncio
import os
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from swap_router.config import RouterConfig
from swap_router.engine import RoutingEngine
from swap_router.errors import (
    DataUnavailable,
    InsufficientLiquidity,
    InvalidDeadline,
    InvalidSlippageTolerance,
    NoRouteFound,
    NoViableRoute,
    RoutingCancelled,
    RoutingError,
    StaleDataTimeout,
)
from swap_router.models.plan import TradePlanResponse
from swap_router.models.request import RouteRequest
from swap_router.models.snapshot import SnapshotModel
from swap_router.models.types import Uint256
from swap_router.sources import (
    FixedGasPriceSource,
    GasPriceSource,
    PoolStateSource,
    StaticPoolSource,
)

logger = structlog.get_logger()

router = APIRouter()

# Network names accepted in the URL and their chain ids
NETWORK_CHAIN_IDS = {
    "mainnet": 1,
    "xdai": 100,
    "arbitrum-one": 42161,
    "base": 8453,
}

# Seconds a routing computation may take before the request fails
REQUEST_TIMEOUT = float(os.environ.get("ROUTER_REQUEST_TIMEOUT", "10"))

ERROR_STATUS: dict[type[RoutingError], int] = {
    InvalidDeadline: 400,
    InvalidSlippageTolerance: 400,
    NoRouteFound: 422,
    NoViableRoute: 422,
    InsufficientLiquidity: 422,
    DataUnavailable: 503,
    RoutingCancelled: 503,
    StaleDataTimeout: 504,
}

EngineFactory = Callable[[PoolStateSource, GasPriceSource], RoutingEngine]


class RouteBody(BaseModel):
    """A routing request together with the pool state to route against."""

    request: RouteRequest
    snapshot: SnapshotModel
    gas_price: Uint256 = Field(default="0", alias="gasPrice", description="Native gas price in wei.")

    model_config = {"populate_by_name": True}


@lru_cache(maxsize=1)
def get_router_config() -> RouterConfig:
    """Router configuration, read once from the environment."""
    return RouterConfig.from_env()


@lru_cache(maxsize=1)
def _shared_executor() -> ThreadPoolExecutor:
    return ThreadPoolExecutor(
        max_workers=get_router_config().max_workers, thread_name_prefix="router"
    )


def get_engine_factory() -> EngineFactory:
    """Dependency provider for routing engines.

    Override this in tests to inject a custom engine:
        app.dependency_overrides[get_engine_factory] = lambda: my_factory

    Returns:
        A callable building an engine for one request's data sources.
    """
    config = get_router_config()
    executor = _shared_executor()

    def factory(pool_source: PoolStateSource, gas_price_source: GasPriceSource) -> RoutingEngine:
        return RoutingEngine(
            config,
            pool_source=pool_source,
            gas_price_source=gas_price_source,
            executor=executor,
        )

    return factory


def error_response(err: RoutingError) -> JSONResponse:
    """JSON error body with the kind and triggering parameters."""
    status = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(err, error_type)), 500
    )
    return JSONResponse(status_code=status, content=err.to_dict())


@router.post("/route/{network}", response_model=None)
async def route(
    network: str,
    body: RouteBody,
    engine_factory: EngineFactory = Depends(get_engine_factory),
) -> JSONResponse:
    """Compute a trade plan for one request.

    Error Handling:
        - Invalid request schema: 422 Validation Error (Pydantic)
        - Unsupported network: 404
        - Malformed parameters (slippage, deadline, amount): 400
        - No route or no viable route: 422
        - Data source failure: 503; routing timeout: 504
    """
    request = body.request
    chain_id = NETWORK_CHAIN_IDS.get(network)
    logger.info(
        "received_route_request",
        network=network,
        token_in=request.token_in.address,
        token_out=request.token_out.address,
        trade_type=request.trade_type.value,
        pool_count=len(body.snapshot.pools),
    )

    if chain_id is None:
        logger.warning(
            "unsupported_network", network=network, supported_networks=list(NETWORK_CHAIN_IDS)
        )
        return JSONResponse(
            status_code=404,
            content={"error": "unsupported_network", "params": {"network": network}},
        )

    pool_source = StaticPoolSource.from_json(body.snapshot.model_dump(by_alias=True))
    engine = engine_factory(pool_source, FixedGasPriceSource(int(body.gas_price)))
    if engine.config.chain_id != chain_id:
        return JSONResponse(
            status_code=404,
            content={
                "error": "unsupported_network",
                "params": {"network": network, "chain_id": engine.config.chain_id},
            },
        )

    cancel_event = threading.Event()
    loop = asyncio.get_running_loop()
    try:
        plan = await asyncio.wait_for(
            loop.run_in_executor(None, engine.route, request, cancel_event),
            timeout=REQUEST_TIMEOUT,
        )
    except TimeoutError:
        # Stop the worker at its next stage boundary
        cancel_event.set()
        logger.warning("routing_timeout", network=network, timeout_seconds=REQUEST_TIMEOUT)
        return JSONResponse(
            status_code=504,
            content={"error": "routing_timeout", "params": {"timeout_seconds": REQUEST_TIMEOUT}},
        )
    except RoutingError as err:
        logger.info("routing_failed", error=err.kind, params=err.params)
        return error_response(err)
    except ValueError as err:
        logger.info("routing_rejected", reason=str(err))
        return JSONResponse(
            status_code=400,
            content={"error": "invalid_request", "message": str(err), "params": {}},
        )
    finally:
        engine.close()

    logger.info(
        "returning_plan",
        network=network,
        routes=plan.route_count,
        amount_in=plan.amount_in,
        amount_out=plan.amount_out,
    )
    response = TradePlanResponse.from_plan(
        plan,
        token_in=request.token_in.to_token(chain_id),
        token_out=request.token_out.to_token(chain_id),
    )
    return JSONResponse(content=response.model_dump(mode="json", by_alias=True, exclude_none=True))
