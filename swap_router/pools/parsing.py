"""Parse snapshot documents into pool objects.

Malformed entries are skipped with a warning rather than failing the whole
snapshot; a snapshot missing a pool only narrows the search.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from pydantic import ValidationError

from swap_router.amm import AnyPool
from swap_router.amm.base import FEE_DENOMINATOR
from swap_router.amm.concentrated import FEE_MEDIUM, ConcentratedLiquidityPool, TickInfo
from swap_router.amm.constant_product import ConstantProductPool
from swap_router.models.snapshot import PoolModel, SnapshotModel
from swap_router.pools.graph import PoolSnapshot

logger = structlog.get_logger()

CONSTANT_PRODUCT_KINDS = frozenset({"constantProduct", "constant_product"})
CONCENTRATED_KINDS = frozenset({"concentratedLiquidity", "concentrated_liquidity"})


def parse_snapshot(data: dict[str, Any]) -> PoolSnapshot:
    """Parse a snapshot document.

    Raises:
        pydantic.ValidationError: If the snapshot header itself is malformed
    """
    model = SnapshotModel.model_validate(data)

    pools: list[AnyPool] = []
    for index, raw in enumerate(model.pools):
        try:
            entry = PoolModel.model_validate(raw)
        except ValidationError as err:
            logger.warning("snapshot_pool_invalid", index=index, errors=err.error_count())
            continue
        pool = parse_pool(entry)
        if pool is not None:
            pools.append(pool)

    logger.debug(
        "snapshot_parsed",
        block_number=model.block_number,
        pools=len(pools),
        skipped=len(model.pools) - len(pools),
    )
    return PoolSnapshot(
        pools=tuple(pools),
        block_number=model.block_number,
        timestamp=model.timestamp,
        chain_id=model.chain_id,
    )


def parse_pool(entry: PoolModel) -> AnyPool | None:
    """Build a pool from one snapshot entry, or None if it cannot be used."""
    if len(entry.tokens) != 2:
        logger.warning(
            "snapshot_pool_wrong_token_count",
            pool=entry.address,
            count=len(entry.tokens),
        )
        return None

    fee = _parse_fee(entry)
    if fee is None:
        return None

    try:
        if entry.kind in CONSTANT_PRODUCT_KINDS:
            return _parse_constant_product(entry, fee)
        if entry.kind in CONCENTRATED_KINDS:
            return _parse_concentrated(entry, fee)
    except ValueError as err:
        logger.warning("snapshot_pool_rejected", pool=entry.address, kind=entry.kind, reason=str(err))
        return None

    logger.debug("snapshot_pool_unknown_kind", pool=entry.address, kind=entry.kind)
    return None


def _parse_constant_product(entry: PoolModel, fee: int) -> ConstantProductPool | None:
    if entry.reserves is None or len(entry.reserves) != 2:
        logger.warning("constant_product_pool_missing_reserves", pool=entry.address)
        return None

    return ConstantProductPool(
        address=entry.address,
        token0=entry.tokens[0],
        token1=entry.tokens[1],
        fee=fee,
        reserve0=int(entry.reserves[0]),
        reserve1=int(entry.reserves[1]),
    )


def _parse_concentrated(entry: PoolModel, fee: int) -> ConcentratedLiquidityPool | None:
    if entry.sqrt_price is None or entry.liquidity is None or entry.tick is None:
        logger.warning("concentrated_pool_missing_state", pool=entry.address)
        return None

    token0, token1 = entry.tokens[0].lower(), entry.tokens[1].lower()
    if token0 > token1:
        # Price and ticks are defined against the sorted pair; a reversed
        # entry is ambiguous
        logger.warning("concentrated_pool_tokens_unordered", pool=entry.address)
        return None

    return ConcentratedLiquidityPool(
        address=entry.address,
        token0=token0,
        token1=token1,
        fee=fee,
        sqrt_price_x96=int(entry.sqrt_price),
        liquidity=int(entry.liquidity),
        tick=entry.tick,
        ticks=_parse_ticks(entry),
        tick_spacing=entry.tick_spacing or 0,
    )


def _parse_ticks(entry: PoolModel) -> tuple[TickInfo, ...]:
    """Parse the tick -> liquidity_net mapping, skipping bad entries."""
    if not entry.liquidity_net:
        return ()

    ticks = []
    for tick_str, net_str in entry.liquidity_net.items():
        try:
            ticks.append(TickInfo(index=int(tick_str), liquidity_net=int(net_str)))
        except ValueError:
            logger.debug(
                "concentrated_pool_parse_tick_failed",
                pool=entry.address,
                tick=tick_str,
                net=net_str,
            )
    return tuple(sorted(ticks))


def _parse_fee(entry: PoolModel) -> int | None:
    """Parse a fee into pips.

    Fee can come as:
    - Decimal fraction "0.003" (0.3%) -> multiply by 1,000,000 -> 3000
    - Integer string "3000" -> use directly

    A fraction finer than one pip is rejected rather than rounded.
    """
    if entry.fee is None:
        return FEE_MEDIUM

    try:
        value = Decimal(entry.fee)
    except InvalidOperation:
        logger.warning("snapshot_pool_invalid_fee", pool=entry.address, fee=entry.fee)
        return None

    if not value.is_finite() or value < 0:
        logger.warning("snapshot_pool_invalid_fee", pool=entry.address, fee=entry.fee)
        return None

    pips = value * FEE_DENOMINATOR if value < 1 else value
    if pips != pips.to_integral_value():
        logger.warning("snapshot_pool_invalid_fee", pool=entry.address, fee=entry.fee)
        return None
    return int(pips)


__all__ = ["parse_pool", "parse_snapshot"]
