"""Pydantic models for pool snapshot documents.

A snapshot is the JSON an indexer (or a file on disk) provides for one
block:

    {
      "chainId": 1,
      "blockNumber": 19000000,
      "timestamp": 1705000000,
      "pools": [
        {"kind": "constantProduct", "address": "0x...", "tokens": ["0x...", "0x..."],
         "reserves": ["1000000000000000000000", "2000000000000000000000000"], "fee": "0.003"},
        {"kind": "concentratedLiquidity", "address": "0x...", "tokens": [...],
         "fee": "500", "sqrtPrice": "...", "liquidity": "...", "tick": -200000,
         "liquidityNet": {"-887270": "...", "887270": "-..."}}
      ]
    }
"""

from typing import Any

from pydantic import BaseModel, Field

from swap_router.models.types import Address, Uint256


class PoolModel(BaseModel):
    """One pool entry of a snapshot.

    Family-specific fields are optional here; the pool parser checks that
    the ones its family needs are present.
    """

    kind: str
    address: Address
    tokens: list[Address]
    # Decimal fraction ("0.003") or pips ("3000")
    fee: str | None = None

    # Constant product
    reserves: list[Uint256] | None = None

    # Concentrated liquidity
    sqrt_price: Uint256 | None = Field(default=None, alias="sqrtPrice")
    liquidity: Uint256 | None = None
    tick: int | None = None
    liquidity_net: dict[str, str] | None = Field(default=None, alias="liquidityNet")
    tick_spacing: int | None = Field(default=None, alias="tickSpacing")

    model_config = {"populate_by_name": True}


class SnapshotModel(BaseModel):
    """A full pool snapshot as of one block."""

    chain_id: int = Field(default=1, alias="chainId")
    block_number: int | None = Field(default=None, alias="blockNumber")
    timestamp: int | None = None
    # Validated entry by entry so one malformed pool does not sink the snapshot
    pools: list[dict[str, Any]] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


__all__ = ["PoolModel", "SnapshotModel"]
