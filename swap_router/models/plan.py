"""Pydantic response models for trade plans."""

from __future__ import annotations

from decimal import Decimal
from fractions import Fraction

from pydantic import BaseModel, Field

from swap_router.models.token import Token, TokenAmount
from swap_router.models.types import Address, Bytes, Uint256
from swap_router.routing.planner import SwapInstruction, TradePlan
from swap_router.routing.types import TradeType


def format_fraction(value: Fraction, places: int = 8) -> str:
    """Decimal rendering of a fraction, truncated to ``places`` digits."""
    scaled = value.numerator * 10**places // value.denominator
    return format(Decimal(scaled).scaleb(-places), "f")


class RouteModel(BaseModel):
    """One route of the plan and its execution bounds."""

    path: list[Address]
    pools: list[Address]
    protocols: list[str]
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    amount_bound: Uint256 = Field(
        alias="amountBound",
        description="Minimum output (exact input) or maximum input (exact output).",
    )

    model_config = {"populate_by_name": True}

    @classmethod
    def from_instruction(cls, instruction: SwapInstruction) -> RouteModel:
        return cls(
            path=list(instruction.route.path),
            pools=list(instruction.route.addresses),
            protocols=list(instruction.protocols),
            amount_in=str(instruction.amount_in),
            amount_out=str(instruction.amount_out),
            amount_bound=str(instruction.amount_bound),
        )


class TradePlanResponse(BaseModel):
    """Serialized trade plan."""

    trade_type: TradeType = Field(alias="tradeType")
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    amount_in_decimal: str | None = Field(default=None, alias="amountInDecimal")
    amount_out_decimal: str | None = Field(default=None, alias="amountOutDecimal")
    minimum_output: Uint256 | None = Field(default=None, alias="minimumOutput")
    maximum_input: Uint256 | None = Field(default=None, alias="maximumInput")
    slippage_tolerance: str = Field(alias="slippageTolerance")
    recipient: Address
    deadline: int
    gas_units: int = Field(alias="gasUnits")
    gas_cost: Uint256 = Field(
        alias="gasCost", description="Gas cost in quote-token units, rounded down."
    )
    price_impact: str = Field(alias="priceImpact")
    block_number: int | None = Field(default=None, alias="blockNumber")
    router: Address
    calldata: Bytes
    routes: list[RouteModel]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_plan(
        cls,
        plan: TradePlan,
        token_in: Token | None = None,
        token_out: Token | None = None,
    ) -> TradePlanResponse:
        """Serialize a plan; token metadata adds human-readable amounts."""
        s = plan.slippage_tolerance
        return cls(
            trade_type=plan.trade_type,
            token_in=plan.token_in,
            token_out=plan.token_out,
            amount_in=str(plan.amount_in),
            amount_out=str(plan.amount_out),
            amount_in_decimal=_decimal(token_in, plan.amount_in),
            amount_out_decimal=_decimal(token_out, plan.amount_out),
            minimum_output=None if plan.minimum_output is None else str(plan.minimum_output),
            maximum_input=None if plan.maximum_input is None else str(plan.maximum_input),
            slippage_tolerance=f"{s.numerator}/{s.denominator}",
            recipient=plan.recipient,
            deadline=plan.deadline,
            gas_units=plan.gas_units,
            gas_cost=str(plan.gas_cost.numerator // plan.gas_cost.denominator),
            price_impact=format_fraction(plan.price_impact),
            block_number=plan.block_number,
            router=plan.router,
            calldata="0x" + plan.calldata.hex(),
            routes=[RouteModel.from_instruction(i) for i in plan.instructions],
        )


def _decimal(token: Token | None, raw: int) -> str | None:
    if token is None:
        return None
    return str(TokenAmount(token, raw).to_decimal())


__all__ = ["RouteModel", "TradePlanResponse", "format_fraction"]
