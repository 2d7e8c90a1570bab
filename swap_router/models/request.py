"""Routing request model.

The request surface is a validated, enumerated set of fields with explicit
defaults. Amounts are exact: either a raw integer string in the token's
smallest unit (``amount``) or a human-readable decimal string
(``amountDecimal``) converted without rounding.
"""

from __future__ import annotations

from fractions import Fraction

from pydantic import BaseModel, Field, model_validator

from swap_router.models.token import Token, TokenAmount
from swap_router.models.types import Address, Uint256
from swap_router.routing.types import TradeType


def parse_fraction(value: str) -> Fraction:
    """Parse ``"num/den"`` or a decimal string such as ``"0.005"`` exactly.

    Raises:
        ValueError: If the value is not a valid rational number
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected a string fraction, got {type(value).__name__}")
    try:
        return Fraction(value.strip())
    except (ValueError, ZeroDivisionError) as err:
        raise ValueError(f"Invalid fraction: '{value}'") from err


class TokenInfo(BaseModel):
    """Token identity and precision as supplied by the caller."""

    address: Address
    decimals: int = Field(ge=0, le=77)
    symbol: str | None = None

    def to_token(self, chain_id: int) -> Token:
        return Token(
            chain_id=chain_id, address=self.address, decimals=self.decimals, symbol=self.symbol
        )


class RouteRequest(BaseModel):
    """A request to route one trade."""

    token_in: TokenInfo = Field(alias="tokenIn")
    token_out: TokenInfo = Field(alias="tokenOut")
    amount: Uint256 | None = Field(
        default=None,
        description="Raw amount of the fixed side, in the token's smallest unit.",
    )
    amount_decimal: str | None = Field(
        default=None,
        alias="amountDecimal",
        description="Human-readable amount of the fixed side, e.g. '10.5'.",
    )
    trade_type: TradeType = Field(default=TradeType.EXACT_INPUT, alias="tradeType")
    recipient: Address
    # Kept as text; parsed and range checked by the engine so a bad value
    # surfaces as InvalidSlippageTolerance
    slippage_tolerance: str | None = Field(default=None, alias="slippageTolerance")
    deadline_offset: int | None = Field(default=None, alias="deadlineOffset")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _one_amount(self) -> RouteRequest:
        if (self.amount is None) == (self.amount_decimal is None):
            raise ValueError("Exactly one of amount and amountDecimal must be given")
        return self

    @property
    def fixed_token(self) -> TokenInfo:
        """Token whose amount the request fixes."""
        if self.trade_type is TradeType.EXACT_INPUT:
            return self.token_in
        return self.token_out

    def fixed_amount(self, chain_id: int) -> TokenAmount:
        """Exact amount of the fixed side.

        Raises:
            ValueError: If ``amountDecimal`` has more digits than the token allows
        """
        token = self.fixed_token.to_token(chain_id)
        if self.amount is not None:
            return TokenAmount.from_raw(token, self.amount)
        return TokenAmount.from_decimal(token, self.amount_decimal or "0")


__all__ = ["RouteRequest", "TokenInfo", "parse_fraction"]
