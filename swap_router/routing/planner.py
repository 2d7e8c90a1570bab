"""Execution planner: turn a winning allocation into a trade plan.

The plan fixes the slippage bound, the deadline and the router calldata.
It is built once per request and never modified; broadcasting it is the
caller's business.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from itertools import groupby

import structlog

from swap_router.constants import SWAP_ROUTER_02
from swap_router.errors import InvalidDeadline, InvalidSlippageTolerance
from swap_router.models.types import is_valid_address, normalize_address
from swap_router.routing.encoding import (
    ADDRESS_THIS,
    CONTRACT_BALANCE,
    encode_exact_input,
    encode_exact_output,
    encode_multicall,
    encode_swap_exact_tokens_for_tokens,
    encode_swap_tokens_for_exact_tokens,
)
from swap_router.routing.optimizer import OptimizedAllocation
from swap_router.routing.types import Route, RouteQuote, TradeType

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapInstruction:
    """Execution of one route of the allocation."""

    route: Route
    amount_in: int
    amount_out: int
    # Minimum output (exact input) or maximum input (exact output)
    amount_bound: int
    # Router calls for this route, in execution order
    calls: tuple[bytes, ...]

    @property
    def protocols(self) -> tuple[str, ...]:
        return tuple(pool.kind for pool in self.route.pools)


@dataclass(frozen=True)
class TradePlan:
    """Finalized, immutable instruction for one routing request."""

    trade_type: TradeType
    token_in: str
    token_out: str
    # Quoted amounts
    amount_in: int
    amount_out: int
    # Exactly one of these is set, depending on the trade type
    minimum_output: int | None
    maximum_input: int | None
    slippage_tolerance: Fraction
    recipient: str
    deadline: int
    gas_units: int
    # Gas cost in quote-token units (output token for exact input)
    gas_cost: Fraction
    price_impact: Fraction
    block_number: int | None
    instructions: tuple[SwapInstruction, ...]
    router: str
    calldata: bytes

    @property
    def route_count(self) -> int:
        return len(self.instructions)


def validate_slippage_tolerance(slippage_tolerance: Fraction | Decimal | int) -> Fraction:
    """Check and normalize a slippage tolerance.

    Raises:
        InvalidSlippageTolerance: Unless it is an exact fraction in [0, 1)
    """
    if isinstance(slippage_tolerance, bool) or not isinstance(
        slippage_tolerance, (Fraction, Decimal, int)
    ):
        raise InvalidSlippageTolerance(
            "Slippage tolerance must be an exact fraction",
            slippage_tolerance=repr(slippage_tolerance),
        )
    if isinstance(slippage_tolerance, Decimal) and not slippage_tolerance.is_finite():
        raise InvalidSlippageTolerance(
            "Slippage tolerance must be finite", slippage_tolerance=str(slippage_tolerance)
        )
    value = Fraction(slippage_tolerance)
    if not 0 <= value < 1:
        raise InvalidSlippageTolerance(
            "Slippage tolerance must be in [0, 1)", slippage_tolerance=str(value)
        )
    return value


def validate_deadline_offset(deadline_offset: int) -> int:
    """Check a deadline offset in seconds.

    Raises:
        InvalidDeadline: Unless it is a positive integer
    """
    if isinstance(deadline_offset, bool) or not isinstance(deadline_offset, int):
        raise InvalidDeadline(
            "Deadline offset must be an integer number of seconds",
            deadline_offset=repr(deadline_offset),
        )
    if deadline_offset <= 0:
        raise InvalidDeadline("Deadline offset must be positive", deadline_offset=deadline_offset)
    return deadline_offset


def minimum_output(quoted_out: int, slippage_tolerance: Fraction) -> int:
    """floor(quoted_out * (1 - slippage))."""
    s = slippage_tolerance
    return quoted_out * (s.denominator - s.numerator) // s.denominator


def maximum_input(quoted_in: int, slippage_tolerance: Fraction) -> int:
    """ceil(quoted_in * (1 + slippage))."""
    s = slippage_tolerance
    return -(-quoted_in * (s.denominator + s.numerator) // s.denominator)


class ExecutionPlanner:
    """Builds trade plans targeting SwapRouter02.

    Args:
        clock: Returns the current unix time; injectable for tests
        router: Router contract the calldata targets
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        router: str = SWAP_ROUTER_02,
    ) -> None:
        self.clock = clock
        self.router = normalize_address(router, validate=True)

    def plan(
        self,
        optimized: OptimizedAllocation,
        slippage_tolerance: Fraction | Decimal | int,
        deadline_offset: int,
        recipient: str,
        block_number: int | None = None,
    ) -> TradePlan:
        """Build the plan for a winning allocation.

        Raises:
            InvalidSlippageTolerance: If the tolerance is not in [0, 1)
            InvalidDeadline: If the deadline offset is not positive
            ValueError: If the recipient is not a valid address
        """
        slippage = validate_slippage_tolerance(slippage_tolerance)
        offset = validate_deadline_offset(deadline_offset)
        if not is_valid_address(recipient):
            raise ValueError(f"Invalid recipient address: {recipient}")
        recipient = normalize_address(recipient)

        deadline = int(self.clock()) + offset
        quote = optimized.quote
        trade_type = optimized.trade_type

        instructions = tuple(
            self._instruction(route_quote, trade_type, slippage, recipient)
            for route_quote in quote.route_quotes
        )
        calls = [call for instruction in instructions for call in instruction.calls]
        calldata = encode_multicall(deadline, calls)

        if trade_type is TradeType.EXACT_INPUT:
            min_out, max_in = minimum_output(quote.amount_out, slippage), None
        else:
            min_out, max_in = None, maximum_input(quote.amount_in, slippage)

        plan = TradePlan(
            trade_type=trade_type,
            token_in=optimized.allocation.token_in,
            token_out=optimized.allocation.token_out,
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            minimum_output=min_out,
            maximum_input=max_in,
            slippage_tolerance=slippage,
            recipient=recipient,
            deadline=deadline,
            gas_units=quote.gas_units,
            gas_cost=optimized.gas_cost,
            price_impact=quote.price_impact,
            block_number=block_number,
            instructions=instructions,
            router=self.router,
            calldata=calldata,
        )

        logger.info(
            "trade_plan_built",
            trade_type=trade_type.value,
            routes=len(instructions),
            amount_in=plan.amount_in,
            amount_out=plan.amount_out,
            minimum_output=min_out,
            maximum_input=max_in,
            deadline=deadline,
        )
        return plan

    def _instruction(
        self,
        route_quote: RouteQuote,
        trade_type: TradeType,
        slippage: Fraction,
        recipient: str,
    ) -> SwapInstruction:
        if trade_type is TradeType.EXACT_INPUT:
            bound = minimum_output(route_quote.amount_out, slippage)
            calls = self._exact_input_calls(route_quote, bound, recipient)
        else:
            bound = maximum_input(route_quote.amount_in, slippage)
            calls = self._exact_output_calls(route_quote, bound, recipient)
        return SwapInstruction(
            route=route_quote.route,
            amount_in=route_quote.amount_in,
            amount_out=route_quote.amount_out,
            amount_bound=bound,
            calls=tuple(calls),
        )

    def _exact_input_calls(
        self, route_quote: RouteQuote, min_out: int, recipient: str
    ) -> list[bytes]:
        """One exact input call per same-protocol segment.

        Intermediate segments deliver to the router, and later segments
        spend the router's balance.
        """
        segments = _segments(route_quote.route)
        calls = []
        for position, (kind, start, end) in enumerate(segments):
            first = position == 0
            last = position == len(segments) - 1
            amount_in = route_quote.amount_in if first else CONTRACT_BALANCE
            segment_min = min_out if last else 0
            to = recipient if last else ADDRESS_THIS
            tokens = route_quote.route.path[start : end + 1]
            if kind == "constant_product":
                calls.append(encode_swap_exact_tokens_for_tokens(amount_in, segment_min, tokens, to))
            else:
                fees = [pool.fee for pool in route_quote.route.pools[start:end]]
                calls.append(encode_exact_input(tokens, fees, to, amount_in, segment_min))
        return calls

    def _exact_output_calls(
        self, route_quote: RouteQuote, max_in: int, recipient: str
    ) -> list[bytes]:
        """Exact output for the first segment, exact input for the rest.

        The router only pays exact output swaps from the caller, so a mixed
        route buys the first segment's quoted output into the router, then
        sells the router's balance through the remaining segments with the
        requested output as the minimum.
        """
        segments = _segments(route_quote.route)
        calls = []
        for position, (kind, start, end) in enumerate(segments):
            first = position == 0
            last = position == len(segments) - 1
            tokens = route_quote.route.path[start : end + 1]
            fees = [pool.fee for pool in route_quote.route.pools[start:end]]
            to = recipient if last else ADDRESS_THIS
            if first:
                # Quoted output at the end of this segment
                amount_out = route_quote.hops[end - 1].amount_out
                if kind == "constant_product":
                    calls.append(encode_swap_tokens_for_exact_tokens(amount_out, max_in, tokens, to))
                else:
                    calls.append(encode_exact_output(tokens, fees, to, amount_out, max_in))
                continue
            segment_min = route_quote.amount_out if last else 0
            if kind == "constant_product":
                calls.append(
                    encode_swap_exact_tokens_for_tokens(CONTRACT_BALANCE, segment_min, tokens, to)
                )
            else:
                calls.append(encode_exact_input(tokens, fees, to, CONTRACT_BALANCE, segment_min))
        return calls


def _segments(route: Route) -> list[tuple[str, int, int]]:
    """Split a route into runs of one pool kind: (kind, first hop, end hop)."""
    segments = []
    start = 0
    for kind, group in groupby(route.pools, key=lambda pool: pool.kind):
        length = len(list(group))
        segments.append((kind, start, start + length))
        start += length
    return segments


__all__ = [
    "ExecutionPlanner",
    "SwapInstruction",
    "TradePlan",
    "maximum_input",
    "minimum_output",
    "validate_deadline_offset",
    "validate_slippage_tolerance",
]
