"""Integer math for concentrated liquidity pools.

Ports of the UniswapV3 core libraries (TickMath, SqrtPriceMath, SwapMath)
onto Python ints. Prices are Q64.96 square roots: ``sqrt(price) * 2**96``
where ``price`` is token1 per token0. Rounding always favours the pool:
inputs round up and outputs round down.
"""

from __future__ import annotations

from .constants import MAX_SQRT_RATIO, MAX_TICK, MIN_SQRT_RATIO, MIN_TICK, Q96

FEE_DENOMINATOR = 1_000_000

_MAX_UINT256 = 2**256 - 1

# Multipliers for 1/sqrt(1.0001)^(2^i), as Q128.128 fixed point
_TICK_RATIO_FACTORS = (
    (0x2, 0xFFF97272373D413259A46990580E213A),
    (0x4, 0xFFF2E50F5F656932EF12357CF3C7FDCC),
    (0x8, 0xFFE5CACA7E10E4E61C3624EAA0941CD0),
    (0x10, 0xFFCB9843D60F6159C9DB58835C926644),
    (0x20, 0xFF973B41FA98C081472E6896DFB254C0),
    (0x40, 0xFF2EA16466C96A3843EC78B326B52861),
    (0x80, 0xFE5DEE046A99A2A811C461F1969C3053),
    (0x100, 0xFCBE86C7900A88AEDCFFC83B479AA3A4),
    (0x200, 0xF987A7253AC413176F2B074CF7815E54),
    (0x400, 0xF3392B0822B70005940C7A398E4B70F3),
    (0x800, 0xE7159475A2C29B7443B29C7FA6E889D9),
    (0x1000, 0xD097F3BDFD2022B8845AD8F792AA5825),
    (0x2000, 0xA9F746462D870FDF8A65DC1F90E061E5),
    (0x4000, 0x70D869A156D2A1B890BB3DF62BAF32F7),
    (0x8000, 0x31BE135F97D08FD981231505542FCFA6),
    (0x10000, 0x9AA508B5B7A84E1C677DE54F3E99BC9),
    (0x20000, 0x5D6AF8DEDB81196699C329225EE604),
    (0x40000, 0x2216E584F5FA1EA926041BEDFE98),
    (0x80000, 0x48A170391F7DC42444E8FA2),
)


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator)."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    return (a * b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator)."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    return -((-(a * b)) // denominator)


def div_rounding_up(a: int, b: int) -> int:
    """ceil(a / b)."""
    return -((-a) // b)


# TickMath


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """sqrt(1.0001^tick) * 2^96, rounded up.

    Raises:
        ValueError: If the tick is outside [MIN_TICK, MAX_TICK]
    """
    abs_tick = abs(tick)
    if abs_tick > MAX_TICK:
        raise ValueError(f"Tick out of range: {tick}")

    if abs_tick & 0x1:
        ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001
    else:
        ratio = 0x100000000000000000000000000000000
    for bit, factor in _TICK_RATIO_FACTORS:
        if abs_tick & bit:
            ratio = (ratio * factor) >> 128

    if tick > 0:
        ratio = _MAX_UINT256 // ratio

    # Q128.128 -> Q64.96, rounding up so the result round-trips through
    # get_tick_at_sqrt_ratio
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """Greatest tick whose sqrt ratio is <= ``sqrt_price_x96``.

    Raises:
        ValueError: If the price is outside [MIN_SQRT_RATIO, MAX_SQRT_RATIO)
    """
    if not MIN_SQRT_RATIO <= sqrt_price_x96 < MAX_SQRT_RATIO:
        raise ValueError(f"sqrt price out of range: {sqrt_price_x96}")

    low, high = MIN_TICK, MAX_TICK
    while low < high:
        mid = (low + high + 1) // 2
        if get_sqrt_ratio_at_tick(mid) <= sqrt_price_x96:
            low = mid
        else:
            high = mid - 1
    return low


# SqrtPriceMath


def get_amount0_delta(sqrt_a: int, sqrt_b: int, liquidity: int, round_up: bool) -> int:
    """Token0 amount between two prices: L * (sqrt_b - sqrt_a) / (sqrt_a * sqrt_b)."""
    if sqrt_a > sqrt_b:
        sqrt_a, sqrt_b = sqrt_b, sqrt_a
    if sqrt_a <= 0:
        raise ValueError("sqrt price must be positive")

    numerator1 = liquidity << 96
    numerator2 = sqrt_b - sqrt_a

    if round_up:
        return div_rounding_up(mul_div_rounding_up(numerator1, numerator2, sqrt_b), sqrt_a)
    return mul_div(numerator1, numerator2, sqrt_b) // sqrt_a


def get_amount1_delta(sqrt_a: int, sqrt_b: int, liquidity: int, round_up: bool) -> int:
    """Token1 amount between two prices: L * (sqrt_b - sqrt_a)."""
    if sqrt_a > sqrt_b:
        sqrt_a, sqrt_b = sqrt_b, sqrt_a

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_b - sqrt_a, Q96)
    return mul_div(liquidity, sqrt_b - sqrt_a, Q96)


def _next_sqrt_price_from_amount0(
    sqrt_price_x96: int, liquidity: int, amount: int, add: bool
) -> int:
    # Rounds up: the price must move at least as far as the exact result
    if amount == 0:
        return sqrt_price_x96
    numerator1 = liquidity << 96
    product = amount * sqrt_price_x96

    if add:
        return mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 + product)

    if numerator1 <= product:
        raise ValueError("Not enough token0 liquidity for requested output")
    return mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 - product)


def _next_sqrt_price_from_amount1(
    sqrt_price_x96: int, liquidity: int, amount: int, add: bool
) -> int:
    # Rounds down: the price must move at least as far as the exact result
    if add:
        return sqrt_price_x96 + (amount << 96) // liquidity

    quotient = div_rounding_up(amount << 96, liquidity)
    if sqrt_price_x96 <= quotient:
        raise ValueError("Not enough token1 liquidity for requested output")
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int, liquidity: int, amount_in: int, zero_for_one: bool
) -> int:
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise ValueError("Price and liquidity must be positive")
    if zero_for_one:
        return _next_sqrt_price_from_amount0(sqrt_price_x96, liquidity, amount_in, True)
    return _next_sqrt_price_from_amount1(sqrt_price_x96, liquidity, amount_in, True)


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int, liquidity: int, amount_out: int, zero_for_one: bool
) -> int:
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise ValueError("Price and liquidity must be positive")
    if zero_for_one:
        return _next_sqrt_price_from_amount1(sqrt_price_x96, liquidity, amount_out, False)
    return _next_sqrt_price_from_amount0(sqrt_price_x96, liquidity, amount_out, False)


# SwapMath


def compute_swap_step(
    sqrt_current: int,
    sqrt_target: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int,
    exact_input: bool,
) -> tuple[int, int, int, int]:
    """Swap within one tick range.

    Moves the price from ``sqrt_current`` toward ``sqrt_target`` until
    either the target is reached or ``amount_remaining`` is used up.

    Args:
        sqrt_current: Current Q64.96 sqrt price
        sqrt_target: Price that must not be crossed in this step
        liquidity: Active liquidity for the range
        amount_remaining: Input still to sell (exact input) or output
            still to buy (exact output); always non-negative here
        fee_pips: Pool fee in pips
        exact_input: Direction of the amount

    Returns:
        (sqrt_next, amount_in, amount_out, fee_amount); ``amount_in``
        excludes the fee
    """
    zero_for_one = sqrt_current >= sqrt_target
    amount_in = 0
    amount_out = 0

    if exact_input:
        remaining_less_fee = mul_div(amount_remaining, FEE_DENOMINATOR - fee_pips, FEE_DENOMINATOR)
        if zero_for_one:
            amount_in = get_amount0_delta(sqrt_target, sqrt_current, liquidity, True)
        else:
            amount_in = get_amount1_delta(sqrt_current, sqrt_target, liquidity, True)
        if remaining_less_fee >= amount_in:
            sqrt_next = sqrt_target
        else:
            sqrt_next = get_next_sqrt_price_from_input(
                sqrt_current, liquidity, remaining_less_fee, zero_for_one
            )
    else:
        if zero_for_one:
            amount_out = get_amount1_delta(sqrt_target, sqrt_current, liquidity, False)
        else:
            amount_out = get_amount0_delta(sqrt_current, sqrt_target, liquidity, False)
        if amount_remaining >= amount_out:
            sqrt_next = sqrt_target
        else:
            sqrt_next = get_next_sqrt_price_from_output(
                sqrt_current, liquidity, amount_remaining, zero_for_one
            )

    reached_target = sqrt_next == sqrt_target

    if zero_for_one:
        if not (reached_target and exact_input):
            amount_in = get_amount0_delta(sqrt_next, sqrt_current, liquidity, True)
        if not (reached_target and not exact_input):
            amount_out = get_amount1_delta(sqrt_next, sqrt_current, liquidity, False)
    else:
        if not (reached_target and exact_input):
            amount_in = get_amount1_delta(sqrt_current, sqrt_next, liquidity, True)
        if not (reached_target and not exact_input):
            amount_out = get_amount0_delta(sqrt_current, sqrt_next, liquidity, False)

    if not exact_input and amount_out > amount_remaining:
        amount_out = amount_remaining

    if exact_input and not reached_target:
        # Whatever was not converted is kept by the pool as fee
        fee_amount = amount_remaining - amount_in
    else:
        fee_amount = mul_div_rounding_up(amount_in, fee_pips, FEE_DENOMINATOR - fee_pips)

    return sqrt_next, amount_in, amount_out, fee_amount


__all__ = [
    "compute_swap_step",
    "div_rounding_up",
    "get_amount0_delta",
    "get_amount1_delta",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
    "get_sqrt_ratio_at_tick",
    "get_tick_at_sqrt_ratio",
    "mul_div",
    "mul_div_rounding_up",
]
