"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token addresses and common amounts
- factories: Pool and request factory functions
"""

from tests.helpers.constants import (
    DAI,
    GNO,
    LUSD,
    RECIPIENT,
    TOKEN_DECIMALS,
    UNI,
    USDC,
    USDT,
    WBTC,
    WETH,
    pool_address,
)
from tests.helpers.factories import (
    FULL_RANGE_LOWER,
    FULL_RANGE_UPPER,
    make_cp_pool,
    make_full_range_cl_pool,
    make_request,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "WBTC",
    "LUSD",
    "UNI",
    "GNO",
    "RECIPIENT",
    "TOKEN_DECIMALS",
    "pool_address",
    # Factories
    "FULL_RANGE_LOWER",
    "FULL_RANGE_UPPER",
    "make_cp_pool",
    "make_full_range_cl_pool",
    "make_request",
]
