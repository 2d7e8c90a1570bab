"""Data models: tokens, amounts and shared field types.

Request, response and snapshot models live in their own modules
(``swap_router.models.request``, ``.plan`` and ``.snapshot``).
"""

from swap_router.models.token import Token, TokenAmount
from swap_router.models.types import (
    UINT256_MAX,
    Address,
    Bytes,
    Uint256,
    is_valid_address,
    normalize_address,
)

__all__ = [
    "Token",
    "TokenAmount",
    "UINT256_MAX",
    "Address",
    "Bytes",
    "Uint256",
    "is_valid_address",
    "normalize_address",
]
