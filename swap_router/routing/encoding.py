"""SwapRouter02 calldata encoding.

SwapRouter02 executes constant product ("V2") and concentrated liquidity
("V3") swaps and batches calls through ``multicall(deadline, data[])``.
Only the encodings needed to execute a trade plan live here.
"""

from __future__ import annotations

from collections.abc import Sequence

from eth_abi import encode  # type: ignore[attr-defined]

from swap_router.models.types import is_valid_address, normalize_address

# swapExactTokensForTokens(uint256,uint256,address[],address)
SWAP_EXACT_TOKENS_SELECTOR = bytes.fromhex("472b43f3")

# swapTokensForExactTokens(uint256,uint256,address[],address)
SWAP_TOKENS_FOR_EXACT_SELECTOR = bytes.fromhex("42712a67")

# exactInput((bytes,address,uint256,uint256))
EXACT_INPUT_SELECTOR = bytes.fromhex("b858183f")

# exactOutput((bytes,address,uint256,uint256))
EXACT_OUTPUT_SELECTOR = bytes.fromhex("09b81346")

# multicall(uint256,bytes[])
MULTICALL_SELECTOR = bytes.fromhex("5ae401dc")

# Router-internal recipient: the router itself, for chaining one call's
# output into the next
ADDRESS_THIS = "0x0000000000000000000000000000000000000002"

# amountIn of 0 tells the router to spend its own balance of the input token
CONTRACT_BALANCE = 0


def _address_bytes(address: str, label: str) -> bytes:
    """Convert an address to its 20 raw bytes.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {label} address: {address}")
    return bytes.fromhex(normalize_address(address)[2:])


def encode_v3_path(tokens: Sequence[str], fees: Sequence[int]) -> bytes:
    """Pack a concentrated liquidity path: token, fee (uint24), token, ...

    Raises:
        ValueError: If the token and fee counts do not line up or a fee
            does not fit uint24
    """
    if len(tokens) != len(fees) + 1 or not fees:
        raise ValueError(f"Path needs one more token than fees: {len(tokens)} vs {len(fees)}")
    packed = _address_bytes(tokens[0], "path")
    for fee, token in zip(fees, tokens[1:]):
        if not 0 <= fee < 2**24:
            raise ValueError(f"Fee does not fit uint24: {fee}")
        packed += fee.to_bytes(3, "big") + _address_bytes(token, "path")
    return packed


def encode_swap_exact_tokens_for_tokens(
    amount_in: int, amount_out_min: int, path: Sequence[str], recipient: str
) -> bytes:
    """Constant product exact input swap along ``path``."""
    path_bytes = [_address_bytes(token, "path") for token in path]
    args = encode(
        ["uint256", "uint256", "address[]", "address"],
        [amount_in, amount_out_min, path_bytes, _address_bytes(recipient, "recipient")],
    )
    return SWAP_EXACT_TOKENS_SELECTOR + args


def encode_swap_tokens_for_exact_tokens(
    amount_out: int, amount_in_max: int, path: Sequence[str], recipient: str
) -> bytes:
    """Constant product exact output swap along ``path``."""
    path_bytes = [_address_bytes(token, "path") for token in path]
    args = encode(
        ["uint256", "uint256", "address[]", "address"],
        [amount_out, amount_in_max, path_bytes, _address_bytes(recipient, "recipient")],
    )
    return SWAP_TOKENS_FOR_EXACT_SELECTOR + args


def encode_exact_input(
    tokens: Sequence[str],
    fees: Sequence[int],
    recipient: str,
    amount_in: int,
    amount_out_minimum: int,
) -> bytes:
    """Concentrated liquidity exact input swap along ``tokens``."""
    args = encode(
        ["(bytes,address,uint256,uint256)"],
        [
            (
                encode_v3_path(tokens, fees),
                _address_bytes(recipient, "recipient"),
                amount_in,
                amount_out_minimum,
            )
        ],
    )
    return EXACT_INPUT_SELECTOR + args


def encode_exact_output(
    tokens: Sequence[str],
    fees: Sequence[int],
    recipient: str,
    amount_out: int,
    amount_in_maximum: int,
) -> bytes:
    """Concentrated liquidity exact output swap along ``tokens``.

    The router walks exact output paths backwards, so the packed path is
    reversed (output token first).
    """
    args = encode(
        ["(bytes,address,uint256,uint256)"],
        [
            (
                encode_v3_path(list(reversed(tokens)), list(reversed(fees))),
                _address_bytes(recipient, "recipient"),
                amount_out,
                amount_in_maximum,
            )
        ],
    )
    return EXACT_OUTPUT_SELECTOR + args


def encode_multicall(deadline: int, calls: Sequence[bytes]) -> bytes:
    """Wrap router calls so they execute atomically before ``deadline``."""
    args = encode(["uint256", "bytes[]"], [deadline, list(calls)])
    return MULTICALL_SELECTOR + args


__all__ = [
    "ADDRESS_THIS",
    "CONTRACT_BALANCE",
    "EXACT_INPUT_SELECTOR",
    "EXACT_OUTPUT_SELECTOR",
    "MULTICALL_SELECTOR",
    "SWAP_EXACT_TOKENS_SELECTOR",
    "SWAP_TOKENS_FOR_EXACT_SELECTOR",
    "encode_exact_input",
    "encode_exact_output",
    "encode_multicall",
    "encode_swap_exact_tokens_for_tokens",
    "encode_swap_tokens_for_exact_tokens",
    "encode_v3_path",
]
