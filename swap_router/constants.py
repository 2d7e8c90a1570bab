"""Well-known addresses and gas parameters for mainnet routing."""

from swap_router.models.types import is_valid_address


def _validate_token_address(name: str, address: str) -> str:
    """Validate a hard-coded address at import time.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


MAINNET_CHAIN_ID = 1

# SwapRouter02 (handles V2-style and V3-style pools in one multicall)
SWAP_ROUTER_02 = _validate_token_address(
    "SwapRouter02", "0x68b3465833fb72a70ecdf485e0e4c7bd8665fc45"
)

# Gas units per hop, by pool family
CONSTANT_PRODUCT_SWAP_GAS = 60_000
CONCENTRATED_SWAP_GAS = 106_000

# Fixed per-transaction overhead (intrinsic cost plus router entry)
BASE_SWAP_GAS = 21_000 + 30_000

# Well-known token addresses on mainnet (lowercase)
WETH = _validate_token_address("WETH", "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2")
USDC = _validate_token_address("USDC", "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")
USDT = _validate_token_address("USDT", "0xdac17f958d2ee523a2206206994597c13d831ec7")
DAI = _validate_token_address("DAI", "0x6b175474e89094c44da98b954eedeac495271d0f")
WBTC = _validate_token_address("WBTC", "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599")
LUSD = _validate_token_address("LUSD", "0x5f98805a4e8be255a32880fdec7f6728c6568ba0")

# Intermediates allowed beyond the first hop
MAINNET_BASE_TOKENS = frozenset({WETH, USDC, USDT, DAI, WBTC})

NATIVE_TOKEN_DECIMALS = 18
