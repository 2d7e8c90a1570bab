"""Swap router: best-execution routing across DEX liquidity pools."""

__version__ = "0.1.0"
