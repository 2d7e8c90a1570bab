"""Gas price conversion into quote-token units.

Scoring needs the gas price in the token the score is measured in (the
output token for exact input trades, the input token for exact output).
The native price is converted by simulating one native token through the
best candidate route to the quote token:

1. If the quote token is the native token, the rate is 1
2. Otherwise, route 1e18 native units through the pools
3. If no route exists, gas is ignored (price 0) and a warning is logged
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

import structlog

from swap_router.errors import NoRouteFound
from swap_router.models.types import normalize_address
from swap_router.pools.graph import PoolGraph
from swap_router.routing.pathfinding import PathEnumerator
from swap_router.routing.quoter import Quoter
from swap_router.routing.types import Quote

logger = structlog.get_logger()

# Default amount to use for price estimation (1 token with 18 decimals)
DEFAULT_ESTIMATION_AMOUNT = 10**18


@dataclass(frozen=True)
class GasPriceEstimate:
    """Gas price expressed in quote-token units.

    Attributes:
        token: The quote token
        gas_price_wei: Native gas price the estimate started from
        price_per_gas: Quote-token units per gas unit
        source: Where the rate came from ('native', 'pool', 'default')
    """

    token: str
    gas_price_wei: int
    price_per_gas: Fraction
    source: str


class GasPriceConverter:
    """Convert a native gas price into quote-token units via pool routing."""

    def __init__(
        self,
        enumerator: PathEnumerator,
        quoter: Quoter,
        native_token: str,
        max_hops: int = 3,
        max_candidates: int = 10,
        estimation_amount: int = DEFAULT_ESTIMATION_AMOUNT,
    ) -> None:
        self._enumerator = enumerator
        self._quoter = quoter
        self._native_token = normalize_address(native_token)
        self._max_hops = max_hops
        self._max_candidates = max_candidates
        self._estimation_amount = estimation_amount

    def convert(self, graph: PoolGraph, gas_price_wei: int, quote_token: str) -> GasPriceEstimate:
        """Express ``gas_price_wei`` in units of ``quote_token``.

        Raises:
            ValueError: If the gas price is negative
        """
        if gas_price_wei < 0:
            raise ValueError(f"Gas price cannot be negative: {gas_price_wei}")
        token = normalize_address(quote_token)

        if token == self._native_token:
            return GasPriceEstimate(
                token=token,
                gas_price_wei=gas_price_wei,
                price_per_gas=Fraction(gas_price_wei),
                source="native",
            )

        amount_out = self._best_native_output(graph, token)
        if amount_out is None:
            logger.warning(
                "gas_price_conversion_defaulting",
                token=token[-8:],
                reason="no pool route from native token",
            )
            return GasPriceEstimate(
                token=token, gas_price_wei=gas_price_wei, price_per_gas=Fraction(0), source="default"
            )

        price_per_gas = Fraction(gas_price_wei * amount_out, self._estimation_amount)
        logger.debug(
            "gas_price_converted",
            token=token[-8:],
            gas_price_wei=gas_price_wei,
            native_rate=amount_out,
        )
        return GasPriceEstimate(
            token=token, gas_price_wei=gas_price_wei, price_per_gas=price_per_gas, source="pool"
        )

    def _best_native_output(self, graph: PoolGraph, token: str) -> int | None:
        """Output of the best route selling the estimation amount of native token."""
        try:
            routes = self._enumerator.enumerate(
                graph, self._native_token, token, self._max_hops, self._max_candidates
            )
        except NoRouteFound:
            return None

        quotes = [
            q
            for q in self._quoter.quote_many(routes, self._estimation_amount)
            if isinstance(q, Quote)
        ]
        if not quotes:
            return None
        return max(q.amount_out for q in quotes)


__all__ = ["DEFAULT_ESTIMATION_AMOUNT", "GasPriceConverter", "GasPriceEstimate"]
