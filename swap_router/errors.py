"""Routing error taxonomy.

Every failure carries its kind and the parameters that triggered it so
callers can surface both without parsing messages.

Only ``InsufficientLiquidity`` is recoverable inside the engine: the route
optimizer drops the offending candidate and carries on. Everything else
propagates to the caller untouched; the engine never retries.
"""

from __future__ import annotations

from typing import Any


class RoutingError(Exception):
    """Base error for routing computations."""

    kind: str = "routing_error"

    def __init__(self, message: str, **params: Any) -> None:
        super().__init__(message)
        self.params: dict[str, Any] = params

    def to_dict(self) -> dict[str, Any]:
        """Serializable view: kind, message and triggering parameters."""
        return {
            "error": self.kind,
            "message": str(self),
            "params": {key: _jsonable(value) for key, value in self.params.items()},
        }


class InsufficientLiquidity(RoutingError):
    """A pool or route cannot fill the requested amount."""

    kind = "insufficient_liquidity"


class NoRouteFound(RoutingError):
    """No path connects the two tokens in the pool graph."""

    kind = "no_route_found"


class NoViableRoute(RoutingError):
    """Paths exist but none can fill the requested amount."""

    kind = "no_viable_route"


class DataUnavailable(RoutingError):
    """The pool state or gas price source could not provide data."""

    kind = "data_unavailable"


class StaleDataTimeout(RoutingError):
    """The snapshot fetch did not complete within its deadline."""

    kind = "stale_data_timeout"


class InvalidDeadline(RoutingError):
    """Deadline offset must be a positive number of seconds."""

    kind = "invalid_deadline"


class InvalidSlippageTolerance(RoutingError):
    """Slippage tolerance must be a fraction in [0, 1)."""

    kind = "invalid_slippage_tolerance"


class RoutingCancelled(RoutingError):
    """The routing computation was cancelled before a plan was produced."""

    kind = "routing_cancelled"


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return str(value)


__all__ = [
    "DataUnavailable",
    "InsufficientLiquidity",
    "InvalidDeadline",
    "InvalidSlippageTolerance",
    "NoRouteFound",
    "NoViableRoute",
    "RoutingCancelled",
    "RoutingError",
    "StaleDataTimeout",
]
